"""Main CLI entry point for SchoolPay."""

import typer
from rich.console import Console

from schoolpay import __version__
from schoolpay.exceptions import ConfigurationError
from schoolpay.utils.config import get_settings
from schoolpay.utils.logging import configure_from_settings

from ..fees.cli import app as fees_app

app = typer.Typer(
    name="schoolpay",
    help="🏫 Student fee payment allocation",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)
console = Console()

app.add_typer(fees_app, name="fees")


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]SchoolPay[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """SchoolPay - split student payments across outstanding fees."""
    try:
        settings = get_settings()
    except ConfigurationError as e:
        console.print(f"[red]✗ {e}[/]")
        raise typer.Exit(2)
    configure_from_settings(settings)


if __name__ == "__main__":
    app()
