"""Fee allocation CLI commands.

Runs the allocation engine over fee assignments exported from the backing
store and shows how a payment would be split across fee categories.
"""

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.table import Table

from ...exceptions import FileFormatError, SchoolPayError, ValidationError, wrap_exception
from ...utils.logging import LogPerformance, get_logger, set_correlation_id
from ..allocation import AllocationEngine
from ..application.schemas import FeeAssignmentInput
from ..domain.enums import AllocationState
from ..domain.models import FeeAssignment
from ..domain.money import format_amount, to_amount

app = typer.Typer(name="fees", help="💰 Fee payment allocation", no_args_is_help=True)
console = Console()
logger = get_logger(__name__)

_ASSIGNMENTS_ADAPTER = TypeAdapter(list[FeeAssignmentInput])


def load_assignments(file_path: Path) -> list[FeeAssignment]:
    """Load fee assignments from a JSON file.

    The file holds either a list of assignments or an object with a
    ``feeAssignments`` (or ``fee_assignments``) list.

    Raises:
        FileFormatError: If the file is not JSON, does not match the schema, or
            holds a line item whose amounts do not add up
    """
    with LogPerformance("fee_assignments_load", logger):
        try:
            payload = json.loads(file_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise wrap_exception(
                e,
                "Fee assignment file could not be read as JSON",
                exception_class=FileFormatError,
                path=str(file_path),
            ) from e

        if isinstance(payload, dict):
            payload = payload.get("feeAssignments", payload.get("fee_assignments"))

        try:
            inputs = _ASSIGNMENTS_ADAPTER.validate_python(payload)
        except PydanticValidationError as e:
            raise wrap_exception(
                e,
                "Fee assignment file does not match the expected structure",
                exception_class=FileFormatError,
                path=str(file_path),
                errors=e.error_count(),
            ) from e

        try:
            return [item.to_domain() for item in inputs]
        except ValueError as e:
            raise wrap_exception(
                e,
                f"Fee assignment file has an inconsistent line item: {e}",
                exception_class=FileFormatError,
                path=str(file_path),
            ) from e


@app.callback()
def fees_callback() -> None:
    """Split payments across outstanding fee categories."""


def _parse_override(raw: str) -> tuple[str, str]:
    category_id, sep, amount = raw.partition("=")
    if not sep or not category_id.strip():
        raise ValidationError(
            "Manual allocations must look like CATEGORY=AMOUNT",
            field="manual",
            value=raw,
        )
    return category_id.strip(), amount.strip()


def _render_table(engine: AllocationEngine) -> Table:
    table = Table(title="💰 Payment Allocation", show_header=True)
    table.add_column("Category", style="cyan")
    table.add_column("Type")
    table.add_column("Required", justify="center")
    table.add_column("Balance", justify="right")
    table.add_column("Allocated", justify="right", style="bold")

    for item in engine.allocations:
        table.add_row(
            item.category_name,
            item.type.value,
            "[red]✓[/]" if item.is_mandatory else "",
            format_amount(item.max_amount),
            format_amount(item.allocated_amount),
        )
    return table


@app.command("allocate")
def allocate(
    file_path: Path = typer.Argument(..., help="JSON file with fee assignments", exists=True),
    amount: str = typer.Option(..., "--amount", "-a", help="Payment amount"),
    manual: Optional[list[str]] = typer.Option(
        None, "--manual", "-m", help="Manual allocation CATEGORY=AMOUNT (repeatable)"
    ),
    max_categories: Optional[list[str]] = typer.Option(
        None, "--max", help="Allocate the full balance of CATEGORY (repeatable)"
    ),
    clear: bool = typer.Option(False, "--clear", help="Start from empty manual allocations"),
    as_json: bool = typer.Option(False, "--json", help="Print the allocation summary as JSON"),
):
    """🧮 Split a payment across a student's outstanding fee categories.

    Examples:
        # Automatic allocation (mandatory fees first, larger balances next)
        schoolpay fees allocate assignments.json --amount 18000

        # Manual split
        schoolpay fees allocate assignments.json -a 25000 --clear -m tuition=20000 -m uniform=5000
    """
    set_correlation_id()
    try:
        assignments = load_assignments(file_path)
        engine = AllocationEngine(assignments, payment_amount=to_amount(amount))

        if clear:
            engine.clear_all()
        for category_id in max_categories or []:
            engine.set_max(category_id)
        for raw in manual or []:
            engine.set_allocation(*_parse_override(raw))
    except SchoolPayError as e:
        console.print(f"[red]✗ {e.message}[/]")
        logger.error("allocation_cli_failed", error=str(e))
        raise typer.Exit(2)

    summary = engine.summary()

    if as_json:
        typer.echo(json.dumps(summary.to_dict(), indent=2))
        failed = summary.state == AllocationState.OUTSTANDING and not summary.is_valid
        raise typer.Exit(1 if failed else 0)

    if summary.state == AllocationState.NO_ASSIGNMENTS:
        console.print("[yellow]⚠ No Fee Assignments Found[/]")
        console.print(
            "This student has no fee assignments yet. Assign fees before recording payments."
        )
        return
    if summary.state == AllocationState.SETTLED:
        console.print("[green]✓ All Fees Paid[/]")
        console.print("This student has no outstanding fee balance.")
        return

    console.print(_render_table(engine))
    console.print(
        f"Payment: [bold]{format_amount(summary.payment_amount)}[/]  "
        f"Allocated: [blue]{format_amount(summary.total_allocated)}[/]  "
        f"Remaining: [{'green' if summary.remaining == 0 else 'red'}]"
        f"{format_amount(summary.remaining)}[/]"
    )
    console.print(f"Mode: {'auto' if summary.auto_allocate_enabled else 'manual'}")

    message = engine.validation_message()
    if message is not None:
        console.print(f"[red]✗ {message}[/]")
        raise typer.Exit(1)

    console.print("[green]✓ Allocation matches the payment amount[/]")
