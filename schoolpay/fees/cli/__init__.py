"""Fee allocation CLI."""

from .allocation_cli import app

__all__ = ["app"]
