"""Shared Rich console for user-facing output."""

from rich.console import Console

console = Console(highlight=False)


def disable_color() -> None:
    """Turn off color and styling for the rest of the run (``--no-color``)."""
    console.no_color = True
