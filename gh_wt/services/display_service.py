"""Display of worktree lists and action lists"""
from typing import List

from rich.markup import escape
from rich.table import Table

from gh_wt.config import Action
from gh_wt.constants import CLI_COLORS, COLUMNS
from gh_wt.formatters import format_row
from gh_wt.logging_config import get_logger
from gh_wt.models.worktree import WorktreeListItem
from gh_wt.utils.console import console

logger = get_logger(__name__)


class DisplayService:
    def display_worktree_table(self, items: List[WorktreeListItem]) -> None:
        """Print worktrees as a table."""
        if not items:
            console.print("No worktrees found")
            return

        table = Table()
        for col in COLUMNS:
            table.add_column(col.label, min_width=col.width or None, overflow="fold")

        for item in items:
            row = format_row(item)
            table.add_row(
                *(escape(row[col.key]) for col in COLUMNS),
                style=CLI_COLORS.get(row["status"]),
            )

        console.print(table)
        logger.debug(f"Displayed {len(items)} worktrees")

    def display_actions(self, actions: List[Action], silent: bool = False) -> None:
        """Print configured actions; silent mode prints bare names for scripts."""
        if not actions:
            if not silent:
                console.print("[yellow]No actions configured.[/yellow]")
            return

        if silent:
            for action in actions:
                console.print(action.name, markup=False)
            return

        console.print("Available actions:")
        for action in actions:
            console.print(f"  - {escape(action.name)}")

    def print_success(self, path: str) -> None:
        """Final message after a worktree was created."""
        console.print("\n[green]Worktree created successfully![/green]")
        console.print(f"Location: {escape(path)}")
        console.print("\nTo switch to the worktree:")
        console.print(f"[cyan]  cd {escape(path)}[/cyan]")
