"""Formatting helpers shared by the CLI table and the TUI."""

from datetime import datetime
from typing import Optional

from gh_wt.constants import STATUS_CLEAN, STATUS_MODIFIED
from gh_wt.models.worktree import WorktreeListItem


def format_mod_time(timestamp: Optional[float]) -> str:
    """
    Format a modification timestamp as ``YYYY-MM-DD HH:MM`` local time.

    Args:
        timestamp: Seconds since the epoch, or None when unknown

    Returns:
        Formatted date string
    """
    if timestamp is None:
        return "unknown"
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M")


def format_status(item: WorktreeListItem) -> str:
    return STATUS_MODIFIED if item.has_changes else STATUS_CLEAN


def format_branch(item: WorktreeListItem) -> str:
    return item.branch or "(detached)"


def format_row(item: WorktreeListItem) -> dict:
    """All display values of a worktree, keyed like ``constants.COLUMNS``."""
    return {
        "name": item.name,
        "repo": item.repo,
        "branch": format_branch(item),
        "status": format_status(item),
        "modified": format_mod_time(item.last_mod_time),
        "path": item.path,
    }
