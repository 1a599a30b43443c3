"""Shared constants for gh-wt."""

from dataclasses import dataclass
from typing import List

# Directory name of the bare clone that backs PR and issue worktrees
BARE_DIR = ".bare"

FETCH_HEAD = "FETCH_HEAD"
PR_REF_TEMPLATE = "refs/pull/{number}/head"
REMOTE_FETCH_REFSPEC = "refs/heads/*:refs/remotes/origin/*"


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    key: str
    label: str
    width: int = 0  # 0 means auto-width


# Unified column definitions for both the CLI table and the TUI
COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("name", "Worktree", 24),
    ColumnDefinition("repo", "Repo", 16),
    ColumnDefinition("branch", "Branch", 30),
    ColumnDefinition("status", "Status", 10),
    ColumnDefinition("modified", "Modified", 16),
    ColumnDefinition("path", "Path", 0),
]


STATUS_CLEAN = "clean"
STATUS_MODIFIED = "modified"

# CLI colors (Rich color names)
CLI_COLORS = {
    STATUS_CLEAN: None,
    STATUS_MODIFIED: "yellow",
}

# TUI colors (color names for Textual)
TUI_COLORS = {
    STATUS_CLEAN: "green",
    STATUS_MODIFIED: "yellow",
}

UNCOMMITTED_WARNING = (
    "WARNING: {subject} has uncommitted changes that will be PERMANENTLY DELETED. "
    "Consider committing or stashing changes first."
)
