"""Tests for formatting and printing worktree lists"""
from datetime import datetime

import pytest

from gh_wt.config import Action
from gh_wt.formatters import format_branch, format_mod_time, format_row, format_status
from gh_wt.models.worktree import WorktreeListItem
from gh_wt.services.display_service import DisplayService
from gh_wt.utils.console import console


@pytest.fixture
def item():
    return WorktreeListItem(
        name="pr_42",
        repo="hello",
        branch="fix-bug",
        path="/wt/hello/pr_42",
        has_changes=True,
        last_mod_time=datetime(2024, 3, 5, 14, 7).timestamp(),
    )


@pytest.fixture
def wide_console(monkeypatch):
    monkeypatch.setattr(console, "width", 200)
    return console


class TestFormatters:
    """Test the display values of a worktree."""

    def test_format_row(self, item):
        assert format_row(item) == {
            "name": "pr_42",
            "repo": "hello",
            "branch": "fix-bug",
            "status": "modified",
            "modified": "2024-03-05 14:07",
            "path": "/wt/hello/pr_42",
        }

    def test_clean_and_detached(self, item):
        item.has_changes = False
        item.branch = ""
        assert format_status(item) == "clean"
        assert format_branch(item) == "(detached)"

    def test_unknown_mod_time(self):
        assert format_mod_time(None) == "unknown"


class TestDisplayService:
    """Test console output."""

    def test_worktree_table(self, item, wide_console):
        with wide_console.capture() as capture:
            DisplayService().display_worktree_table([item])
        out = capture.get()
        for value in ("pr_42", "hello", "fix-bug", "modified", "2024-03-05 14:07", "/wt/hello/pr_42"):
            assert value in out

    def test_empty_table(self, wide_console):
        with wide_console.capture() as capture:
            DisplayService().display_worktree_table([])
        assert capture.get().strip() == "No worktrees found"

    def test_actions(self, wide_console):
        actions = [Action(name="setup", cmds=["make"]), Action(name="[test]", cmds=["pytest"])]
        with wide_console.capture() as capture:
            DisplayService().display_actions(actions)
        assert capture.get().splitlines() == ["Available actions:", "  - setup", "  - [test]"]

    def test_actions_silent(self, wide_console):
        actions = [Action(name="setup", cmds=["make"]), Action(name="deploy", cmds=["./deploy"])]
        with wide_console.capture() as capture:
            DisplayService().display_actions(actions, silent=True)
        assert capture.get().splitlines() == ["setup", "deploy"]

    def test_no_actions(self, wide_console):
        with wide_console.capture() as capture:
            DisplayService().display_actions([], silent=True)
        assert capture.get() == ""

    def test_print_success(self, wide_console):
        with wide_console.capture() as capture:
            DisplayService().print_success("/wt/hello/pr_42")
        out = capture.get()
        assert "Worktree created successfully!" in out
        assert "  cd /wt/hello/pr_42" in out
