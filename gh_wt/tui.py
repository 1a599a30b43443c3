"""Interactive worktree browser using Textual."""

from typing import Callable, List, Optional

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.coordinate import Coordinate
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Footer, Header, Static

from .__version__ import __version__
from .constants import COLUMNS, TUI_COLORS
from .core.lookup import resolve_backing_repo
from .core.remover import WorktreeRemover
from .exceptions import GhWtError
from .formatters import format_row
from .logging_config import get_logger
from .models.worktree import WorktreeListItem

logger = get_logger(__name__)


class ConfirmScreen(ModalScreen[bool]):
    """Modal confirmation dialog."""

    DEFAULT_CSS = """
    ConfirmScreen {
        align: center middle;
    }

    #confirm-dialog {
        width: 80%;
        height: auto;
        border: thick $background 80%;
        background: $surface;
        padding: 1 2;
    }

    #confirm-message {
        width: 100%;
        height: auto;
        padding: 1 0;
    }

    #button-container {
        width: 100%;
        height: auto;
        align: center middle;
        padding: 1 0;
    }

    Button {
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("y", "answer(True)", "Yes", show=False),
        Binding("n", "answer(False)", "No", show=False),
        Binding("escape", "answer(False)", "Cancel", show=False),
    ]

    def __init__(self, message: str):
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Static(self.message, id="confirm-message", markup=False)
            with Container(id="button-container"):
                yield Button("Yes", variant="error", id="yes")
                yield Button("No", variant="primary", id="no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button press."""
        self.dismiss(event.button.id == "yes")

    def action_answer(self, answer: bool) -> None:
        self.dismiss(answer)


class WorktreeListApp(App[Optional[str]]):
    """Browse worktrees; Enter selects one, ``d`` removes one.

    The app returns the selected worktree path (or None) from ``run()``.
    """

    TITLE = "gh-wt"
    SUB_TITLE = f"v{__version__}"

    CSS = """
    Screen {
        background: $surface;
    }

    DataTable {
        height: 1fr;
    }

    #status-bar {
        dock: bottom;
        height: auto;
        background: $panel;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("enter", "select_worktree", "Open", show=True),
        Binding("d", "remove_worktree", "Remove"),
        Binding("r", "refresh", "Refresh"),
    ]

    def __init__(
        self,
        loader: Callable[[], List[WorktreeListItem]],
        remover: Optional[WorktreeRemover] = None,
    ):
        super().__init__()
        self.loader = loader
        self.remover = remover or WorktreeRemover()
        self.items: List[WorktreeListItem] = []
        self.status_message = ""

    def compose(self) -> ComposeResult:
        """Create child widgets."""
        yield Header(show_clock=False, icon="")
        yield DataTable(id="worktree-table", cursor_type="row", zebra_stripes=True)
        yield Static(id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Set up the table when app starts."""
        table = self.query_one(DataTable)
        for col in COLUMNS:
            table.add_column(col.label, width=None, key=col.key)
        self._load()

    def _load(self) -> None:
        try:
            self.items = self.loader()
        except GhWtError as e:
            logger.error(f"Error loading worktrees: {e}")
            self.items = []
            self.notify(str(e), severity="error")
        self._populate_table()

    def _populate_table(self) -> None:
        table = self.query_one(DataTable)
        table.clear()

        for item in self.items:
            row = format_row(item)
            color = TUI_COLORS.get(row["status"], "")
            table.add_row(
                *(Text(row[col.key], style=color if col.key == "status" else "") for col in COLUMNS),
                key=item.path,
            )

        if self.items:
            self.status_message = f"{len(self.items)} worktree{'s' if len(self.items) != 1 else ''}"
        else:
            self.status_message = "No worktrees found"
        self.query_one("#status-bar", Static).update(self.status_message)

    def _selected_item(self) -> Optional[WorktreeListItem]:
        table = self.query_one(DataTable)
        if not self.items or table.cursor_row is None:
            return None
        if 0 <= table.cursor_row < len(self.items):
            return self.items[table.cursor_row]
        return None

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        """Enter on a row selects that worktree."""
        self.action_select_worktree()

    def action_select_worktree(self) -> None:
        item = self._selected_item()
        if item is not None:
            self.exit(item.path)

    def action_refresh(self) -> None:
        self._load()

    def action_remove_worktree(self) -> None:
        item = self._selected_item()
        if item is None:
            self.notify("No worktree selected", severity="warning")
            return

        message = f"Remove worktree '{item.name}' ({item.repo}) and delete branch '{item.branch}'?"
        if item.has_changes:
            message += "\n\nIt has uncommitted changes that will be PERMANENTLY DELETED."
        self.push_screen(ConfirmScreen(message), lambda confirmed: self._remove(item, confirmed))

    def _remove(self, item: WorktreeListItem, confirmed: Optional[bool]) -> None:
        if not confirmed:
            self.notify("Removal cancelled")
            return

        repo_path = resolve_backing_repo(item.path)
        if repo_path is None:
            self.notify(f"No repository found for {item.path}", severity="error")
            return

        row = self.query_one(DataTable).cursor_row
        try:
            self.remover.remove(repo_path, item.path, branch=item.branch, force=True)
        except GhWtError as e:
            # The worktree itself may already be gone (branch deletion failure)
            logger.error(f"Error removing {item.path}: {e}")
            self.notify(str(e), severity="error")
        else:
            self.notify(f"Removed {item.name}", severity="information")

        self._load()
        if self.items and row is not None:
            self.query_one(DataTable).cursor_coordinate = Coordinate(min(row, len(self.items) - 1), 0)
