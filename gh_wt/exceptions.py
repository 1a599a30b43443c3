"""Custom exceptions for gh-wt"""

from typing import List, Optional


class GhWtError(Exception):
    """Base exception for all gh-wt errors."""

    # Set by the worktree creator when rollback after this error was incomplete
    rollback_error: Optional["RollbackError"] = None


class GitOperationError(GhWtError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, target: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.target = target
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if target:
            error_msg += f" for '{target}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class BranchDeletionError(GitOperationError):
    """Raised when a worktree was removed but its branch could not be deleted."""

    def __init__(self, branch: str, message: Optional[str] = None):
        super().__init__("branch_delete", branch, message)

    def __str__(self) -> str:
        return f"worktree removed, but branch deletion failed: {super().__str__()}"


class GitHubAPIError(GhWtError):
    """Exception raised for errors in GitHub API operations."""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        self.message = message

        error_msg = f"GitHub API operation '{operation}' failed"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class OperationCancelled(GhWtError):
    """The operator declined a confirmation. Nothing was changed."""

    def __init__(self, message: str = "Cancelled - no changes made"):
        super().__init__(message)


class WorktreeConflictError(GhWtError):
    """The target worktree location is still occupied."""

    def __init__(self, path: str, reason: str = "worktree already exists"):
        self.path = path
        super().__init__(f"{reason}: {path}")


class DirtyWorktreeError(GhWtError):
    """The worktree has uncommitted changes and force was not requested."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"worktree has uncommitted changes: {path}")


class WorktreeNotFoundError(GhWtError):
    """No worktree matches the given name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"worktree '{name}' not found")


class WorktreeCreationError(GhWtError):
    """A non-git step of worktree creation failed."""

    def __init__(self, step: str, message: str):
        self.step = step
        super().__init__(f"failed to {step}: {message}")


class RollbackError(GhWtError):
    """One or more resources could not be cleaned up after a failed creation."""

    def __init__(self, errors: List[Exception]):
        self.errors = list(errors)
        details = "; ".join(str(e) for e in self.errors)
        super().__init__(f"rollback incomplete ({len(self.errors)} error(s)): {details}")


class ConfigError(GhWtError):
    """Invalid or unreadable configuration."""


class ActionNotFoundError(GhWtError):
    """The named action is not configured."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"action '{name}' not found in config")


class TemplateError(GhWtError):
    """A template could not be rendered."""

    def __init__(self, template: str, message: str):
        self.template = template
        super().__init__(f"failed to render template '{template}': {message}")


class CommandFailedError(GhWtError):
    """A shell command exited with a non-zero status."""

    def __init__(self, command: str, returncode: Optional[int] = None, message: Optional[str] = None):
        self.command = command
        self.returncode = returncode

        error_msg = f"command '{command}' failed"
        if returncode is not None:
            error_msg += f" with exit status {returncode}"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class ActionFailedError(GhWtError):
    """A command of an action failed; later commands were not run."""

    def __init__(self, action: str, command: str, cause: Exception):
        self.action = action
        self.command = command
        self.cause = cause
        super().__init__(f"action '{action}': command '{command}' failed: {cause}")
