"""Git-related services for gh-wt."""

from .operations import (
    GitOperations,
    clone_bare,
    configure_remote_fetch,
    get_git_common_dir,
    get_git_root,
    get_remote_url,
    get_repo_name,
    safe_git_root,
)
from .worktrees import WorktreeService, normalize_path

__all__ = [
    "GitOperations",
    "WorktreeService",
    "clone_bare",
    "configure_remote_fetch",
    "get_git_common_dir",
    "get_git_root",
    "get_remote_url",
    "get_repo_name",
    "normalize_path",
    "safe_git_root",
]
