"""Finding worktrees and their repositories under the worktree root."""

import os
from dataclasses import dataclass
from typing import List, Optional

from gh_wt.constants import BARE_DIR
from gh_wt.exceptions import GitOperationError
from gh_wt.logging_config import get_logger
from gh_wt.models.worktree import WorktreeListItem
from gh_wt.services.git import GitOperations, get_git_common_dir, normalize_path

logger = get_logger(__name__)


@dataclass
class LocatedWorktree:
    """A worktree directory together with the repository backing it."""

    name: str
    repo: str
    path: str
    repo_path: Optional[str]
    branch: str = ""


def resolve_backing_repo(worktree_path: str, repo_dir: Optional[str] = None) -> Optional[str]:
    """Repository a worktree belongs to.

    Asks git for the common directory; falls back to the bare clone next to
    the worktree when the directory is no longer a valid work tree.
    """
    if os.path.isdir(worktree_path):
        try:
            return get_git_common_dir(worktree_path)
        except GitOperationError as e:
            logger.debug(f"{worktree_path} is not a git work tree: {e}")

    repo_dir = repo_dir or os.path.dirname(os.path.abspath(worktree_path))
    bare = os.path.join(repo_dir, BARE_DIR)
    if os.path.isdir(bare):
        return bare
    return None


def discover_repositories(base_dir: str) -> List[str]:
    """Repository directories under the worktree root (sorted by name)."""
    try:
        entries = sorted(os.scandir(base_dir), key=lambda e: e.name)
    except OSError as e:
        logger.debug(f"Cannot read worktree root {base_dir}: {e}")
        return []
    return [entry.path for entry in entries if entry.is_dir() and not entry.name.startswith(".")]


def find_worktrees(base_dir: str, name: str) -> List[LocatedWorktree]:
    """Every ``<base>/<repo>/<name>`` directory, one per repository."""
    matches = []
    for repo_dir in discover_repositories(base_dir):
        candidate = os.path.join(repo_dir, name)
        if os.path.isdir(candidate):
            repo_path = resolve_backing_repo(candidate, repo_dir)
            branch = GitOperations.current_branch(candidate)
            matches.append(
                LocatedWorktree(
                    name=name,
                    repo=os.path.basename(repo_dir),
                    path=candidate,
                    repo_path=repo_path,
                    branch=branch,
                )
            )
    logger.debug(f"Found {len(matches)} worktree(s) named {name} under {base_dir}")
    return matches


def _worktree_dirs(repo_dir: str) -> List[str]:
    """Work tree roots under ``repo_dir``, including nested names like ``feature/login``."""
    found = []
    for current, dirs, files in os.walk(repo_dir):
        if current == repo_dir and BARE_DIR in dirs:
            dirs.remove(BARE_DIR)
        if ".git" in dirs or ".git" in files:
            found.append(current)
            dirs[:] = []
            continue
        dirs[:] = sorted(d for d in dirs if not d.startswith("."))
    return found


def list_worktrees(repo_dir: str) -> List[WorktreeListItem]:
    """Worktrees of the repository whose worktrees live in ``repo_dir``.

    Covers every worktree git knows for the repositories found there (the
    bare clone and any local repository a worktree points back to).
    """
    repo_name = os.path.basename(os.path.normpath(repo_dir))
    repo_paths = []
    bare = os.path.join(repo_dir, BARE_DIR)
    if os.path.isdir(bare):
        repo_paths.append(bare)
    for path in _worktree_dirs(repo_dir):
        repo_path = resolve_backing_repo(path, repo_dir)
        if repo_path and repo_path not in repo_paths:
            repo_paths.append(repo_path)

    items: List[WorktreeListItem] = []
    seen = set()
    root = normalize_path(repo_dir)
    for repo_path in repo_paths:
        try:
            worktrees = GitOperations(repo_path).worktree_list()
        except GitOperationError as e:
            logger.warning(f"Could not list worktrees of {repo_path}: {e}")
            continue
        for wt in worktrees:
            path = normalize_path(wt.path)
            if wt.is_bare or os.path.basename(path) == BARE_DIR or path in seen:
                continue
            # Only worktrees kept under the worktree root, at any depth
            if not path.startswith(root + os.sep):
                continue
            seen.add(path)
            try:
                mod_time = os.stat(wt.path).st_mtime
            except OSError:
                mod_time = None
            items.append(
                WorktreeListItem(
                    name=os.path.relpath(path, root),
                    repo=repo_name,
                    branch=wt.branch_name or GitOperations.current_branch(wt.path),
                    path=wt.path,
                    has_changes=GitOperations.has_uncommitted_changes(wt.path),
                    last_mod_time=mod_time,
                )
            )
    return items


def remove_empty_parents(path: str, stop_dir: str) -> None:
    """Delete directories left empty above a removed nested worktree, up to ``stop_dir``."""
    stop = normalize_path(stop_dir)
    parent = os.path.dirname(normalize_path(path))
    while parent.startswith(stop + os.sep):
        try:
            os.rmdir(parent)
        except OSError:
            return
        logger.debug(f"Removed empty directory {parent}")
        parent = os.path.dirname(parent)
