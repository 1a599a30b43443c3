"""Worktree teardown."""

import os
import shutil
from typing import Callable, Optional

from gh_wt.exceptions import BranchDeletionError, DirtyWorktreeError, GitOperationError, GhWtError
from gh_wt.logging_config import get_logger
from gh_wt.services.git import GitOperations, normalize_path

logger = get_logger(__name__)


class WorktreeRemover:
    """Removes a worktree and then its branch. Removing twice is a no-op."""

    def __init__(self, git_factory: Callable[[str], GitOperations] = GitOperations):
        self.git_factory = git_factory

    def find_exact_path(self, git_ops: GitOperations, worktree_path: str) -> Optional[str]:
        """Path as git recorded it; git may store a differently normalized path."""
        registered = git_ops.worktree_registered_path(worktree_path)
        if registered:
            return registered

        try:
            worktrees = git_ops.worktree_list()
        except GitOperationError as e:
            logger.debug(f"Could not list worktrees: {e}")
            return None

        wanted = normalize_path(worktree_path)
        for wt in worktrees:
            if not wt.is_bare and normalize_path(wt.path) == wanted:
                return wt.path
        return None

    def remove(self, repo_path: str, worktree_path: str, branch: str = "", force: bool = False) -> None:
        """Remove the worktree at ``worktree_path`` and delete ``branch``.

        Args:
            repo_path: Backing repository of the worktree
            worktree_path: Worktree directory
            branch: Branch to delete afterwards; empty to keep branches untouched
            force: Remove even with uncommitted changes

        Raises:
            DirtyWorktreeError: Uncommitted changes and not forced
            BranchDeletionError: The worktree is gone but its branch could not be deleted
        """
        git_ops = self.git_factory(repo_path)

        if not force and git_ops.has_uncommitted_changes(worktree_path):
            raise DirtyWorktreeError(worktree_path)

        exact_path = self.find_exact_path(git_ops, worktree_path)
        removed_by_git = False
        if exact_path:
            try:
                git_ops.worktree_remove(exact_path, force=force)
                removed_by_git = True
            except GitOperationError as e:
                logger.warning(f"git worktree remove failed, removing directory directly: {e}")

        if not removed_by_git and os.path.lexists(worktree_path):
            try:
                if os.path.isdir(worktree_path) and not os.path.islink(worktree_path):
                    shutil.rmtree(worktree_path)
                else:
                    os.remove(worktree_path)
            except OSError as e:
                raise GhWtError(f"failed to remove worktree directory {worktree_path}: {e}") from e
            logger.info(f"Removed directory {worktree_path}")

        if exact_path and not removed_by_git and git_ops.worktree_is_registered(worktree_path):
            try:
                git_ops.worktree_prune()
            except GitOperationError as e:
                logger.debug(f"Could not prune worktree records: {e}")

        self._delete_branch(git_ops, branch)

    @staticmethod
    def _delete_branch(git_ops: GitOperations, branch: str) -> None:
        if not branch or branch == "HEAD":
            return
        if not git_ops.branch_exists(branch):
            logger.debug(f"Branch {branch} already gone")
            return
        try:
            git_ops.branch_delete(branch, force=True)
        except GitOperationError as e:
            raise BranchDeletionError(branch, e.message) from e
