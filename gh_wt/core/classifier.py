"""Classification of what already occupies a worktree target."""

import os

from gh_wt.logging_config import get_logger
from gh_wt.models.conflict import ConflictSignature
from gh_wt.services.git import GitOperations

logger = get_logger(__name__)


class ConflictClassifier:
    """Derives the conflict signature for a target path and branch. Read-only."""

    def __init__(self, git_ops: GitOperations):
        self.git_ops = git_ops

    def classify(self, worktree_path: str, branch_name: str) -> ConflictSignature:
        """Inspect the filesystem and the backing repository.

        A backing repository that does not exist yet (first worktree for a
        repo) yields a signature with every field False.
        """
        dir_exists = os.path.lexists(worktree_path)

        if not self.git_ops.repository_exists():
            logger.debug(f"Repository {self.git_ops.repo_path} does not exist yet")
            return ConflictSignature(dir_exists=dir_exists, git_registered=False, branch_exists=False)

        git_registered = self.git_ops.worktree_is_registered(worktree_path)
        branch_exists = self.git_ops.branch_exists(branch_name)

        current_branch = ""
        if git_registered:
            current_branch = self.git_ops.branch_for_worktree(worktree_path)

        signature = ConflictSignature(
            dir_exists=dir_exists,
            git_registered=git_registered,
            branch_exists=branch_exists,
            current_branch=current_branch,
        )
        logger.debug(f"Conflict signature for {worktree_path} ({branch_name}): {signature}")
        return signature
