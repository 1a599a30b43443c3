"""Transactional worktree creation with rollback."""

import os
import shutil
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from gh_wt.config import Config
from gh_wt.constants import FETCH_HEAD
from gh_wt.exceptions import (
    GhWtError,
    GitOperationError,
    OperationCancelled,
    RollbackError,
    WorktreeConflictError,
    WorktreeCreationError,
)
from gh_wt.logging_config import get_logger
from gh_wt.models.conflict import BranchDecision, CleanupStep, Resolution
from gh_wt.models.worktree import WorktreeRequest, WorktreeType
from gh_wt.services.git import GitOperations, clone_bare, configure_remote_fetch
from gh_wt.utils.console import console

logger = get_logger(__name__)

GitFactory = Callable[[str], GitOperations]


@dataclass
class CreationTransaction:
    """Resources one creation attempt caused to exist, in creation order."""

    repo_path: str
    created_directories: List[str] = field(default_factory=list)
    created_branches: List[str] = field(default_factory=list)

    def record_directory(self, path: str) -> None:
        self.created_directories.append(path)

    def record_branch(self, branch: str) -> None:
        self.created_branches.append(branch)

    def rollback(self, git_ops: GitOperations) -> List[Exception]:
        """Remove every recorded directory and branch, best-effort.

        Returns:
            Every failure encountered; an empty list means a clean rollback
        """
        errors: List[Exception] = []

        for path in reversed(self.created_directories):
            logger.info(f"Rolling back worktree directory {path}")
            if git_ops.worktree_is_registered(path):
                try:
                    git_ops.worktree_remove(path, force=True)
                except GitOperationError as e:
                    logger.debug(f"git could not remove {path}, deleting directly: {e}")
            if os.path.lexists(path):
                try:
                    _remove_path(path)
                except OSError as e:
                    errors.append(WorktreeCreationError("remove directory", f"{path}: {e}"))
            if git_ops.worktree_is_registered(path):
                try:
                    git_ops.worktree_prune()
                except GitOperationError as e:
                    errors.append(e)

        for branch in reversed(self.created_branches):
            logger.info(f"Rolling back branch {branch}")
            if not git_ops.branch_exists(branch):
                continue
            try:
                git_ops.branch_delete(branch, force=True)
            except GitOperationError as e:
                errors.append(e)

        return errors


def _remove_path(path: str) -> None:
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.remove(path)


class WorktreeCreator:
    """Executes a resolved creation plan, rolling back on failure.

    The creator never prompts; every decision arrives in the Resolution.
    """

    def __init__(self, config: Config, git_factory: GitFactory = GitOperations):
        self.config = config
        self.git_factory = git_factory
        self.transaction: Optional[CreationTransaction] = None

    def ensure_repository(self, request: WorktreeRequest) -> str:
        """Create the repo directory and the bare clone if needed. Idempotent.

        Returns:
            Path of the backing repository
        """
        base_dir = self.config.worktree_dir
        repo_dir = request.repo_dir(base_dir)
        repo_path = request.backing_repo_path(base_dir)

        try:
            os.makedirs(repo_dir, exist_ok=True)
        except OSError as e:
            raise WorktreeCreationError("create worktree directory", f"{repo_dir}: {e}") from e

        if request.is_remote and not os.path.exists(repo_path):
            clone_url = request.resolved_clone_url
            if not clone_url:
                raise WorktreeCreationError("clone repository", f"no clone URL for {request.repo}")
            console.print(f"Cloning {request.owner or ''}/{request.repo}...".lstrip("/"))
            try:
                clone_bare(clone_url, repo_path)
                configure_remote_fetch(repo_path)
            except GitOperationError:
                # A half-made clone would be mistaken for a usable one next time
                shutil.rmtree(repo_path, ignore_errors=True)
                raise
        return repo_path

    def create(self, request: WorktreeRequest, resolution: Resolution) -> str:
        """Create the worktree described by ``request``.

        Args:
            request: What to create
            resolution: Decision and cleanup plan from the resolver

        Returns:
            Absolute path of the new worktree

        Raises:
            OperationCancelled: If the resolution is a cancel; nothing is touched
            GhWtError: The error of the failing step, with ``rollback_error``
                set when cleanup after it was incomplete
        """
        if resolution.decision is BranchDecision.CANCEL:
            raise OperationCancelled()

        base_dir = self.config.worktree_dir
        worktree_path = os.path.abspath(request.worktree_path(base_dir))
        transaction = CreationTransaction(repo_path=request.backing_repo_path(base_dir))
        self.transaction = transaction
        git_ops = self.git_factory(transaction.repo_path)

        try:
            self.ensure_repository(request)
            self._remove_stale_record(git_ops, worktree_path)
            self._run_cleanup(
                git_ops, request, worktree_path, resolution.cleanup_plan, resolution.branch_worktrees
            )

            if resolution.decision is BranchDecision.ATTACH:
                self._attach(git_ops, transaction, request, worktree_path)
            else:
                self._create_branch_worktree(git_ops, transaction, request, worktree_path)
        except Exception as e:
            error = e if isinstance(e, GhWtError) else WorktreeCreationError("create worktree", str(e))
            logger.error(f"Worktree creation failed: {error}")
            rollback_errors = transaction.rollback(git_ops)
            if rollback_errors:
                error.rollback_error = RollbackError(rollback_errors)
                logger.error(str(error.rollback_error))
            if error is e:
                raise
            raise error from e

        logger.info(f"Created worktree {worktree_path} on branch {request.branch_name}")
        return worktree_path

    def _remove_stale_record(self, git_ops: GitOperations, worktree_path: str) -> None:
        """Drop a git record for a worktree whose directory is gone; git refuses to reuse it."""
        if os.path.lexists(worktree_path):
            return
        registered = git_ops.worktree_registered_path(worktree_path)
        if registered:
            logger.info(f"Pruning stale worktree record at {registered}")
            git_ops.worktree_prune()

    def _run_cleanup(
        self,
        git_ops: GitOperations,
        request: WorktreeRequest,
        worktree_path: str,
        plan: List[CleanupStep],
        branch_worktrees: Optional[List[str]] = None,
    ) -> None:
        for step in plan:
            if step is CleanupStep.REMOVE_WORKTREE:
                registered = git_ops.worktree_registered_path(worktree_path) or worktree_path
                console.print(f"Removing worktree at {worktree_path}...")
                git_ops.worktree_remove(registered, force=True)
            elif step is CleanupStep.PRUNE_RECORD:
                git_ops.worktree_prune()
            elif step is CleanupStep.REMOVE_DIRECTORY:
                if os.path.lexists(worktree_path):
                    console.print(f"Removing directory at {worktree_path}...")
                    try:
                        _remove_path(worktree_path)
                    except OSError as e:
                        raise WorktreeCreationError("remove directory", f"{worktree_path}: {e}") from e
            elif step is CleanupStep.REMOVE_BRANCH_WORKTREES:
                for path in branch_worktrees or []:
                    self._remove_branch_worktree(git_ops, request.branch_name, path)
            elif step is CleanupStep.DELETE_BRANCH:
                console.print(f"Deleting existing branch '{request.branch_name}'...")
                git_ops.branch_delete(request.branch_name, force=True)

        if os.path.lexists(worktree_path):
            raise WorktreeConflictError(worktree_path)

    @staticmethod
    def _remove_branch_worktree(git_ops: GitOperations, branch: str, path: str) -> None:
        """Free ``branch`` by removing the worktree at ``path`` that has it checked out."""
        if os.path.lexists(path):
            console.print(f"Removing worktree at {path} (branch '{branch}')...")
            git_ops.worktree_remove(path, force=True)
        else:
            logger.info(f"Pruning missing worktree {path} holding branch {branch}")
            git_ops.worktree_prune()

    def _fetch_pull_request(self, git_ops: GitOperations, request: WorktreeRequest) -> None:
        console.print(f"Fetching PR #{request.number}...")
        git_ops.fetch(request.pr_ref)

    def _attach(
        self,
        git_ops: GitOperations,
        transaction: CreationTransaction,
        request: WorktreeRequest,
        worktree_path: str,
    ) -> None:
        """Check out the existing branch in a new worktree; no branch is created."""
        if request.type is WorktreeType.PR:
            # Re-fetch so force-pushes to the PR are visible in FETCH_HEAD
            self._fetch_pull_request(git_ops, request)

        console.print(f"Attaching to existing branch '{request.branch_name}'...")
        transaction.record_directory(worktree_path)
        git_ops.worktree_add_from_branch(request.branch_name, worktree_path)

    def _create_branch_worktree(
        self,
        git_ops: GitOperations,
        transaction: CreationTransaction,
        request: WorktreeRequest,
        worktree_path: str,
    ) -> None:
        branch = request.branch_name
        branch_existed = git_ops.branch_exists(branch)
        if branch_existed:
            raise GitOperationError("worktree_add", branch, "branch already exists")

        transaction.record_directory(worktree_path)
        try:
            if request.type is WorktreeType.PR:
                self._fetch_pull_request(git_ops, request)
                console.print(f"Creating worktree for branch '{branch}'...")
                git_ops.worktree_add_from_ref(branch, worktree_path, FETCH_HEAD)
            elif request.start_point and request.start_point != "HEAD":
                console.print(f"Creating branch '{branch}' from {request.start_point}...")
                git_ops.worktree_add_from_ref(branch, worktree_path, request.start_point)
            else:
                console.print(f"Creating branch '{branch}'...")
                git_ops.worktree_add(branch, worktree_path)
        except GitOperationError:
            # A failed add can still leave the new branch behind
            if git_ops.branch_exists(branch):
                transaction.record_branch(branch)
            raise
        transaction.record_branch(branch)
