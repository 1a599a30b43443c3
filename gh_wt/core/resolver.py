"""Turns a conflict signature into a cleanup plan and an operator decision."""

import os
from typing import Callable, List, Optional

from rich.markup import escape
from rich.prompt import Confirm

from gh_wt.constants import UNCOMMITTED_WARNING
from gh_wt.exceptions import GhWtError, GitOperationError, WorktreeConflictError
from gh_wt.logging_config import get_logger
from gh_wt.models.conflict import BranchDecision, CleanupStep, ConflictSignature, Resolution
from gh_wt.models.worktree import WorktreeInfo, WorktreeRequest
from gh_wt.services.git import GitOperations, normalize_path
from gh_wt.utils.console import console

logger = get_logger(__name__)

ConfirmFunc = Callable[[str], bool]


def confirm_with_prompt(message: str) -> bool:
    """Ask a yes/no question on the terminal, defaulting to no."""
    try:
        return Confirm.ask(escape(message), console=console, default=False)
    except EOFError as e:
        raise GhWtError("failed to read confirmation: no input available (use --force)") from e


def build_cleanup_plan(signature: ConflictSignature, delete_branch: bool = True) -> List[CleanupStep]:
    """Ordered cleanup steps, one per occupied resource.

    A registered worktree whose directory exists is removed through git,
    which also removes the directory.
    """
    plan: List[CleanupStep] = []
    if signature.dir_exists and signature.git_registered:
        plan.append(CleanupStep.REMOVE_WORKTREE)
    elif signature.git_registered:
        plan.append(CleanupStep.PRUNE_RECORD)
    elif signature.dir_exists:
        plan.append(CleanupStep.REMOVE_DIRECTORY)

    if signature.branch_exists and delete_branch:
        plan.append(CleanupStep.DELETE_BRANCH)
    return plan


class ConflictResolver:
    """Decides between overwrite, attach and cancel before anything is mutated."""

    def __init__(self, git_ops: GitOperations, confirm: Optional[ConfirmFunc] = None):
        self.git_ops = git_ops
        self.confirm = confirm or confirm_with_prompt

    def resolve(
        self,
        signature: ConflictSignature,
        request: WorktreeRequest,
        worktree_path: str,
        force: bool = False,
        use_existing: bool = False,
    ) -> Resolution:
        """Build the cleanup plan and get the operator's decision.

        Args:
            signature: Fresh classification of the target
            request: What is being created
            worktree_path: Target worktree path
            force: Accept the plan without prompting
            use_existing: Attach to the branch if it already exists

        Returns:
            Resolution with decision, plan, warnings and the prompt message
        """
        if not signature.has_conflict:
            return Resolution.no_conflict()

        attach = use_existing and signature.branch_exists
        decision = BranchDecision.ATTACH if attach else BranchDecision.OVERWRITE
        plan = build_cleanup_plan(signature, delete_branch=not attach)

        holders = self.branch_holders(request.branch_name, worktree_path) if signature.branch_exists else []
        self.check_branch_holders(request.branch_name, holders, attach)
        branch_worktrees = [wt.path for wt in holders]
        if branch_worktrees and CleanupStep.DELETE_BRANCH in plan:
            plan.insert(plan.index(CleanupStep.DELETE_BRANCH), CleanupStep.REMOVE_BRANCH_WORKTREES)

        warnings = self.collect_warnings(signature, request, worktree_path, plan, branch_worktrees)
        message = self.describe_plan(
            signature, request, worktree_path, plan, warnings, decision, branch_worktrees
        )
        resolution = Resolution(
            decision=decision,
            cleanup_plan=plan,
            warnings=warnings,
            message=message,
            branch_worktrees=branch_worktrees,
        )

        # Attaching to an existing branch with nothing to clean up destroys nothing
        if not plan:
            return resolution

        if force:
            logger.info("Force flag set, accepting cleanup plan without prompting")
            return resolution

        if not self.confirm(message):
            logger.info("Operator declined the cleanup plan")
            resolution.decision = BranchDecision.CANCEL
        return resolution

    def branch_holders(self, branch: str, worktree_path: str) -> List[WorktreeInfo]:
        """Worktrees other than the target that have ``branch`` checked out."""
        try:
            worktrees = self.git_ops.worktree_list()
        except GitOperationError as e:
            logger.debug(f"Could not list worktrees for branch check: {e}")
            return []

        target = normalize_path(worktree_path)
        return [
            wt
            for wt in worktrees
            if wt.branch_name == branch and not wt.is_bare and normalize_path(wt.path) != target
        ]

    @staticmethod
    def check_branch_holders(branch: str, holders: List[WorktreeInfo], attach: bool) -> None:
        """Fail before prompting when git could not free the branch for the new worktree.

        Raises:
            WorktreeConflictError: The branch is checked out in the main work
                tree (which is never removed), or attaching while another
                worktree holds the branch
        """
        for wt in holders:
            if wt.is_main:
                raise WorktreeConflictError(
                    wt.path, f"branch '{branch}' is checked out in the main work tree"
                )
        if attach and holders:
            raise WorktreeConflictError(
                holders[0].path, f"branch '{branch}' is already checked out in another worktree"
            )

    def collect_warnings(
        self,
        signature: ConflictSignature,
        request: WorktreeRequest,
        worktree_path: str,
        plan: List[CleanupStep],
        branch_worktrees: Optional[List[str]] = None,
    ) -> List[str]:
        """Warnings for every work tree whose uncommitted changes the plan would destroy."""
        warnings: List[str] = []
        abs_path = os.path.abspath(worktree_path)

        touches_target = any(
            step in plan for step in (CleanupStep.REMOVE_WORKTREE, CleanupStep.REMOVE_DIRECTORY)
        )
        if touches_target and self.git_ops.is_git_repository(abs_path):
            if self.git_ops.has_uncommitted_changes(abs_path):
                warnings.append(UNCOMMITTED_WARNING.format(subject=f"Worktree at {abs_path}"))

        if CleanupStep.REMOVE_BRANCH_WORKTREES in plan:
            for path in branch_worktrees or []:
                if self.git_ops.has_uncommitted_changes(path):
                    warnings.append(UNCOMMITTED_WARNING.format(
                        subject=f"Branch '{request.branch_name}' checked out at {path}"
                    ))

        for warning in warnings:
            logger.warning(warning)
        return warnings

    @staticmethod
    def describe_plan(
        signature: ConflictSignature,
        request: WorktreeRequest,
        worktree_path: str,
        plan: List[CleanupStep],
        warnings: List[str],
        decision: BranchDecision = BranchDecision.OVERWRITE,
        branch_worktrees: Optional[List[str]] = None,
    ) -> str:
        """Human-readable summary of everything the plan will delete or overwrite."""
        abs_path = os.path.abspath(worktree_path)
        branch = request.branch_name
        lines = [f"Target: create worktree for '{branch}'", "", "This will:"]

        for step in plan:
            if step is CleanupStep.REMOVE_WORKTREE:
                if signature.current_branch:
                    lines.append(
                        f"- Remove worktree at {abs_path} (currently on branch '{signature.current_branch}')"
                    )
                else:
                    lines.append(f"- Remove worktree at {abs_path}")
            elif step is CleanupStep.PRUNE_RECORD:
                lines.append(f"- Remove stale worktree record at {abs_path}")
            elif step is CleanupStep.REMOVE_DIRECTORY:
                lines.append(f"- Remove directory at {abs_path}")
            elif step is CleanupStep.REMOVE_BRANCH_WORKTREES:
                for path in branch_worktrees or []:
                    lines.append(f"- Remove worktree at {path} (has branch '{branch}' checked out)")
            elif step is CleanupStep.DELETE_BRANCH:
                lines.append(f"- Delete existing branch '{branch}'")

        if decision is BranchDecision.ATTACH:
            lines.append(f"- Create worktree on existing branch '{branch}'")
        else:
            lines.append(f"- Create worktree and branch for '{branch}'")

        for warning in warnings:
            lines.append("")
            lines.append(warning)

        lines.append("")
        lines.append("Overwrite?")
        return "\n".join(lines)
