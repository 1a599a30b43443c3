"""Conflict classification and resolution models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List


@dataclass(frozen=True)
class ConflictSignature:
    """What already occupies a worktree target. Computed fresh on every run."""
    dir_exists: bool
    git_registered: bool
    branch_exists: bool
    current_branch: str = ""  # Branch checked out at the registered path, if known

    @property
    def has_conflict(self) -> bool:
        return self.dir_exists or self.git_registered or self.branch_exists


class BranchDecision(Enum):
    """How the creator should treat an occupied target."""
    OVERWRITE = "overwrite"
    ATTACH = "attach"
    CANCEL = "cancel"


class CleanupStep(Enum):
    """One destructive step the creator runs before creating the worktree."""
    REMOVE_WORKTREE = "remove_worktree"
    PRUNE_RECORD = "prune_record"
    REMOVE_DIRECTORY = "remove_directory"
    REMOVE_BRANCH_WORKTREES = "remove_branch_worktrees"  # Other worktrees holding the branch
    DELETE_BRANCH = "delete_branch"


@dataclass
class Resolution:
    """Outcome of conflict resolution, handed to the creator."""
    decision: BranchDecision
    cleanup_plan: List[CleanupStep] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    message: str = ""
    branch_worktrees: List[str] = field(default_factory=list)  # Removed by REMOVE_BRANCH_WORKTREES

    @property
    def proceed(self) -> bool:
        return self.decision is not BranchDecision.CANCEL

    @classmethod
    def no_conflict(cls) -> "Resolution":
        return cls(decision=BranchDecision.OVERWRITE)
