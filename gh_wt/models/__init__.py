"""Data models for gh-wt."""

from .worktree import WorktreeType, WorktreeRequest, WorktreeInfo, WorktreeListItem
from .conflict import ConflictSignature, BranchDecision, CleanupStep, Resolution

__all__ = [
    "WorktreeType",
    "WorktreeRequest",
    "WorktreeInfo",
    "WorktreeListItem",
    "ConflictSignature",
    "BranchDecision",
    "CleanupStep",
    "Resolution",
]
