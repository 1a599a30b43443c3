"""Worktree lifecycle: classify, resolve, create, remove."""

from .classifier import ConflictClassifier
from .resolver import ConflictResolver, build_cleanup_plan
from .creator import CreationTransaction, WorktreeCreator
from .remover import WorktreeRemover

__all__ = [
    "ConflictClassifier",
    "ConflictResolver",
    "build_cleanup_plan",
    "CreationTransaction",
    "WorktreeCreator",
    "WorktreeRemover",
]
