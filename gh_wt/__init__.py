"""
gh-wt - Create and manage git worktrees for pull requests, issues and local branches
"""

from .__version__ import __version__
from .config import Config, Action
from .core import ConflictClassifier, ConflictResolver, WorktreeCreator, WorktreeRemover

__all__ = [
    "Config",
    "Action",
    "ConflictClassifier",
    "ConflictResolver",
    "WorktreeCreator",
    "WorktreeRemover",
    "__version__",
]
