"""Worktree data models."""

import os
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional

from gh_wt.constants import BARE_DIR, FETCH_HEAD, PR_REF_TEMPLATE


class WorktreeType(Enum):
    """What a worktree was created from."""
    PR = "pr"
    ISSUE = "issue"
    LOCAL = "local"


@dataclass(frozen=True)
class WorktreeRequest:
    """Immutable intent for creating one worktree.

    Built once per invocation from resolved input. The branch and worktree
    names may only change through ``with_names`` before creation starts.
    """

    type: WorktreeType
    repo: str
    branch_name: str
    worktree_name: str
    owner: Optional[str] = None
    number: Optional[int] = None
    start_point: str = "HEAD"
    repo_path: Optional[str] = None  # Backing repository for local worktrees
    clone_url: Optional[str] = None
    title: Optional[str] = None

    def __post_init__(self):
        if not self.repo:
            raise ValueError("repo is required")
        if not self.branch_name:
            raise ValueError("branch_name is required")
        if not self.worktree_name:
            raise ValueError("worktree_name is required")
        if self.type is WorktreeType.LOCAL:
            if self.number is not None:
                raise ValueError("local worktrees do not have a number")
            if not self.repo_path:
                raise ValueError("local worktrees need the path of their repository")
        elif self.number is None:
            raise ValueError(f"{self.type.value} worktrees need a number")

    @classmethod
    def for_pull_request(
        cls,
        owner: str,
        repo: str,
        number: int,
        branch_name: Optional[str] = None,
        name: Optional[str] = None,
        title: Optional[str] = None,
        clone_url: Optional[str] = None,
    ) -> "WorktreeRequest":
        return cls(
            type=WorktreeType.PR,
            owner=owner,
            repo=repo,
            number=number,
            branch_name=branch_name or f"pr_{number}",
            worktree_name=name or f"pr_{number}",
            start_point=FETCH_HEAD,
            clone_url=clone_url,
            title=title,
        )

    @classmethod
    def for_issue(
        cls,
        owner: str,
        repo: str,
        number: int,
        name: Optional[str] = None,
        title: Optional[str] = None,
        clone_url: Optional[str] = None,
    ) -> "WorktreeRequest":
        branch = f"issue_{number}"
        return cls(
            type=WorktreeType.ISSUE,
            owner=owner,
            repo=repo,
            number=number,
            branch_name=branch,
            worktree_name=name or branch,
            clone_url=clone_url,
            title=title,
        )

    @classmethod
    def for_local(
        cls, repo: str, repo_path: str, name: str, owner: Optional[str] = None
    ) -> "WorktreeRequest":
        from gh_wt.parsing import sanitize_branch_name

        return cls(
            type=WorktreeType.LOCAL,
            owner=owner,
            repo=repo,
            branch_name=sanitize_branch_name(name),
            worktree_name=name,
            repo_path=repo_path,
        )

    def with_names(
        self, branch_name: Optional[str] = None, worktree_name: Optional[str] = None
    ) -> "WorktreeRequest":
        """Return a copy with a different branch and/or worktree name."""
        return replace(
            self,
            branch_name=branch_name or self.branch_name,
            worktree_name=worktree_name or self.worktree_name,
        )

    @property
    def is_remote(self) -> bool:
        """PR and issue worktrees are backed by a bare clone under the worktree root."""
        return self.type is not WorktreeType.LOCAL

    @property
    def pr_ref(self) -> Optional[str]:
        if self.type is not WorktreeType.PR:
            return None
        return PR_REF_TEMPLATE.format(number=self.number)

    @property
    def resolved_clone_url(self) -> Optional[str]:
        if self.clone_url:
            return self.clone_url
        if self.owner:
            return f"https://github.com/{self.owner}/{self.repo}.git"
        return None

    def repo_dir(self, base_dir: str) -> str:
        """Directory holding every worktree of this repository."""
        return os.path.join(os.path.abspath(base_dir), self.repo)

    def worktree_path(self, base_dir: str) -> str:
        return os.path.join(self.repo_dir(base_dir), self.worktree_name)

    def backing_repo_path(self, base_dir: str) -> str:
        """Git repository the worktree is attached to."""
        if self.type is WorktreeType.LOCAL:
            return os.path.abspath(self.repo_path)
        return os.path.join(self.repo_dir(base_dir), BARE_DIR)

    def template_fields(self) -> Dict[str, Optional[str]]:
        """Request fields exposed to action templates."""
        return {
            "Type": self.type.value,
            "Owner": self.owner,
            "Repo": self.repo,
            "Number": str(self.number) if self.number is not None else None,
            "BranchName": self.branch_name,
        }


@dataclass
class WorktreeInfo:
    """Information about a git worktree."""

    path: str
    branch_name: str
    commit_sha: str
    is_main: bool  # Is this the main working tree?
    is_orphaned: bool  # Directory missing?
    is_bare: bool = False

    def __str__(self) -> str:
        """String representation of worktree."""
        status = "orphaned" if self.is_orphaned else "active"
        main_marker = " (main)" if self.is_main else ""
        return f"{self.branch_name or '(detached)'} @ {self.path}{main_marker} [{status}]"


@dataclass
class WorktreeListItem:
    """A worktree as shown by the list command."""

    name: str
    repo: str
    branch: str
    path: str
    has_changes: bool = False
    last_mod_time: Optional[float] = None
