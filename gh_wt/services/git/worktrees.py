"""Worktree operations service for gh-wt."""

import os
from typing import Any, Dict, List, Optional

import git

from gh_wt.exceptions import GitOperationError
from gh_wt.logging_config import get_logger
from gh_wt.models.worktree import WorktreeInfo

logger = get_logger(__name__)


def normalize_path(path: str) -> str:
    """Absolute, symlink-free form of a path for comparisons."""
    return os.path.realpath(os.path.abspath(path))


def git_error(operation: str, target: Optional[str], error: Exception) -> GitOperationError:
    """Convert a GitPython exception into a GitOperationError with the git stderr."""
    if isinstance(error, git.exc.GitCommandError):
        stderr = (error.stderr or "").strip()
        # GitPython prefixes stderr with "stderr: '" ... "'"
        if stderr.startswith("stderr:"):
            stderr = stderr[len("stderr:"):].strip().strip("'").strip()
        status = error.status if error.status is not None else "unknown"
        if stderr:
            message = f"exit {status}: {stderr}"
        else:
            message = f"exit {status}"
    else:
        message = str(error)
    return GitOperationError(operation, target, message)


def parse_worktree_list(output: str) -> List[WorktreeInfo]:
    """Parse ``git worktree list --porcelain`` output.

    Format:
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name
        (blank line between worktrees)
    """
    worktrees: List[WorktreeInfo] = []
    current: Dict[str, Any] = {}

    def flush():
        path = current.get("path", "")
        if path:
            worktrees.append(
                WorktreeInfo(
                    path=path,
                    branch_name=current.get("branch", ""),
                    commit_sha=current.get("HEAD", ""),
                    is_main=not worktrees,  # First entry is always the main one
                    is_orphaned=not os.path.exists(path),
                    is_bare=current.get("bare", False),
                )
            )

    for raw_line in output.split("\n"):
        line = raw_line.strip()

        if not line:
            # Empty line marks end of worktree entry
            if current:
                flush()
                current = {}
            continue

        if line.startswith("worktree "):
            current["path"] = line.split(" ", 1)[1]
        elif line.startswith("HEAD "):
            current["HEAD"] = line.split(" ", 1)[1]
        elif line.startswith("branch "):
            branch_ref = line.split(" ", 1)[1]
            if branch_ref.startswith("refs/heads/"):
                current["branch"] = branch_ref[len("refs/heads/"):]
            else:
                current["branch"] = ""
        elif line == "bare":
            current["bare"] = True
        elif line.startswith("detached"):
            current["branch"] = ""  # Detached HEAD

    # Handle last entry if no trailing blank line
    if current:
        flush()

    return worktrees


class WorktreeService:
    """Service for managing the worktrees of one repository."""

    def __init__(self, repo_path: str):
        """Initialize the worktree service.

        Args:
            repo_path: Path to the git repository (bare repository, .git dir or work tree)
        """
        self.repo_path = repo_path

    def _get_repo(self) -> git.Repo:
        """Open the repository. A fresh instance per call; Repo objects are cheap."""
        return git.Repo(self.repo_path)

    def list_worktrees(self) -> List[WorktreeInfo]:
        """Get detailed information about all worktrees.

        Raises:
            GitOperationError: If the worktree list cannot be read
        """
        try:
            output = self._get_repo().git.worktree("list", "--porcelain")
        except (git.exc.GitError, OSError) as e:
            raise git_error("worktree_list", self.repo_path, e) from e

        worktrees = parse_worktree_list(output)
        logger.debug(f"Found {len(worktrees)} worktrees in {self.repo_path}")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    def get_worktree_info(self) -> List[WorktreeInfo]:
        """Best-effort variant of list_worktrees; empty when git cannot list."""
        try:
            return self.list_worktrees()
        except GitOperationError as e:
            logger.debug(f"Could not list worktrees: {e}")
            return []

    def find_registered_path(self, path: str) -> Optional[str]:
        """Return the path exactly as git recorded it, if the path is registered."""
        target = normalize_path(path)
        for wt in self.get_worktree_info():
            if normalize_path(wt.path) == target:
                return wt.path
        return None

    def is_registered(self, path: str) -> bool:
        return self.find_registered_path(path) is not None

    def add(self, path: str, branch: Optional[str] = None, new_branch: Optional[str] = None,
            start_point: Optional[str] = None) -> None:
        """Run ``git worktree add``.

        Args:
            path: Where to create the worktree
            branch: Existing branch to check out (when not creating one)
            new_branch: Name of a branch to create with ``-b``
            start_point: Ref the new branch starts from
        """
        args = ["add"]
        if new_branch:
            args += ["-b", new_branch, path]
            if start_point:
                args.append(start_point)
        else:
            args += [path, branch]

        try:
            self._get_repo().git.worktree(*args)
        except (git.exc.GitError, OSError) as e:
            raise git_error("worktree_add", path, e) from e
        logger.info(f"Added worktree at {path}")

    def remove(self, path: str, force: bool = False) -> None:
        """Remove a worktree at the specified path.

        Args:
            path: Path to the worktree directory
            force: Force removal even if working tree is dirty or locked
        """
        args = ["remove", path]
        if force:
            args.append("--force")

        try:
            self._get_repo().git.worktree(*args)
        except (git.exc.GitError, OSError) as e:
            error = git_error("worktree_remove", path, e)
            logger.error(f"Failed to remove worktree at {path}: {error.message}")
            raise error from e
        logger.info(f"Removed worktree at {path}")

    def prune(self) -> None:
        """Prune orphaned worktree metadata."""
        try:
            self._get_repo().git.worktree("prune")
        except (git.exc.GitError, OSError) as e:
            error = git_error("worktree_prune", self.repo_path, e)
            logger.error(f"Failed to prune worktrees: {error.message}")
            raise error from e
        logger.info("Pruned orphaned worktree metadata")

    @staticmethod
    def get_status_details(worktree_path: str) -> dict:
        """Get detailed file status of a worktree.

        Args:
            worktree_path: Path to the worktree directory

        Returns:
            Dict with 'modified', 'untracked', 'staged' boolean flags,
            or empty dict if the path doesn't exist or isn't a work tree
        """
        if not os.path.isdir(worktree_path):
            logger.debug(f"Worktree path {worktree_path} doesn't exist")
            return {}

        try:
            status = git.Git(worktree_path).status("--porcelain")
        except (git.exc.GitError, OSError) as e:
            logger.debug(f"Could not check worktree status for {worktree_path}: {e}")
            return {}

        # Porcelain format: XY filename
        # X = index status, Y = working tree status
        has_modified = False
        has_untracked = False
        has_staged = False

        for line in status.split("\n"):
            if len(line) < 2:
                continue
            if line.startswith("??"):
                has_untracked = True
                continue
            if line[0] != " ":
                has_staged = True
            if line[1] != " ":
                has_modified = True

        return {
            "modified": has_modified,
            "untracked": has_untracked,
            "staged": has_staged,
        }
