"""Git operations service"""

import os
from typing import List, Optional

import git

from gh_wt.constants import REMOTE_FETCH_REFSPEC
from gh_wt.exceptions import GitOperationError
from gh_wt.logging_config import get_logger
from gh_wt.models.worktree import WorktreeInfo
from gh_wt.services.git.worktrees import WorktreeService, git_error

logger = get_logger(__name__)


class GitOperations:
    """Git capability interface for one backing repository.

    Mutating operations raise GitOperationError. Queries are best-effort and
    answer False or an empty string when git cannot be asked, so callers can
    query a repository that does not exist yet.
    """

    def __init__(self, repo_path: str):
        """Initialize the service.

        Args:
            repo_path: Path to the git repository (string path, not repo object)
        """
        self.repo_path = repo_path
        self.remote_name = "origin"
        self.worktree_service = WorktreeService(repo_path)

    def _get_repo(self) -> git.Repo:
        """Get a fresh git.Repo instance.

        GitPython repos are lightweight - they don't clone, just open the existing repo.
        """
        return git.Repo(self.repo_path)

    def repository_exists(self) -> bool:
        """Whether the backing repository is present and readable."""
        try:
            self._get_repo()
            return True
        except (git.exc.GitError, OSError):
            return False

    # Worktrees

    def worktree_add(self, branch: str, path: str) -> None:
        """Create a worktree on a new branch starting at HEAD."""
        self.worktree_service.add(path, new_branch=branch)

    def worktree_add_from_ref(self, branch: str, path: str, ref: str) -> None:
        """Create a worktree on a new branch starting at ``ref``."""
        self.worktree_service.add(path, new_branch=branch, start_point=ref)

    def worktree_add_from_branch(self, branch: str, path: str) -> None:
        """Create a worktree checking out an existing branch."""
        self.worktree_service.add(path, branch=branch)

    def worktree_remove(self, path: str, force: bool = False) -> None:
        self.worktree_service.remove(path, force=force)

    def worktree_list(self) -> List[WorktreeInfo]:
        return self.worktree_service.list_worktrees()

    def worktree_is_registered(self, path: str) -> bool:
        return self.worktree_service.is_registered(path)

    def worktree_registered_path(self, path: str) -> Optional[str]:
        return self.worktree_service.find_registered_path(path)

    def worktree_prune(self) -> None:
        self.worktree_service.prune()

    # Branches

    def branch_exists(self, name: str) -> bool:
        """Check if a local branch exists in the repository."""
        if not name:
            return False
        try:
            self._get_repo().git.show_ref("--verify", "--quiet", f"refs/heads/{name}")
            return True
        except (git.exc.GitError, OSError):
            return False

    def branch_delete(self, name: str, force: bool = False) -> None:
        """Delete a local branch (``-D`` when forced)."""
        flag = "-D" if force else "-d"
        try:
            self._get_repo().git.branch(flag, name)
        except (git.exc.GitError, OSError) as e:
            raise git_error("branch_delete", name, e) from e
        logger.info(f"Deleted branch {name}")

    @staticmethod
    def current_branch(path: str) -> str:
        """Branch checked out at ``path``; empty string when it cannot be determined."""
        if not os.path.isdir(path):
            return ""
        try:
            return git.Git(path).rev_parse("--abbrev-ref", "HEAD").strip()
        except (git.exc.GitError, OSError) as e:
            logger.debug(f"Could not read current branch at {path}: {e}")
            return ""

    def branch_for_worktree(self, path: str) -> str:
        """Branch recorded by git for a registered worktree path."""
        target = os.path.realpath(path)
        for wt in self.worktree_service.get_worktree_info():
            if os.path.realpath(wt.path) == target:
                return wt.branch_name
        return self.current_branch(path)

    # Remote

    def fetch(self, *refs: str) -> None:
        """Fetch refs from origin (``FETCH_HEAD`` points at the last one)."""
        try:
            self._get_repo().git.fetch(self.remote_name, *refs)
        except (git.exc.GitError, OSError) as e:
            raise git_error("fetch", " ".join(refs) or self.remote_name, e) from e
        logger.info(f"Fetched {' '.join(refs) or self.remote_name}")

    # Working tree state

    @staticmethod
    def has_uncommitted_changes(path: str) -> bool:
        """Whether the work tree at ``path`` has staged, modified or untracked files."""
        details = WorktreeService.get_status_details(path)
        return any(details.values())

    @staticmethod
    def is_git_repository(path: str) -> bool:
        if not os.path.isdir(path):
            return False
        try:
            git.Git(path).rev_parse("--git-dir")
            return True
        except (git.exc.GitError, OSError):
            return False


def clone_bare(url: str, dest: str) -> None:
    """Clone ``url`` as a bare repository at ``dest``."""
    try:
        git.Repo.clone_from(url, dest, bare=True)
    except (git.exc.GitError, OSError) as e:
        raise git_error("clone", url, e) from e
    logger.info(f"Cloned {url} into {dest}")


def configure_remote_fetch(repo_path: str) -> None:
    """Make origin fetch every branch; bare clones do not set a fetch refspec."""
    try:
        git.Repo(repo_path).git.config("--add", "remote.origin.fetch", REMOTE_FETCH_REFSPEC)
    except (git.exc.GitError, OSError) as e:
        raise git_error("config_remote", repo_path, e) from e


def get_git_root(path: str = ".") -> str:
    """Top-level directory of the work tree containing ``path``.

    Raises:
        GitOperationError: If ``path`` is not inside a work tree
    """
    try:
        return git.Git(os.path.abspath(path)).rev_parse("--show-toplevel").strip()
    except (git.exc.GitError, OSError) as e:
        raise git_error("rev_parse", path, e) from e


def get_git_common_dir(path: str) -> str:
    """Absolute path of the repository directory shared by all worktrees of ``path``."""
    try:
        common = git.Git(os.path.abspath(path)).rev_parse("--git-common-dir").strip()
    except (git.exc.GitError, OSError) as e:
        raise git_error("rev_parse", path, e) from e
    if not os.path.isabs(common):
        common = os.path.join(os.path.abspath(path), common)
    return os.path.normpath(common)


def get_repo_name(path: str = ".") -> str:
    """Name of the repository containing ``path`` (its top-level directory name)."""
    return os.path.basename(get_git_root(path))


def get_remote_url(path: str = ".", remote: str = "origin") -> Optional[str]:
    """URL of ``remote`` for the repository at ``path``, or None."""
    try:
        return git.Repo(path, search_parent_directories=True).remote(remote).url
    except (git.exc.GitError, OSError, ValueError) as e:
        logger.debug(f"No remote '{remote}' for {path}: {e}")
        return None


def safe_git_root(path: str = ".") -> Optional[str]:
    """get_git_root that answers None outside a work tree."""
    try:
        return get_git_root(path)
    except GitOperationError:
        return None
