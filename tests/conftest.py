"""Pytest fixtures for gh-wt tests"""
import os
import tempfile
from pathlib import Path
from unittest.mock import Mock

import git
import pytest

from gh_wt.config import Action, Config
from gh_wt.models.worktree import WorktreeRequest


def _configure_user(repo):
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")


def _commit_file(repo, name, content, message):
    path = Path(repo.working_dir) / name
    path.write_text(content)
    repo.index.add([name])
    return repo.index.commit(message)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        # Resolve symlinks (macOS /var -> /private/var) so paths compare equal to git's
        yield Path(os.path.realpath(tmpdir))


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository for testing."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    # Initialize repository
    repo = git.Repo.init(repo_path)
    _configure_user(repo)

    # Create initial commit on main branch
    _commit_file(repo, "README.md", "# Test Repository\n", "Initial commit")
    repo.git.branch("-M", "main")

    # Add a fake GitHub remote for testing
    repo.create_remote("origin", "git@github.com:test/test-repo.git")

    yield repo

    # Cleanup
    repo.close()


@pytest.fixture
def origin_repo(temp_dir):
    """A repository standing in for GitHub, with pull request 123 under refs/pull/."""
    repo_path = temp_dir / "origin"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)
    _configure_user(repo)
    _commit_file(repo, "README.md", "# Origin\n", "Initial commit")
    repo.git.branch("-M", "main")

    # The PR head exists only as refs/pull/123/head, like on GitHub
    repo.git.checkout("-b", "pr-work")
    pr_commit = _commit_file(repo, "feature.txt", "PR content\n", "PR commit")
    repo.git.update_ref("refs/pull/123/head", pr_commit.hexsha)
    repo.git.checkout("main")
    repo.git.branch("-D", "pr-work")

    yield repo

    repo.close()


@pytest.fixture
def worktree_root(temp_dir):
    return str(temp_dir / "worktrees")


@pytest.fixture
def config(worktree_root):
    """Configuration with the worktree root inside the temp dir."""
    return Config(
        worktree_dir=worktree_root,
        actions=[
            Action(name="hello", cmds=["echo {{.WorktreeName}} > hello.txt"]),
            Action(name="deploy", cmds=["echo one >> log.txt", "exit 3", "echo three >> log.txt"]),
        ],
    )


@pytest.fixture
def pr_request(origin_repo):
    """Request for PR 123 of test/r, cloned from the local origin repository."""
    return WorktreeRequest.for_pull_request(
        "test",
        "r",
        123,
        branch_name="feature-x",
        clone_url=origin_repo.working_dir,
    )


@pytest.fixture
def local_request(git_repo):
    return WorktreeRequest.for_local("test_repo", git_repo.working_dir, "my-feature", owner="test")


@pytest.fixture
def confirm_yes():
    return Mock(return_value=True)


@pytest.fixture
def confirm_no():
    return Mock(return_value=False)
