"""Tests for the git capability interface"""
import os

import pytest

from gh_wt.constants import REMOTE_FETCH_REFSPEC
from gh_wt.exceptions import GitOperationError
from gh_wt.services.git import (
    GitOperations,
    clone_bare,
    configure_remote_fetch,
    get_git_common_dir,
    get_git_root,
    get_remote_url,
    get_repo_name,
    safe_git_root,
)
from gh_wt.services.git.worktrees import parse_worktree_list


class TestParseWorktreeList:
    """Test parsing of `git worktree list --porcelain`."""

    def test_bare_and_linked_worktrees(self, temp_dir):
        output = (
            f"worktree {temp_dir}/.bare\n"
            "bare\n"
            "\n"
            f"worktree {temp_dir}/pr_1\n"
            "HEAD abc123\n"
            "branch refs/heads/feature\n"
            "\n"
            f"worktree {temp_dir}/detached\n"
            "HEAD def456\n"
            "detached\n"
        )
        worktrees = parse_worktree_list(output)

        assert len(worktrees) == 3
        assert worktrees[0].is_bare and worktrees[0].is_main
        assert worktrees[1].branch_name == "feature"
        assert worktrees[1].commit_sha == "abc123"
        assert not worktrees[1].is_main
        assert worktrees[1].is_orphaned  # Path does not exist
        assert worktrees[2].branch_name == ""

    def test_empty_output(self):
        assert parse_worktree_list("") == []


class TestBranches:
    """Test branch queries and deletion."""

    def test_branch_exists(self, git_repo):
        ops = GitOperations(git_repo.working_dir)
        assert ops.branch_exists("main")
        assert not ops.branch_exists("nope")
        assert not ops.branch_exists("")

    def test_branch_delete(self, git_repo):
        git_repo.git.branch("to-delete")
        ops = GitOperations(git_repo.working_dir)

        ops.branch_delete("to-delete", force=True)

        assert not ops.branch_exists("to-delete")

    def test_branch_delete_missing(self, git_repo):
        ops = GitOperations(git_repo.working_dir)
        with pytest.raises(GitOperationError) as exc_info:
            ops.branch_delete("missing", force=True)
        assert exc_info.value.operation == "branch_delete"
        assert "missing" in str(exc_info.value)

    def test_branch_queries_on_missing_repo(self, temp_dir):
        ops = GitOperations(str(temp_dir / "nowhere"))
        assert not ops.repository_exists()
        assert not ops.branch_exists("main")
        assert not ops.worktree_is_registered(str(temp_dir / "wt"))


class TestWorktrees:
    """Test worktree add, list, remove and prune."""

    def test_add_list_remove(self, git_repo, temp_dir):
        ops = GitOperations(git_repo.working_dir)
        path = str(temp_dir / "wt")

        ops.worktree_add("feature", path)

        assert os.path.isdir(path)
        assert ops.worktree_is_registered(path)
        assert ops.branch_for_worktree(path) == "feature"
        assert GitOperations.current_branch(path) == "feature"
        assert [wt.branch_name for wt in ops.worktree_list()] == ["main", "feature"]

        ops.worktree_remove(path)

        assert not os.path.exists(path)
        assert not ops.worktree_is_registered(path)
        assert ops.branch_exists("feature")

    def test_add_from_existing_branch(self, git_repo, temp_dir):
        git_repo.git.branch("existing")
        ops = GitOperations(git_repo.working_dir)
        path = str(temp_dir / "wt")

        ops.worktree_add_from_branch("existing", path)

        assert GitOperations.current_branch(path) == "existing"

    def test_add_from_invalid_ref(self, git_repo, temp_dir):
        ops = GitOperations(git_repo.working_dir)
        with pytest.raises(GitOperationError) as exc_info:
            ops.worktree_add_from_ref("feature", str(temp_dir / "wt"), "no-such-ref")
        assert exc_info.value.operation == "worktree_add"

    def test_prune_stale_record(self, git_repo, temp_dir):
        import shutil

        ops = GitOperations(git_repo.working_dir)
        path = str(temp_dir / "wt")
        ops.worktree_add("feature", path)
        shutil.rmtree(path)

        assert ops.worktree_is_registered(path)
        ops.worktree_prune()
        assert not ops.worktree_is_registered(path)

    def test_uncommitted_changes(self, git_repo, temp_dir):
        ops = GitOperations(git_repo.working_dir)
        path = temp_dir / "wt"
        ops.worktree_add("feature", str(path))

        assert not GitOperations.has_uncommitted_changes(str(path))
        (path / "new.txt").write_text("untracked\n")
        assert GitOperations.has_uncommitted_changes(str(path))
        assert not GitOperations.has_uncommitted_changes(str(temp_dir / "missing"))

    def test_is_git_repository(self, git_repo, temp_dir):
        assert GitOperations.is_git_repository(git_repo.working_dir)
        plain = temp_dir / "plain"
        plain.mkdir()
        assert not GitOperations.is_git_repository(str(plain))


class TestRepositoryHelpers:
    """Test clone and repository discovery helpers."""

    def test_clone_bare_and_fetch_pull_request(self, origin_repo, temp_dir):
        bare = str(temp_dir / "r" / ".bare")

        clone_bare(origin_repo.working_dir, bare)
        configure_remote_fetch(bare)

        ops = GitOperations(bare)
        assert ops.repository_exists()
        assert ops.branch_exists("main")
        assert REMOTE_FETCH_REFSPEC in ops._get_repo().git.config("--get-all", "remote.origin.fetch")

        ops.fetch("refs/pull/123/head")
        fetched = ops._get_repo().git.rev_parse("FETCH_HEAD")
        assert fetched == origin_repo.git.rev_parse("refs/pull/123/head")

    def test_clone_failure(self, temp_dir):
        with pytest.raises(GitOperationError):
            clone_bare(str(temp_dir / "does-not-exist"), str(temp_dir / "dest"))

    def test_git_root_and_name(self, git_repo):
        subdir = os.path.join(git_repo.working_dir, "sub")
        os.makedirs(subdir)

        assert get_git_root(subdir) == git_repo.working_dir
        assert get_repo_name(subdir) == "test_repo"
        assert get_remote_url(git_repo.working_dir) == "git@github.com:test/test-repo.git"

    def test_git_root_outside_repository(self, temp_dir):
        with pytest.raises(GitOperationError):
            get_git_root(str(temp_dir))
        assert safe_git_root(str(temp_dir)) is None

    def test_common_dir_of_linked_worktree(self, git_repo, temp_dir):
        path = str(temp_dir / "wt")
        GitOperations(git_repo.working_dir).worktree_add("feature", path)

        assert get_git_common_dir(path) == os.path.join(git_repo.working_dir, ".git")
