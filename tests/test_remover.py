"""Tests for worktree removal"""
import os
from unittest.mock import Mock

import pytest

from gh_wt.core import WorktreeRemover
from gh_wt.exceptions import BranchDeletionError, DirtyWorktreeError, GitOperationError
from gh_wt.models.worktree import WorktreeInfo
from gh_wt.services.git import GitOperations


@pytest.fixture
def feature_worktree(git_repo, temp_dir):
    """A linked worktree on branch 'feature'."""
    path = str(temp_dir / "worktrees" / "test_repo" / "feature")
    GitOperations(git_repo.working_dir).worktree_add("feature", path)
    return path


class TestWorktreeRemover:
    """Test removal of worktrees and their branches."""

    def test_removes_worktree_and_branch(self, git_repo, feature_worktree):
        ops = GitOperations(git_repo.working_dir)

        WorktreeRemover().remove(git_repo.working_dir, feature_worktree, "feature")

        assert not os.path.exists(feature_worktree)
        assert not ops.worktree_is_registered(feature_worktree)
        assert not ops.branch_exists("feature")

    def test_second_removal_is_a_no_op(self, git_repo, feature_worktree):
        remover = WorktreeRemover()
        remover.remove(git_repo.working_dir, feature_worktree, "feature")

        # Nothing left to remove; must not raise
        remover.remove(git_repo.working_dir, feature_worktree, "feature")

    def test_keeps_branch_when_none_given(self, git_repo, feature_worktree):
        WorktreeRemover().remove(git_repo.working_dir, feature_worktree)

        assert GitOperations(git_repo.working_dir).branch_exists("feature")

    def test_detached_head_branch_is_ignored(self, git_repo, feature_worktree):
        WorktreeRemover().remove(git_repo.working_dir, feature_worktree, "HEAD")

        assert not os.path.exists(feature_worktree)

    def test_dirty_worktree_requires_force(self, git_repo, feature_worktree):
        with open(os.path.join(feature_worktree, "wip.txt"), "w") as f:
            f.write("work in progress\n")

        with pytest.raises(DirtyWorktreeError):
            WorktreeRemover().remove(git_repo.working_dir, feature_worktree, "feature")

        assert os.path.isfile(os.path.join(feature_worktree, "wip.txt"))
        assert GitOperations(git_repo.working_dir).branch_exists("feature")

        WorktreeRemover().remove(git_repo.working_dir, feature_worktree, "feature", force=True)
        assert not os.path.exists(feature_worktree)

    def test_branch_deletion_failure(self, git_repo, feature_worktree):
        # 'main' is checked out in the main work tree, so git refuses to delete it
        with pytest.raises(BranchDeletionError) as exc_info:
            WorktreeRemover().remove(git_repo.working_dir, feature_worktree, "main")

        assert str(exc_info.value).startswith("worktree removed, but branch deletion failed")
        assert not os.path.exists(feature_worktree)

    def test_unregistered_directory_is_deleted(self, git_repo, temp_dir):
        leftover = temp_dir / "worktrees" / "test_repo" / "leftover"
        leftover.mkdir(parents=True)

        WorktreeRemover().remove(git_repo.working_dir, str(leftover))

        assert not leftover.exists()

    def test_falls_back_to_directory_removal(self, temp_dir):
        path = temp_dir / "wt"
        path.mkdir()
        ops = Mock(spec=GitOperations)
        ops.has_uncommitted_changes.return_value = False
        ops.worktree_registered_path.return_value = str(path)
        ops.worktree_remove.side_effect = GitOperationError("worktree_remove", str(path), "locked")
        ops.worktree_is_registered.return_value = True
        ops.branch_exists.return_value = False

        WorktreeRemover(git_factory=lambda repo_path: ops).remove("repo", str(path), "feature")

        assert not path.exists()
        ops.worktree_prune.assert_called_once()

    def test_find_exact_path(self, git_repo, feature_worktree):
        ops = GitOperations(git_repo.working_dir)
        remover = WorktreeRemover()

        assert remover.find_exact_path(ops, feature_worktree) == feature_worktree
        assert remover.find_exact_path(ops, feature_worktree + "-missing") is None

    def test_find_exact_path_ignores_suffix_matches(self, temp_dir):
        target = str(temp_dir / "wt")
        # A different worktree whose path merely ends with the target's path
        lookalike = os.path.join(str(temp_dir), "nested", target.lstrip(os.sep))
        ops = Mock(spec=GitOperations)
        ops.worktree_registered_path.return_value = None
        ops.worktree_list.return_value = [
            WorktreeInfo(path=lookalike, branch_name="other", commit_sha="abc", is_main=False, is_orphaned=False)
        ]

        assert WorktreeRemover().find_exact_path(ops, target) is None
