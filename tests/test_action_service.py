"""Tests for running configured actions"""
from unittest.mock import Mock

import pytest

from gh_wt.config import Action, Config
from gh_wt.exceptions import ActionFailedError, ActionNotFoundError, CommandFailedError, GhWtError
from gh_wt.models.worktree import WorktreeRequest
from gh_wt.services.action_service import ActionService


@pytest.fixture
def worktree(temp_dir):
    path = temp_dir / "worktrees" / "hello" / "pr_42"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def request_42():
    return WorktreeRequest.for_pull_request("octo", "hello", 42, branch_name="fix-bug")


class TestActionServiceWithRecorder:
    """Test rendering and ordering with a recording runner."""

    def test_commands_run_in_order_with_rendered_templates(self, worktree, request_42):
        config = Config(actions=[Action(
            name="setup",
            cmds=["echo {{.WorktreeName}}", "gh pr checkout {{.Number}} {{.CLI_ARGS}}"],
        )])
        runner = Mock()

        ActionService(config, runner=runner).execute(
            "setup", str(worktree), request=request_42, cli_args="--force", root_dir="/src"
        )

        commands = [c.args[0] for c in runner.call_args_list]
        assert commands == ["echo pr_42", "gh pr checkout 42 --force"]
        assert all(c.kwargs["cwd"] == str(worktree) for c in runner.call_args_list)

    def test_dir_template_sets_working_directory(self, worktree):
        config = Config(actions=[Action(name="build", cmds=["make"], dir="{{.WorktreePath}}/src")])
        runner = Mock()

        ActionService(config, runner=runner).execute("build", str(worktree), root_dir="/src")

        assert runner.call_args.kwargs["cwd"] == f"{worktree}/src"

    def test_first_failure_stops_the_action(self, worktree):
        config = Config(actions=[Action(name="deploy", cmds=["one", "two", "three"])])
        runner = Mock(side_effect=[None, CommandFailedError("two", 3), None])

        with pytest.raises(ActionFailedError) as exc_info:
            ActionService(config, runner=runner).execute("deploy", str(worktree), root_dir="/src")

        assert runner.call_count == 2
        assert exc_info.value.command == "two"
        assert isinstance(exc_info.value.cause, CommandFailedError)

    def test_render_error_stops_before_running(self, worktree):
        config = Config(actions=[Action(name="bad", cmds=["ok", "echo {{.Unknown}}", "never"])])
        runner = Mock()

        with pytest.raises(ActionFailedError, match="unknown variable 'Unknown'"):
            ActionService(config, runner=runner).execute("bad", str(worktree), root_dir="/src")

        assert runner.call_count == 1

    def test_unknown_action(self, worktree):
        runner = Mock()
        with pytest.raises(ActionNotFoundError):
            ActionService(Config(), runner=runner).execute("missing", str(worktree))
        runner.assert_not_called()

    def test_requires_name_and_path(self, worktree):
        service = ActionService(Config(actions=[Action(name="a", cmds=["x"])]), runner=Mock())
        with pytest.raises(GhWtError, match="action name is required"):
            service.execute(" ", str(worktree))
        with pytest.raises(GhWtError, match="worktree path is required"):
            service.execute("a", "")

    def test_root_dir_defaults_to_current_repository(self, worktree, git_repo, monkeypatch):
        monkeypatch.chdir(git_repo.working_dir)
        config = Config(actions=[Action(name="root", cmds=["ls {{.ROOT_DIR}}"])])
        runner = Mock()

        ActionService(config, runner=runner).execute("root", str(worktree))

        assert runner.call_args.args[0] == f"ls {git_repo.working_dir}"


class TestActionServiceWithShell:
    """Test actions against a real shell."""

    def test_side_effects_of_earlier_commands_are_kept(self, config, worktree):
        with pytest.raises(ActionFailedError) as exc_info:
            ActionService(config).execute("deploy", str(worktree), root_dir="/src")

        assert (worktree / "log.txt").read_text() == "one\n"
        assert exc_info.value.cause.returncode == 3

    def test_successful_action(self, config, worktree):
        ActionService(config).execute("hello", str(worktree), root_dir="/src")
        assert (worktree / "hello.txt").read_text().strip() == "pr_42"

    def test_run_in_worktree(self, config, worktree):
        ActionService(config).run_in_worktree("touch ran.txt", str(worktree))
        assert (worktree / "ran.txt").exists()
