"""Tests for configuration loading"""
import os

import pytest

from gh_wt.config import Action, Config, load_config
from gh_wt.exceptions import ActionNotFoundError, ConfigError


CONFIG_YAML = """\
worktree_dir: {worktree_dir}
actions:
  - name: setup
    cmds:
      - npm install
      - echo {{{{.WorktreeName}}}}
  - name: build
    dir: "{{{{.WorktreePath}}}}/src"
    cmds: [make]
"""


@pytest.fixture
def config_file(temp_dir):
    path = temp_dir / "config.yaml"
    path.write_text(CONFIG_YAML.format(worktree_dir=temp_dir / "from-file"))
    return path


class TestConfigValidation:
    """Test Config dataclass validation."""

    def test_defaults(self):
        config = Config()
        assert config.worktree_dir == os.path.expanduser(os.path.join("~", "github", "worktree"))
        assert config.actions == []
        assert config.force is False

    def test_expands_home(self):
        config = Config(worktree_dir="~/wt")
        assert config.worktree_dir == os.path.join(os.path.expanduser("~"), "wt")

    def test_empty_worktree_dir(self):
        with pytest.raises(ConfigError):
            Config(worktree_dir="  ")

    def test_actions_from_dicts(self):
        config = Config(actions=[{"name": "a", "cmds": ["true"], "dir": ""}])
        assert config.actions == [Action(name="a", cmds=["true"])]
        assert config.actions[0].dir is None

    def test_duplicate_action_names(self):
        with pytest.raises(ConfigError, match="duplicate action"):
            Config(actions=[{"name": "a", "cmds": ["x"]}, {"name": "a", "cmds": ["y"]}])

    def test_action_needs_commands(self):
        with pytest.raises(ConfigError, match="at least one command"):
            Action(name="empty", cmds=[])

    def test_action_needs_name(self):
        with pytest.raises(ConfigError):
            Action(name="", cmds=["true"])

    def test_get_action(self):
        config = Config(actions=[Action(name="a", cmds=["true"])])
        assert config.get_action("a").cmds == ["true"]
        with pytest.raises(ActionNotFoundError, match="action 'missing' not found"):
            config.get_action("missing")

    def test_get_and_to_dict(self):
        config = Config(worktree_dir="/tmp/wt", github_token="tok")
        assert config.get("github_token") == "tok"
        assert config.get("nope", "default") == "default"
        assert config.to_dict()["worktree_dir"] == os.path.abspath("/tmp/wt")


class TestLoadConfig:
    """Test file, environment and flag precedence."""

    def test_reads_file(self, config_file, temp_dir):
        config = load_config(config_file, environ={})

        assert config.worktree_dir == str(temp_dir / "from-file")
        assert [a.name for a in config.actions] == ["setup", "build"]
        assert config.get_action("setup").cmds[1] == "echo {{.WorktreeName}}"
        assert config.get_action("build").dir == "{{.WorktreePath}}/src"

    def test_missing_default_file_uses_defaults(self, temp_dir, monkeypatch):
        monkeypatch.setenv("HOME", str(temp_dir))
        config = load_config(environ={})
        assert config.actions == []

    def test_missing_explicit_file(self, temp_dir):
        with pytest.raises(ConfigError, match="config file not found"):
            load_config(temp_dir / "nope.yaml", environ={})

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / "bad.yaml"
        path.write_text("actions: [unclosed\n")
        with pytest.raises(ConfigError, match="failed to parse"):
            load_config(path, environ={})

    def test_non_mapping_file(self, temp_dir):
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_config(path, environ={})

    def test_environment_overrides_file(self, config_file, temp_dir):
        env = {"GH_WT_WORKTREE_DIR": str(temp_dir / "from-env")}
        config = load_config(config_file, environ=env)
        assert config.worktree_dir == str(temp_dir / "from-env")

    def test_flags_override_environment(self, config_file, temp_dir):
        env = {"GH_WT_WORKTREE_DIR": str(temp_dir / "from-env")}
        config = load_config(config_file, environ=env, worktree_dir=str(temp_dir / "flag"), force=True)
        assert config.worktree_dir == str(temp_dir / "flag")
        assert config.force is True

    def test_none_overrides_are_ignored(self, config_file, temp_dir):
        config = load_config(config_file, environ={}, force=None)
        assert config.force is False

    def test_token_precedence(self, config_file):
        assert load_config(config_file, environ={"GITHUB_TOKEN": "plain"}).github_token == "plain"
        assert load_config(config_file, environ={"GH_TOKEN": "gh"}).github_token == "gh"
        env = {"GITHUB_TOKEN": "plain", "GH_WT_GITHUB_TOKEN": "scoped"}
        assert load_config(config_file, environ=env).github_token == "scoped"
        assert load_config(config_file, environ={}).github_token is None
