"""Command-line argument parsing for gh-wt."""

import argparse
import sys
from typing import List, Optional, Tuple

from gh_wt.__version__ import __version__


def split_cli_args(argv: List[str]) -> Tuple[List[str], str]:
    """Split ``argv`` at the first bare ``--``.

    Everything after it is handed to actions as ``CLI_ARGS`` (or run as a
    raw command), joined by single spaces.
    """
    if "--" not in argv:
        return argv, ""
    index = argv.index("--")
    return argv[:index], " ".join(argv[index + 1:])


def _global_options(suppress: bool) -> argparse.ArgumentParser:
    """Flags accepted both before and after the subcommand."""
    default = argparse.SUPPRESS if suppress else None
    flag_default = argparse.SUPPRESS if suppress else False
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        default=flag_default,
        help="Force operation without prompts",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=flag_default,
        help="Show verbose output",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=flag_default,
        help="Show debug information for troubleshooting",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        default=flag_default,
        help="Disable color output",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        default=default,
        help="Config file (default: ~/.config/gh-wt/config.yaml)",
    )
    return parser


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gh-wt",
        description="Manage git worktrees for GitHub pull requests, issues and local branches",
        epilog="Arguments after '--' are passed to actions as CLI_ARGS. "
        "Set GITHUB_TOKEN (or github_token in the config file) for private repositories.",
        parents=[_global_options(suppress=False)],
    )
    parser.add_argument("--version", action="version", version=f"gh-wt {__version__}")

    common = [_global_options(suppress=True)]
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    add = subparsers.add_parser(
        "add",
        aliases=["create"],
        parents=common,
        help="Add a new worktree",
        description="Add a worktree from a GitHub pull request, a GitHub issue or a local name.",
    )
    add.add_argument("target", nargs="?", help="PR URL, issue URL or worktree name")
    add.add_argument("--pr", metavar="PR", help="PR number or URL")
    add.add_argument("--issue", metavar="ISSUE", help="Issue number or URL")
    add.add_argument("-n", "--name", help="Name of the worktree (overrides pr_N / issue_N)")
    add.add_argument("-a", "--action", help="Action to run after the worktree is created")
    add.add_argument(
        "-e",
        "--use-existing",
        action="store_true",
        help="Attach to the branch if it already exists instead of recreating it",
    )
    add.set_defaults(command="add")

    remove = subparsers.add_parser(
        "remove",
        aliases=["rm"],
        parents=common,
        help="Remove a worktree and its branch",
        description="Remove a worktree and its branch. Prompts if it has uncommitted changes.",
    )
    remove.add_argument("target", help="Worktree name or PR/issue URL")
    remove.set_defaults(command="remove")

    list_parser = subparsers.add_parser(
        "list", aliases=["ls"], parents=common, help="List worktrees"
    )
    list_parser.add_argument("repo", nargs="?", help="Only list worktrees of this repository")
    list_parser.add_argument(
        "--plain", action="store_true", help="Print a table instead of the interactive view"
    )
    list_parser.set_defaults(command="list")

    run = subparsers.add_parser(
        "run",
        parents=common,
        help="Run an action or command in an existing worktree",
        usage="gh-wt run <worktree> [action] [-- command]",
    )
    run.add_argument("worktree", help="Worktree name")
    run.add_argument("action", nargs="?", help="Action to run")

    action = subparsers.add_parser("action", parents=common, help="Inspect configured actions")
    action.add_argument("-l", "--list", action="store_true", help="List all available actions")
    action.add_argument(
        "-s", "--silent", action="store_true", help="Only print action names (for scripts)"
    )

    return parser


def parse_args(argv: Optional[List[str]] = None) -> Tuple[argparse.Namespace, str]:
    """Parse command-line arguments.

    Returns:
        Parsed namespace and the ``CLI_ARGS`` string
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    own_args, cli_args = split_cli_args(argv)
    return build_parser().parse_args(own_args), cli_args

