"""Running configured actions in a worktree."""

import os
from typing import Callable, Mapping, Optional

from rich.markup import escape

from gh_wt.config import Config
from gh_wt.exceptions import ActionFailedError, GhWtError, TemplateError
from gh_wt.logging_config import get_logger
from gh_wt.models.worktree import WorktreeRequest
from gh_wt.services.git import safe_git_root
from gh_wt.services.template_renderer import TemplateContext, render
from gh_wt.utils.console import console
from gh_wt.utils.shell import Stream, run_command

logger = get_logger(__name__)

CommandRunner = Callable[..., None]


class ActionService:
    """Renders an action's templates and runs its commands in order, stopping at the first failure."""

    def __init__(self, config: Config, runner: CommandRunner = run_command):
        self.config = config
        self.runner = runner

    def build_context(
        self,
        action_name: str,
        worktree_path: str,
        request: Optional[WorktreeRequest] = None,
        cli_args: str = "",
        root_dir: Optional[str] = None,
    ) -> TemplateContext:
        if root_dir is None:
            root_dir = safe_git_root(os.getcwd())
        return TemplateContext.build(
            worktree_path=worktree_path,
            action=action_name,
            request=request,
            cli_args=cli_args,
            root_dir=root_dir,
        )

    def execute(
        self,
        action_name: str,
        worktree_path: str,
        request: Optional[WorktreeRequest] = None,
        cli_args: str = "",
        env: Optional[Mapping[str, str]] = None,
        stdin: Stream = None,
        stdout: Stream = None,
        stderr: Stream = None,
        root_dir: Optional[str] = None,
    ) -> None:
        """Run the named action against a worktree.

        Commands run one at a time; the first failure stops the action. Side
        effects of commands that already ran are kept.

        Raises:
            ActionNotFoundError: If no action has that name
            ActionFailedError: Rendering or running a command failed
            TemplateError: The working directory template could not be rendered
        """
        if not action_name or not action_name.strip():
            raise GhWtError("action name is required")
        if not worktree_path or not worktree_path.strip():
            raise GhWtError("worktree path is required")

        action = self.config.get_action(action_name)
        context = self.build_context(action_name, worktree_path, request, cli_args, root_dir)

        run_dir = worktree_path
        if action.dir:
            run_dir = render(action.dir, context)

        console.print(f"\n[magenta]Running action '{escape(action_name)}' in {escape(run_dir)}...[/magenta]")

        for template in action.cmds:
            try:
                command = render(template, context)
            except TemplateError as e:
                raise ActionFailedError(action_name, template, e) from e

            console.print(f"[magenta]\\[{escape(action_name)}]: {escape(command)}[/magenta]")
            try:
                self.runner(command, cwd=run_dir, env=env, stdin=stdin, stdout=stdout, stderr=stderr)
            except GhWtError as e:
                logger.error(f"Action '{action_name}' stopped at {command!r}: {e}")
                raise ActionFailedError(action_name, command, e) from e

        console.print("[green]Action finished successfully.[/green]")

    def run_in_worktree(
        self,
        command: str,
        worktree_path: str,
        env: Optional[Mapping[str, str]] = None,
        stdin: Stream = None,
        stdout: Stream = None,
        stderr: Stream = None,
    ) -> None:
        """Run a raw command (the arguments after ``--``) in the worktree."""
        console.print(f"\n[magenta]Running in worktree: {escape(command)}[/magenta]")
        self.runner(command, cwd=worktree_path, env=env, stdin=stdin, stdout=stdout, stderr=stderr)
