"""Subcommand implementations for gh-wt."""

import argparse
import os
import re
import sys
from typing import Callable, List, Optional, Tuple

from rich.markup import escape
from rich.prompt import Prompt

from gh_wt.config import Config
from gh_wt.core import ConflictClassifier, ConflictResolver, WorktreeCreator, WorktreeRemover
from gh_wt.core.lookup import (
    LocatedWorktree,
    discover_repositories,
    find_worktrees,
    list_worktrees,
    remove_empty_parents,
)
from gh_wt.core.resolver import confirm_with_prompt
from gh_wt.exceptions import (
    BranchDeletionError,
    DirtyWorktreeError,
    GhWtError,
    GitOperationError,
    WorktreeNotFoundError,
)
from gh_wt.logging_config import get_logger
from gh_wt.models.worktree import WorktreeListItem, WorktreeRequest, WorktreeType
from gh_wt.parsing import (
    determine_worktree_type,
    is_github_url,
    is_url,
    parse_github_url,
    parse_number,
    parse_remote_url,
)
from gh_wt.services.action_service import ActionService
from gh_wt.services.display_service import DisplayService
from gh_wt.services.git import GitOperations, get_git_root, get_remote_url, get_repo_name
from gh_wt.services.github_service import GitHubService
from gh_wt.utils.console import console

logger = get_logger(__name__)

_REMOTE_NAME = re.compile(r"^(pr|issue)_(\d+)$")


def is_interactive_terminal() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


def _unsupported_url(value: str) -> GhWtError:
    return GhWtError(
        f"unsupported URL: {value} (expected an https://github.com pull request or issue URL)"
    )


class WorktreeCommands:
    """Runs one parsed gh-wt invocation against the resolved config."""

    def __init__(
        self,
        config: Config,
        cli_args: str = "",
        cwd: Optional[str] = None,
        github: Optional[GitHubService] = None,
        confirm: Optional[Callable[[str], bool]] = None,
        action_service: Optional[ActionService] = None,
        remover: Optional[WorktreeRemover] = None,
    ):
        self.config = config
        self.cli_args = cli_args
        self.cwd = cwd or os.getcwd()
        self.github = github or GitHubService(config)
        self.confirm = confirm or confirm_with_prompt
        self.action_service = action_service or ActionService(config)
        self.remover = remover or WorktreeRemover()
        self.display = DisplayService()

    def dispatch(self, args: argparse.Namespace) -> int:
        handlers = {
            "add": self.add,
            "remove": self.remove,
            "list": self.list,
            "run": self.run,
            "action": self.action,
        }
        return handlers[args.command](args)

    # Request resolution

    def _current_repository(self) -> Tuple[str, str, Optional[str]]:
        """(owner, repo, remote URL) of the repository containing the working directory."""
        root = get_git_root(self.cwd)
        remote_url = get_remote_url(root)
        if not remote_url:
            raise GhWtError(f"repository at {root} has no 'origin' remote")
        try:
            owner, repo = parse_remote_url(remote_url).split("/")
        except ValueError as e:
            raise GhWtError(str(e)) from e
        return owner, repo, remote_url

    def _locate_remote_item(
        self, value: str, expected: WorktreeType
    ) -> Tuple[str, str, int, Optional[str]]:
        """(owner, repo, number, clone URL) for a PR/issue given as URL or number."""
        if is_github_url(value):
            try:
                owner, repo, kind, number = parse_github_url(value)
            except ValueError as e:
                raise GhWtError(str(e)) from e
            if kind is not expected:
                raise GhWtError(f"{value} is not a {expected.value} URL")
            return owner, repo, number, None

        if is_url(value):
            raise _unsupported_url(value)
        try:
            number = parse_number(value)
        except ValueError as e:
            raise GhWtError(str(e)) from e
        owner, repo, remote_url = self._current_repository()
        return owner, repo, number, remote_url

    def _pull_request_request(self, value: str, name: Optional[str]) -> WorktreeRequest:
        owner, repo, number, clone_url = self._locate_remote_item(value, WorktreeType.PR)
        console.print("Fetching Pull Request info...")
        pr = self.github.get_pull_request(owner, repo, number)
        console.print(f"[green]Creating worktree for PR #{pr.number}: {escape(pr.title)}[/green]")
        return WorktreeRequest.for_pull_request(
            owner,
            repo,
            pr.number,
            branch_name=pr.head_ref,
            name=name,
            title=pr.title,
            clone_url=clone_url,
        )

    def _issue_request(self, value: str, name: Optional[str]) -> WorktreeRequest:
        owner, repo, number, clone_url = self._locate_remote_item(value, WorktreeType.ISSUE)
        console.print("Fetching Issue info...")
        issue = self.github.get_issue(owner, repo, number)
        console.print(f"[green]Creating worktree for Issue #{issue.number}: {escape(issue.title)}[/green]")
        return WorktreeRequest.for_issue(
            owner, repo, issue.number, name=name, title=issue.title, clone_url=clone_url
        )

    def _local_request(self, target: str, name: Optional[str]) -> WorktreeRequest:
        try:
            root = get_git_root(self.cwd)
        except GitOperationError as e:
            raise GhWtError("not in a git repository") from e

        owner = None
        remote_url = get_remote_url(root)
        if remote_url:
            try:
                owner = parse_remote_url(remote_url).split("/")[0]
            except ValueError:
                logger.debug(f"Remote {remote_url} is not a GitHub remote")

        return WorktreeRequest.for_local(get_repo_name(root), root, name or target, owner=owner)

    def resolve_request(self, args: argparse.Namespace) -> WorktreeRequest:
        """Turn the add arguments into a creation request."""
        if args.pr:
            return self._pull_request_request(args.pr, args.name)
        if args.issue:
            return self._issue_request(args.issue, args.name)
        if not args.target:
            raise GhWtError("a PR URL, issue URL or worktree name is required")

        kind = determine_worktree_type(args.target)
        if kind is WorktreeType.PR:
            return self._pull_request_request(args.target, args.name)
        if kind is WorktreeType.ISSUE:
            return self._issue_request(args.target, args.name)
        if is_url(args.target):
            raise _unsupported_url(args.target)
        return self._local_request(args.target, args.name)

    # Commands

    def add(self, args: argparse.Namespace) -> int:
        request = self.resolve_request(args)
        base_dir = self.config.worktree_dir
        worktree_path = request.worktree_path(base_dir)

        creator = WorktreeCreator(self.config)
        # Classification must see the repository the worktree will be attached to
        repo_path = creator.ensure_repository(request)
        git_ops = GitOperations(repo_path)

        signature = ConflictClassifier(git_ops).classify(worktree_path, request.branch_name)
        logger.debug(f"Conflict signature for {worktree_path}: {signature}")
        resolution = ConflictResolver(git_ops, confirm=self.confirm).resolve(
            signature,
            request,
            worktree_path,
            force=self.config.force,
            use_existing=args.use_existing,
        )

        path = creator.create(request, resolution)
        self.display.print_success(path)
        self._post_create(args.action, path, request)
        return 0

    def _post_create(self, action_name: Optional[str], path: str, request: WorktreeRequest) -> None:
        """Run the requested action or raw command; failures only warn."""
        if action_name:
            try:
                self.action_service.execute(action_name, path, request=request, cli_args=self.cli_args)
            except GhWtError as e:
                console.print(f"\n[yellow]Action '{escape(action_name)}' failed: {escape(str(e))}[/yellow]")
        elif self.cli_args:
            try:
                self.action_service.run_in_worktree(self.cli_args, path)
            except GhWtError as e:
                console.print(f"\n[yellow]Command '{escape(self.cli_args)}' failed: {escape(str(e))}[/yellow]")

    def _find(self, target: str) -> List[LocatedWorktree]:
        """Worktrees matching a name, ``repo/name`` or a PR/issue URL."""
        base_dir = self.config.worktree_dir

        if is_github_url(target):
            try:
                _, repo, kind, number = parse_github_url(target)
            except ValueError as e:
                raise GhWtError(str(e)) from e
            name = f"{'pr' if kind is WorktreeType.PR else 'issue'}_{number}"
            return [m for m in find_worktrees(base_dir, name) if m.repo == repo]

        if is_url(target):
            raise _unsupported_url(target)

        # Worktree names may themselves contain '/', e.g. feature/login
        matches = find_worktrees(base_dir, target)
        if matches or "/" not in target:
            return matches

        repo, name = target.split("/", 1)
        return [m for m in find_worktrees(base_dir, name) if m.repo == repo]

    def _choose(self, target: str, matches: List[LocatedWorktree]) -> LocatedWorktree:
        if len(matches) == 1:
            return matches[0]
        repos = [m.repo for m in matches]
        if not is_interactive_terminal():
            raise GhWtError(
                f"worktree '{target}' exists in several repositories ({', '.join(repos)}); "
                f"use <repo>/{target}"
            )
        repo = Prompt.ask(
            f"Worktree '{escape(target)}' exists in several repositories. Which one?",
            choices=repos,
            console=console,
        )
        return matches[repos.index(repo)]

    def remove(self, args: argparse.Namespace) -> int:
        matches = self._find(args.target)
        if not matches:
            console.print(f"Worktree '{escape(args.target)}' not found, nothing to remove")
            return 0

        located = self._choose(args.target, matches)
        if not located.repo_path:
            raise GhWtError(f"cannot determine the repository of {located.path}")

        force = self.config.force
        try:
            try:
                self.remover.remove(located.repo_path, located.path, located.branch, force=force)
            except DirtyWorktreeError:
                if not self.confirm(f"Worktree '{located.name}' has uncommitted changes. Remove anyway?"):
                    console.print("Operation cancelled")
                    return 0
                self.remover.remove(located.repo_path, located.path, located.branch, force=True)
        except BranchDeletionError as e:
            console.print(f"[yellow]Warning: {escape(str(e))}[/yellow]")
            return 1

        remove_empty_parents(located.path, os.path.join(self.config.worktree_dir, located.repo))
        console.print(f"Removed worktree: {escape(located.name)}")
        return 0

    def _loader(self, repo: Optional[str]) -> Callable[[], List[WorktreeListItem]]:
        base_dir = self.config.worktree_dir
        if repo:
            repo_dir = os.path.join(base_dir, repo)
            if not os.path.isdir(repo_dir):
                raise GhWtError(f"repository '{repo}' not found in {base_dir}")
            repo_dirs = [repo_dir]
        else:
            repo_dirs = discover_repositories(base_dir)

        def load() -> List[WorktreeListItem]:
            items: List[WorktreeListItem] = []
            for repo_dir in repo_dirs:
                items.extend(list_worktrees(repo_dir))
            return items

        return load

    def list(self, args: argparse.Namespace) -> int:
        loader = self._loader(args.repo)

        if args.plain or not is_interactive_terminal():
            self.display.display_worktree_table(loader())
            return 0

        from gh_wt.tui import WorktreeListApp

        selected = WorktreeListApp(loader, remover=self.remover).run()
        if selected:
            console.print(f"cd {escape(selected)}", markup=False)
        return 0

    def request_for_existing(self, located: LocatedWorktree) -> WorktreeRequest:
        """Best-effort request describing a worktree that already exists."""
        owner = None
        if located.repo_path:
            remote_url = get_remote_url(located.repo_path)
            if remote_url:
                try:
                    owner = parse_remote_url(remote_url).split("/")[0]
                except ValueError:
                    logger.debug(f"Remote {remote_url} is not a GitHub remote")

        branch = located.branch if located.branch and located.branch != "HEAD" else None
        match = _REMOTE_NAME.match(located.name)
        if match and owner:
            kind, number = match.group(1), int(match.group(2))
            if kind == "pr":
                return WorktreeRequest.for_pull_request(
                    owner, located.repo, number, branch_name=branch, name=located.name
                )
            return WorktreeRequest.for_issue(owner, located.repo, number, name=located.name).with_names(
                branch_name=branch
            )

        request = WorktreeRequest.for_local(
            located.repo, located.repo_path or located.path, located.name, owner=owner
        )
        return request.with_names(branch_name=branch)

    def run(self, args: argparse.Namespace) -> int:
        matches = self._find(args.worktree)
        if not matches:
            raise WorktreeNotFoundError(args.worktree)
        located = self._choose(args.worktree, matches)

        if args.action:
            request = self.request_for_existing(located)
            self.action_service.execute(args.action, located.path, request=request, cli_args=self.cli_args)
        elif self.cli_args:
            self.action_service.run_in_worktree(self.cli_args, located.path)
        else:
            raise GhWtError("nothing to run: give an action name or a command after '--'")
        return 0

    def action(self, args: argparse.Namespace) -> int:
        self.display.display_actions(self.config.actions, silent=args.silent)
        return 0

