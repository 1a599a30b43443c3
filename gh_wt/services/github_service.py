"""GitHub API integration service"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

from github import Auth, Github, GithubException

from gh_wt.exceptions import GitHubAPIError
from gh_wt.logging_config import get_logger

if TYPE_CHECKING:
    from github.Repository import Repository
    from gh_wt.config import Config

logger = get_logger(__name__)


@dataclass
class PullRequestInfo:
    number: int
    title: str
    head_ref: str
    url: str


@dataclass
class IssueInfo:
    number: int
    title: str
    url: str


class GitHubService:
    """Looks up pull request and issue metadata."""

    def __init__(self, config: Union["Config", dict], github: Optional[Github] = None):
        """Initialize the service.

        Without a token the API is used anonymously, which works for public
        repositories within the unauthenticated rate limit.
        """
        self.config = config
        self.github_token = config.get("github_token")
        self._github = github

    @property
    def github(self) -> Github:
        if self._github is None:
            if self.github_token:
                self._github = Github(auth=Auth.Token(self.github_token))
            else:
                logger.debug("[GitHub] No token configured, using anonymous access")
                self._github = Github()
        return self._github

    def _get_repo(self, owner: str, repo: str) -> "Repository":
        try:
            return self.github.get_repo(f"{owner}/{repo}")
        except GithubException as e:
            raise GitHubAPIError("get_repo", f"{owner}/{repo}: {self._describe(e)}") from e

    @staticmethod
    def _describe(error: GithubException) -> str:
        data = error.data if isinstance(error.data, dict) else {}
        return f"{error.status} {data.get('message', '')}".strip()

    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequestInfo:
        """Number, title and head branch of a pull request."""
        gh_repo = self._get_repo(owner, repo)
        try:
            pr = gh_repo.get_pull(number)
        except GithubException as e:
            raise GitHubAPIError("get_pull", f"#{number}: {self._describe(e)}") from e

        logger.debug(f"[GitHub] PR #{pr.number} head={pr.head.ref}")
        return PullRequestInfo(number=pr.number, title=pr.title, head_ref=pr.head.ref, url=pr.html_url)

    def get_issue(self, owner: str, repo: str, number: int) -> IssueInfo:
        """Number and title of an issue."""
        gh_repo = self._get_repo(owner, repo)
        try:
            issue = gh_repo.get_issue(number)
        except GithubException as e:
            raise GitHubAPIError("get_issue", f"#{number}: {self._describe(e)}") from e

        logger.debug(f"[GitHub] Issue #{issue.number}: {issue.title}")
        return IssueInfo(number=issue.number, title=issue.title, url=issue.html_url)
