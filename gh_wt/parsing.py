"""Parsing of worktree arguments, GitHub URLs and git remotes."""

import re
from typing import Tuple
from urllib.parse import urlparse

from gh_wt.models.worktree import WorktreeType

_INVALID_BRANCH_CHARS = re.compile(r"[^a-zA-Z0-9_-]")
_PR_PATH = re.compile(r"^/[^/]+/[^/]+/pull/\d+(?:/.*)?$")
_ISSUE_PATH = re.compile(r"^/[^/]+/[^/]+/issues/\d+(?:/.*)?$")
GITHUB_HOSTS = ("github.com", "www.github.com")


def sanitize_branch_name(name: str) -> str:
    """Replace every character git dislikes in a branch name with an underscore."""
    return _INVALID_BRANCH_CHARS.sub("_", name)


def determine_worktree_type(value: str) -> WorktreeType:
    """Classify a CLI argument as a PR URL, an issue URL or a local name.

    Only https://github.com URLs count as PRs or issues.
    """
    if not is_github_url(value):
        return WorktreeType.LOCAL

    path = urlparse(value).path
    if _PR_PATH.match(path):
        return WorktreeType.PR
    if _ISSUE_PATH.match(path):
        return WorktreeType.ISSUE
    return WorktreeType.LOCAL


def is_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_github_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme == "https" and parsed.netloc.lower() in GITHUB_HOSTS


def parse_github_url(url: str) -> Tuple[str, str, WorktreeType, int]:
    """Split a GitHub PR or issue URL into (owner, repo, type, number).

    Raises:
        ValueError: If the URL is not a PR or issue URL
    """
    parsed = urlparse(url)
    parts = parsed.path.strip("/").split("/")
    if len(parts) < 4:
        raise ValueError(f"invalid GitHub URL format: {url}")

    owner, repo, kind, number_str = parts[:4]
    try:
        number = int(number_str)
    except ValueError:
        raise ValueError(f"invalid issue/PR number: {number_str}") from None

    if kind == "pull":
        return owner, repo, WorktreeType.PR, number
    if kind == "issues":
        return owner, repo, WorktreeType.ISSUE, number
    raise ValueError(f"unsupported URL type: {kind} (expected 'issues' or 'pull')")


def parse_number(value: str) -> int:
    """Parse ``123`` or ``#123``."""
    text = value.strip().lstrip("#")
    if not text.isdigit():
        raise ValueError(f"invalid issue/PR number: {value}")
    return int(text)


def parse_remote_url(remote_url: str) -> str:
    """Return ``owner/repo`` for an SSH or HTTPS GitHub remote URL."""
    if remote_url.startswith("git@"):
        # Handle SSH URL format (git@github.com:org/repo.git)
        path = remote_url.split(":", 1)[1]
    else:
        # Handle HTTPS URL format (https://github.com/org/repo.git)
        path = urlparse(remote_url).path.strip("/")

    if path.endswith(".git"):
        path = path[:-4]

    if path.count("/") != 1:
        raise ValueError(f"cannot determine owner/repo from remote URL: {remote_url}")
    return path
