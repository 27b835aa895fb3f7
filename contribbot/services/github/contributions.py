"""Decide whether a GitHub user recently committed to a set of repositories."""

import calendar
import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from contribbot.constants import CONTRIBUTION_WINDOW_MONTHS
from contribbot.models import ContributionResult, RepositoryRef
from contribbot.services.github.client import GitHubClient, GitHubError

logger = logging.getLogger(__name__)


def months_ago(now: datetime, months: int) -> datetime:
    """Same wall-clock instant ``months`` calendar months earlier.

    The day is clamped to the length of the target month (Aug 31 -> Feb 28).
    """
    month_index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def _login(user: dict[str, Any] | None) -> str:
    if not user:
        return ""
    return (user.get("login") or "").lower()


def is_commit_by(commit: dict[str, Any], username: str) -> bool:
    """True if the username is the commit's author or committer login."""
    username = username.lower()
    return _login(commit.get("author")) == username or _login(commit.get("committer")) == username


async def check_contributions(
    github: GitHubClient,
    username: str,
    repositories: Iterable[str | RepositoryRef],
    now: datetime | None = None,
) -> ContributionResult:
    """Find the first repository the user committed to within the window.

    Repositories are checked in the given order and the first match wins.
    Malformed references are skipped, and a repository whose commits cannot
    be fetched is logged and passed over.

    Args:
        github: GitHub API client
        username: GitHub login, compared case-insensitively
        repositories: ``owner/name`` strings or parsed references
        now: Reference time (defaults to current UTC time)

    Returns:
        ContributionResult naming the matching repository, or a negative result
    """
    since = months_ago(now or datetime.now(UTC), CONTRIBUTION_WINDOW_MONTHS)

    for entry in repositories:
        repo = entry if isinstance(entry, RepositoryRef) else RepositoryRef.parse(entry)
        if repo is None:
            logger.debug(f"Skipping malformed repository reference {entry!r}")
            continue

        try:
            commits = await github.list_commits(repo, since)
        except GitHubError as e:
            logger.error(f"Error checking {repo}: {e}")
            continue

        if any(is_commit_by(commit, username) for commit in commits):
            return ContributionResult(contributed=True, repo=repo)

    return ContributionResult(contributed=False, repo=None)
