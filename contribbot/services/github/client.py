"""GitHub REST API client.

Only the commit listing endpoint is used:
https://docs.github.com/en/rest/commits/commits#list-commits
"""

import logging
from datetime import datetime
from typing import Any

import httpx

from contribbot.constants import (
    COMMITS_PER_PAGE,
    GITHUB_API_BASE_URL,
    GITHUB_API_VERSION,
    MAX_COMMIT_PAGES,
)
from contribbot.models import RepositoryRef
from contribbot.utils.http_client import create_http_client

logger = logging.getLogger(__name__)


class GitHubError(Exception):
    """Base exception for GitHub errors."""

    pass


class GitHubAuthError(GitHubError):
    """Authentication or permission error."""

    pass


class GitHubConnectionError(GitHubError):
    """Connection error."""

    pass


class GitHubClient:
    """Client for the GitHub REST API.

    Usage:
        client = GitHubClient(token="ghp_...")
        commits = await client.list_commits(RepositoryRef("dotnet", "aspire"), since)
        await client.aclose()
    """

    def __init__(
        self,
        token: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize GitHub client.

        Args:
            token: Personal access token; anonymous requests when empty
            http_client: Pre-built client (tests inject a MockTransport here)
        """
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        if http_client is None:
            http_client = create_http_client(GITHUB_API_BASE_URL, headers=headers)
        else:
            http_client.headers.update(headers)
        self._client = http_client

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        """GET a JSON resource.

        Raises:
            GitHubAuthError: On 401/403 errors
            GitHubConnectionError: On connection errors
            GitHubError: On other errors
        """
        try:
            response = await self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise GitHubConnectionError(f"Connection timeout: {e}") from e
        except httpx.TransportError as e:
            raise GitHubConnectionError(f"Cannot connect to GitHub: {e}") from e

        if response.status_code in (401, 403):
            raise GitHubAuthError(f"Access denied ({response.status_code}): {response.text}")

        if response.status_code >= 400:
            raise GitHubError(f"API error {response.status_code}: {response.text}")

        try:
            return response.json()
        except ValueError as e:
            raise GitHubError(f"Invalid JSON from GitHub ({response.status_code}): {e}") from e

    async def list_commits(
        self,
        repo: RepositoryRef,
        since: datetime,
        per_page: int = COMMITS_PER_PAGE,
        max_pages: int = MAX_COMMIT_PAGES,
    ) -> list[dict[str, Any]]:
        """List commits made to a repository since a point in time.

        Pages are requested in order until one comes back empty or short,
        or until ``max_pages`` pages have been read. A failure after the
        first page ends paging and the commits read so far are returned.

        Args:
            repo: Repository to list
            since: Only commits with a commit date at or after this instant
            per_page: Page size
            max_pages: Page cap, bounds the cost on very active repositories

        Returns:
            Raw commit objects as returned by the API
        """
        commits: list[dict[str, Any]] = []
        path = f"/repos/{repo.owner}/{repo.name}/commits"

        for page in range(1, max_pages + 1):
            try:
                batch = await self._get(
                    path,
                    params={
                        "since": since.isoformat(),
                        "per_page": per_page,
                        "page": page,
                    },
                )
                if not isinstance(batch, list):
                    raise GitHubError(f"Unexpected commit listing payload: {type(batch).__name__}")
            except GitHubError as e:
                # Only the first page decides whether the repository is readable
                if page == 1:
                    raise
                logger.warning(f"Stopped paging {repo} at page {page}: {e}")
                break

            if not batch:
                break

            commits.extend(batch)
            if len(batch) < per_page:
                break

        logger.debug(f"Fetched {len(commits)} commits from {repo} since {since.date()}")
        return commits
