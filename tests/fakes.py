"""In-process fakes for the GitHub and Discord HTTP APIs."""

from collections.abc import Callable
from typing import Any

import httpx

from contribbot.constants import DISCORD_API_BASE_URL, GITHUB_API_BASE_URL
from contribbot.services.discord import DiscordClient
from contribbot.services.github import GitHubClient

CLIENT_ID = "123456789"


def make_commit(author: str | None = None, committer: str | None = None, sha: str = "abc") -> dict:
    """Commit object shaped like the GitHub list-commits response."""
    return {
        "sha": sha,
        "commit": {"message": "change", "author": {"name": "n", "email": "e", "date": "2026-09-01T00:00:00Z"}},
        "author": {"login": author, "id": 1} if author else None,
        "committer": {"login": committer, "id": 2} if committer else None,
    }


class FakeGitHubAPI:
    """In-process stand-in for the GitHub commits endpoint."""

    def __init__(
        self,
        commits: dict[str, list[dict]] | None = None,
        failing: dict[str, int] | None = None,
        failing_pages: dict[tuple[str, int], int] | None = None,
        malformed: set[str] | None = None,
    ) -> None:
        self.commits = commits or {}
        self.failing = failing or {}
        self.failing_pages = failing_pages or {}
        self.malformed = malformed or set()
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        _, owner, name, _ = request.url.path.strip("/").split("/")
        repo = f"{owner}/{name}"

        if repo in self.failing:
            return httpx.Response(self.failing[repo], json={"message": "failure"})
        if repo in self.malformed:
            return httpx.Response(200, text="<html>rate limited</html>")
        if repo not in self.commits:
            return httpx.Response(404, json={"message": "Not Found"})

        page = int(request.url.params["page"])
        if (repo, page) in self.failing_pages:
            return httpx.Response(self.failing_pages[repo, page], json={"message": "failure"})
        per_page = int(request.url.params["per_page"])
        start = (page - 1) * per_page
        return httpx.Response(200, json=self.commits[repo][start:start + per_page])

    def requests_for(self, repo: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == f"/repos/{repo}/commits"]

    def client(self, token: str | None = None) -> GitHubClient:
        return GitHubClient(
            token=token,
            http_client=httpx.AsyncClient(
                transport=httpx.MockTransport(self.handler),
                base_url=GITHUB_API_BASE_URL,
            ),
        )


class FakeDiscordAPI:
    """In-process stand-in for the Discord OAuth2 and user endpoints."""

    def __init__(
        self,
        token_payload: dict[str, Any] | None = None,
        user: dict[str, Any] | str | None = None,
        connections: list[dict[str, Any]] | None = None,
        role_status: int | Callable[[str], int] = 200,
        metadata_status: int = 200,
    ) -> None:
        self.token_payload = (
            token_payload if token_payload is not None
            else {"access_token": "user-token", "token_type": "Bearer", "expires_in": 604800}
        )
        self.user = user or {"id": "42", "username": "alice_discord"}
        self.connections = (
            connections if connections is not None
            else [{"type": "github", "id": "1", "name": "alice", "verified": True}]
        )
        self.role_status = role_status
        self.metadata_status = metadata_status
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/api/oauth2/token":
            return httpx.Response(200, json=self.token_payload)
        if path == "/api/v10/users/@me":
            if isinstance(self.user, str):
                return httpx.Response(200, text=self.user)
            return httpx.Response(200, json=self.user)
        if path == "/api/v10/users/@me/connections":
            return httpx.Response(200, json=self.connections)
        if path == f"/api/v10/users/@me/applications/{CLIENT_ID}/role-connection":
            token = request.headers["Authorization"].removeprefix("Bearer ")
            status = self.role_status(token) if callable(self.role_status) else self.role_status
            return httpx.Response(status, json={})
        if path == f"/api/v10/applications/{CLIENT_ID}/role-connections/metadata":
            return httpx.Response(self.metadata_status, json=[])
        return httpx.Response(404, json={"message": "404: Not Found"})

    @property
    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]

    def role_connection_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/role-connection")]

    def client(self) -> DiscordClient:
        return DiscordClient(
            client_id=CLIENT_ID,
            client_secret="test-secret",
            redirect_uri="http://localhost:3000/linked-role",
            bot_token="bot-token",
            http_client=httpx.AsyncClient(
                transport=httpx.MockTransport(self.handler),
                base_url=DISCORD_API_BASE_URL,
            ),
        )


