"""Discord API client for the OAuth2 linked-roles flow.

Documentation: https://discord.com/developers/docs/tutorials/configuring-app-metadata-for-linked-roles
"""

import logging
from typing import Any
from urllib.parse import urlencode

import httpx

from contribbot.constants import (
    DISCORD_API_BASE_URL,
    DISCORD_AUTHORIZE_URL,
    DISCORD_OAUTH_SCOPES,
    DISCORD_TOKEN_URL,
)
from contribbot.models import DiscordConnection, DiscordUser
from contribbot.utils.http_client import create_http_client

logger = logging.getLogger(__name__)


class DiscordError(Exception):
    """Base exception for Discord errors."""

    pass


class DiscordAuthError(DiscordError):
    """Authentication error."""

    pass


class DiscordConnectionError(DiscordError):
    """Connection error."""

    pass


class DiscordClient:
    """Client for the Discord OAuth2 and role-connection endpoints.

    Usage:
        client = DiscordClient(
            client_id="1234",
            client_secret="secret",
            redirect_uri="https://example.com/linked-role",
            bot_token="bot-token",
        )

        token = await client.exchange_code(code)
        user = await client.get_current_user(token)
        connections = await client.get_connections(token)
        await client.update_role_connection(token, "Contributor", "octocat", {"contributed_to_repos": True})
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        bot_token: str = "",
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize Discord client.

        Args:
            client_id: Application client ID
            client_secret: Application client secret
            redirect_uri: OAuth2 redirect URI registered for the application
            bot_token: Bot token, needed only for metadata registration
            http_client: Pre-built client (tests inject a MockTransport here)
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.bot_token = bot_token
        self._client = http_client or create_http_client(DISCORD_API_BASE_URL)

    async def aclose(self) -> None:
        await self._client.aclose()

    def authorize_url(self) -> str:
        """URL that starts the OAuth2 flow for the linked role."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": DISCORD_OAUTH_SCOPES,
        }
        return f"{DISCORD_AUTHORIZE_URL}?{urlencode(params)}"

    async def _request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, translating transport failures."""
        try:
            return await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            raise DiscordConnectionError(f"Connection timeout: {e}") from e
        except httpx.TransportError as e:
            raise DiscordConnectionError(f"Cannot connect to Discord: {e}") from e

    async def _get_json(self, path: str, access_token: str) -> Any:
        response = await self._request(
            "GET", path, headers={"Authorization": f"Bearer {access_token}"}
        )
        if response.status_code == 401:
            raise DiscordAuthError("Invalid or expired access token")
        if response.status_code >= 400:
            raise DiscordError(f"API error {response.status_code}: {response.text}")
        try:
            return response.json()
        except ValueError as e:
            raise DiscordError(f"Invalid JSON from Discord ({response.status_code}): {e}") from e

    # ==================== OAuth2 ====================

    async def exchange_code(self, code: str) -> str | None:
        """Trade an authorization code for an access token.

        Returns:
            The access token, or None when Discord did not issue one
        """
        response = await self._request(
            "POST",
            DISCORD_TOKEN_URL,
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
            },
        )

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if not isinstance(payload, dict) or not payload.get("access_token"):
            error = payload.get("error") if isinstance(payload, dict) else None
            logger.warning(
                f"Token exchange returned no access token (status {response.status_code}, error={error})"
            )
            return None

        return payload["access_token"]

    # ==================== Users ====================

    async def get_current_user(self, access_token: str) -> DiscordUser:
        """Profile of the user that authorized the token."""
        result = await self._get_json("/users/@me", access_token)
        if not isinstance(result, dict) or "id" not in result:
            raise DiscordError("User profile response has no id")
        return DiscordUser.from_api(result)

    async def get_connections(self, access_token: str) -> list[DiscordConnection]:
        """Third-party accounts linked to the user."""
        result = await self._get_json("/users/@me/connections", access_token)
        if result and not isinstance(result, list):
            raise DiscordError(f"Unexpected connections payload: {type(result).__name__}")
        return [DiscordConnection.from_api(item) for item in result or []]

    # ==================== Role connections ====================

    async def update_role_connection(
        self,
        access_token: str,
        platform_name: str,
        platform_username: str,
        metadata: dict[str, Any],
    ) -> bool:
        """Set the user's role-connection metadata for this application.

        Returns:
            True if Discord accepted the update
        """
        response = await self._request(
            "PUT",
            f"/users/@me/applications/{self.client_id}/role-connection",
            headers={"Authorization": f"Bearer {access_token}"},
            json={
                "platform_name": platform_name,
                "platform_username": platform_username,
                "metadata": metadata,
            },
        )
        if response.is_success:
            return True

        logger.warning(f"Role connection update rejected ({response.status_code}): {response.text}")
        return False

    async def register_metadata(self, records: list[dict[str, Any]]) -> bool:
        """Register the application's role-connection metadata schema.

        Returns:
            True if Discord accepted the records
        """
        response = await self._request(
            "PUT",
            f"/applications/{self.client_id}/role-connections/metadata",
            headers={"Authorization": f"Bot {self.bot_token}"},
            json=records,
        )
        if response.is_success:
            return True

        logger.error(f"Failed to register linked role metadata: {response.text}")
        return False
