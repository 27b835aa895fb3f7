"""Application state shared by the HTTP handlers and the re-check task."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from fastapi import Request

from contribbot.config import Settings
from contribbot.registry import VerificationRegistry
from contribbot.services.discord import DiscordClient
from contribbot.services.github import GitHubClient
from contribbot.services.verification import LinkedRoleVerifier


@dataclass
class AppState:
    """Everything built once at startup."""

    settings: Settings
    registry: VerificationRegistry
    discord: DiscordClient
    github: GitHubClient
    verifier: LinkedRoleVerifier
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    async def aclose(self) -> None:
        """Close the persistent HTTP clients."""
        await self.discord.aclose()
        await self.github.aclose()


def build_app_state(
    settings: Settings,
    discord: DiscordClient | None = None,
    github: GitHubClient | None = None,
) -> AppState:
    """Wire the registry, API clients and verifier from settings."""
    registry = VerificationRegistry()
    discord = discord or DiscordClient(
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        redirect_uri=settings.redirect_uri,
        bot_token=settings.discord_token,
    )
    github = github or GitHubClient(token=settings.github_token or None)
    verifier = LinkedRoleVerifier(discord, github, registry, settings.repositories)
    return AppState(
        settings=settings,
        registry=registry,
        discord=discord,
        github=github,
        verifier=verifier,
    )


def get_app_state(request: Request) -> AppState:
    """FastAPI dependency returning the state built in the lifespan."""
    return request.app.state.contribbot
