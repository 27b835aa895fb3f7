"""Role-connection metadata: the schema we register and the values we push."""

import logging
from collections.abc import Sequence
from typing import Any

from contribbot.constants import (
    CONTRIBUTION_WINDOW_MONTHS,
    METADATA_KEY,
    METADATA_NAME,
    METADATA_TYPE_BOOLEAN_EQUAL,
    PLATFORM_NAME_DEFAULT,
)
from contribbot.models import ContributionResult
from contribbot.services.discord.client import DiscordClient

logger = logging.getLogger(__name__)


def metadata_records(repositories: Sequence[str]) -> list[dict[str, Any]]:
    """Metadata schema describing the contributor flag."""
    return [
        {
            "key": METADATA_KEY,
            "name": METADATA_NAME,
            "description": (
                f"Has contributed to {' or '.join(repositories)} "
                f"in the last {CONTRIBUTION_WINDOW_MONTHS} months"
            ),
            "type": METADATA_TYPE_BOOLEAN_EQUAL,
        }
    ]


def platform_name(result: ContributionResult) -> str:
    if result.repo is not None:
        return f"{result.repo} Contributor"
    return PLATFORM_NAME_DEFAULT


async def register_linked_role(discord: DiscordClient, repositories: Sequence[str]) -> bool:
    """Register the linked role metadata with Discord."""
    logger.info("Registering linked role metadata...")
    ok = await discord.register_metadata(metadata_records(repositories))
    if ok:
        logger.info("Linked role metadata registered successfully")
    return ok


async def push_role_connection(
    discord: DiscordClient,
    access_token: str,
    platform_username: str,
    result: ContributionResult,
) -> bool:
    """Push the contributor flag for one user.

    Args:
        discord: Discord API client
        access_token: The user's OAuth2 bearer token
        platform_username: GitHub login, or the Discord username as fallback
        result: Contribution check outcome

    Returns:
        True if Discord accepted the update
    """
    return await discord.update_role_connection(
        access_token,
        platform_name=platform_name(result),
        platform_username=platform_username,
        metadata={METADATA_KEY: result.contributed},
    )
