"""Discord integration: OAuth2 exchange and linked-role metadata."""

from contribbot.services.discord.client import (
    DiscordAuthError,
    DiscordClient,
    DiscordConnectionError,
    DiscordError,
)
from contribbot.services.discord.role_connection import (
    metadata_records,
    platform_name,
    push_role_connection,
    register_linked_role,
)

__all__ = [
    # Client
    "DiscordClient",
    "DiscordError",
    "DiscordAuthError",
    "DiscordConnectionError",
    # Role connection
    "metadata_records",
    "platform_name",
    "push_role_connection",
    "register_linked_role",
]
