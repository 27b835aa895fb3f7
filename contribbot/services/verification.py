"""Linked-role verification: the OAuth2 callback flow and per-user re-checks."""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from contribbot.models import (
    ContributionResult,
    VerificationOutcome,
    VerificationRecord,
    VerificationStatus,
)
from contribbot.registry import VerificationRegistry
from contribbot.services.discord import DiscordClient, DiscordError, push_role_connection
from contribbot.services.github import GitHubClient, check_contributions
from contribbot.utils.logging import LogContext

logger = logging.getLogger(__name__)


class LinkedRoleVerifier:
    """Runs contribution checks and keeps Discord and the registry in step.

    Usage:
        verifier = LinkedRoleVerifier(discord, github, registry, ["dotnet/aspire"])
        outcome = await verifier.verify_callback(code)
        await verifier.recheck_user(user_id, registry.get(user_id))
    """

    def __init__(
        self,
        discord: DiscordClient,
        github: GitHubClient,
        registry: VerificationRegistry,
        repositories: Sequence[str],
    ):
        self.discord = discord
        self.github = github
        self.registry = registry
        self.repositories = list(repositories)

    async def check(self, github_username: str, now: datetime | None = None) -> ContributionResult:
        return await check_contributions(self.github, github_username, self.repositories, now=now)

    async def verify_callback(self, code: str | None) -> VerificationOutcome:
        """Handle the OAuth2 redirect for one user.

        Each step is a separate network call and the flow stops at the first
        step that cannot continue. The registry is written only after Discord
        accepted the role-connection update.
        """
        if not code:
            return VerificationOutcome(VerificationStatus.INVALID_CODE)

        try:
            access_token = await self.discord.exchange_code(code)
            if not access_token:
                return VerificationOutcome(VerificationStatus.AUTH_FAILED)

            user = await self.discord.get_current_user(access_token)
            log = LogContext(logger, discord_user=user.id)

            connections = await self.discord.get_connections(access_token)
            github = next((c for c in connections if c.is_verified_github), None)
            if github is None:
                log.info("No verified GitHub connection found")
                return VerificationOutcome(VerificationStatus.NO_GITHUB, discord_user_id=user.id)

            github_username = github.name
            log = log.bind(github=github_username)
            log.info("Found GitHub connection")

            result = await self.check(github_username)
            if result.contributed:
                log.info(f"Contributed to {result.repo}")
            else:
                log.info("No contributions to the configured repositories")

            updated = await push_role_connection(
                self.discord, access_token, github_username or user.username, result
            )
            if not updated:
                return VerificationOutcome(
                    VerificationStatus.UPDATE_FAILED,
                    github_username=github_username,
                    discord_user_id=user.id,
                )

            self.registry.upsert(
                user.id,
                VerificationRecord(
                    token=access_token,
                    last_checked=datetime.now(UTC),
                    github_username=github_username,
                    repositories=tuple(self.repositories),
                ),
            )
        except DiscordError as e:
            logger.error(f"OAuth2 error: {e}")
            return VerificationOutcome(VerificationStatus.ERROR)

        status = VerificationStatus.CONTRIBUTED if result.contributed else VerificationStatus.NOT_CONTRIBUTED
        return VerificationOutcome(
            status,
            github_username=github_username,
            repo=result.repo,
            discord_user_id=user.id,
        )

    async def recheck_user(self, user_id: str, record: VerificationRecord) -> bool:
        """Re-run the check for a registered user and push the new value.

        Returns:
            True if Discord accepted the update and the timestamp was refreshed
        """
        log = LogContext(logger, discord_user=user_id, github=record.github_username)

        try:
            result = await self.check(record.github_username)
            updated = await push_role_connection(
                self.discord, record.token, record.github_username, result
            )
        except DiscordError as e:
            log.error(f"Error re-checking contributions: {e}")
            return False

        if not updated:
            log.warning("Role connection update failed, will retry next sweep")
            return False

        self.registry.touch(user_id)
        log.info(f"Re-checked: contributed={result.contributed}")
        return True
