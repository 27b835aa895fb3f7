"""Periodic re-verification of registered users."""

import asyncio
import logging
from datetime import datetime

from contribbot.constants import (
    MAX_CONSECUTIVE_FAILURES,
    RECHECK_AFTER_DAYS,
    RECHECK_DELAY,
    RECHECK_INTERVAL,
)
from contribbot.services.verification import LinkedRoleVerifier

logger = logging.getLogger(__name__)


async def run_recheck_sweep(
    verifier: LinkedRoleVerifier,
    now: datetime | None = None,
    max_age_days: float = RECHECK_AFTER_DAYS,
    delay: float = RECHECK_DELAY,
) -> dict[str, int]:
    """Re-check every registry entry whose last check is old enough.

    Users are processed one at a time, in registration order, with ``delay``
    seconds between consecutive users to stay under the API rate limits.
    """
    stale = verifier.registry.stale(max_age_days, now=now)
    skipped = len(verifier.registry) - len(stale)

    updated = 0
    failed = 0
    for index, (user_id, record) in enumerate(stale):
        if index:
            await asyncio.sleep(delay)
        try:
            if await verifier.recheck_user(user_id, record):
                updated += 1
            else:
                failed += 1
        except Exception as e:
            failed += 1
            logger.error(f"Failed to re-check user {user_id}: {e}")

    logger.info(
        f"Periodic re-check completed: {len(stale)} checked, "
        f"{updated} updated, {failed} failed, {skipped} skipped"
    )
    return {
        "checked": len(stale),
        "updated": updated,
        "failed": failed,
        "skipped": skipped,
    }


async def periodic_recheck(
    verifier: LinkedRoleVerifier,
    shutdown_event: asyncio.Event,
    interval: float = RECHECK_INTERVAL,
) -> None:
    """Background task that runs a re-check sweep once per interval."""
    consecutive_failures = 0
    max_failures = MAX_CONSECUTIVE_FAILURES

    while not shutdown_event.is_set():
        try:
            # Wait with cancellation support
            await asyncio.wait_for(shutdown_event.wait(), timeout=interval)
            break  # Shutdown requested
        except TimeoutError:
            pass  # Normal timeout, continue with sweep

        try:
            await run_recheck_sweep(verifier)
            consecutive_failures = 0
        except Exception as e:
            consecutive_failures += 1
            logger.error(f"Periodic re-check failed ({consecutive_failures}/{max_failures}): {e}")
            if consecutive_failures >= max_failures:
                logger.critical("Re-check: Too many consecutive failures, backing off")
                await asyncio.sleep(interval)
                consecutive_failures = 0
