"""In-memory registry of verified users.

The registry lives for the lifetime of the process only. A restart starts
from an empty mapping and every pending re-check is forgotten.
"""

import logging
from collections.abc import Iterator
from datetime import UTC, datetime

from contribbot.models import VerificationRecord

logger = logging.getLogger(__name__)


class VerificationRegistry:
    """Discord user id -> VerificationRecord, in insertion order."""

    def __init__(self) -> None:
        self._records: dict[str, VerificationRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def get(self, user_id: str) -> VerificationRecord | None:
        return self._records.get(user_id)

    def upsert(self, user_id: str, record: VerificationRecord) -> None:
        """Insert or overwrite the record for a user."""
        self._records[user_id] = record
        logger.debug(f"Registry entry stored for {user_id} ({len(self._records)} total)")

    def touch(self, user_id: str, when: datetime | None = None) -> None:
        """Overwrite only the last-checked timestamp of an existing entry."""
        record = self._records.get(user_id)
        if record is None:
            return
        self._records[user_id] = record.touched(when)

    def snapshot(self) -> list[tuple[str, VerificationRecord]]:
        """Copy of all entries, safe to iterate while the registry changes."""
        return list(self._records.items())

    def stale(
        self, max_age_days: float, now: datetime | None = None
    ) -> list[tuple[str, VerificationRecord]]:
        """Entries whose last check is at least ``max_age_days`` old."""
        now = now or datetime.now(UTC)
        return [
            (user_id, record)
            for user_id, record in self.snapshot()
            if record.age_days(now) >= max_age_days
        ]
