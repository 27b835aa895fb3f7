"""Domain models shared by the services, the registry and the web layer."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class RepositoryRef:
    """A GitHub repository identified by owner and name."""

    owner: str
    name: str

    @classmethod
    def parse(cls, value: str) -> "RepositoryRef | None":
        """Parse an ``owner/name`` string.

        Returns None when either part is missing; callers skip such entries.
        """
        parts = value.strip().split("/")
        owner = parts[0]
        name = parts[1] if len(parts) > 1 else ""
        if not owner or not name:
            return None
        return cls(owner=owner, name=name)

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class ContributionResult:
    """Outcome of a contribution check."""

    contributed: bool
    repo: RepositoryRef | None = None


@dataclass
class DiscordUser:
    """The authenticated Discord user."""

    id: str
    username: str
    global_name: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "DiscordUser":
        return cls(
            id=str(data["id"]),
            username=data.get("username", ""),
            global_name=data.get("global_name"),
        )


@dataclass
class DiscordConnection:
    """A third-party account linked to a Discord user."""

    type: str
    id: str
    name: str
    verified: bool = False
    visibility: int | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "DiscordConnection":
        return cls(
            type=data.get("type", ""),
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            verified=bool(data.get("verified", False)),
            visibility=data.get("visibility"),
        )

    @property
    def is_verified_github(self) -> bool:
        return self.type == "github" and self.verified


@dataclass
class VerificationRecord:
    """What we remember about a verified user for periodic re-checks."""

    token: str = field(repr=False)
    last_checked: datetime
    github_username: str
    repositories: tuple[str, ...] = ()

    def age_days(self, now: datetime | None = None) -> float:
        """Days elapsed since the last successful check."""
        now = now or datetime.now(UTC)
        return (now - self.last_checked).total_seconds() / 86400

    def touched(self, when: datetime | None = None) -> "VerificationRecord":
        """Copy of this record with a new last-checked timestamp."""
        return replace(self, last_checked=when or datetime.now(UTC))


class VerificationStatus(str, Enum):
    """Result of one interactive linked-role callback."""

    INVALID_CODE = "invalid_code"
    AUTH_FAILED = "auth_failed"
    NO_GITHUB = "no_github"
    UPDATE_FAILED = "update_failed"
    CONTRIBUTED = "contributed"
    NOT_CONTRIBUTED = "not_contributed"
    ERROR = "error"


@dataclass
class VerificationOutcome:
    """Everything the callback page needs to render."""

    status: VerificationStatus
    github_username: str | None = None
    repo: RepositoryRef | None = None
    discord_user_id: str | None = None
