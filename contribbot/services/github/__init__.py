"""GitHub integration: commit listing and contribution checks."""

from contribbot.services.github.client import (
    GitHubAuthError,
    GitHubClient,
    GitHubConnectionError,
    GitHubError,
)
from contribbot.services.github.contributions import (
    check_contributions,
    is_commit_by,
    months_ago,
)

__all__ = [
    # Client
    "GitHubClient",
    "GitHubError",
    "GitHubAuthError",
    "GitHubConnectionError",
    # Contributions
    "check_contributions",
    "is_commit_by",
    "months_ago",
]
