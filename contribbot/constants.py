"""Application constants - centralized configuration values."""

# =============================================================================
# Contribution window
# =============================================================================
CONTRIBUTION_WINDOW_MONTHS = 6
COMMITS_PER_PAGE = 100
MAX_COMMIT_PAGES = 20  # 2000 commits per repository at most

# =============================================================================
# Re-verification
# =============================================================================
RECHECK_INTERVAL = 24 * 60 * 60  # 24 hours
RECHECK_AFTER_DAYS = 30
RECHECK_DELAY = 2.0  # seconds between users
MAX_CONSECUTIVE_FAILURES = 5  # For background tasks

# =============================================================================
# API Timeouts (in seconds)
# =============================================================================
HTTPX_TIMEOUT = 10.0
SHUTDOWN_TIMEOUT = 10.0

# =============================================================================
# Discord
# =============================================================================
DISCORD_API_BASE_URL = "https://discord.com/api/v10"
DISCORD_AUTHORIZE_URL = "https://discord.com/api/oauth2/authorize"
DISCORD_TOKEN_URL = "https://discord.com/api/oauth2/token"
DISCORD_OAUTH_SCOPES = "role_connections.write identify connections"

# Role connection metadata
METADATA_KEY = "contributed_to_repos"
METADATA_NAME = "Repository Contributor"
METADATA_TYPE_BOOLEAN_EQUAL = 7
PLATFORM_NAME_DEFAULT = "Repository Contributor Check"

# =============================================================================
# GitHub
# =============================================================================
GITHUB_API_BASE_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
