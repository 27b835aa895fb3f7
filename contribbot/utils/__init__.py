"""Utility modules for ContribBot."""

from contribbot.utils.http_client import create_http_client
from contribbot.utils.logging import LogContext, setup_logging

__all__ = [
    # HTTP
    "create_http_client",
    # Logging
    "LogContext",
    "setup_logging",
]
