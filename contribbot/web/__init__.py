"""Web routes."""

from contribbot.web.router import web_router

__all__ = ["web_router"]
