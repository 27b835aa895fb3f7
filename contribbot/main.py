"""Main FastAPI application."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated

import uvicorn
from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from contribbot import __version__
from contribbot.config import get_settings
from contribbot.constants import SHUTDOWN_TIMEOUT
from contribbot.services.discord import DiscordError, register_linked_role
from contribbot.services.recheck import periodic_recheck
from contribbot.state import AppState, build_app_state, get_app_state
from contribbot.utils.logging import setup_logging
from contribbot.web import web_router

settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Pages carry inline styles only, no scripts
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; style-src 'self' 'unsafe-inline'; frame-ancestors 'none';"
        )
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    state = build_app_state(settings)
    app.state.contribbot = state
    logger.info(f"Checking repositories: {', '.join(settings.repositories)}")
    logger.info(f"Client ID: {'Set' if settings.client_id else 'Missing'}")

    try:
        await register_linked_role(state.discord, settings.repositories)
    except DiscordError as e:
        logger.error(f"Linked role metadata registration failed: {e}")

    shutdown_event = asyncio.Event()
    recheck_task = asyncio.create_task(
        periodic_recheck(state.verifier, shutdown_event),
        name="linked_role_recheck",
    )
    app.state.recheck_task = recheck_task
    logger.info("Started periodic re-check task (every 24h, users older than 30 days)")

    yield

    # Graceful shutdown
    logger.info("Shutting down background tasks...")
    shutdown_event.set()
    try:
        await asyncio.wait_for(recheck_task, timeout=SHUTDOWN_TIMEOUT)
        logger.info("Re-check task stopped gracefully")
    except TimeoutError:
        logger.warning("Re-check task did not stop in time, forcing cancellation")
        recheck_task.cancel()
        await asyncio.gather(recheck_task, return_exceptions=True)

    await state.aclose()
    logger.info("HTTP clients closed")
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.app_name,
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(SecurityHeadersMiddleware)
app.include_router(web_router)


@app.get("/health", include_in_schema=True, tags=["monitoring"])
async def health_check(
    request: Request,
    state: Annotated[AppState, Depends(get_app_state)],
) -> JSONResponse:
    """Health check endpoint for monitoring and load balancers.

    Returns:
        JSONResponse with status, uptime, registry size and scheduler state.
    """
    task: asyncio.Task | None = getattr(request.app.state, "recheck_task", None)

    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "uptime_seconds": (datetime.now(UTC) - state.started_at).total_seconds(),
        "version": __version__,
        "checks": {
            "registry": {"status": "healthy", "entries": len(state.registry)},
        },
    }

    if task is not None and task.done():
        health_status["checks"]["scheduler"] = {"status": "unhealthy"}
        health_status["status"] = "degraded"
    else:
        health_status["checks"]["scheduler"] = {"status": "healthy"}

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(content=health_status, status_code=status_code)


def run() -> None:
    """Serve the application with uvicorn."""
    logger.info(f"Server listening on port {settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)
