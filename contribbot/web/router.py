"""Web routes: landing page, OAuth2 entry point and the linked-role callback."""

import logging
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from contribbot.constants import CONTRIBUTION_WINDOW_MONTHS
from contribbot.models import VerificationOutcome, VerificationStatus
from contribbot.state import AppState, get_app_state

logger = logging.getLogger(__name__)

web_router = APIRouter()
templates = Jinja2Templates(directory=Path(__file__).parent / "templates")


def join_repositories(repositories: list[str]) -> str:
    """Human-readable "a or b" list."""
    return " or ".join(repositories)


templates.env.filters["join_repositories"] = join_repositories

# Page copy for each callback outcome: (title, heading, status code)
_RESULT_PAGES: dict[VerificationStatus, tuple[str, str, int]] = {
    VerificationStatus.CONTRIBUTED: ("Success", "✅ Success!", 200),
    VerificationStatus.NOT_CONTRIBUTED: ("No Contributions", "❌ No contributions found", 200),
    VerificationStatus.NO_GITHUB: ("Connect GitHub", "🔗 GitHub connection required", 200),
    VerificationStatus.UPDATE_FAILED: ("Error", "❌ Error", 502),
    VerificationStatus.ERROR: ("Error", "❌ Error", 502),
}


@web_router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    state: Annotated[AppState, Depends(get_app_state)],
) -> HTMLResponse:
    """Landing page listing the repositories that count."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "repositories": state.settings.repositories,
            "window_months": CONTRIBUTION_WINDOW_MONTHS,
        },
    )


@web_router.get("/auth")
async def auth(state: Annotated[AppState, Depends(get_app_state)]) -> RedirectResponse:
    """Send the user to Discord's OAuth2 consent screen."""
    logger.info(f"Starting auth flow for repositories: {', '.join(state.settings.repositories)}")
    return RedirectResponse(url=state.discord.authorize_url(), status_code=302)


@web_router.get("/linked-role")
async def linked_role(
    request: Request,
    state: Annotated[AppState, Depends(get_app_state)],
    code: str | None = None,
) -> Response:
    """OAuth2 callback: verify contributions and update the linked role."""
    logger.info("Linked role callback triggered")
    outcome = await state.verifier.verify_callback(code)

    if outcome.status == VerificationStatus.INVALID_CODE:
        return PlainTextResponse("❌ Invalid authorization code.", status_code=400)
    if outcome.status == VerificationStatus.AUTH_FAILED:
        return PlainTextResponse("❌ Failed to authenticate with Discord.", status_code=400)

    return render_outcome(request, outcome, state.settings.repositories)


def render_outcome(
    request: Request,
    outcome: VerificationOutcome,
    repositories: list[str],
) -> HTMLResponse:
    """Render the result page for a completed callback."""
    title, heading, status_code = _RESULT_PAGES[outcome.status]
    return templates.TemplateResponse(
        request,
        "result.html",
        {
            "title": title,
            "heading": heading,
            "status": outcome.status.value,
            "github_username": outcome.github_username,
            "repo": str(outcome.repo) if outcome.repo else None,
            "repositories": repositories,
            "window_months": CONTRIBUTION_WINDOW_MONTHS,
        },
        status_code=status_code,
    )
