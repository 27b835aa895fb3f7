"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator

# Settings are read at import time by contribbot.main
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("REPO_1", "org/r1")
os.environ.setdefault("REPO_2", "org/r2")
os.environ.setdefault("CLIENT_ID", "123456789")
os.environ.setdefault("CLIENT_SECRET", "test-secret")
os.environ.setdefault("DISCORD_TOKEN", "bot-token")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from contribbot.config import Settings
from contribbot.main import app
from contribbot.state import AppState, build_app_state, get_app_state
from tests.fakes import CLIENT_ID, FakeDiscordAPI, FakeGitHubAPI


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the process environment."""
    return Settings(
        _env_file=None,
        app_env="test",
        client_id=CLIENT_ID,
        client_secret="test-secret",
        discord_token="bot-token",
        repo_1="org/r1",
        repo_2="org/r2",
    )


@pytest.fixture
def github_api() -> FakeGitHubAPI:
    return FakeGitHubAPI()


@pytest.fixture
def discord_api() -> FakeDiscordAPI:
    return FakeDiscordAPI()


@pytest_asyncio.fixture
async def app_state(
    settings: Settings, github_api: FakeGitHubAPI, discord_api: FakeDiscordAPI
) -> AsyncGenerator[AppState, None]:
    """Application state wired to the fake APIs."""
    state = build_app_state(settings, discord=discord_api.client(), github=github_api.client())
    yield state
    await state.aclose()


@pytest_asyncio.fixture
async def client(app_state: AppState) -> AsyncGenerator[AsyncClient, None]:
    """Test client for the web routes."""
    app.dependency_overrides[get_app_state] = lambda: app_state

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
