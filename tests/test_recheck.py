"""Tests for the periodic re-check sweep."""

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest

from contribbot.models import VerificationRecord
from contribbot.registry import VerificationRegistry
from contribbot.services.recheck import periodic_recheck, run_recheck_sweep
from contribbot.services.verification import LinkedRoleVerifier
from tests.fakes import FakeDiscordAPI, FakeGitHubAPI, make_commit


def add_user(verifier: LinkedRoleVerifier, user_id: str, days_old: float) -> VerificationRecord:
    record = VerificationRecord(
        token=f"token-{user_id}",
        last_checked=datetime.now(UTC) - timedelta(days=days_old),
        github_username=f"user{user_id}",
        repositories=("org/r1",),
    )
    verifier.registry.upsert(user_id, record)
    return record


@pytest.fixture
def verifier() -> LinkedRoleVerifier:
    github_api = FakeGitHubAPI(commits={"org/r1": [make_commit(author="user1")]})
    return LinkedRoleVerifier(FakeDiscordAPI().client(), github_api.client(), VerificationRegistry(), ["org/r1"])


class TestRecheckSweep:
    """Tests for run_recheck_sweep."""

    @pytest.mark.asyncio
    async def test_only_stale_entries_are_rechecked(self, verifier: LinkedRoleVerifier):
        fresh = add_user(verifier, "1", days_old=29)
        add_user(verifier, "2", days_old=30)
        add_user(verifier, "3", days_old=90)

        summary = await run_recheck_sweep(verifier, delay=0)

        assert summary == {"checked": 2, "updated": 2, "failed": 0, "skipped": 1}
        assert verifier.registry.get("1") == fresh
        assert verifier.registry.get("2").age_days() < 1
        assert verifier.registry.get("3").age_days() < 1

    @pytest.mark.asyncio
    async def test_fresh_registry_makes_no_calls(self):
        discord_api, github_api = FakeDiscordAPI(), FakeGitHubAPI()
        verifier = LinkedRoleVerifier(discord_api.client(), github_api.client(), VerificationRegistry(), ["org/r1"])
        add_user(verifier, "1", days_old=1)

        summary = await run_recheck_sweep(verifier, delay=0)

        assert summary["checked"] == 0
        assert discord_api.requests == []
        assert github_api.requests == []

    @pytest.mark.asyncio
    async def test_delay_between_users(self, verifier: LinkedRoleVerifier):
        for user_id in ("1", "2", "3"):
            add_user(verifier, user_id, days_old=31)

        with patch("contribbot.services.recheck.asyncio.sleep", new=AsyncMock()) as sleep:
            await run_recheck_sweep(verifier)

        assert sleep.await_count == 2
        sleep.assert_awaited_with(2.0)

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_sweep(self):
        discord_api = FakeDiscordAPI(role_status=lambda token: 401 if token == "token-1" else 200)
        verifier = LinkedRoleVerifier(
            discord_api.client(), FakeGitHubAPI(commits={"org/r1": []}).client(), VerificationRegistry(), ["org/r1"]
        )
        stale_1 = add_user(verifier, "1", days_old=31)
        add_user(verifier, "2", days_old=31)

        summary = await run_recheck_sweep(verifier, delay=0)

        assert summary["updated"] == 1
        assert summary["failed"] == 1
        assert verifier.registry.get("1").last_checked == stale_1.last_checked
        assert verifier.registry.get("2").age_days() < 1

    @pytest.mark.asyncio
    async def test_unexpected_error_is_contained(self, verifier: LinkedRoleVerifier):
        add_user(verifier, "1", days_old=31)
        add_user(verifier, "2", days_old=31)

        original = verifier.recheck_user

        async def flaky(user_id, record):
            if user_id == "1":
                raise RuntimeError("boom")
            return await original(user_id, record)

        verifier.recheck_user = flaky
        summary = await run_recheck_sweep(verifier, delay=0)

        assert summary["failed"] == 1
        assert summary["updated"] == 1


class TestPeriodicRecheck:
    """Tests for the background task loop."""

    @pytest.mark.asyncio
    async def test_runs_sweep_each_interval_until_shutdown(self, verifier: LinkedRoleVerifier):
        shutdown_event = asyncio.Event()
        calls = []

        async def fake_sweep(v):
            calls.append(v)
            if len(calls) == 2:
                shutdown_event.set()
            return {}

        with patch("contribbot.services.recheck.run_recheck_sweep", new=fake_sweep):
            await asyncio.wait_for(periodic_recheck(verifier, shutdown_event, interval=0.01), timeout=5)

        assert calls == [verifier, verifier]

    @pytest.mark.asyncio
    async def test_shutdown_before_first_interval(self, verifier: LinkedRoleVerifier):
        shutdown_event = asyncio.Event()
        shutdown_event.set()
        sweep = AsyncMock()

        with patch("contribbot.services.recheck.run_recheck_sweep", new=sweep):
            await periodic_recheck(verifier, shutdown_event, interval=60)

        sweep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sweep_errors_do_not_kill_task(self, verifier: LinkedRoleVerifier):
        shutdown_event = asyncio.Event()
        attempts = []

        async def failing_sweep(v):
            attempts.append(v)
            if len(attempts) == 3:
                shutdown_event.set()
            raise RuntimeError("sweep failed")

        with patch("contribbot.services.recheck.run_recheck_sweep", new=failing_sweep):
            await asyncio.wait_for(periodic_recheck(verifier, shutdown_event, interval=0.01), timeout=5)

        assert len(attempts) == 3
