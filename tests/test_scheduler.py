"""Tests for UpdateScheduler."""

import asyncio
import threading
from unittest.mock import MagicMock, patch

import pytest

from autoupdater.git_update.scheduler import UpdateScheduler
from autoupdater.git_update.types import UpdateOutcome


class BlockingReconciler:
    """Reconciler whose pass waits until released."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = 0

    def run_pass(self) -> UpdateOutcome:
        self.calls += 1
        self.started.set()
        self.release.wait(timeout=5)
        return UpdateOutcome(status="no_change")


@pytest.fixture
def reconciler():
    mock = MagicMock()
    mock.run_pass.return_value = UpdateOutcome(status="no_change")
    return mock


class TestRunPass:
    """Test single pass execution."""

    @pytest.mark.asyncio
    async def test_returns_outcome(self, reconciler):
        """Test the reconciler outcome is passed through."""
        scheduler = UpdateScheduler(reconciler, interval_s=60)

        outcome = await scheduler.run_pass()

        assert outcome.status == "no_change"
        assert scheduler.passes_run == 1
        assert not scheduler.is_busy

    @pytest.mark.asyncio
    async def test_overlapping_pass_is_skipped(self):
        """A trigger during a running pass does not start a second one."""
        blocking = BlockingReconciler()
        scheduler = UpdateScheduler(blocking, interval_s=60)

        first = asyncio.create_task(scheduler.run_pass())
        await asyncio.to_thread(blocking.started.wait, 5)

        assert scheduler.is_busy
        assert await scheduler.run_pass() is None

        blocking.release.set()
        outcome = await first

        assert outcome.status == "no_change"
        assert blocking.calls == 1
        assert scheduler.passes_run == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_failed_outcome(self, reconciler):
        """The scheduler survives an exception escaping the pass."""
        reconciler.run_pass.side_effect = RuntimeError("kaboom")
        scheduler = UpdateScheduler(reconciler, interval_s=60)

        outcome = await scheduler.run_pass()

        assert outcome.status == "failed"
        assert outcome.error == "kaboom"
        assert not scheduler.is_busy

    @pytest.mark.asyncio
    async def test_on_outcome_callback(self, reconciler):
        """Test the callback sees every outcome and its errors are contained."""
        seen = []
        scheduler = UpdateScheduler(reconciler, interval_s=60, on_outcome=seen.append)
        await scheduler.run_pass()
        assert [o.status for o in seen] == ["no_change"]

        broken = UpdateScheduler(reconciler, interval_s=60, on_outcome=MagicMock(side_effect=ValueError))
        assert (await broken.run_pass()).status == "no_change"


class TestRunForever:
    """Test the polling loop."""

    @pytest.mark.asyncio
    async def test_runs_immediately_then_sleeps_interval(self, reconciler):
        """First pass runs at once, then one pass per fixed delay."""
        scheduler = UpdateScheduler(reconciler, interval_s=90)
        sleeps = []

        async def fake_sleep(delay):
            sleeps.append(delay)
            if len(sleeps) == 3:
                scheduler.stop()

        with patch("autoupdater.git_update.scheduler.asyncio.sleep", fake_sleep):
            await scheduler.run_forever()

        assert reconciler.run_pass.call_count == 3
        assert sleeps == [90, 90, 90]

    @pytest.mark.asyncio
    async def test_failed_pass_keeps_polling(self, reconciler):
        """A failed pass does not stop the loop."""
        reconciler.run_pass.side_effect = [
            UpdateOutcome(status="failed", error="build failed"),
            UpdateOutcome(status="no_change"),
        ]
        scheduler = UpdateScheduler(reconciler, interval_s=1)

        async def fake_sleep(delay):
            if reconciler.run_pass.call_count == 2:
                scheduler.stop()

        with patch("autoupdater.git_update.scheduler.asyncio.sleep", fake_sleep):
            await scheduler.run_forever()

        assert scheduler.passes_run == 2

    @pytest.mark.asyncio
    async def test_stop_during_pass(self, reconciler):
        """stop() from the callback ends the loop without sleeping."""
        scheduler = UpdateScheduler(reconciler, interval_s=3600)
        scheduler.on_outcome = lambda outcome: scheduler.stop()

        await asyncio.wait_for(scheduler.run_forever(), timeout=5)

        assert scheduler.passes_run == 1
