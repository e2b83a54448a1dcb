"""Fixed-delay scheduler driving the update reconciler."""

import asyncio
from typing import Callable

from loguru import logger

from autoupdater.git_update.service import UpdateReconciler
from autoupdater.git_update.types import UpdateOutcome


class UpdateScheduler:
    """
    Runs a pass right away, then one pass per interval, forever.

    The interval is measured from the end of one pass to the start of the
    next, and a trigger that arrives while a pass is running is skipped,
    so two passes never touch the checkout at the same time.
    """

    def __init__(
        self,
        reconciler: UpdateReconciler,
        interval_s: float,
        on_outcome: Callable[[UpdateOutcome], None] | None = None,
    ):
        self.reconciler = reconciler
        self.interval_s = interval_s
        self.on_outcome = on_outcome
        self.passes_run = 0
        self._lock = asyncio.Lock()
        self._running = False

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    async def run_pass(self) -> UpdateOutcome | None:
        """Run one pass unless another is in progress (then return None)."""
        if self._lock.locked():
            logger.warning("Previous update pass still running, skipping this tick")
            return None

        async with self._lock:
            try:
                # The pass blocks on subprocesses; keep it off the event loop.
                outcome = await asyncio.to_thread(self.reconciler.run_pass)
            except Exception as e:
                logger.exception("Unexpected error during update pass")
                outcome = UpdateOutcome(status="failed", error=str(e))
            self.passes_run += 1

        if self.on_outcome:
            try:
                self.on_outcome(outcome)
            except Exception as e:
                logger.error(f"Update outcome callback error: {e}")

        return outcome

    async def run_forever(self) -> None:
        """Loop until stop() is called."""
        self._running = True
        logger.info(f"Update scheduler started, interval {self.interval_s}s")
        while self._running:
            await self.run_pass()
            if not self._running:
                break
            await asyncio.sleep(self.interval_s)

    def stop(self) -> None:
        """Stop after the current pass or sleep."""
        self._running = False
