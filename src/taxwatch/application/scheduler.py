# src/taxwatch/application/scheduler.py
"""
Refresh Scheduler - Periodic Cycle Trigger

Runs one refresh cycle at start-up and then one per interval on the asyncio
event loop shared with the HTTP server.

States: IDLE (no cycle in progress) and RUNNING. Ticks are independent of
cycle completion; a tick that fires while a cycle is RUNNING is skipped, not
queued. A failing cycle is logged and recorded in last_report; the next tick
proceeds as usual. Failed cycles are never retried before the next tick.

Files that USE this module:
- taxwatch.app (starts the scheduler in the server lifespan)
- taxwatch.adapters.http.server (health endpoint reads state and last report)

Files that this module USES:
- taxwatch.application.refresh_service (CycleReport)
"""
from __future__ import annotations

import asyncio
import enum
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

from taxwatch.application.refresh_service import CycleReport

logger = logging.getLogger(__name__)


class SchedulerState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


class RefreshScheduler:
    """Fixed-interval ticker with a skip-if-running overlap policy."""

    def __init__(
        self,
        cycle: Callable[[], Awaitable[CycleReport]],
        interval: timedelta,
        name: str = "tax_refresh",
    ):
        """
        Initialize scheduler.

        Args:
            cycle: Coroutine function running one refresh cycle
            interval: Time between ticks (first tick fires immediately)
            name: Label used in log messages and task names
        """
        if interval.total_seconds() <= 0:
            raise ValueError("interval must be positive")
        self._cycle = cycle
        self.interval = interval
        self.name = name
        self._lock = asyncio.Lock()
        self._ticker: Optional[asyncio.Task] = None
        self._cycle_tasks: set[asyncio.Task] = set()
        self.last_report: Optional[CycleReport] = None
        self.cycles_run = 0
        self.ticks_skipped = 0

    @property
    def state(self) -> SchedulerState:
        return SchedulerState.RUNNING if self._lock.locked() else SchedulerState.IDLE

    @property
    def is_started(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    async def run_once(self) -> Optional[CycleReport]:
        """
        Run one cycle unless one is already in progress.

        Returns:
            The cycle's report (also for failed cycles), or None if skipped
        """
        # Re-entrancy protection: skip if a cycle is already running
        if self._lock.locked():
            self.ticks_skipped += 1
            logger.warning("%s: skipping tick, previous cycle still running", self.name)
            return None

        async with self._lock:
            started = datetime.now(timezone.utc)
            try:
                report = await self._cycle()
            except Exception as e:
                logger.error("%s: cycle failed: %s (type: %s)", self.name, e, type(e).__name__, exc_info=True)
                report = CycleReport(
                    started_at=started,
                    finished_at=datetime.now(timezone.utc),
                    persisted=False,
                    error=str(e),
                )
            self.cycles_run += 1
            self.last_report = report
            return report

    async def trigger(self) -> Optional[CycleReport]:
        """Run a cycle on demand under the same skip policy."""
        return await self.run_once()

    def _spawn_cycle(self) -> None:
        task = asyncio.create_task(self.run_once(), name=f"{self.name}-cycle")
        self._cycle_tasks.add(task)
        task.add_done_callback(self._cycle_tasks.discard)

    async def _tick_forever(self) -> None:
        while True:
            self._spawn_cycle()
            next_run = datetime.now() + self.interval
            logger.info("%s: next run at %s", self.name, next_run.strftime("%Y-%m-%d %H:%M:%S"))
            await asyncio.sleep(self.interval.total_seconds())

    def start(self) -> None:
        """Start ticking; the first cycle runs immediately. Needs a running loop."""
        if self.is_started:
            return
        logger.info("%s: scheduler started, interval=%s", self.name, self.interval)
        self._ticker = asyncio.create_task(self._tick_forever(), name=f"{self.name}-ticker")

    async def stop(self) -> None:
        """
        Stop accepting ticks and cancel the cycle in progress.

        A cycle is only cancellable while its fetches are pending; once the
        snapshot is being written the write runs to completion first.
        """
        tasks = list(self._cycle_tasks)
        if self._ticker is not None:
            tasks.append(self._ticker)
            self._ticker = None
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("%s: scheduler stopped", self.name)
