# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""MonitorScheduler: runs monitoring cycles on a fixed interval.

Uses pure asyncio (no external scheduler dependencies).  The scheduler is
started as a background task during ``threatwatch serve`` and
``threatwatch watch``.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from threatwatch.models.alert import ThreatAlert

logger = logging.getLogger("threatwatch.monitoring.scheduler")

CycleRunner = Callable[[], Awaitable[list[ThreatAlert]]]

_DEFAULT_INTERVAL_SECONDS = 300.0


class MonitorScheduler:
    """Asyncio loop that invokes *run_cycle* every *interval* seconds.

    Only one cycle runs at a time: :meth:`run_once` waits for an in-flight
    cycle instead of overlapping it.  A failing cycle is logged and the
    loop carries on.
    """

    def __init__(
        self,
        run_cycle: CycleRunner,
        *,
        interval: float = _DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        if interval <= 0:
            msg = "interval must be positive"
            raise ValueError(msg)
        self._run_cycle = run_cycle
        self._interval = interval
        self._lock = asyncio.Lock()
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self.cycles_completed = 0
        self.cycles_failed = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval(self) -> float:
        return self._interval

    async def start(self) -> None:
        """Start the background loop; the first cycle runs immediately."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("Monitor scheduler started (interval=%ss)", self._interval)

    async def stop(self) -> None:
        """Gracefully stop the scheduler."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.info("Monitor scheduler stopped")

    async def run_once(self) -> list[ThreatAlert]:
        """Run a single cycle, serialized with the background loop."""
        async with self._lock:
            return await self._run_cycle()

    async def _loop(self) -> None:
        while self._running:
            try:
                await self.run_once()
                self.cycles_completed += 1
            except Exception:
                self.cycles_failed += 1
                logger.exception("Monitoring cycle failed")
            await asyncio.sleep(self._interval)
