# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the interval monitoring scheduler."""

from __future__ import annotations

import asyncio

import pytest

from threatwatch.monitoring.scheduler import MonitorScheduler


class _CountingCycle:
    """Cycle runner that counts calls and tracks overlap."""

    def __init__(self, *, delay: float = 0.0, fail: bool = False) -> None:
        self.delay = delay
        self.fail = fail
        self.calls = 0
        self.active = 0
        self.max_active = 0

    async def __call__(self) -> list:
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail:
                raise RuntimeError("cycle exploded")
            return []
        finally:
            self.active -= 1


class TestMonitorScheduler:
    """Tests for MonitorScheduler lifecycle and serialization."""

    def test_rejects_non_positive_interval(self) -> None:
        with pytest.raises(ValueError, match="interval"):
            MonitorScheduler(_CountingCycle(), interval=0)

    def test_initial_state(self) -> None:
        """A new scheduler is idle."""
        scheduler = MonitorScheduler(_CountingCycle(), interval=60)
        assert scheduler.running is False
        assert scheduler.interval == 60
        assert scheduler.cycles_completed == 0

    async def test_first_cycle_runs_immediately(self) -> None:
        cycle = _CountingCycle()
        scheduler = MonitorScheduler(cycle, interval=3600)
        await scheduler.start()
        await asyncio.sleep(0.05)
        await scheduler.stop()

        assert cycle.calls == 1
        assert scheduler.cycles_completed == 1
        assert scheduler.running is False

    async def test_repeats_on_interval(self) -> None:
        cycle = _CountingCycle()
        scheduler = MonitorScheduler(cycle, interval=0.02)
        await scheduler.start()
        await asyncio.sleep(0.15)
        await scheduler.stop()
        assert cycle.calls >= 3

    async def test_start_is_idempotent(self) -> None:
        cycle = _CountingCycle()
        scheduler = MonitorScheduler(cycle, interval=3600)
        await scheduler.start()
        await scheduler.start()
        await asyncio.sleep(0.05)
        await scheduler.stop()
        assert cycle.calls == 1

    async def test_failed_cycle_does_not_stop_loop(self, caplog) -> None:
        """A raising cycle is logged and counted; the loop keeps going."""
        cycle = _CountingCycle(fail=True)
        scheduler = MonitorScheduler(cycle, interval=0.02)
        await scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.stop()

        assert cycle.calls >= 2
        assert scheduler.cycles_failed == cycle.calls
        assert scheduler.cycles_completed == 0
        assert "Monitoring cycle failed" in caplog.text

    async def test_run_once_never_overlaps(self) -> None:
        cycle = _CountingCycle(delay=0.02)
        scheduler = MonitorScheduler(cycle, interval=3600)

        await asyncio.gather(*(scheduler.run_once() for _ in range(4)))

        assert cycle.calls == 4
        assert cycle.max_active == 1

    async def test_run_once_waits_for_background_cycle(self) -> None:
        cycle = _CountingCycle(delay=0.05)
        scheduler = MonitorScheduler(cycle, interval=3600)
        await scheduler.start()
        await asyncio.sleep(0.01)

        await scheduler.run_once()
        await scheduler.stop()

        assert cycle.calls == 2
        assert cycle.max_active == 1

    async def test_stop_without_start(self) -> None:
        scheduler = MonitorScheduler(_CountingCycle(), interval=60)
        await scheduler.stop()
        assert scheduler.running is False
