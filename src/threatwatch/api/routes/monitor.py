# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Monitoring engine endpoints: on-demand cycles and scheduler status."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from threatwatch.api.auth import require_api_key
from threatwatch.api.deps import get_scheduler, get_service
from threatwatch.models.alert import ThreatAlert
from threatwatch.models.dashboard import FeedStatus
from threatwatch.monitoring.orchestrator import CycleReport
from threatwatch.monitoring.scheduler import MonitorScheduler
from threatwatch.monitoring.service import MonitoringService

router = APIRouter()


class CycleSummary(BaseModel):
    started_at: datetime
    finished_at: datetime | None
    rules_evaluated: int
    rules_in_cooldown: list[str]
    rules_triggered: list[str]
    pattern_errors: dict[str, str]
    source_errors: dict[str, str]
    rule_errors: dict[str, str]
    alerts_created: int


class CycleResponse(BaseModel):
    summary: CycleSummary | None
    alerts: list[ThreatAlert]


class MonitorStatusResponse(BaseModel):
    scheduler_running: bool
    interval_seconds: float | None
    cycles_completed: int
    cycles_failed: int
    last_cycle: CycleSummary | None


def _summary(report: CycleReport | None) -> CycleSummary | None:
    if report is None:
        return None
    return CycleSummary(
        started_at=report.started_at,
        finished_at=report.finished_at,
        rules_evaluated=report.rules_evaluated,
        rules_in_cooldown=report.rules_in_cooldown,
        rules_triggered=report.rules_triggered,
        pattern_errors=report.pattern_errors,
        source_errors=report.source_errors,
        rule_errors=report.rule_errors,
        alerts_created=report.alerts_created,
    )


@router.post("/monitor/cycle", response_model=CycleResponse)
async def run_cycle(
    service: MonitoringService = Depends(get_service),
    scheduler: MonitorScheduler | None = Depends(get_scheduler),
    _api_key: str = Depends(require_api_key),
) -> CycleResponse:
    """Run one monitoring cycle now, serialized with the background scheduler."""
    if scheduler is not None:
        alerts = await scheduler.run_once()
    else:
        alerts = await service.run_monitoring_cycle()
    return CycleResponse(summary=_summary(service.last_cycle), alerts=alerts)


@router.get("/monitor/status", response_model=MonitorStatusResponse)
async def monitor_status(
    service: MonitoringService = Depends(get_service),
    scheduler: MonitorScheduler | None = Depends(get_scheduler),
    _api_key: str = Depends(require_api_key),
) -> MonitorStatusResponse:
    return MonitorStatusResponse(
        scheduler_running=scheduler is not None and scheduler.running,
        interval_seconds=scheduler.interval if scheduler is not None else None,
        cycles_completed=scheduler.cycles_completed if scheduler is not None else 0,
        cycles_failed=scheduler.cycles_failed if scheduler is not None else 0,
        last_cycle=_summary(service.last_cycle),
    )


@router.get("/monitor/feeds", response_model=list[FeedStatus])
async def feed_statuses(
    service: MonitoringService = Depends(get_service),
    _api_key: str = Depends(require_api_key),
) -> list[FeedStatus]:
    """Health of each indicator feed, measured from the engine's fetches."""
    return service.get_feed_statuses()
