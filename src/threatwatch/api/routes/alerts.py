# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Threat alert endpoints: listing and lifecycle updates."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from threatwatch.api.auth import require_api_key
from threatwatch.api.deps import get_service
from threatwatch.core.constants import AlertStatus, Severity
from threatwatch.models.alert import AlertNote, ThreatAlert
from threatwatch.monitoring.service import MonitoringService

router = APIRouter()


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class StatusBody(BaseModel):
    status: AlertStatus


class AssigneeBody(BaseModel):
    assignee: str | None = None


class NoteBody(BaseModel):
    author: str = Field(min_length=1)
    content: str = Field(min_length=1)


def _not_found(alert_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Alert not found: {alert_id}")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/alerts", response_model=list[ThreatAlert])
async def list_alerts(
    status: AlertStatus | None = None,
    severity: Severity | None = None,
    rule_id: str | None = None,
    limit: int | None = Query(default=None, ge=1, le=1000),
    service: MonitoringService = Depends(get_service),
    _api_key: str = Depends(require_api_key),
) -> list[ThreatAlert]:
    return service.list_alerts(status=status, severity=severity, rule_id=rule_id, limit=limit)


@router.get("/alerts/{alert_id}", response_model=ThreatAlert)
async def get_alert(
    alert_id: str,
    service: MonitoringService = Depends(get_service),
    _api_key: str = Depends(require_api_key),
) -> ThreatAlert:
    alert = service.get_alert(alert_id)
    if alert is None:
        raise _not_found(alert_id)
    return alert


@router.patch("/alerts/{alert_id}/status", response_model=ThreatAlert)
async def update_alert_status(
    alert_id: str,
    body: StatusBody,
    service: MonitoringService = Depends(get_service),
    _api_key: str = Depends(require_api_key),
) -> ThreatAlert:
    alert = service.update_alert_status(alert_id, body.status)
    if alert is None:
        raise _not_found(alert_id)
    return alert


@router.patch("/alerts/{alert_id}/assignee", response_model=ThreatAlert)
async def assign_alert(
    alert_id: str,
    body: AssigneeBody,
    service: MonitoringService = Depends(get_service),
    _api_key: str = Depends(require_api_key),
) -> ThreatAlert:
    alert = service.assign_alert(alert_id, body.assignee)
    if alert is None:
        raise _not_found(alert_id)
    return alert


@router.post("/alerts/{alert_id}/notes", response_model=AlertNote, status_code=201)
async def add_alert_note(
    alert_id: str,
    body: NoteBody,
    service: MonitoringService = Depends(get_service),
    _api_key: str = Depends(require_api_key),
) -> AlertNote:
    note = service.add_alert_note(alert_id, body.author, body.content)
    if note is None:
        raise _not_found(alert_id)
    return note
