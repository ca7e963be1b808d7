# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Request dependencies shared by the route modules."""

from __future__ import annotations

from fastapi import HTTPException, Request

from threatwatch.monitoring.scheduler import MonitorScheduler
from threatwatch.monitoring.service import MonitoringService


def get_service(request: Request) -> MonitoringService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Monitoring service not initialized")
    return service


def get_scheduler(request: Request) -> MonitorScheduler | None:
    return getattr(request.app.state, "scheduler", None)
