# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Monitoring dashboard endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from threatwatch.api.auth import require_api_key
from threatwatch.api.deps import get_service
from threatwatch.models.dashboard import MonitoringDashboard
from threatwatch.monitoring.service import MonitoringService

router = APIRouter()


@router.get("/dashboard", response_model=MonitoringDashboard)
async def get_dashboard(
    service: MonitoringService = Depends(get_service),
    _api_key: str = Depends(require_api_key),
) -> MonitoringDashboard:
    return service.get_dashboard()
