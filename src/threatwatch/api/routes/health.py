# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from threatwatch import __version__
from threatwatch.api.deps import get_scheduler
from threatwatch.monitoring.scheduler import MonitorScheduler

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    scheduler: str


@router.get("/health", response_model=HealthResponse)
async def health(
    scheduler: MonitorScheduler | None = Depends(get_scheduler),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        service="threatwatch",
        version=__version__,
        scheduler="running" if scheduler is not None and scheduler.running else "stopped",
    )
