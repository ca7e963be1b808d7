# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from threatwatch import __version__
from threatwatch.api.routes import alerts, dashboard, health, monitor, rules
from threatwatch.core.config import Settings, get_settings
from threatwatch.core.logging import setup_logging
from threatwatch.monitoring.scheduler import MonitorScheduler
from threatwatch.monitoring.service import MonitoringService

logger = logging.getLogger("threatwatch.api.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    settings: Settings = app.state.settings

    if app.state.service is None:
        app.state.service = MonitoringService.from_settings(settings)
    service: MonitoringService = app.state.service

    scheduler = MonitorScheduler(
        service.run_monitoring_cycle, interval=settings.cycle_interval_seconds
    )
    app.state.scheduler = scheduler
    if app.state.enable_scheduler:
        await scheduler.start()
    logger.info(
        "API ready with %d rules (scheduler=%s)",
        len(service.list_rules()),
        "on" if scheduler.running else "off",
    )

    yield

    await scheduler.stop()
    await service.drain_notifications()


def create_app(
    service: MonitoringService | None = None,
    *,
    settings: Settings | None = None,
    enable_scheduler: bool = True,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title="threatwatch",
        description="Continuous OSINT threat monitoring and alerting",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.state.settings = settings
    app.state.service = service
    app.state.scheduler = None
    app.state.enable_scheduler = enable_scheduler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix="/api/v1", tags=["health"])
    app.include_router(rules.router, prefix="/api/v1", tags=["rules"])
    app.include_router(alerts.router, prefix="/api/v1", tags=["alerts"])
    app.include_router(monitor.router, prefix="/api/v1", tags=["monitor"])
    app.include_router(dashboard.router, prefix="/api/v1", tags=["dashboard"])

    return app


def create_app_from_env() -> FastAPI:
    """Factory wrapper that reads THREATWATCH_NO_SCHEDULER and sets up logging."""
    import os

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    enable_scheduler = os.environ.get("THREATWATCH_NO_SCHEDULER", "") != "1"
    return create_app(settings=settings, enable_scheduler=enable_scheduler)
