# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Dashboard summary models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, computed_field

from threatwatch.core.constants import FeedState, SourceType
from threatwatch.models.alert import ThreatAlert


class FeedStatus(BaseModel):
    """Health of one indicator feed, measured from the engine's own fetches."""

    name: str
    source_type: SourceType
    status: FeedState = FeedState.UNKNOWN
    last_update: datetime | None = None
    last_error: str | None = None
    items_received: int = 0
    latency_ms: float | None = None
    fetches: int = 0
    failures: int = 0


class RulePerformance(BaseModel):
    rule_id: str
    rule_name: str
    triggers_last_24h: int = 0
    triggers_last_7d: int = 0
    false_positive_rate: float = Field(default=0.0, ge=0.0, le=100.0)


class ThreatTrend(BaseModel):
    """Alert counts for one calendar day, by severity."""

    date: str
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        return self.critical + self.high + self.medium + self.low


class MonitoringDashboard(BaseModel):
    active_rules: int = 0
    total_alerts: int = 0
    critical_alerts: int = 0
    unresolved_alerts: int = 0
    sources_healthy: int = 0
    sources_total: int = 0
    last_update: datetime
    recent_alerts: list[ThreatAlert] = Field(default_factory=list)
    rule_performance: list[RulePerformance] = Field(default_factory=list)
    threat_trends: list[ThreatTrend] = Field(default_factory=list)
