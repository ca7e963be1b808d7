# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Notification payload built from an emitted threat alert."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from threatwatch.core.constants import Severity
from threatwatch.models.alert import ThreatAlert

_MAX_INDICATORS = 10


class AlertNotification(BaseModel):
    """What delivery channels see of an alert."""

    alert_id: str
    rule_id: str
    rule_name: str
    severity: Severity
    title: str
    description: str
    source: str
    indicators: list[str] = Field(default_factory=list)
    indicator_count: int = 0
    timestamp: datetime

    @classmethod
    def from_alert(cls, alert: ThreatAlert) -> AlertNotification:
        return cls(
            alert_id=alert.id,
            rule_id=alert.rule_id,
            rule_name=alert.rule_name,
            severity=alert.severity,
            title=alert.title,
            description=alert.description,
            source=alert.source,
            indicators=alert.indicators[:_MAX_INDICATORS],
            indicator_count=len(alert.indicators),
            timestamp=alert.timestamp,
        )
