# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Monitoring rule, source and delivery action models."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field

from threatwatch.core.constants import (
    ActionType,
    MatchType,
    Severity,
    SourceStatus,
    SourceType,
)


def _now() -> datetime:
    return datetime.now(UTC)


class MonitoringSource(BaseModel):
    """A typed external feed polled by a rule. Owned by value by its rule."""

    id: str = Field(default_factory=lambda: f"src-{uuid.uuid4().hex[:8]}")
    name: str
    source_type: SourceType
    enabled: bool = True
    refresh_interval_minutes: int = Field(default=30, ge=0, description="Advisory only")
    last_checked_at: datetime | None = None
    status: SourceStatus = SourceStatus.ACTIVE
    error_message: str | None = None


class AlertAction(BaseModel):
    """A delivery directive evaluated for every alert the rule produces."""

    type: ActionType
    config: dict[str, Any] = Field(default_factory=dict)
    enabled: bool = True


class RuleDraft(BaseModel):
    """Everything needed to create a rule; id, timestamps and trigger info are assigned."""

    name: str
    description: str = ""
    match_type: MatchType = MatchType.KEYWORD
    pattern: str
    enabled: bool = True
    severity: Severity = Severity.MEDIUM
    sources: list[MonitoringSource] = Field(default_factory=list)
    actions: list[AlertAction] = Field(default_factory=list)
    cooldown_minutes: int = Field(default=60, ge=0)


class RulePatch(BaseModel):
    """Partial update of a rule's user-editable fields.

    Only fields explicitly set by the caller are merged.
    """

    name: str | None = None
    description: str | None = None
    match_type: MatchType | None = None
    pattern: str | None = None
    enabled: bool | None = None
    severity: Severity | None = None
    sources: list[MonitoringSource] | None = None
    actions: list[AlertAction] | None = None
    cooldown_minutes: int | None = Field(default=None, ge=0)


class MonitoringRule(RuleDraft):
    """A stored monitoring rule with its trigger bookkeeping."""

    id: str
    last_triggered_at: datetime | None = None
    trigger_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    def cooldown_until(self) -> datetime | None:
        """End of the current cooldown window, or ``None`` if never triggered."""
        if self.last_triggered_at is None:
            return None
        return self.last_triggered_at + timedelta(minutes=self.cooldown_minutes)

    def in_cooldown(self, now: datetime) -> bool:
        until = self.cooldown_until()
        return until is not None and now < until

    def enabled_sources(self) -> list[MonitoringSource]:
        return [s for s in self.sources if s.enabled]
