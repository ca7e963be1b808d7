# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Threat alert models."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from threatwatch.core.constants import CLOSED_ALERT_STATUSES, AlertStatus, Severity


class AlertNote(BaseModel):
    """An investigator note attached to an alert."""

    id: str
    author: str
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class AlertDraft(BaseModel):
    """Payload emitted by the orchestrator; the store assigns id, status and notes."""

    rule_id: str
    rule_name: str = Field(description="Copy of the rule name at emission time")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    severity: Severity
    title: str
    description: str
    source: str = Field(description="Name of the source that produced the match")
    indicators: list[str] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)


class ThreatAlert(AlertDraft):
    """A stored alert.

    Only ``status``, ``assignee`` and ``notes`` change after creation.
    """

    id: str
    status: AlertStatus = AlertStatus.NEW
    assignee: str | None = None
    notes: list[AlertNote] = Field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return self.status not in CLOSED_ALERT_STATUSES
