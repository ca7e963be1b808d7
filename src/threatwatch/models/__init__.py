# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Domain models for threatwatch."""

from threatwatch.models.alert import AlertDraft, AlertNote, ThreatAlert
from threatwatch.models.dashboard import (
    FeedStatus,
    MonitoringDashboard,
    RulePerformance,
    ThreatTrend,
)
from threatwatch.models.rule import (
    AlertAction,
    MonitoringRule,
    MonitoringSource,
    RuleDraft,
    RulePatch,
)

__all__ = [
    "AlertAction",
    "AlertDraft",
    "AlertNote",
    "FeedStatus",
    "MonitoringDashboard",
    "MonitoringRule",
    "MonitoringSource",
    "RuleDraft",
    "RulePatch",
    "RulePerformance",
    "ThreatAlert",
    "ThreatTrend",
]
