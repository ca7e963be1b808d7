# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Enumerations shared by rules, sources, alerts and delivery actions."""

from enum import StrEnum


class Severity(StrEnum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MatchType(StrEnum):
    KEYWORD = "keyword"
    REGEX = "regex"


class SourceType(StrEnum):
    THREATFOX = "threatfox"
    URLHAUS = "urlhaus"
    RANSOMWATCH = "ransomwatch"
    FORUMS = "forums"
    TELEGRAM = "telegram"
    GITHUB = "github"
    PASTEBIN = "pastebin"
    CUSTOM = "custom"


class SourceStatus(StrEnum):
    ACTIVE = "active"
    ERROR = "error"
    PAUSED = "paused"


class FeedState(StrEnum):
    ONLINE = "online"
    DEGRADED = "degraded"
    OFFLINE = "offline"
    UNKNOWN = "unknown"


class ActionType(StrEnum):
    WEBHOOK = "webhook"
    EMAIL = "email"
    SLACK = "slack"
    TEAMS = "teams"
    PAGERDUTY = "pagerduty"
    LOG = "log"
    UI = "ui"


class AlertStatus(StrEnum):
    NEW = "new"
    ACKNOWLEDGED = "acknowledged"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"
    FALSE_POSITIVE = "false_positive"


# Alerts in these states no longer count as unresolved.
CLOSED_ALERT_STATUSES: frozenset[AlertStatus] = frozenset(
    {AlertStatus.RESOLVED, AlertStatus.FALSE_POSITIVE}
)

# Trend buckets are reported from most to least severe.
SEVERITY_ORDER: tuple[Severity, ...] = (
    Severity.CRITICAL,
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
)
