# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Dashboard aggregator: summary statistics over rule and alert snapshots."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from datetime import UTC, date, datetime, timedelta, tzinfo

from threatwatch.core.constants import (
    CLOSED_ALERT_STATUSES,
    SEVERITY_ORDER,
    AlertStatus,
    Severity,
    SourceStatus,
)
from threatwatch.models.alert import ThreatAlert
from threatwatch.models.dashboard import MonitoringDashboard, RulePerformance, ThreatTrend
from threatwatch.models.rule import MonitoringRule

logger = logging.getLogger("threatwatch.analytics.dashboard")

TREND_DAYS = 7


def _aware(value: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class DashboardAggregator:
    """Computes the monitoring dashboard from pre-fetched snapshots.

    This is a pure in-memory aggregator: it never reads or mutates the
    stores itself.  Daily trend buckets run midnight to midnight in
    *timezone* (UTC unless configured otherwise).
    """

    def __init__(
        self,
        rules: Sequence[MonitoringRule],
        alerts: Sequence[ThreatAlert],
        *,
        timezone: tzinfo = UTC,
    ) -> None:
        self.rules = list(rules)
        self.alerts = list(alerts)
        self.timezone = timezone

    def build(
        self, now: datetime | None = None, *, recent_limit: int | None = None
    ) -> MonitoringDashboard:
        """Assemble the full dashboard as of *now*.

        ``recent_alerts`` keeps the alerts' most-recent-first order, cut to
        *recent_limit* entries when given.
        """
        now = _aware(now or datetime.now(UTC))
        healthy, total = self.source_health()
        recent = self.alerts if recent_limit is None else self.alerts[:recent_limit]

        return MonitoringDashboard(
            active_rules=sum(1 for r in self.rules if r.enabled),
            total_alerts=len(self.alerts),
            critical_alerts=sum(1 for a in self.alerts if a.severity == Severity.CRITICAL),
            unresolved_alerts=sum(
                1 for a in self.alerts if a.status not in CLOSED_ALERT_STATUSES
            ),
            sources_healthy=healthy,
            sources_total=total,
            last_update=now,
            recent_alerts=[a.model_copy(deep=True) for a in recent],
            rule_performance=self.rule_performance(now),
            threat_trends=self.threat_trends(now),
        )

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    def source_health(self) -> tuple[int, int]:
        """``(active, total)`` over every rule's sources.

        A source referenced by two rules is counted twice: each rule owns
        its own copy.
        """
        sources = [s for r in self.rules for s in r.sources]
        return sum(1 for s in sources if s.status == SourceStatus.ACTIVE), len(sources)

    # ------------------------------------------------------------------
    # Rule performance
    # ------------------------------------------------------------------

    def rule_performance(self, now: datetime) -> list[RulePerformance]:
        now = _aware(now)
        day_ago = now - timedelta(hours=24)
        week_ago = now - timedelta(days=7)

        per_rule: dict[str, list[ThreatAlert]] = {}
        for alert in self.alerts:
            per_rule.setdefault(alert.rule_id, []).append(alert)

        results: list[RulePerformance] = []
        for rule in self.rules:
            alerts = per_rule.get(rule.id, [])
            false_positives = sum(1 for a in alerts if a.status == AlertStatus.FALSE_POSITIVE)
            results.append(
                RulePerformance(
                    rule_id=rule.id,
                    rule_name=rule.name,
                    triggers_last_24h=sum(1 for a in alerts if _aware(a.timestamp) >= day_ago),
                    triggers_last_7d=sum(1 for a in alerts if _aware(a.timestamp) >= week_ago),
                    false_positive_rate=(
                        false_positives / len(alerts) * 100 if alerts else 0.0
                    ),
                )
            )
        return results

    # ------------------------------------------------------------------
    # Trends
    # ------------------------------------------------------------------

    def trend_days(self, now: datetime) -> list[date]:
        """The seven calendar days ending today, oldest first."""
        today = _aware(now).astimezone(self.timezone).date()
        return [today - timedelta(days=offset) for offset in range(TREND_DAYS - 1, -1, -1)]

    def threat_trends(self, now: datetime) -> list[ThreatTrend]:
        days = self.trend_days(now)
        counts: dict[date, Counter[str]] = {day: Counter() for day in days}

        for alert in self.alerts:
            day = _aware(alert.timestamp).astimezone(self.timezone).date()
            bucket = counts.get(day)
            if bucket is not None:
                bucket[Severity(alert.severity).value] += 1

        return [
            ThreatTrend(
                date=day.isoformat(),
                **{severity.value: counts[day][severity.value] for severity in SEVERITY_ORDER},
            )
            for day in days
        ]
