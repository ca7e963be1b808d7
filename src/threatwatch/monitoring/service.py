# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""MonitoringService: the operations exposed to the API and CLI."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from threatwatch.analytics.dashboard import DashboardAggregator
from threatwatch.core.config import Settings, get_settings
from threatwatch.core.constants import AlertStatus, Severity, SourceType
from threatwatch.core.exceptions import ConfigurationError
from threatwatch.models.alert import AlertNote, ThreatAlert
from threatwatch.models.dashboard import FeedStatus, MonitoringDashboard
from threatwatch.models.rule import MonitoringRule, RuleDraft, RulePatch
from threatwatch.monitoring.alert_store import AlertListener, AlertStore
from threatwatch.monitoring.defaults import default_rules
from threatwatch.monitoring.feeds import FeedHealthTracker
from threatwatch.monitoring.loader import load_rules_file
from threatwatch.monitoring.matcher import PatternMatcher
from threatwatch.monitoring.orchestrator import CycleReport, MonitoringOrchestrator
from threatwatch.monitoring.rule_store import RuleStore
from threatwatch.notifications.dispatcher import AlertDispatcher
from threatwatch.sources import AdapterRegistry, SourceAdapter, build_adapter_registry

logger = logging.getLogger("threatwatch.monitoring.service")


def _utc_now() -> datetime:
    return datetime.now(UTC)


def resolve_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        msg = f"Unknown trend timezone: {name!r}"
        raise ConfigurationError(msg) from exc


class MonitoringService:
    """One independent monitoring instance: its stores, engine and dashboard.

    Construct it directly (tests, embedding) or with :meth:`from_settings`.
    """

    def __init__(
        self,
        rule_store: RuleStore,
        alert_store: AlertStore,
        orchestrator: MonitoringOrchestrator,
        *,
        dispatcher: AlertDispatcher | None = None,
        trend_timezone: tzinfo = UTC,
        recent_alert_limit: int | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.rules = rule_store
        self.alerts = alert_store
        self.orchestrator = orchestrator
        self.dispatcher = dispatcher
        self._trend_timezone = trend_timezone
        self._recent_alert_limit = recent_alert_limit
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        adapters: AdapterRegistry | None = None,
        matcher: PatternMatcher | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> MonitoringService:
        """Wire a service from *settings* and seed its rule set.

        Rules come from ``rules_file`` when set, otherwise from the built-in
        defaults when ``seed_default_rules`` is true.
        """
        settings = settings or get_settings()
        rule_store = RuleStore(clock=clock)
        alert_store = AlertStore(clock=clock)
        dispatcher = AlertDispatcher(settings)
        orchestrator = MonitoringOrchestrator(
            rule_store,
            alert_store,
            adapters if adapters is not None else build_adapter_registry(settings),
            matcher,
            fetch_timeout=settings.source_fetch_timeout,
            dispatcher=dispatcher,
            feeds=FeedHealthTracker(degraded_latency_ms=settings.feed_degraded_latency_ms),
            clock=clock,
        )

        if settings.rules_file:
            seeds = load_rules_file(settings.rules_file)
        elif settings.seed_default_rules:
            seeds = list(default_rules())
        else:
            seeds = []
        for rule_id, draft in seeds:
            try:
                rule_store.add(draft, rule_id=rule_id)
            except ValueError as exc:
                logger.warning("Skipping rule %r: %s", draft.name, exc)
        logger.info("Monitoring service ready with %d rules", len(rule_store))

        return cls(
            rule_store,
            alert_store,
            orchestrator,
            dispatcher=dispatcher,
            trend_timezone=resolve_timezone(settings.trend_timezone),
            recent_alert_limit=settings.dashboard_recent_alerts,
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def list_rules(self) -> list[MonitoringRule]:
        return self.rules.list()

    def get_rule(self, rule_id: str) -> MonitoringRule | None:
        return self.rules.get(rule_id)

    def add_rule(self, draft: RuleDraft | dict[str, Any]) -> MonitoringRule:
        if isinstance(draft, dict):
            draft = RuleDraft.model_validate(draft)
        return self.rules.add(draft)

    def update_rule(
        self, rule_id: str, patch: RulePatch | dict[str, Any]
    ) -> MonitoringRule | None:
        return self.rules.update(rule_id, patch)

    def delete_rule(self, rule_id: str) -> bool:
        return self.rules.delete(rule_id)

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    def list_alerts(
        self,
        *,
        status: AlertStatus | None = None,
        severity: Severity | None = None,
        rule_id: str | None = None,
        limit: int | None = None,
    ) -> list[ThreatAlert]:
        """Alerts most recent first, optionally filtered."""
        alerts = self.alerts.list()
        if status is not None:
            alerts = [a for a in alerts if a.status == status]
        if severity is not None:
            alerts = [a for a in alerts if a.severity == severity]
        if rule_id is not None:
            alerts = [a for a in alerts if a.rule_id == rule_id]
        return alerts if limit is None else alerts[:limit]

    def get_alert(self, alert_id: str) -> ThreatAlert | None:
        return self.alerts.get(alert_id)

    def update_alert_status(
        self, alert_id: str, status: AlertStatus | str
    ) -> ThreatAlert | None:
        return self.alerts.update_status(alert_id, status)

    def assign_alert(self, alert_id: str, assignee: str | None) -> ThreatAlert | None:
        return self.alerts.assign(alert_id, assignee)

    def add_alert_note(self, alert_id: str, author: str, content: str) -> AlertNote | None:
        return self.alerts.add_note(alert_id, author, content)

    def subscribe_to_alerts(self, callback: AlertListener) -> Callable[[], None]:
        return self.alerts.subscribe(callback)

    # ------------------------------------------------------------------
    # Engine
    # ------------------------------------------------------------------

    def register_adapter(self, source_type: SourceType, adapter: SourceAdapter) -> None:
        """Enable polling of *source_type* (forums, telegram, ...) through *adapter*."""
        self.orchestrator.adapters.register(source_type, adapter)

    async def run_monitoring_cycle(self) -> list[ThreatAlert]:
        return await self.orchestrator.run_cycle()

    @property
    def last_cycle(self) -> CycleReport | None:
        return self.orchestrator.last_report

    def get_feed_statuses(self) -> list[FeedStatus]:
        """Health of each registered indicator feed."""
        return self.orchestrator.feed_statuses()

    async def drain_notifications(self) -> None:
        """Wait for background alert deliveries to finish."""
        if self.dispatcher is not None:
            await self.dispatcher.drain()

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def get_dashboard(self, now: datetime | None = None) -> MonitoringDashboard:
        aggregator = DashboardAggregator(
            self.rules.list(), self.alerts.list(), timezone=self._trend_timezone
        )
        return aggregator.build(now or self._clock(), recent_limit=self._recent_alert_limit)
