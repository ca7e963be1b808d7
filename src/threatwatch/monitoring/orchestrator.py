# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Monitoring cycle orchestrator: evaluates enabled rules against their sources."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from threatwatch.core.constants import SourceStatus
from threatwatch.core.exceptions import PatternError, SourceFetchError
from threatwatch.models.alert import AlertDraft, ThreatAlert
from threatwatch.models.dashboard import FeedStatus
from threatwatch.models.rule import MonitoringRule, MonitoringSource
from threatwatch.monitoring.alert_store import AlertStore
from threatwatch.monitoring.feeds import FeedHealthTracker
from threatwatch.monitoring.matcher import PatternMatcher, compile_rule_pattern, keyword_terms
from threatwatch.monitoring.rule_store import RuleStore
from threatwatch.notifications.dispatcher import AlertDispatcher
from threatwatch.sources.base import AdapterRegistry, RawRecord, SourceAdapter

logger = logging.getLogger("threatwatch.monitoring.orchestrator")

_DEFAULT_FETCH_TIMEOUT = 20.0


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class CycleReport:
    """Summary of one :meth:`MonitoringOrchestrator.run_cycle` invocation."""

    started_at: datetime
    finished_at: datetime | None = None
    rules_evaluated: int = 0
    rules_in_cooldown: list[str] = field(default_factory=list)
    rules_triggered: list[str] = field(default_factory=list)
    pattern_errors: dict[str, str] = field(default_factory=dict)
    source_errors: dict[str, str] = field(default_factory=dict)
    rule_errors: dict[str, str] = field(default_factory=dict)
    alerts_created: int = 0


@dataclass(frozen=True, slots=True)
class _FetchOutcome:
    source: MonitoringSource
    records: list[RawRecord] | None
    error: str | None = None


class MonitoringOrchestrator:
    """Runs monitoring cycles.

    Per enabled rule: cooldown gate, pattern compilation, concurrent fetch
    of the rule's enabled sources, matching, alert emission and trigger
    bookkeeping.  Failures are confined to the source or rule they occur
    in.  Overlapping cycles must be serialized by the caller.
    """

    def __init__(
        self,
        rule_store: RuleStore,
        alert_store: AlertStore,
        adapters: AdapterRegistry,
        matcher: PatternMatcher | None = None,
        *,
        fetch_timeout: float = _DEFAULT_FETCH_TIMEOUT,
        dispatcher: AlertDispatcher | None = None,
        feeds: FeedHealthTracker | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._rules = rule_store
        self._alerts = alert_store
        self._adapters = adapters
        self._matcher = matcher or PatternMatcher()
        self._fetch_timeout = fetch_timeout
        self._dispatcher = dispatcher
        self.feeds = feeds or FeedHealthTracker()
        self._clock = clock
        self.last_report: CycleReport | None = None

    @property
    def adapters(self) -> AdapterRegistry:
        return self._adapters

    async def run_cycle(self) -> list[ThreatAlert]:
        """Evaluate every enabled rule once and return the alerts created."""
        report = CycleReport(started_at=self._clock())
        created: list[ThreatAlert] = []

        for rule in self._rules.list_enabled():
            emitted: list[ThreatAlert] = []
            try:
                await self._evaluate_rule(rule, report, emitted)
            except Exception as exc:
                logger.exception(
                    "Rule %s failed during evaluation", rule.id, extra={"rule_id": rule.id}
                )
                report.rule_errors[rule.id] = str(exc) or type(exc).__name__
            created.extend(emitted)

        report.finished_at = self._clock()
        report.alerts_created = len(created)
        self.last_report = report
        logger.info(
            "Monitoring cycle complete: rules=%d cooldown=%d triggered=%d alerts=%d "
            "pattern_errors=%d source_errors=%d rule_errors=%d",
            report.rules_evaluated,
            len(report.rules_in_cooldown),
            len(report.rules_triggered),
            len(created),
            len(report.pattern_errors),
            len(report.source_errors),
            len(report.rule_errors),
        )
        return created

    async def _evaluate_rule(
        self, rule: MonitoringRule, report: CycleReport, alerts: list[ThreatAlert]
    ) -> None:
        """Evaluate *rule*, appending each alert to *alerts* as it is stored.

        Alerts already stored are counted against the rule even if a later
        step raises.
        """
        now = self._clock()
        if rule.in_cooldown(now):
            logger.debug("Rule %s in cooldown until %s", rule.id, rule.cooldown_until())
            report.rules_in_cooldown.append(rule.id)
            return

        try:
            compiled = compile_rule_pattern(rule)
        except PatternError as exc:
            logger.error("Skipping rule %s: %s", rule.id, exc, extra={"rule_id": rule.id})
            report.pattern_errors[rule.id] = exc.reason
            return

        report.rules_evaluated += 1
        sources = [s for s in rule.enabled_sources() if s.source_type in self._adapters]
        if not sources:
            return

        query = _query_hint(rule)
        outcomes = await asyncio.gather(
            *(self._fetch(source, query) for source in sources)
        )

        try:
            for outcome in outcomes:
                checked_at = self._clock()
                if outcome.records is None:
                    report.source_errors[f"{rule.id}/{outcome.source.id}"] = outcome.error or ""
                    self._rules.update_source_status(
                        rule.id,
                        outcome.source.id,
                        SourceStatus.ERROR,
                        error_message=outcome.error,
                        checked_at=checked_at,
                    )
                    continue

                self._rules.update_source_status(
                    rule.id, outcome.source.id, SourceStatus.ACTIVE, checked_at=checked_at
                )
                self._emit(rule, outcome, compiled, alerts)
        finally:
            if alerts:
                self._rules.record_trigger(rule.id, now, len(alerts))
                report.rules_triggered.append(rule.id)
                logger.info(
                    "Rule %s produced %d alert(s)",
                    rule.id,
                    len(alerts),
                    extra={"rule_id": rule.id},
                )
                self._hand_off(rule, alerts)

    async def _fetch(self, source: MonitoringSource, query: str | None) -> _FetchOutcome:
        adapter = self._adapters.get(source.source_type)
        if adapter is None:
            return _FetchOutcome(source, [])

        ctx = {"source_id": source.id, "source_type": source.source_type}
        started = time.perf_counter()
        error: str | None = None
        try:
            records = list(
                await asyncio.wait_for(
                    adapter.fetch(source, query=query), timeout=self._fetch_timeout
                )
            )
        except TimeoutError:
            error = f"fetch timed out after {self._fetch_timeout:g}s"
            logger.warning("Source %s (%s): %s", source.name, source.id, error, extra=ctx)
        except SourceFetchError as exc:
            error = str(exc)
            logger.warning("Source %s (%s) failed: %s", source.name, source.id, exc, extra=ctx)
        except Exception as exc:
            error = str(exc) or type(exc).__name__
            logger.exception(
                "Source %s (%s) raised unexpectedly", source.name, source.id, extra=ctx
            )
        latency_ms = (time.perf_counter() - started) * 1000

        if error is not None:
            self.feeds.record_failure(
                source.source_type, _adapter_name(adapter), error=error, latency_ms=latency_ms
            )
            return _FetchOutcome(source, None, error)

        self.feeds.record_success(
            source.source_type,
            _adapter_name(adapter),
            items=len(records),
            latency_ms=latency_ms,
            at=self._clock(),
        )
        return _FetchOutcome(source, records)

    def _emit(
        self,
        rule: MonitoringRule,
        outcome: _FetchOutcome,
        compiled: re.Pattern[str],
        alerts: list[ThreatAlert],
    ) -> None:
        candidates = self._matcher.match(
            rule, outcome.source.source_type, outcome.records or [], compiled=compiled
        )
        for candidate in candidates:
            alerts.append(
                self._alerts.append(
                    AlertDraft(
                        rule_id=rule.id,
                        rule_name=rule.name,
                        timestamp=self._clock(),
                        severity=rule.severity,
                        title=candidate.title,
                        description=candidate.description,
                        source=outcome.source.name,
                        indicators=candidate.indicators,
                        context=candidate.context,
                    )
                )
            )

    def _hand_off(self, rule: MonitoringRule, alerts: list[ThreatAlert]) -> None:
        if self._dispatcher is None:
            return
        try:
            self._dispatcher.submit(rule.actions, list(alerts))
        except Exception:
            logger.exception("Could not schedule delivery for rule %s", rule.id)

    def feed_statuses(self) -> list[FeedStatus]:
        """Health of every registered feed, from the fetches made so far."""
        return self.feeds.statuses(
            (source_type, _adapter_name(adapter))
            for source_type, adapter in self._adapters.items()
        )


def _query_hint(rule: MonitoringRule) -> str | None:
    """First ``|``-separated term of the pattern, for search-backed adapters."""
    terms = keyword_terms(rule.pattern)
    return terms[0] if terms else None


def _adapter_name(adapter: SourceAdapter) -> str:
    return getattr(adapter, "name", None) or type(adapter).__name__
