# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the monitoring cycle orchestrator."""

from __future__ import annotations

import pytest

from threatwatch.core.constants import (
    ActionType,
    FeedState,
    MatchType,
    Severity,
    SourceStatus,
    SourceType,
)
from threatwatch.core.exceptions import SourceFetchError
from threatwatch.models.rule import AlertAction, MonitoringSource
from threatwatch.monitoring.alert_store import AlertStore
from threatwatch.monitoring.feeds import FeedHealthTracker
from threatwatch.monitoring.matcher import PatternMatcher
from threatwatch.monitoring.orchestrator import MonitoringOrchestrator
from threatwatch.monitoring.rule_store import RuleStore
from threatwatch.sources.base import AdapterRegistry, CallableAdapter

ACME = {"group": "LockBit", "victim_name": "Acme Corp"}


@pytest.fixture
def rules(clock) -> RuleStore:
    return RuleStore(clock=clock)


@pytest.fixture
def alerts(clock) -> AlertStore:
    return AlertStore(clock=clock)


def _orchestrator(rules, alerts, clock, adapters, **kwargs) -> MonitoringOrchestrator:
    return MonitoringOrchestrator(rules, alerts, AdapterRegistry(adapters), clock=clock, **kwargs)


class TestExampleScenario:
    async def test_lockbit_victim_then_cooldown(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        rule = rules.add(make_draft(severity=Severity.HIGH))
        adapter = static_adapter([ACME])
        orch = _orchestrator(rules, alerts, clock, {SourceType.RANSOMWATCH: adapter})

        created = await orch.run_cycle()

        assert len(created) == 1
        assert "Acme Corp" in created[0].title
        assert created[0].severity == Severity.HIGH
        assert created[0].source == "Ransomwatch"
        assert created[0].rule_name == "Ransomware Watch"
        stored = rules.get(rule.id)
        assert stored.trigger_count == 1
        assert stored.last_triggered_at == clock.now

        clock.advance(minutes=5)
        assert await orch.run_cycle() == []
        assert rules.get(rule.id).trigger_count == 1
        assert len(alerts) == 1


class TestCooldownGating:
    async def test_no_source_calls_during_cooldown(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        rules.add(make_draft(cooldown_minutes=30))
        adapter = static_adapter([ACME])
        orch = _orchestrator(rules, alerts, clock, {SourceType.RANSOMWATCH: adapter})

        await orch.run_cycle()
        assert len(adapter.calls) == 1

        clock.advance(minutes=29)
        await orch.run_cycle()
        assert len(adapter.calls) == 1
        assert orch.last_report.rules_in_cooldown == [rules.list()[0].id]

        clock.advance(minutes=1)
        created = await orch.run_cycle()
        assert len(adapter.calls) == 2
        assert len(created) == 1

    async def test_zero_match_cycle_does_not_advance_cooldown(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        rule = rules.add(make_draft())
        adapter = static_adapter([{"group": "Play", "victim_name": "Foo"}])
        orch = _orchestrator(rules, alerts, clock, {SourceType.RANSOMWATCH: adapter})

        assert await orch.run_cycle() == []
        stored = rules.get(rule.id)
        assert stored.last_triggered_at is None
        assert stored.trigger_count == 0

        # Still polled on the very next cycle: no cooldown was started.
        clock.advance(minutes=1)
        await orch.run_cycle()
        assert len(adapter.calls) == 2

    async def test_trigger_count_adds_every_alert(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        rule = rules.add(make_draft())
        records = [ACME, {"group": "BlackCat", "victim_name": "Globex"}]
        orch = _orchestrator(
            rules, alerts, clock, {SourceType.RANSOMWATCH: static_adapter(records)}
        )
        created = await orch.run_cycle()
        assert len(created) == 2
        assert rules.get(rule.id).trigger_count == 2


class TestFailureIsolation:
    async def test_failed_source_does_not_stop_siblings(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        rule = rules.add(
            make_draft(
                sources=[
                    MonitoringSource(id="bad", name="Broken", source_type=SourceType.RANSOMWATCH),
                    MonitoringSource(id="good", name="Forums", source_type=SourceType.FORUMS),
                ],
                pattern="lockbit|leak",
            )
        )
        forum_post = {"thread": "lockbit leak", "content": "", "forum": "XSS"}
        orch = _orchestrator(
            rules,
            alerts,
            clock,
            {
                SourceType.RANSOMWATCH: static_adapter(error=SourceFetchError("HTTP 503")),
                SourceType.FORUMS: static_adapter([forum_post]),
            },
        )

        created = await orch.run_cycle()

        assert len(created) == 1
        assert created[0].source == "Forums"
        sources = {s.id: s for s in rules.get(rule.id).sources}
        assert sources["bad"].status == SourceStatus.ERROR
        assert sources["bad"].error_message == "HTTP 503"
        assert sources["bad"].last_checked_at == clock.now
        assert sources["good"].status == SourceStatus.ACTIVE
        assert sources["good"].last_checked_at == clock.now
        assert orch.last_report.source_errors == {f"{rule.id}/bad": "HTTP 503"}

    async def test_unexpected_exception_is_recorded(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        rule = rules.add(make_draft())
        orch = _orchestrator(
            rules,
            alerts,
            clock,
            {SourceType.RANSOMWATCH: static_adapter(error=KeyError("posts"))},
        )
        assert await orch.run_cycle() == []
        assert rules.get(rule.id).sources[0].status == SourceStatus.ERROR

    async def test_recovered_source_clears_error(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        rule = rules.add(make_draft())
        adapter = static_adapter(error=SourceFetchError("down"))
        orch = _orchestrator(rules, alerts, clock, {SourceType.RANSOMWATCH: adapter})
        await orch.run_cycle()

        adapter.error = None
        await orch.run_cycle()
        source = rules.get(rule.id).sources[0]
        assert source.status == SourceStatus.ACTIVE
        assert source.error_message is None

    async def test_slow_source_times_out(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        rule = rules.add(make_draft())
        orch = _orchestrator(
            rules,
            alerts,
            clock,
            {SourceType.RANSOMWATCH: static_adapter([ACME], delay=1.0)},
            fetch_timeout=0.01,
        )
        assert await orch.run_cycle() == []
        source = rules.get(rule.id).sources[0]
        assert source.status == SourceStatus.ERROR
        assert "timed out" in source.error_message

    async def test_malformed_pattern_skips_only_that_rule(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        broken = rules.add(make_draft(name="Broken", match_type=MatchType.REGEX, pattern="(lockbit"))
        rules.add(make_draft(name="Healthy"))
        adapter = static_adapter([ACME])
        orch = _orchestrator(rules, alerts, clock, {SourceType.RANSOMWATCH: adapter})

        created = await orch.run_cycle()

        assert [a.rule_name for a in created] == ["Healthy"]
        assert len(adapter.calls) == 1
        assert broken.id in orch.last_report.pattern_errors
        assert rules.get(broken.id).last_triggered_at is None


class TestSourceSelection:
    async def test_disabled_rules_and_sources_are_skipped(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        rules.add(make_draft(enabled=False))
        rules.add(
            make_draft(
                sources=[
                    MonitoringSource(
                        id="off", name="Off", source_type=SourceType.RANSOMWATCH, enabled=False
                    )
                ]
            )
        )
        adapter = static_adapter([ACME])
        orch = _orchestrator(rules, alerts, clock, {SourceType.RANSOMWATCH: adapter})
        assert await orch.run_cycle() == []
        assert adapter.calls == []

    async def test_source_type_without_adapter_is_silent(
        self, rules, alerts, clock, make_draft
    ) -> None:
        rule = rules.add(
            make_draft(
                sources=[MonitoringSource(id="gh", name="GitHub", source_type=SourceType.GITHUB)]
            )
        )
        orch = _orchestrator(rules, alerts, clock, {})
        assert await orch.run_cycle() == []
        source = rules.get(rule.id).sources[0]
        assert source.status == SourceStatus.ACTIVE
        assert orch.last_report.source_errors == {}

    async def test_keyword_query_hint(self, rules, alerts, clock, static_adapter, make_draft) -> None:
        rules.add(make_draft(pattern=" lockbit | blackcat"))
        adapter = static_adapter([])
        orch = _orchestrator(rules, alerts, clock, {SourceType.RANSOMWATCH: adapter})
        await orch.run_cycle()
        assert adapter.calls == [("src-rw", "lockbit")]


class _RecordingDispatcher:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.submitted: list[tuple[list[AlertAction], list[str]]] = []

    def submit(self, actions, alerts):
        if self.fail:
            raise RuntimeError("dispatcher down")
        self.submitted.append((list(actions), [a.id for a in alerts]))


class TestDeliveryHandOff:
    async def test_alerts_handed_to_dispatcher(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        rules.add(make_draft(actions=[AlertAction(type=ActionType.LOG)]))
        dispatcher = _RecordingDispatcher()
        orch = _orchestrator(
            rules,
            alerts,
            clock,
            {SourceType.RANSOMWATCH: static_adapter([ACME])},
            dispatcher=dispatcher,
        )
        created = await orch.run_cycle()
        assert dispatcher.submitted == [([AlertAction(type=ActionType.LOG)], [created[0].id])]

    async def test_dispatcher_failure_does_not_block_emission(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        rule = rules.add(make_draft())
        orch = _orchestrator(
            rules,
            alerts,
            clock,
            {SourceType.RANSOMWATCH: static_adapter([ACME])},
            dispatcher=_RecordingDispatcher(fail=True),
        )
        created = await orch.run_cycle()
        assert len(created) == 1
        assert len(alerts) == 1
        assert rules.get(rule.id).trigger_count == 1


class _FailingMatcher(PatternMatcher):
    """Matcher that blows up on one source type."""

    def __init__(self, failing: SourceType) -> None:
        super().__init__()
        self.failing = failing

    def match(self, rule, source_type, records, *, compiled=None):
        if source_type == self.failing:
            raise RuntimeError("matcher exploded")
        return super().match(rule, source_type, records, compiled=compiled)


def _two_source_draft(make_draft, **overrides):
    return make_draft(
        sources=[
            MonitoringSource(id="rw", name="Ransomwatch", source_type=SourceType.RANSOMWATCH),
            MonitoringSource(id="xss", name="XSS", source_type=SourceType.FORUMS),
        ],
        **overrides,
    )


class TestRuleIsolation:
    async def test_unexpected_records_do_not_sink_the_cycle(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        first = rules.add(_two_source_draft(make_draft, name="A"))
        second = rules.add(make_draft(name="B"))

        async def raw_forum_feed(source, query):
            return ["lockbit post", None, {"thread": "lockbit builder", "forum": "XSS"}]

        orch = _orchestrator(
            rules,
            alerts,
            clock,
            {
                SourceType.RANSOMWATCH: static_adapter([ACME]),
                SourceType.FORUMS: CallableAdapter(raw_forum_feed),
            },
        )

        created = await orch.run_cycle()

        assert sorted(a.rule_name for a in created) == ["A", "A", "B"]
        assert rules.get(first.id).trigger_count == 2
        assert rules.get(second.id).trigger_count == 1
        assert orch.last_report.rule_errors == {}

    async def test_failure_mid_rule_keeps_bookkeeping_and_later_rules(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        first = rules.add(_two_source_draft(make_draft, name="A"))
        second = rules.add(make_draft(name="B"))
        forum_post = {"thread": "lockbit builder", "forum": "XSS"}
        orch = _orchestrator(
            rules,
            alerts,
            clock,
            {
                SourceType.RANSOMWATCH: static_adapter([ACME]),
                SourceType.FORUMS: static_adapter([forum_post]),
            },
            matcher=_FailingMatcher(SourceType.FORUMS),
        )

        created = await orch.run_cycle()

        assert [a.rule_name for a in created] == ["A", "B"]
        assert len(alerts) == 2
        stored = rules.get(first.id)
        assert stored.trigger_count == 1
        assert stored.last_triggered_at == clock.now
        assert rules.get(second.id).trigger_count == 1
        report = orch.last_report
        assert report.rule_errors == {first.id: "matcher exploded"}
        assert report.alerts_created == 2
        assert report.rules_triggered == [first.id, second.id]

        # Alerts already stored started the cooldown: no duplicates next cycle.
        clock.advance(minutes=5)
        assert await orch.run_cycle() == []
        assert orch.last_report.rules_in_cooldown == [first.id, second.id]
        assert len(alerts) == 2

    async def test_failing_rule_without_alerts_is_not_triggered(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        rule = rules.add(
            make_draft(
                sources=[MonitoringSource(id="xss", name="XSS", source_type=SourceType.FORUMS)]
            )
        )
        orch = _orchestrator(
            rules,
            alerts,
            clock,
            {SourceType.FORUMS: static_adapter([{"thread": "lockbit"}])},
            matcher=_FailingMatcher(SourceType.FORUMS),
        )
        assert await orch.run_cycle() == []
        assert rules.get(rule.id).last_triggered_at is None
        assert rule.id in orch.last_report.rule_errors
        assert orch.last_report.rules_triggered == []

    async def test_adapter_returning_none_is_a_source_error(
        self, rules, alerts, clock, make_draft
    ) -> None:
        async def broken(source, query):
            return None

        rule = rules.add(make_draft())
        orch = _orchestrator(
            rules, alerts, clock, {SourceType.RANSOMWATCH: CallableAdapter(broken)}
        )
        assert await orch.run_cycle() == []
        assert rules.get(rule.id).sources[0].status == SourceStatus.ERROR
        assert orch.last_report.rule_errors == {}


class TestFeedHealth:
    async def test_fetches_are_measured(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        rules.add(_two_source_draft(make_draft))
        orch = _orchestrator(
            rules,
            alerts,
            clock,
            {
                SourceType.RANSOMWATCH: static_adapter([ACME]),
                SourceType.FORUMS: static_adapter(error=SourceFetchError("HTTP 502")),
                SourceType.URLHAUS: static_adapter([]),
            },
        )
        assert [f.status for f in orch.feed_statuses()] == [FeedState.UNKNOWN] * 3

        await orch.run_cycle()

        feeds = {f.source_type: f for f in orch.feed_statuses()}
        online = feeds[SourceType.RANSOMWATCH]
        assert online.status == FeedState.ONLINE
        assert online.name == "static"
        assert online.items_received == 1
        assert online.latency_ms is not None and online.latency_ms >= 0
        assert online.last_update == clock.now
        assert (online.fetches, online.failures) == (1, 0)

        offline = feeds[SourceType.FORUMS]
        assert offline.status == FeedState.OFFLINE
        assert offline.last_error == "HTTP 502"
        assert offline.last_update is None
        assert (offline.fetches, offline.failures) == (1, 1)

        assert feeds[SourceType.URLHAUS].status == FeedState.UNKNOWN

    async def test_slow_feed_is_degraded(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        rules.add(make_draft())
        orch = _orchestrator(
            rules,
            alerts,
            clock,
            {SourceType.RANSOMWATCH: static_adapter([], delay=0.02)},
            feeds=FeedHealthTracker(degraded_latency_ms=1.0),
        )
        await orch.run_cycle()
        (feed,) = orch.feed_statuses()
        assert feed.status == FeedState.DEGRADED
        assert feed.latency_ms > 1.0


class TestQueryHint:
    async def test_regex_rule_passes_first_alternative(
        self, rules, alerts, clock, static_adapter, make_draft
    ) -> None:
        rules.add(make_draft(match_type=MatchType.REGEX, pattern=r"lock\s*bit|conti"))
        adapter = static_adapter([])
        orch = _orchestrator(rules, alerts, clock, {SourceType.RANSOMWATCH: adapter})
        await orch.run_cycle()
        assert adapter.calls == [("src-rw", r"lock\s*bit")]
