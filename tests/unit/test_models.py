# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the rule, alert and dashboard models."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from threatwatch.core.constants import AlertStatus, MatchType, Severity, SourceStatus, SourceType
from threatwatch.models import (
    AlertAction,
    MonitoringRule,
    MonitoringSource,
    RuleDraft,
    RulePatch,
    ThreatAlert,
    ThreatTrend,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


def _rule(**overrides) -> MonitoringRule:
    fields = {
        "id": "rule-x",
        "name": "X",
        "pattern": "lockbit",
        "cooldown_minutes": 30,
    }
    fields.update(overrides)
    return MonitoringRule(**fields)


class TestMonitoringSource:
    def test_defaults(self) -> None:
        src = MonitoringSource(name="Ransomwatch", source_type=SourceType.RANSOMWATCH)
        assert src.id.startswith("src-")
        assert src.enabled is True
        assert src.status == SourceStatus.ACTIVE
        assert src.last_checked_at is None
        assert src.error_message is None

    def test_unknown_source_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MonitoringSource(name="X", source_type="myspace")


class TestRuleDraft:
    def test_defaults(self) -> None:
        draft = RuleDraft(name="X", pattern="a|b")
        assert draft.match_type == MatchType.KEYWORD
        assert draft.severity == Severity.MEDIUM
        assert draft.sources == []
        assert draft.actions == []

    def test_negative_cooldown_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RuleDraft(name="X", pattern="a", cooldown_minutes=-1)

    def test_action_parsed_from_mapping(self) -> None:
        draft = RuleDraft(name="X", pattern="a", actions=[{"type": "slack", "config": {"a": 1}}])
        assert draft.actions == [AlertAction(type="slack", config={"a": 1})]


class TestRulePatch:
    def test_only_set_fields_dumped(self) -> None:
        patch = RulePatch(enabled=False)
        assert patch.model_dump(exclude_unset=True) == {"enabled": False}


class TestCooldown:
    def test_never_triggered_is_not_in_cooldown(self) -> None:
        rule = _rule()
        assert rule.cooldown_until() is None
        assert rule.in_cooldown(NOW) is False

    def test_inside_window(self) -> None:
        rule = _rule(last_triggered_at=NOW)
        assert rule.cooldown_until() == NOW + timedelta(minutes=30)
        assert rule.in_cooldown(NOW + timedelta(minutes=29, seconds=59)) is True

    def test_window_end_is_exclusive(self) -> None:
        rule = _rule(last_triggered_at=NOW)
        assert rule.in_cooldown(NOW + timedelta(minutes=30)) is False

    def test_zero_cooldown(self) -> None:
        rule = _rule(last_triggered_at=NOW, cooldown_minutes=0)
        assert rule.in_cooldown(NOW) is False

    def test_enabled_sources(self) -> None:
        rule = _rule(
            sources=[
                MonitoringSource(id="a", name="A", source_type="ransomwatch"),
                MonitoringSource(id="b", name="B", source_type="forums", enabled=False),
            ]
        )
        assert [s.id for s in rule.enabled_sources()] == ["a"]


class TestThreatAlert:
    def test_is_open(self) -> None:
        alert = ThreatAlert(
            id="alert-1",
            rule_id="rule-x",
            rule_name="X",
            severity=Severity.HIGH,
            title="t",
            description="d",
            source="s",
        )
        assert alert.status == AlertStatus.NEW
        assert alert.is_open
        alert.status = AlertStatus.FALSE_POSITIVE
        assert not alert.is_open


class TestThreatTrend:
    def test_total_is_serialized(self) -> None:
        trend = ThreatTrend(date="2026-03-10", critical=1, high=2, medium=3, low=4)
        assert trend.total == 10
        assert trend.model_dump()["total"] == 10
