# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Built-in starting rule set."""

from __future__ import annotations

from threatwatch.core.constants import ActionType, MatchType, Severity, SourceType
from threatwatch.models.rule import AlertAction, MonitoringSource, RuleDraft


def _ui() -> list[AlertAction]:
    return [AlertAction(type=ActionType.UI)]


def default_rules() -> list[tuple[str, RuleDraft]]:
    """The five pre-seeded rules as ``(rule_id, draft)`` pairs.

    Fresh objects are built on every call, so seeding one store never
    shares source records with another.
    """
    return [
        (
            "rule-1",
            RuleDraft(
                name="Critical Ransomware Activity",
                description="Monitor for new ransomware victim announcements",
                match_type=MatchType.KEYWORD,
                pattern="lockbit|blackcat|alphv|cl0p|royal|blackbasta",
                severity=Severity.CRITICAL,
                sources=[
                    MonitoringSource(
                        id="s1",
                        name="Ransomwatch",
                        source_type=SourceType.RANSOMWATCH,
                        refresh_interval_minutes=15,
                    )
                ],
                actions=_ui(),
                cooldown_minutes=30,
            ),
        ),
        (
            "rule-2",
            RuleDraft(
                name="Stealer Malware C2",
                description="Monitor for new stealer malware command & control infrastructure",
                match_type=MatchType.KEYWORD,
                pattern="redline|raccoon|vidar|lummac2|stealc",
                severity=Severity.HIGH,
                sources=[
                    MonitoringSource(
                        id="s2",
                        name="ThreatFox",
                        source_type=SourceType.THREATFOX,
                        refresh_interval_minutes=30,
                    )
                ],
                actions=_ui(),
                cooldown_minutes=60,
            ),
        ),
        (
            "rule-3",
            RuleDraft(
                name="Data Breach Mentions",
                description="Monitor dark web forums for database leak discussions",
                match_type=MatchType.KEYWORD,
                pattern="database|dump|leak|breach|combo",
                severity=Severity.HIGH,
                sources=[
                    MonitoringSource(
                        id="s3",
                        name="Forums",
                        source_type=SourceType.FORUMS,
                        refresh_interval_minutes=60,
                    )
                ],
                actions=_ui(),
                cooldown_minutes=120,
            ),
        ),
        (
            "rule-4",
            RuleDraft(
                name="Critical CVE Exploits",
                description="Monitor for exploitation of critical CVEs",
                match_type=MatchType.REGEX,
                pattern=r"CVE-202[3-5]-\d{4,5}",
                severity=Severity.CRITICAL,
                sources=[
                    MonitoringSource(
                        id="s4",
                        name="ThreatFox",
                        source_type=SourceType.THREATFOX,
                        refresh_interval_minutes=30,
                    ),
                    MonitoringSource(
                        id="s5",
                        name="GitHub",
                        source_type=SourceType.GITHUB,
                        refresh_interval_minutes=60,
                    ),
                ],
                actions=_ui(),
                cooldown_minutes=60,
            ),
        ),
        (
            "rule-5",
            RuleDraft(
                name="Cobalt Strike Beacons",
                description="Monitor for new Cobalt Strike infrastructure",
                match_type=MatchType.KEYWORD,
                pattern="cobalt strike|cobaltstrike|beacon|teamserver",
                severity=Severity.HIGH,
                sources=[
                    MonitoringSource(
                        id="s6",
                        name="URLhaus",
                        source_type=SourceType.URLHAUS,
                        refresh_interval_minutes=30,
                    )
                ],
                actions=_ui(),
                cooldown_minutes=60,
            ),
        ),
    ]
