# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Continuous monitoring engine: rules, alerts, cycles."""

from threatwatch.monitoring.alert_store import AlertStore
from threatwatch.monitoring.defaults import default_rules
from threatwatch.monitoring.feeds import FeedHealthTracker
from threatwatch.monitoring.loader import load_rules_file
from threatwatch.monitoring.matcher import (
    CandidateMatch,
    FieldMapping,
    FieldMappingRegistry,
    PatternMatcher,
    compile_rule_pattern,
)
from threatwatch.monitoring.orchestrator import CycleReport, MonitoringOrchestrator
from threatwatch.monitoring.rule_store import RuleStore
from threatwatch.monitoring.scheduler import MonitorScheduler
from threatwatch.monitoring.service import MonitoringService

__all__ = [
    "AlertStore",
    "CandidateMatch",
    "CycleReport",
    "FeedHealthTracker",
    "FieldMapping",
    "FieldMappingRegistry",
    "MonitorScheduler",
    "MonitoringOrchestrator",
    "MonitoringService",
    "PatternMatcher",
    "RuleStore",
    "compile_rule_pattern",
    "default_rules",
    "load_rules_file",
]
