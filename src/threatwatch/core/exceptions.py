# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for threatwatch."""


class ThreatWatchError(Exception):
    """Base exception for all threatwatch errors."""


class ConfigurationError(ThreatWatchError):
    """Invalid or missing configuration."""


class PatternError(ThreatWatchError):
    """A monitoring rule's pattern cannot be compiled."""

    def __init__(self, rule_id: str, pattern: str, reason: str) -> None:
        self.rule_id = rule_id
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid pattern for rule {rule_id!r} ({pattern!r}): {reason}")


class SourceFetchError(ThreatWatchError):
    """An indicator source adapter failed to return records."""


class RuleLoadError(ThreatWatchError):
    """Failed to load monitoring rules from a file."""
