# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Match monitoring rule patterns against raw records fetched from a source."""

from __future__ import annotations

import copy
import functools
import logging
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from threatwatch.core.constants import MatchType, SourceType
from threatwatch.core.exceptions import PatternError
from threatwatch.models.rule import MonitoringRule

logger = logging.getLogger("threatwatch.monitoring.matcher")

Record = Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class CandidateMatch:
    """One record that matched a rule, ready to become an alert."""

    title: str
    description: str
    indicators: list[str] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class FieldMapping:
    """How records of one source type are tested and summarized.

    ``fields`` are the record keys searched for the pattern; the callables
    build the alert title, description and indicator list from a matching
    record, which is kept under ``context_key`` in the alert context.
    """

    fields: tuple[str, ...]
    context_key: str
    title: Callable[[Record], str]
    description: Callable[[Record], str]
    indicators: Callable[[Record], list[str]]


def _values(record: Record, *keys: str) -> list[str]:
    return [str(record[k]) for k in keys if record.get(k)]


RANSOMWATCH_MAPPING = FieldMapping(
    fields=("group", "victim_name"),
    context_key="victim",
    title=lambda r: f"Ransomware Victim: {r.get('victim_name', 'Unknown')}",
    description=lambda r: f"New victim announced by {r.get('group', 'Unknown')}",
    indicators=lambda r: _values(r, "victim_name", "group", "victim_domain"),
)

FORUMS_MAPPING = FieldMapping(
    fields=("thread", "content"),
    context_key="post",
    title=lambda r: f"Forum Activity: {str(r.get('thread', ''))[:60]}",
    description=lambda r: f"Suspicious post on {r.get('forum', 'unknown forum')}",
    indicators=lambda r: _values(r, "thread", "author", "forum"),
)

THREATFOX_MAPPING = FieldMapping(
    fields=("ioc", "malware_printable", "threat_type", "tags"),
    context_key="ioc",
    title=lambda r: f"ThreatFox IOC Match: {r.get('ioc', 'unknown')}",
    description=lambda r: (
        f"{r.get('ioc_type', 'IOC')} associated with "
        f"{r.get('malware_printable') or 'unknown malware'} reported to ThreatFox"
    ),
    indicators=lambda r: _values(r, "ioc", "malware_printable"),
)

URLHAUS_MAPPING = FieldMapping(
    fields=("url", "threat", "tags"),
    context_key="url",
    title=lambda r: f"URLhaus Malware URL: {r.get('host') or r.get('url', 'unknown')}",
    description=lambda r: f"Malware URL ({r.get('threat') or 'unclassified'}) reported to URLhaus",
    indicators=lambda r: _values(r, "url", "host"),
)


class FieldMappingRegistry:
    """Source type -> :class:`FieldMapping`.

    Unregistered source types have no mapping and produce no matches.
    """

    def __init__(self, mappings: Mapping[SourceType, FieldMapping] | None = None) -> None:
        self._mappings: dict[SourceType, FieldMapping] = dict(mappings or {})

    @classmethod
    def default(cls) -> FieldMappingRegistry:
        return cls(
            {
                SourceType.RANSOMWATCH: RANSOMWATCH_MAPPING,
                SourceType.FORUMS: FORUMS_MAPPING,
                SourceType.THREATFOX: THREATFOX_MAPPING,
                SourceType.URLHAUS: URLHAUS_MAPPING,
            }
        )

    def register(self, source_type: SourceType, mapping: FieldMapping) -> None:
        self._mappings[SourceType(source_type)] = mapping
        logger.debug("Registered field mapping for %s", source_type)

    def get(self, source_type: SourceType) -> FieldMapping | None:
        return self._mappings.get(source_type)

    def __contains__(self, source_type: object) -> bool:
        return source_type in self._mappings

    @property
    def source_types(self) -> list[SourceType]:
        return sorted(self._mappings)


# ---------------------------------------------------------------------------
# Pattern compilation
# ---------------------------------------------------------------------------


def keyword_terms(pattern: str) -> list[str]:
    """Split a ``|``-delimited keyword pattern into trimmed, non-empty terms."""
    return [term.strip() for term in pattern.split("|") if term.strip()]


@functools.lru_cache(maxsize=256)
def _compile(match_type: MatchType, pattern: str) -> re.Pattern[str]:
    if match_type == MatchType.KEYWORD:
        terms = keyword_terms(pattern)
        if not terms:
            msg = "keyword pattern has no terms"
            raise ValueError(msg)
        return re.compile("|".join(re.escape(t) for t in terms), re.IGNORECASE)

    if not pattern:
        msg = "regular expression is empty"
        raise ValueError(msg)
    return re.compile(pattern, re.IGNORECASE)


def compile_rule_pattern(rule: MonitoringRule) -> re.Pattern[str]:
    """Compile (once, then from cache) the pattern of *rule*.

    Raises :class:`PatternError` if the pattern is unusable.
    """
    try:
        return _compile(MatchType(rule.match_type), rule.pattern)
    except (re.error, ValueError) as exc:
        raise PatternError(rule.id, rule.pattern, str(exc)) from exc


# ---------------------------------------------------------------------------
# Matcher
# ---------------------------------------------------------------------------


def _field_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, list | tuple | set):
        return " ".join(str(v) for v in value if v is not None)
    return str(value)


class PatternMatcher:
    """Evaluate a rule's pattern against records from one source."""

    def __init__(self, mappings: FieldMappingRegistry | None = None) -> None:
        self.mappings = mappings if mappings is not None else FieldMappingRegistry.default()

    def match(
        self,
        rule: MonitoringRule,
        source_type: SourceType,
        records: Iterable[Record],
        *,
        compiled: re.Pattern[str] | None = None,
    ) -> list[CandidateMatch]:
        """Return one :class:`CandidateMatch` per matching record.

        A record is tested against each field of its source type's mapping
        and matches if any field contains any occurrence of the pattern.
        Source types without a mapping yield nothing.  Records that are not
        mappings, or that the mapping cannot summarize, are skipped.
        """
        mapping = self.mappings.get(source_type)
        if mapping is None:
            logger.debug("No field mapping for source type %s, skipping", source_type)
            return []

        regex = compiled if compiled is not None else compile_rule_pattern(rule)
        matches: list[CandidateMatch] = []

        for record in records:
            if not isinstance(record, Mapping):
                logger.warning(
                    "Rule %s: skipping %s record of type %s",
                    rule.id,
                    source_type,
                    type(record).__name__,
                )
                continue
            try:
                candidate = self._candidate(regex, mapping, record)
            except Exception as exc:
                logger.warning(
                    "Rule %s: skipping malformed %s record: %r", rule.id, source_type, exc
                )
                continue
            if candidate is not None:
                matches.append(candidate)

        return matches

    def _candidate(
        self, regex: re.Pattern[str], mapping: FieldMapping, record: Record
    ) -> CandidateMatch | None:
        hit, matched_terms = self._search(regex, mapping, record)
        if not hit:
            return None
        return CandidateMatch(
            title=mapping.title(record),
            description=mapping.description(record),
            indicators=[str(i) for i in mapping.indicators(record)],
            context={
                mapping.context_key: copy.deepcopy(dict(record)),
                "matched_terms": matched_terms,
            },
        )

    @staticmethod
    def _search(
        regex: re.Pattern[str], mapping: FieldMapping, record: Record
    ) -> tuple[bool, list[str]]:
        hit = False
        found: dict[str, None] = {}
        for key in mapping.fields:
            text = _field_text(record.get(key))
            if not text:
                continue
            for m in regex.finditer(text):
                hit = True
                if m.group(0):
                    found.setdefault(m.group(0), None)
        return hit, list(found)
