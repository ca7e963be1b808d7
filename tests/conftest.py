# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures and configuration."""

from __future__ import annotations

import asyncio
import os
from datetime import UTC, datetime, timedelta

import pytest

from threatwatch.core.constants import MatchType, Severity, SourceType
from threatwatch.models.rule import MonitoringSource, RuleDraft
from threatwatch.sources.base import SourceAdapter

START = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


class FakeClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class StaticAdapter(SourceAdapter):
    """Adapter returning fixed records (or raising) and recording every call."""

    name = "static"

    def __init__(
        self,
        records: list[dict] | None = None,
        *,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.records = records or []
        self.error = error
        self.delay = delay
        self.calls: list[tuple[str, str | None]] = []

    async def fetch(self, source: MonitoringSource, *, query: str | None = None) -> list[dict]:
        self.calls.append((source.id, query))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return [dict(r) for r in self.records]


def ransomware_draft(**overrides) -> RuleDraft:
    """A LockBit/BlackCat keyword rule polling one ransomwatch source."""
    fields = {
        "name": "Ransomware Watch",
        "description": "Ransomware victim announcements",
        "match_type": MatchType.KEYWORD,
        "pattern": "lockbit|blackcat",
        "severity": Severity.CRITICAL,
        "sources": [
            MonitoringSource(id="src-rw", name="Ransomwatch", source_type=SourceType.RANSOMWATCH)
        ],
        "cooldown_minutes": 30,
    }
    fields.update(overrides)
    return RuleDraft(**fields)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    """Keep THREATWATCH_* variables and any local .env out of the tests."""
    for key in list(os.environ):
        if key.startswith("THREATWATCH_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def static_adapter():
    """Factory for :class:`StaticAdapter` instances."""
    return StaticAdapter


@pytest.fixture
def make_draft():
    """Factory for ransomware keyword rule drafts."""
    return ransomware_draft
