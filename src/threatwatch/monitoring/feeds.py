# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Per-feed health measured from the orchestrator's adapter fetches."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from datetime import datetime

from threatwatch.core.constants import FeedState, SourceType
from threatwatch.models.dashboard import FeedStatus

_DEFAULT_DEGRADED_LATENCY_MS = 5000.0


class FeedHealthTracker:
    """Latest fetch outcome per source type.

    A feed is ``online`` after a successful fetch, ``degraded`` when that
    fetch was slower than *degraded_latency_ms*, ``offline`` after a failed
    fetch and ``unknown`` until it is first polled.
    """

    def __init__(self, *, degraded_latency_ms: float = _DEFAULT_DEGRADED_LATENCY_MS) -> None:
        self._degraded_latency_ms = degraded_latency_ms
        self._feeds: dict[SourceType, FeedStatus] = {}
        self._lock = threading.Lock()

    def _entry(self, source_type: SourceType, name: str) -> FeedStatus:
        entry = self._feeds.get(source_type)
        if entry is None:
            entry = FeedStatus(name=name, source_type=source_type)
            self._feeds[source_type] = entry
        entry.name = name
        return entry

    def record_success(
        self,
        source_type: SourceType,
        name: str,
        *,
        items: int,
        latency_ms: float,
        at: datetime,
    ) -> None:
        with self._lock:
            entry = self._entry(source_type, name)
            entry.fetches += 1
            entry.items_received = items
            entry.latency_ms = round(latency_ms, 1)
            entry.last_update = at
            entry.last_error = None
            entry.status = (
                FeedState.DEGRADED if latency_ms > self._degraded_latency_ms else FeedState.ONLINE
            )

    def record_failure(
        self,
        source_type: SourceType,
        name: str,
        *,
        error: str,
        latency_ms: float,
    ) -> None:
        with self._lock:
            entry = self._entry(source_type, name)
            entry.fetches += 1
            entry.failures += 1
            entry.latency_ms = round(latency_ms, 1)
            entry.last_error = error
            entry.status = FeedState.OFFLINE

    def statuses(self, registered: Iterable[tuple[SourceType, str]] = ()) -> list[FeedStatus]:
        """Snapshot of every tracked feed plus any *registered* feed not yet polled."""
        with self._lock:
            feeds = {st: entry.model_copy() for st, entry in self._feeds.items()}
        for source_type, name in registered:
            feeds.setdefault(source_type, FeedStatus(name=name, source_type=source_type))
        return [feeds[st] for st in sorted(feeds)]
