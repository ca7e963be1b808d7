# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""AlertStore: ordered alert history with lifecycle updates and push subscriptions."""

from __future__ import annotations

import itertools
import logging
import threading
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from threatwatch.core.constants import AlertStatus
from threatwatch.models.alert import AlertDraft, AlertNote, ThreatAlert

logger = logging.getLogger("threatwatch.monitoring.alert_store")

AlertListener = Callable[[ThreatAlert], object]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class AlertStore:
    """Holds emitted alerts most-recent-first.

    ``append`` assigns the id, inserts at the head and notifies listeners
    under a single lock, so concurrent appends never share an id or
    overwrite each other.  Each listener call is isolated: an exception is
    logged and the remaining listeners still run.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utc_now) -> None:
        self._lock = threading.RLock()
        self._clock = clock
        self._alerts: list[ThreatAlert] = []
        self._index: dict[str, ThreatAlert] = {}
        self._listeners: dict[int, AlertListener] = {}
        self._listener_ids = itertools.count(1)
        self._sequence = itertools.count(1)
        # Distinguishes ids minted by separate stores in one process.
        self._prefix = uuid.uuid4().hex[:6]

    def __len__(self) -> int:
        with self._lock:
            return len(self._alerts)

    def _next_id(self) -> str:
        return f"alert-{self._prefix}-{next(self._sequence):06d}"

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def append(self, draft: AlertDraft) -> ThreatAlert:
        """Store a new alert in state ``new`` and notify subscribers."""
        with self._lock:
            alert = ThreatAlert(
                **draft.model_dump(),
                id=self._next_id(),
                status=AlertStatus.NEW,
                notes=[],
            )
            self._alerts.insert(0, alert)
            self._index[alert.id] = alert
            self._notify(alert)
            return alert.model_copy(deep=True)

    def _notify(self, alert: ThreatAlert) -> None:
        for listener_id, listener in list(self._listeners.items()):
            try:
                listener(alert.model_copy(deep=True))
            except Exception:
                logger.exception(
                    "Alert listener %d failed for alert %s",
                    listener_id,
                    alert.id,
                    extra={"alert_id": alert.id, "rule_id": alert.rule_id},
                )

    def subscribe(self, callback: AlertListener) -> Callable[[], None]:
        """Register *callback* for every new alert; returns an unsubscribe handle."""
        with self._lock:
            listener_id = next(self._listener_ids)
            self._listeners[listener_id] = callback

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(listener_id, None)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list(self) -> list[ThreatAlert]:
        """Snapshot of all alerts, most recent first."""
        with self._lock:
            return [a.model_copy(deep=True) for a in self._alerts]

    def get(self, alert_id: str) -> ThreatAlert | None:
        with self._lock:
            alert = self._index.get(alert_id)
            return alert.model_copy(deep=True) if alert is not None else None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def update_status(
        self, alert_id: str, status: AlertStatus | str
    ) -> ThreatAlert | None:
        """Move an alert to *status*. Any state may move to any other."""
        new_status = AlertStatus(status)
        with self._lock:
            alert = self._index.get(alert_id)
            if alert is None:
                return None
            previous = alert.status
            alert.status = new_status
            logger.info(
                "Alert %s status %s -> %s",
                alert_id,
                previous,
                new_status,
                extra={"alert_id": alert_id},
            )
            return alert.model_copy(deep=True)

    def assign(self, alert_id: str, assignee: str | None) -> ThreatAlert | None:
        with self._lock:
            alert = self._index.get(alert_id)
            if alert is None:
                return None
            alert.assignee = assignee
            return alert.model_copy(deep=True)

    def add_note(self, alert_id: str, author: str, content: str) -> AlertNote | None:
        """Append a timestamped note; ``None`` if the alert is unknown."""
        with self._lock:
            alert = self._index.get(alert_id)
            if alert is None:
                return None
            note = AlertNote(
                id=f"note-{uuid.uuid4().hex[:12]}",
                author=author,
                content=content,
                timestamp=self._clock(),
            )
            alert.notes.append(note)
            return note.model_copy()
