# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""RuleStore: in-memory holder of monitoring rules and their trigger bookkeeping."""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

from threatwatch.core.constants import SourceStatus
from threatwatch.models.rule import MonitoringRule, RuleDraft, RulePatch

logger = logging.getLogger("threatwatch.monitoring.rule_store")


def _utc_now() -> datetime:
    return datetime.now(UTC)


class RuleStore:
    """Holds monitoring rules in insertion order.

    Every accessor returns deep copies, so callers never observe (or cause)
    mutation of the stored records.  Each mutation is atomic per record.
    """

    def __init__(
        self,
        rules: Iterable[MonitoringRule] | None = None,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._lock = threading.RLock()
        self._clock = clock
        self._rules: dict[str, MonitoringRule] = {}
        for rule in rules or []:
            self._rules[rule.id] = rule.model_copy(deep=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rules)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list(self) -> list[MonitoringRule]:
        """Return a snapshot of all rules."""
        with self._lock:
            return [r.model_copy(deep=True) for r in self._rules.values()]

    def list_enabled(self) -> list[MonitoringRule]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._rules.values() if r.enabled]

    def get(self, rule_id: str) -> MonitoringRule | None:
        with self._lock:
            rule = self._rules.get(rule_id)
            return rule.model_copy(deep=True) if rule is not None else None

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def add(self, draft: RuleDraft, *, rule_id: str | None = None) -> MonitoringRule:
        """Store a new rule built from *draft* and return it.

        The id is generated unless *rule_id* is given; ``trigger_count``
        always starts at zero.
        """
        now = self._clock()
        with self._lock:
            new_id = rule_id or f"rule-{uuid.uuid4().hex[:12]}"
            while new_id in self._rules:
                if rule_id is not None:
                    msg = f"Rule id already exists: {rule_id}"
                    raise ValueError(msg)
                new_id = f"rule-{uuid.uuid4().hex[:12]}"

            rule = MonitoringRule(
                **draft.model_dump(),
                id=new_id,
                trigger_count=0,
                last_triggered_at=None,
                created_at=now,
                updated_at=now,
            )
            self._rules[new_id] = rule
            logger.info("Added monitoring rule %s (%s)", new_id, rule.name)
            return rule.model_copy(deep=True)

    def update(
        self, rule_id: str, patch: RulePatch | dict[str, Any]
    ) -> MonitoringRule | None:
        """Merge the explicitly-set fields of *patch* into the rule.

        Returns the updated rule, or ``None`` if no rule has *rule_id*.
        """
        if isinstance(patch, dict):
            patch = RulePatch.model_validate(patch)
        changes = {
            k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None
        }

        with self._lock:
            current = self._rules.get(rule_id)
            if current is None:
                return None

            merged = current.model_dump()
            merged.update(changes)
            merged["updated_at"] = self._clock()
            updated = MonitoringRule.model_validate(merged)
            self._rules[rule_id] = updated
            logger.debug("Updated rule %s fields: %s", rule_id, ", ".join(sorted(changes)))
            return updated.model_copy(deep=True)

    def delete(self, rule_id: str) -> bool:
        with self._lock:
            existed = self._rules.pop(rule_id, None) is not None
        if existed:
            logger.info("Deleted monitoring rule %s", rule_id)
        return existed

    # ------------------------------------------------------------------
    # Engine bookkeeping
    # ------------------------------------------------------------------

    def record_trigger(
        self, rule_id: str, triggered_at: datetime, alert_count: int
    ) -> MonitoringRule | None:
        """Advance the cooldown window and add *alert_count* to the trigger count."""
        if alert_count < 1:
            msg = "record_trigger requires at least one alert"
            raise ValueError(msg)

        with self._lock:
            rule = self._rules.get(rule_id)
            if rule is None:
                return None
            rule.last_triggered_at = triggered_at
            rule.trigger_count += alert_count
            rule.updated_at = self._clock()
            return rule.model_copy(deep=True)

    def update_source_status(
        self,
        rule_id: str,
        source_id: str,
        status: SourceStatus,
        *,
        error_message: str | None = None,
        checked_at: datetime | None = None,
    ) -> bool:
        """Record the outcome of polling one of a rule's sources.

        Returns ``False`` if the rule or source no longer exists.
        """
        with self._lock:
            rule = self._rules.get(rule_id)
            if rule is None:
                return False
            for source in rule.sources:
                if source.id == source_id:
                    source.status = status
                    source.error_message = error_message
                    if checked_at is not None:
                        source.last_checked_at = checked_at
                    rule.updated_at = self._clock()
                    return True
        return False
