# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""PagerDuty notification channel using Events API v2."""

from __future__ import annotations

import logging

import httpx

from threatwatch.core.constants import Severity
from threatwatch.notifications.base import NotificationChannel
from threatwatch.notifications.events import AlertNotification

logger = logging.getLogger("threatwatch.notifications.pagerduty")

_EVENTS_API_URL = "https://events.pagerduty.com/v2/enqueue"
_TIMEOUT_SECONDS = 10.0

# Only page for the two highest severities.
_TRIGGER_SEVERITIES = frozenset({Severity.CRITICAL, Severity.HIGH})

_PD_SEVERITY = {
    Severity.CRITICAL: "critical",
    Severity.HIGH: "error",
    Severity.MEDIUM: "warning",
    Severity.LOW: "info",
}


def _build_event_payload(notification: AlertNotification, routing_key: str) -> dict:
    """Build a PagerDuty Events API v2 payload."""
    custom_details: dict[str, object] = {
        "alert_id": notification.alert_id,
        "rule_id": notification.rule_id,
        "rule_name": notification.rule_name,
        "source": notification.source,
        "description": notification.description,
        "indicator_count": notification.indicator_count,
    }
    if notification.indicators:
        custom_details["indicators"] = notification.indicators[:5]

    return {
        "routing_key": routing_key,
        "event_action": "trigger",
        "dedup_key": f"threatwatch-{notification.alert_id}",
        "payload": {
            "summary": f"threatwatch: {notification.title} ({notification.rule_name})"[:1024],
            "source": notification.source,
            "severity": _PD_SEVERITY.get(notification.severity, "info"),
            "component": "monitoring-engine",
            "group": notification.rule_id,
            "custom_details": custom_details,
            "timestamp": notification.timestamp.isoformat(),
        },
    }


class PagerDutyChannel(NotificationChannel):
    """Create PagerDuty incidents via Events API v2 for critical/high alerts."""

    def __init__(self, routing_key: str) -> None:
        self._routing_key = routing_key

    @property
    def name(self) -> str:
        return "pagerduty"

    def is_configured(self) -> bool:
        return bool(self._routing_key)

    async def send(self, notification: AlertNotification) -> bool:
        if not self._routing_key:
            logger.warning("PagerDuty routing key not configured")
            return False

        if notification.severity not in _TRIGGER_SEVERITIES:
            logger.debug(
                "Skipping PagerDuty for %s alert %s",
                notification.severity,
                notification.alert_id,
            )
            return True  # filtered out by severity

        payload = _build_event_payload(notification, self._routing_key)

        try:
            async with httpx.AsyncClient(timeout=_TIMEOUT_SECONDS) as client:
                response = await client.post(_EVENTS_API_URL, json=payload)
                response.raise_for_status()
            logger.info("PagerDuty incident created for alert %s", notification.alert_id)
            return True
        except Exception:
            logger.exception(
                "Failed to create PagerDuty incident for alert %s", notification.alert_id
            )
            return False
