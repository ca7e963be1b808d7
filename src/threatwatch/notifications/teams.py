# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Microsoft Teams notification channel using Adaptive Cards."""

from __future__ import annotations

import logging

import httpx

from threatwatch.core.constants import Severity
from threatwatch.notifications.base import NotificationChannel
from threatwatch.notifications.events import AlertNotification

logger = logging.getLogger("threatwatch.notifications.teams")

_TIMEOUT_SECONDS = 10.0

_SEVERITY_COLORS = {
    Severity.CRITICAL: "attention",
    Severity.HIGH: "warning",
    Severity.MEDIUM: "accent",
    Severity.LOW: "good",
}


def _build_adaptive_card(notification: AlertNotification) -> dict:
    """Build a Teams Adaptive Card payload."""
    color = _SEVERITY_COLORS.get(notification.severity, "default")

    facts = [
        {"title": "Severity", "value": notification.severity.upper()},
        {"title": "Rule", "value": notification.rule_name},
        {"title": "Source", "value": notification.source},
        {"title": "Alert ID", "value": notification.alert_id},
    ]

    body: list[dict] = [
        {
            "type": "TextBlock",
            "size": "Large",
            "weight": "Bolder",
            "text": f"threatwatch: {notification.title}",
            "style": color,
            "wrap": True,
        },
        {"type": "TextBlock", "text": notification.description, "wrap": True},
        {"type": "FactSet", "facts": facts},
    ]

    if notification.indicators:
        body.append({"type": "TextBlock", "text": "**Indicators:**", "weight": "Bolder"})
        body.extend(
            {"type": "TextBlock", "text": ioc, "wrap": True, "fontType": "Monospace"}
            for ioc in notification.indicators[:5]
        )

    body.append(
        {
            "type": "TextBlock",
            "text": f"Raised at {notification.timestamp.isoformat()}",
            "isSubtle": True,
            "size": "Small",
        }
    )

    return {
        "type": "message",
        "attachments": [
            {
                "contentType": "application/vnd.microsoft.card.adaptive",
                "content": {
                    "$schema": "http://adaptivecards.io/schemas/adaptive-card.json",
                    "type": "AdaptiveCard",
                    "version": "1.4",
                    "body": body,
                },
            }
        ],
    }


class TeamsChannel(NotificationChannel):
    """Send notifications to Microsoft Teams via incoming webhook with Adaptive Cards."""

    def __init__(self, webhook_url: str) -> None:
        self._webhook_url = webhook_url

    @property
    def name(self) -> str:
        return "teams"

    def is_configured(self) -> bool:
        return bool(self._webhook_url)

    async def send(self, notification: AlertNotification) -> bool:
        if not self._webhook_url:
            logger.warning("Teams webhook URL not configured")
            return False

        payload = _build_adaptive_card(notification)

        try:
            async with httpx.AsyncClient(timeout=_TIMEOUT_SECONDS) as client:
                response = await client.post(self._webhook_url, json=payload)
                response.raise_for_status()
            logger.info("Teams notification sent for alert %s", notification.alert_id)
            return True
        except Exception:
            logger.exception(
                "Failed to send Teams notification for alert %s", notification.alert_id
            )
            return False
