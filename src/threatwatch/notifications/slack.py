# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Slack notification channel using Block Kit formatting."""

from __future__ import annotations

import logging

import httpx

from threatwatch.core.constants import Severity
from threatwatch.notifications.base import NotificationChannel
from threatwatch.notifications.events import AlertNotification

logger = logging.getLogger("threatwatch.notifications.slack")

_TIMEOUT_SECONDS = 10.0

_SEVERITY_EMOJI = {
    Severity.CRITICAL: ":rotating_light:",
    Severity.HIGH: ":warning:",
    Severity.MEDIUM: ":large_yellow_circle:",
    Severity.LOW: ":information_source:",
}


def _build_blocks(notification: AlertNotification) -> list[dict]:
    """Build Slack Block Kit blocks for the notification."""
    emoji = _SEVERITY_EMOJI.get(notification.severity, ":question:")

    blocks: list[dict] = [
        {
            "type": "header",
            "text": {
                "type": "plain_text",
                "text": f"{emoji} threatwatch: {notification.title}"[:150],
                "emoji": True,
            },
        },
        {
            "type": "section",
            "fields": [
                {"type": "mrkdwn", "text": f"*Severity:*\n{notification.severity.upper()}"},
                {"type": "mrkdwn", "text": f"*Rule:*\n{notification.rule_name}"},
                {"type": "mrkdwn", "text": f"*Source:*\n{notification.source}"},
                {"type": "mrkdwn", "text": f"*Alert ID:*\n`{notification.alert_id}`"},
            ],
        },
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": notification.description},
        },
    ]

    if notification.indicators:
        lines = [f"- `{ioc}`" for ioc in notification.indicators[:5]]
        blocks.append(
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": "*Indicators:*\n" + "\n".join(lines)},
            }
        )

    blocks.append(
        {
            "type": "context",
            "elements": [
                {
                    "type": "mrkdwn",
                    "text": f"threatwatch alert at {notification.timestamp.isoformat()}",
                }
            ],
        }
    )

    return blocks


class SlackChannel(NotificationChannel):
    """Send notifications to Slack via incoming webhook with Block Kit formatting."""

    def __init__(self, webhook_url: str) -> None:
        self._webhook_url = webhook_url

    @property
    def name(self) -> str:
        return "slack"

    def is_configured(self) -> bool:
        return bool(self._webhook_url)

    async def send(self, notification: AlertNotification) -> bool:
        if not self._webhook_url:
            logger.warning("Slack webhook URL not configured")
            return False

        payload = {"blocks": _build_blocks(notification)}

        try:
            async with httpx.AsyncClient(timeout=_TIMEOUT_SECONDS) as client:
                response = await client.post(self._webhook_url, json=payload)
                response.raise_for_status()
            logger.info("Slack notification sent for alert %s", notification.alert_id)
            return True
        except Exception:
            logger.exception(
                "Failed to send Slack notification for alert %s", notification.alert_id
            )
            return False
