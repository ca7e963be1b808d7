# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Build notification channels from rule actions and application settings."""

from __future__ import annotations

import logging
from typing import Any

from threatwatch.core.config import Settings
from threatwatch.core.constants import ActionType
from threatwatch.models.rule import AlertAction
from threatwatch.notifications.base import NotificationChannel
from threatwatch.notifications.email_channel import EmailChannel
from threatwatch.notifications.generic_webhook import GenericWebhookChannel
from threatwatch.notifications.log_channel import LogChannel
from threatwatch.notifications.pagerduty import PagerDutyChannel
from threatwatch.notifications.slack import SlackChannel
from threatwatch.notifications.teams import TeamsChannel

logger = logging.getLogger("threatwatch.notifications.factory")


def _recipients(value: Any, fallback: list[str]) -> list[str]:
    if isinstance(value, str):
        return [a.strip() for a in value.split(",") if a.strip()]
    if isinstance(value, list):
        return [str(a) for a in value]
    return list(fallback)


def build_channel(action: AlertAction, settings: Settings) -> NotificationChannel | None:
    """Create the channel an action delivers through.

    Values in ``action.config`` take precedence over settings.  ``ui``
    actions return ``None``: the UI receives alerts through the alert
    store subscription, not through a channel.
    """
    cfg = action.config
    match action.type:
        case ActionType.UI:
            return None
        case ActionType.LOG:
            return LogChannel(cfg.get("logger", "threatwatch.alerts"))
        case ActionType.SLACK:
            return SlackChannel(cfg.get("webhook_url") or settings.slack_webhook_url)
        case ActionType.TEAMS:
            return TeamsChannel(cfg.get("webhook_url") or settings.teams_webhook_url)
        case ActionType.PAGERDUTY:
            return PagerDutyChannel(cfg.get("routing_key") or settings.pagerduty_routing_key)
        case ActionType.WEBHOOK:
            return GenericWebhookChannel(
                cfg.get("url") or settings.webhook_url,
                secret=cfg.get("secret") or settings.webhook_secret,
                headers=cfg.get("headers"),
            )
        case ActionType.EMAIL:
            return EmailChannel(
                smtp_host=cfg.get("smtp_host") or settings.smtp_host,
                smtp_port=int(cfg.get("smtp_port") or settings.smtp_port),
                smtp_user=cfg.get("smtp_user") or settings.smtp_user,
                smtp_password=cfg.get("smtp_password") or settings.smtp_password,
                smtp_use_tls=bool(cfg.get("smtp_use_tls", settings.smtp_use_tls)),
                from_addr=cfg.get("from") or settings.smtp_from,
                to_addrs=_recipients(cfg.get("to"), settings.smtp_to),
            )
    logger.warning("No notification channel for action type %s", action.type)
    return None


def configured_channels(settings: Settings) -> list[NotificationChannel]:
    """Channels that have credentials in *settings* (plus the log channel)."""
    channels: list[NotificationChannel] = [LogChannel()]
    for action_type in (
        ActionType.SLACK,
        ActionType.TEAMS,
        ActionType.PAGERDUTY,
        ActionType.EMAIL,
        ActionType.WEBHOOK,
    ):
        channel = build_channel(AlertAction(type=action_type), settings)
        if channel is not None and channel.is_configured():
            channels.append(channel)
    return channels
