# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Alert delivery channels."""

from threatwatch.notifications.base import NotificationChannel
from threatwatch.notifications.dispatcher import AlertDispatcher, DeliveryResult
from threatwatch.notifications.email_channel import EmailChannel
from threatwatch.notifications.events import AlertNotification
from threatwatch.notifications.factory import build_channel, configured_channels
from threatwatch.notifications.generic_webhook import GenericWebhookChannel
from threatwatch.notifications.log_channel import LogChannel
from threatwatch.notifications.pagerduty import PagerDutyChannel
from threatwatch.notifications.slack import SlackChannel
from threatwatch.notifications.teams import TeamsChannel

__all__ = [
    "AlertDispatcher",
    "AlertNotification",
    "DeliveryResult",
    "EmailChannel",
    "GenericWebhookChannel",
    "LogChannel",
    "NotificationChannel",
    "PagerDutyChannel",
    "SlackChannel",
    "TeamsChannel",
    "build_channel",
    "configured_channels",
]
