# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Log notification channel: writes alerts to the application log."""

from __future__ import annotations

import logging

from threatwatch.core.constants import Severity
from threatwatch.notifications.base import NotificationChannel
from threatwatch.notifications.events import AlertNotification

_LEVELS = {
    Severity.CRITICAL: logging.CRITICAL,
    Severity.HIGH: logging.ERROR,
    Severity.MEDIUM: logging.WARNING,
    Severity.LOW: logging.INFO,
}


class LogChannel(NotificationChannel):
    """Emit one log record per alert, at a level derived from its severity."""

    def __init__(self, logger_name: str = "threatwatch.alerts") -> None:
        self._logger = logging.getLogger(logger_name)

    @property
    def name(self) -> str:
        return "log"

    async def send(self, notification: AlertNotification) -> bool:
        self._logger.log(
            _LEVELS.get(notification.severity, logging.WARNING),
            "[%s] %s (rule=%s source=%s alert=%s indicators=%s)",
            notification.severity.upper(),
            notification.title,
            notification.rule_name,
            notification.source,
            notification.alert_id,
            ", ".join(notification.indicators),
        )
        return True
