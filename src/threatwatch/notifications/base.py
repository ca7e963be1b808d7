# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Abstract base class for notification channels."""

from __future__ import annotations

import abc

from threatwatch.notifications.events import AlertNotification


class NotificationChannel(abc.ABC):
    """Base class for all notification channels.

    Each concrete channel must implement ``send()`` to deliver an
    :class:`AlertNotification` to its backing service (Slack, Teams,
    PagerDuty, email, generic webhook, log).
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Human-readable channel name (e.g. ``'slack'``)."""

    @abc.abstractmethod
    async def send(self, notification: AlertNotification) -> bool:
        """Deliver a notification.

        Returns:
            ``True`` if the delivery succeeded, ``False`` otherwise.
        """

    def is_configured(self) -> bool:
        """Return ``True`` if the channel has valid configuration.

        Subclasses should override this to check required credentials.
        """
        return True
