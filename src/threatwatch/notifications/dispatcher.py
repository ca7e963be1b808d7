# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Alert dispatcher: delivers new alerts through each rule's enabled actions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from threatwatch.core.config import Settings
from threatwatch.models.alert import ThreatAlert
from threatwatch.models.rule import AlertAction
from threatwatch.notifications.base import NotificationChannel
from threatwatch.notifications.events import AlertNotification
from threatwatch.notifications.factory import build_channel

logger = logging.getLogger("threatwatch.notifications.dispatcher")

ChannelFactory = Callable[[AlertAction, Settings], NotificationChannel | None]


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    alert_id: str
    channel: str
    success: bool


class AlertDispatcher:
    """Deliver alerts through notification channels, decoupled from emission.

    ``submit()`` schedules delivery as a background task and returns
    immediately; ``drain()`` waits for everything submitted so far.
    Channel errors are logged and reported as failed deliveries, never
    raised.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        channel_factory: ChannelFactory = build_channel,
    ) -> None:
        self._settings = settings
        self._channel_factory = channel_factory
        self._pending: set[asyncio.Task[list[DeliveryResult]]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def _channels_for(self, actions: Sequence[AlertAction]) -> list[NotificationChannel]:
        channels: list[NotificationChannel] = []
        for action in actions:
            if not action.enabled:
                continue
            try:
                channel = self._channel_factory(action, self._settings)
            except Exception:
                logger.exception("Could not build channel for action %s", action.type)
                continue
            if channel is not None:
                channels.append(channel)
        return channels

    async def dispatch(
        self, actions: Sequence[AlertAction], alerts: Sequence[ThreatAlert]
    ) -> list[DeliveryResult]:
        """Send every alert through every enabled action's channel."""
        channels = self._channels_for(actions)
        results: list[DeliveryResult] = []
        if not channels:
            return results

        for alert in alerts:
            notification = AlertNotification.from_alert(alert)
            for channel in channels:
                try:
                    success = await channel.send(notification)
                except Exception:
                    logger.exception(
                        "Unhandled error dispatching alert %s to channel %s",
                        alert.id,
                        channel.name,
                    )
                    success = False
                results.append(DeliveryResult(alert.id, channel.name, success))

        failed = sum(1 for r in results if not r.success)
        if failed:
            logger.warning("%d of %d alert deliveries failed", failed, len(results))
        return results

    def submit(
        self, actions: Sequence[AlertAction], alerts: Sequence[ThreatAlert]
    ) -> asyncio.Task[list[DeliveryResult]] | None:
        """Schedule :meth:`dispatch` in the background. Requires a running loop."""
        if not alerts or not any(a.enabled for a in actions):
            return None
        task = asyncio.get_running_loop().create_task(
            self.dispatch(list(actions), list(alerts))
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for all submitted deliveries to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
