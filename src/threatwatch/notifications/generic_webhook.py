# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Generic webhook notification channel for custom HTTP POST endpoints."""

from __future__ import annotations

import hashlib
import hmac
import json
import logging

import httpx

from threatwatch.notifications.base import NotificationChannel
from threatwatch.notifications.events import AlertNotification

logger = logging.getLogger("threatwatch.notifications.generic_webhook")

_TIMEOUT_SECONDS = 10.0
SIGNATURE_HEADER = "X-Threatwatch-Signature"


def _compute_signature(payload_bytes: bytes, secret: str) -> str:
    """Compute HMAC-SHA256 signature for a payload."""
    return hmac.new(
        secret.encode("utf-8"),
        payload_bytes,
        hashlib.sha256,
    ).hexdigest()


class GenericWebhookChannel(NotificationChannel):
    """POST JSON alert notifications to a custom HTTP endpoint.

    The body is the canonical JSON encoding (sorted keys, no whitespace);
    when a secret is set its HMAC-SHA256 is sent in ``X-Threatwatch-Signature``.
    """

    def __init__(
        self,
        url: str,
        *,
        secret: str = "",
        headers: dict[str, str] | None = None,
    ) -> None:
        self._url = url
        self._secret = secret
        self._extra_headers = headers or {}

    @property
    def name(self) -> str:
        return "webhook"

    def is_configured(self) -> bool:
        return bool(self._url)

    async def send(self, notification: AlertNotification) -> bool:
        if not self._url:
            logger.warning("Generic webhook URL not configured")
            return False

        payload = {"event": "alert.created", **notification.model_dump(mode="json")}
        payload_bytes = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode()

        headers: dict[str, str] = {"Content-Type": "application/json"}
        headers.update(self._extra_headers)

        if self._secret:
            headers[SIGNATURE_HEADER] = _compute_signature(payload_bytes, self._secret)

        try:
            async with httpx.AsyncClient(timeout=_TIMEOUT_SECONDS) as client:
                response = await client.post(self._url, content=payload_bytes, headers=headers)
                response.raise_for_status()
            logger.info(
                "Generic webhook sent for alert %s to %s", notification.alert_id, self._url
            )
            return True
        except Exception:
            logger.exception(
                "Failed to send generic webhook for alert %s to %s",
                notification.alert_id,
                self._url,
            )
            return False
