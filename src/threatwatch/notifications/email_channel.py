# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Email notification channel via SMTP with HTML templates."""

from __future__ import annotations

import asyncio
import html
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from threatwatch.core.constants import Severity
from threatwatch.notifications.base import NotificationChannel
from threatwatch.notifications.events import AlertNotification

logger = logging.getLogger("threatwatch.notifications.email")

_SEVERITY_COLORS = {
    Severity.CRITICAL: "#dc3545",
    Severity.HIGH: "#fd7e14",
    Severity.MEDIUM: "#ffc107",
    Severity.LOW: "#17a2b8",
}


def _build_html(notification: AlertNotification) -> str:
    """Render the notification as an HTML email body."""
    color = _SEVERITY_COLORS.get(notification.severity, "#6c757d")
    esc = html.escape

    indicator_rows = "".join(
        f"<li><code>{esc(ioc)}</code></li>" for ioc in notification.indicators
    )
    indicators_block = ""
    if indicator_rows:
        indicators_block = f"""
        <h3 style="margin-top:20px">Indicators</h3>
        <ul>{indicator_rows}</ul>"""

    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family:Arial,sans-serif;max-width:600px;margin:0 auto;padding:20px">
    <div style="background:{color};color:white;padding:16px;border-radius:8px 8px 0 0">
        <h1 style="margin:0;font-size:20px">threatwatch: {esc(notification.title)}</h1>
    </div>
    <div style="border:1px solid #dee2e6;border-top:none;padding:20px;border-radius:0 0 8px 8px">
        <p>{esc(notification.description)}</p>
        <table style="width:100%">
            <tr><td><strong>Severity:</strong></td><td style="color:{color};font-weight:bold">{notification.severity.upper()}</td></tr>
            <tr><td><strong>Rule:</strong></td><td>{esc(notification.rule_name)}</td></tr>
            <tr><td><strong>Source:</strong></td><td>{esc(notification.source)}</td></tr>
            <tr><td><strong>Alert ID:</strong></td><td><code>{notification.alert_id}</code></td></tr>
        </table>
        {indicators_block}
        <p style="color:#6c757d;font-size:12px;margin-top:20px">
            Raised at {notification.timestamp.isoformat()} by threatwatch
        </p>
    </div>
</body>
</html>"""


class EmailChannel(NotificationChannel):
    """Send notification emails via SMTP with HTML formatting."""

    def __init__(
        self,
        *,
        smtp_host: str,
        smtp_port: int = 587,
        smtp_user: str = "",
        smtp_password: str = "",
        smtp_use_tls: bool = True,
        from_addr: str = "",
        to_addrs: list[str] | None = None,
    ) -> None:
        self._smtp_host = smtp_host
        self._smtp_port = smtp_port
        self._smtp_user = smtp_user
        self._smtp_password = smtp_password
        self._smtp_use_tls = smtp_use_tls
        self._from_addr = from_addr or smtp_user
        self._to_addrs = to_addrs or []

    @property
    def name(self) -> str:
        return "email"

    def is_configured(self) -> bool:
        return bool(self._smtp_host and self._to_addrs)

    def _build_message(self, notification: AlertNotification) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = (
            f"[threatwatch] {notification.severity.upper()}: {notification.title}"
        )
        msg["From"] = self._from_addr
        msg["To"] = ", ".join(self._to_addrs)
        msg.attach(MIMEText(_build_html(notification), "html"))
        return msg

    def _deliver(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self._smtp_host, self._smtp_port) as server:
            if self._smtp_use_tls:
                server.ehlo()
                server.starttls(context=ssl.create_default_context())
                server.ehlo()
            if self._smtp_user:
                server.login(self._smtp_user, self._smtp_password)
            server.sendmail(self._from_addr, self._to_addrs, msg.as_string())

    async def send(self, notification: AlertNotification) -> bool:
        if not self.is_configured():
            logger.warning("Email channel not configured (missing host or recipients)")
            return False

        msg = self._build_message(notification)

        try:
            # smtplib blocks; keep it off the event loop.
            await asyncio.to_thread(self._deliver, msg)
            logger.info("Email notification sent for alert %s", notification.alert_id)
            return True
        except Exception:
            logger.exception(
                "Failed to send email notification for alert %s", notification.alert_id
            )
            return False
