# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Ransomware leak-site victim announcements from the public ransomwatch dataset."""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from threatwatch.core.exceptions import SourceFetchError
from threatwatch.models.rule import MonitoringSource
from threatwatch.sources.base import RawRecord, SourceAdapter

logger = logging.getLogger("threatwatch.sources.ransomwatch")

DEFAULT_URL = "https://raw.githubusercontent.com/joshhighet/ransomwatch/main/posts.json"

_DOMAIN_RE = re.compile(r"\b((?:[a-z0-9-]+\.)+[a-z]{2,})\b", re.IGNORECASE)


def _parse_discovered(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _extract_domain(title: str) -> str | None:
    match = _DOMAIN_RE.search(title)
    return match.group(1).lower() if match else None


def normalize_post(post: dict[str, Any]) -> RawRecord:
    """Map a ransomwatch ``posts.json`` entry to a victim record."""
    title = str(post.get("post_title") or "Unknown").strip()
    discovered = _parse_discovered(post.get("discovered"))
    return {
        "id": f"rw-{re.sub(r'[^a-z0-9]+', '-', title.lower()).strip('-')}",
        "group": str(post.get("group_name") or "Unknown"),
        "victim_name": title,
        "victim_domain": _extract_domain(title),
        "announced_at": discovered.isoformat() if discovered else None,
        "source": "Ransomwatch",
    }


class RansomwatchAdapter(SourceAdapter):
    """Fetch recent victim posts, limited to the last *lookback_days*."""

    name = "ransomwatch"

    def __init__(
        self,
        url: str = DEFAULT_URL,
        *,
        lookback_days: int = 1,
        timeout: float = 20.0,
    ) -> None:
        self._url = url
        self._lookback = timedelta(days=lookback_days)
        self._timeout = timeout

    async def fetch(
        self, source: MonitoringSource, *, query: str | None = None
    ) -> list[RawRecord]:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.get(self._url)
        response.raise_for_status()

        data = response.json()
        if not isinstance(data, list):
            msg = f"Unexpected ransomwatch payload type: {type(data).__name__}"
            raise SourceFetchError(msg)

        cutoff = datetime.now(UTC) - self._lookback
        victims: list[RawRecord] = []
        for post in data:
            if not isinstance(post, dict):
                continue
            discovered = _parse_discovered(post.get("discovered"))
            if discovered is not None and discovered < cutoff:
                continue
            victims.append(normalize_post(post))

        logger.info(
            "Ransomwatch returned %d victims within %s for source %s",
            len(victims),
            self._lookback,
            source.name,
        )
        return victims
