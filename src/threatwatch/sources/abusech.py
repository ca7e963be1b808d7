# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""abuse.ch feeds: ThreatFox IOCs and URLhaus malware URLs."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from threatwatch.core.exceptions import SourceFetchError
from threatwatch.models.rule import MonitoringSource
from threatwatch.sources.base import RawRecord, SourceAdapter

logger = logging.getLogger("threatwatch.sources.abusech")

THREATFOX_URL = "https://threatfox-api.abuse.ch/api/v1/"
URLHAUS_URL = "https://urlhaus-api.abuse.ch/v1/urls/recent/"

_THREATFOX_FIELDS = (
    "id",
    "ioc",
    "ioc_type",
    "threat_type",
    "malware",
    "malware_printable",
    "confidence_level",
    "first_seen",
    "tags",
    "reference",
)

_URLHAUS_FIELDS = (
    "id",
    "url",
    "url_status",
    "host",
    "date_added",
    "threat",
    "tags",
    "urlhaus_reference",
)


def _headers(auth_key: str) -> dict[str, str]:
    headers = {"User-Agent": "threatwatch"}
    if auth_key:
        headers["Auth-Key"] = auth_key
    return headers


def _check_status(payload: Any, feed: str) -> str:
    if not isinstance(payload, dict):
        msg = f"Unexpected {feed} payload type: {type(payload).__name__}"
        raise SourceFetchError(msg)
    status = str(payload.get("query_status", ""))
    if status not in ("ok", "no_result"):
        msg = f"{feed} query failed: {status or 'missing query_status'}"
        raise SourceFetchError(msg)
    return status


class ThreatFoxAdapter(SourceAdapter):
    """Recent IOCs from the ThreatFox ``get_iocs`` query."""

    name = "threatfox"

    def __init__(
        self,
        url: str = THREATFOX_URL,
        *,
        auth_key: str = "",
        days: int = 1,
        max_records: int = 500,
        timeout: float = 20.0,
    ) -> None:
        self._url = url
        self._auth_key = auth_key
        self._days = days
        self._max_records = max_records
        self._timeout = timeout

    async def fetch(
        self, source: MonitoringSource, *, query: str | None = None
    ) -> list[RawRecord]:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(
                self._url,
                json={"query": "get_iocs", "days": self._days},
                headers=_headers(self._auth_key),
            )
        response.raise_for_status()

        payload = response.json()
        if _check_status(payload, "ThreatFox") == "no_result":
            return []

        records = [
            {key: item.get(key) for key in _THREATFOX_FIELDS}
            for item in (payload.get("data") or [])[: self._max_records]
            if isinstance(item, dict)
        ]
        logger.info("ThreatFox returned %d IOCs for source %s", len(records), source.name)
        return records


class UrlhausAdapter(SourceAdapter):
    """Recently reported malware URLs from URLhaus."""

    name = "urlhaus"

    def __init__(
        self,
        url: str = URLHAUS_URL,
        *,
        auth_key: str = "",
        max_records: int = 500,
        timeout: float = 20.0,
    ) -> None:
        self._url = url
        self._auth_key = auth_key
        self._max_records = max_records
        self._timeout = timeout

    async def fetch(
        self, source: MonitoringSource, *, query: str | None = None
    ) -> list[RawRecord]:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.get(self._url, headers=_headers(self._auth_key))
        response.raise_for_status()

        payload = response.json()
        if _check_status(payload, "URLhaus") == "no_result":
            return []

        records = [
            {key: item.get(key) for key in _URLHAUS_FIELDS}
            for item in (payload.get("urls") or [])[: self._max_records]
            if isinstance(item, dict)
        ]
        logger.info("URLhaus returned %d URLs for source %s", len(records), source.name)
        return records
