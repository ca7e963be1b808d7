# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the built-in indicator source adapters."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

import httpx
import pytest
import respx

from threatwatch.core.config import Settings
from threatwatch.core.constants import SourceType
from threatwatch.core.exceptions import SourceFetchError
from threatwatch.models.rule import MonitoringSource
from threatwatch.sources import (
    AdapterRegistry,
    CallableAdapter,
    RansomwatchAdapter,
    ThreatFoxAdapter,
    UrlhausAdapter,
    build_adapter_registry,
)
from threatwatch.sources.ransomwatch import normalize_post

RW_URL = "https://feeds.test/ransomwatch/posts.json"
TF_URL = "https://feeds.test/threatfox/"
UH_URL = "https://feeds.test/urlhaus/recent/"

SOURCE = MonitoringSource(id="s1", name="Feed", source_type=SourceType.RANSOMWATCH)


def _recent(hours: int = 1) -> str:
    return (datetime.now(UTC) - timedelta(hours=hours)).strftime("%Y-%m-%d %H:%M:%S.%f")


# ---------------------------------------------------------------------------
# Ransomwatch
# ---------------------------------------------------------------------------


class TestRansomwatch:
    """Tests for the ransomwatch victim feed adapter."""

    def test_normalize_post(self) -> None:
        """Posts map to victim records with an extracted domain."""
        record = normalize_post(
            {
                "post_title": "acme-corp.com",
                "group_name": "lockbit3",
                "discovered": "2026-03-10 08:15:00.000000",
            }
        )
        assert record["group"] == "lockbit3"
        assert record["victim_name"] == "acme-corp.com"
        assert record["victim_domain"] == "acme-corp.com"
        assert record["announced_at"] == "2026-03-10T08:15:00+00:00"
        assert record["id"] == "rw-acme-corp-com"

    def test_normalize_post_without_domain(self) -> None:
        record = normalize_post({"post_title": "Acme Corporation", "group_name": "play"})
        assert record["victim_domain"] is None
        assert record["announced_at"] is None

    @respx.mock
    async def test_fetch_filters_old_posts(self) -> None:
        """Only posts inside the lookback window are returned."""
        respx.get(RW_URL).mock(
            return_value=httpx.Response(
                200,
                json=[
                    {"post_title": "Acme Corp", "group_name": "lockbit3", "discovered": _recent()},
                    {
                        "post_title": "Old Victim",
                        "group_name": "conti",
                        "discovered": "2021-01-01 00:00:00.000000",
                    },
                    "not-a-post",
                ],
            )
        )
        victims = await RansomwatchAdapter(RW_URL).fetch(SOURCE)
        assert [v["victim_name"] for v in victims] == ["Acme Corp"]

    @respx.mock
    async def test_http_error_raises(self) -> None:
        respx.get(RW_URL).mock(return_value=httpx.Response(502))
        with pytest.raises(httpx.HTTPStatusError):
            await RansomwatchAdapter(RW_URL).fetch(SOURCE)

    @respx.mock
    async def test_unexpected_payload(self) -> None:
        respx.get(RW_URL).mock(return_value=httpx.Response(200, json={"posts": []}))
        with pytest.raises(SourceFetchError, match="payload type"):
            await RansomwatchAdapter(RW_URL).fetch(SOURCE)


# ---------------------------------------------------------------------------
# abuse.ch
# ---------------------------------------------------------------------------


class TestThreatFox:
    """Tests for the ThreatFox IOC adapter."""

    @respx.mock
    async def test_fetch_iocs(self) -> None:
        """IOCs are trimmed to the known fields and capped at max_records."""
        route = respx.post(TF_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "query_status": "ok",
                    "data": [
                        {
                            "id": "1",
                            "ioc": "1.2.3.4:443",
                            "malware_printable": "Cobalt Strike",
                            "tags": ["c2"],
                            "internal": "dropped",
                        },
                        {"id": "2", "ioc": "evil.example"},
                    ],
                },
            )
        )
        adapter = ThreatFoxAdapter(TF_URL, auth_key="secret-key", days=3, max_records=1)
        records = await adapter.fetch(SOURCE)

        assert len(records) == 1
        assert records[0]["ioc"] == "1.2.3.4:443"
        assert "internal" not in records[0]

        request = route.calls[0].request
        assert json.loads(request.content) == {"query": "get_iocs", "days": 3}
        assert request.headers["Auth-Key"] == "secret-key"

    @respx.mock
    async def test_no_auth_key_header_when_unset(self) -> None:
        route = respx.post(TF_URL).mock(
            return_value=httpx.Response(200, json={"query_status": "ok", "data": []})
        )
        await ThreatFoxAdapter(TF_URL).fetch(SOURCE)
        assert "Auth-Key" not in route.calls[0].request.headers

    @respx.mock
    async def test_no_result(self) -> None:
        respx.post(TF_URL).mock(
            return_value=httpx.Response(200, json={"query_status": "no_result", "data": None})
        )
        assert await ThreatFoxAdapter(TF_URL).fetch(SOURCE) == []

    @respx.mock
    async def test_failed_query_status(self) -> None:
        """A non-ok query_status is a fetch failure."""
        respx.post(TF_URL).mock(
            return_value=httpx.Response(200, json={"query_status": "unknown_auth_key"})
        )
        with pytest.raises(SourceFetchError, match="unknown_auth_key"):
            await ThreatFoxAdapter(TF_URL).fetch(SOURCE)


class TestUrlhaus:
    """Tests for the URLhaus recent-URL adapter."""

    @respx.mock
    async def test_fetch_urls(self) -> None:
        respx.get(UH_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "query_status": "ok",
                    "urls": [
                        {
                            "id": "9",
                            "url": "http://bad.example/payload.exe",
                            "host": "bad.example",
                            "threat": "malware_download",
                            "tags": ["emotet"],
                        }
                    ],
                },
            )
        )
        records = await UrlhausAdapter(UH_URL).fetch(SOURCE)
        assert records[0]["host"] == "bad.example"
        assert records[0]["tags"] == ["emotet"]

    @respx.mock
    async def test_missing_status(self) -> None:
        respx.get(UH_URL).mock(return_value=httpx.Response(200, json={"urls": []}))
        with pytest.raises(SourceFetchError, match="missing query_status"):
            await UrlhausAdapter(UH_URL).fetch(SOURCE)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    """Tests for the adapter registry."""

    def test_built_in_registry(self) -> None:
        registry = build_adapter_registry(Settings())
        assert registry.source_types == [
            SourceType.RANSOMWATCH,
            SourceType.THREATFOX,
            SourceType.URLHAUS,
        ]
        assert SourceType.FORUMS not in registry

    async def test_callable_adapter(self) -> None:
        """A plain coroutine function can serve a source type."""

        async def forum_feed(source, query):
            return [{"thread": f"{source.name}:{query}"}]

        registry = AdapterRegistry()
        registry.register(SourceType.FORUMS, CallableAdapter(forum_feed, name="forums"))
        adapter = registry.get(SourceType.FORUMS)
        assert await adapter.fetch(SOURCE, query="lockbit") == [{"thread": "Feed:lockbit"}]

        assert registry.unregister(SourceType.FORUMS) is True
        assert registry.unregister(SourceType.FORUMS) is False
        assert registry.get(SourceType.FORUMS) is None
