# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Indicator source adapters."""

from __future__ import annotations

from threatwatch.core.config import Settings
from threatwatch.core.constants import SourceType
from threatwatch.sources.abusech import ThreatFoxAdapter, UrlhausAdapter
from threatwatch.sources.base import AdapterRegistry, CallableAdapter, RawRecord, SourceAdapter
from threatwatch.sources.ransomwatch import RansomwatchAdapter


def build_adapter_registry(settings: Settings) -> AdapterRegistry:
    """Registry with the built-in HTTP adapters configured from *settings*."""
    timeout = settings.source_fetch_timeout
    return AdapterRegistry(
        {
            SourceType.RANSOMWATCH: RansomwatchAdapter(
                settings.ransomwatch_url,
                lookback_days=settings.feed_lookback_days,
                timeout=timeout,
            ),
            SourceType.THREATFOX: ThreatFoxAdapter(
                settings.threatfox_url,
                auth_key=settings.threatfox_auth_key,
                days=settings.feed_lookback_days,
                max_records=settings.feed_max_records,
                timeout=timeout,
            ),
            SourceType.URLHAUS: UrlhausAdapter(
                settings.urlhaus_url,
                auth_key=settings.urlhaus_auth_key,
                max_records=settings.feed_max_records,
                timeout=timeout,
            ),
        }
    )


__all__ = [
    "AdapterRegistry",
    "CallableAdapter",
    "RansomwatchAdapter",
    "RawRecord",
    "SourceAdapter",
    "ThreatFoxAdapter",
    "UrlhausAdapter",
    "build_adapter_registry",
]
