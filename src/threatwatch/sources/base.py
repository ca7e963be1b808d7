# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Indicator source adapter interface and registry."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from threatwatch.core.constants import SourceType
from threatwatch.models.rule import MonitoringSource

logger = logging.getLogger("threatwatch.sources")

RawRecord = dict[str, Any]


class SourceAdapter(ABC):
    """Fetches raw observations for one source type.

    Implementations return structured records (plain dicts) and raise on
    failure; the orchestrator records the failure against the source and
    moves on.
    """

    name: str

    @abstractmethod
    async def fetch(
        self, source: MonitoringSource, *, query: str | None = None
    ) -> list[RawRecord]:
        """Return the current records for *source*.

        *query* is an optional search hint derived from the rule's pattern,
        for adapters backed by a search endpoint.
        """


class CallableAdapter(SourceAdapter):
    """Wrap an async function as an adapter.

    Lets a host enable a source type (forums, telegram, ...) without
    subclassing.
    """

    def __init__(
        self,
        func: Callable[[MonitoringSource, str | None], Awaitable[list[RawRecord]]],
        *,
        name: str = "callable",
    ) -> None:
        self._func = func
        self.name = name

    async def fetch(
        self, source: MonitoringSource, *, query: str | None = None
    ) -> list[RawRecord]:
        return list(await self._func(source, query))


class AdapterRegistry:
    """Source type -> :class:`SourceAdapter`."""

    def __init__(self, adapters: Mapping[SourceType, SourceAdapter] | None = None) -> None:
        self._adapters: dict[SourceType, SourceAdapter] = dict(adapters or {})

    def register(self, source_type: SourceType, adapter: SourceAdapter) -> None:
        self._adapters[SourceType(source_type)] = adapter
        logger.info("Registered source adapter %s for %s", adapter.name, source_type)

    def unregister(self, source_type: SourceType) -> bool:
        return self._adapters.pop(SourceType(source_type), None) is not None

    def get(self, source_type: SourceType) -> SourceAdapter | None:
        return self._adapters.get(source_type)

    def __contains__(self, source_type: object) -> bool:
        return source_type in self._adapters

    def items(self) -> list[tuple[SourceType, SourceAdapter]]:
        return sorted(self._adapters.items())

    @property
    def source_types(self) -> list[SourceType]:
        return sorted(self._adapters)
