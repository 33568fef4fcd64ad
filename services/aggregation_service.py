"""
Aggregation orchestration: resolves a metric to an aggregation policy and fans
the series aggregator out over the series that a source returns for a group of
entities (e.g. every pod behind a service).

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Mapping, Optional, Sequence

from config import DEFAULT_AGGREGATION_POLICIES, settings
from datasources.base import SeriesSource
from datasources.exceptions import SeriesSourceError
from engine.aggregation import aggregate
from engine.enums import AggregationPolicy
from engine.series import AggregatedSeries, Series

log = logging.getLogger(__name__)


def _default_policies() -> Dict[str, AggregationPolicy]:
    return {metric: AggregationPolicy.parse(p) for metric, p in DEFAULT_AGGREGATION_POLICIES.items()}


@dataclass(frozen=True)
class PolicyTable:
    """Metric name -> policy; metrics not listed are passed through."""

    policies: Mapping[str, AggregationPolicy] = field(default_factory=_default_policies)
    override_key: str = field(default_factory=lambda: settings.aggregation_override_key)

    def lookup(self, metric: str) -> Optional[AggregationPolicy]:
        return self.policies.get(metric)

    def override(self, params: Optional[Mapping[str, Any]]) -> Optional[AggregationPolicy]:
        if not params:
            return None
        raw = params.get(self.override_key)
        if raw is None or not str(raw).strip():
            return None
        return AggregationPolicy.parse(str(raw))


def parse_policy(text: str) -> AggregationPolicy:
    return AggregationPolicy.parse(text)


def resolve_policy(
    metric: str,
    params: Optional[Mapping[str, Any]] = None,
    table: Optional[PolicyTable] = None,
) -> Optional[AggregationPolicy]:
    """Override parameter first, then the metric table; ``None`` means pass-through."""
    table = table or PolicyTable()
    forced = table.override(params)
    if forced is not None:
        return forced
    return table.lookup(metric)


def passthrough(series: Sequence[Series], metric: str) -> List[AggregatedSeries]:
    out = [AggregatedSeries.from_series(s, metric) for s in series]
    return [s for s in out if not s.is_empty()]


class AggregationService:
    def __init__(
        self,
        source: SeriesSource,
        table: Optional[PolicyTable] = None,
        logger: Optional[logging.Logger] = None,
        max_parallel: Optional[int] = None,
    ) -> None:
        self.source = source
        self.table = table or PolicyTable()
        self.log = logger or log
        self.max_parallel = max(1, int(max_parallel or settings.aggregation_max_parallel_fetches))

    async def _collect(
        self,
        entities: Sequence[Hashable],
        metric: str,
        params: Optional[Dict[str, Any]],
    ) -> List[Series]:
        sem = asyncio.Semaphore(self.max_parallel)

        async def _fetch(entity: Hashable) -> List[Series]:
            async with sem:
                return await self.source.fetch(entity, metric, params)

        raw = await asyncio.gather(*[_fetch(e) for e in entities], return_exceptions=True)

        collected: List[Series] = []
        for entity, result in zip(entities, raw):
            if isinstance(result, Exception):
                self.log.warning("fetch entity=%r metric=%s failed: %s", entity, metric, result)
                continue
            self.log.debug("fetch entity=%r metric=%s series=%d", entity, metric, len(result))
            collected.extend(result)
        return collected

    async def aggregate_group(
        self,
        parent: Hashable,
        metric: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[AggregatedSeries]:
        """Roll the ``metric`` series of every member of ``parent`` up into one.

        Metrics without a policy (and no override) are returned one result
        per fetched series.
        """
        if parent is None:
            return []
        try:
            members = await self.source.members(parent)
        except Exception as exc:
            raise SeriesSourceError(f"member lookup for {parent!r} failed: {exc}") from exc

        if not members:
            self.log.warning("aggregate_group: no members found for %r", parent)
            return []

        series = await self._collect(members, metric, params)
        if not series:
            return []
        self.log.info("aggregate_group %r metric=%s members=%d series=%d", parent, metric, len(members), len(series))

        policy = resolve_policy(metric, params, self.table)
        if policy is None:
            return passthrough(series, metric)

        result = await asyncio.to_thread(aggregate, series, metric, policy)
        return [] if result.is_empty() else [result]

    async def aggregate_entities(
        self,
        entities: Sequence[Hashable],
        metric: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[AggregatedSeries]:
        """Aggregate ``metric`` across an explicit entity list (SUM unless overridden)."""
        if not entities:
            return []
        if not metric or not str(metric).strip():
            self.log.warning("aggregate_entities: no metric given")
            return []

        targets = [e for e in entities if e is not None]
        series = await self._collect(targets, metric, params)
        if not series:
            self.log.info("aggregate_entities: no series found for %d entities", len(targets))
            return []

        policy = self.table.override(params) or parse_policy(settings.aggregation_default_override)
        result = await asyncio.to_thread(aggregate, series, metric, policy)
        return [] if result.is_empty() else [result]
