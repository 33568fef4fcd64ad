"""
Test cases for the aggregation orchestrator: policy resolution, override
handling, pass-through metrics, source failures and bounded fetch concurrency.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import asyncio

import pytest

from datasources.base import SeriesSource
from datasources.exceptions import SeriesSourceError, UnknownEntity
from datasources.memory import InMemorySeriesSource
from engine.enums import AggregationPolicy
from engine.series import Series, SeriesBatch
from services.aggregation_service import (
    AggregationService,
    PolicyTable,
    parse_policy,
    resolve_policy,
)

T0 = "2024-01-01T00:00:00Z"
T1 = "2024-01-01T00:00:30Z"


def _source(metric="rps"):
    source = InMemorySeriesSource(children={"checkout": ["pod-0"]})
    source.link("checkout", "pod-1")
    source.link("checkout", "pod-0")
    source.add("pod-0", metric, Series.from_arrays("pod-0", [T0, T1], [2.0, 4.0]))
    source.add("pod-1", metric, SeriesBatch(timestamps=(T0, T1), values={metric: [6.0, 8.0]}))
    return source


@pytest.mark.parametrize("metric, expected", [
    ("rps", AggregationPolicy.SUM),
    ("cpu_total", AggregationPolicy.SUM),
    ("latency_ms", AggregationPolicy.AVERAGE),
    ("error_rate_pct", AggregationPolicy.AVERAGE),
    ("memory_bytes", None),
])
def test_default_policy_table(metric, expected):
    assert resolve_policy(metric) == expected


def test_override_wins_over_table():
    assert resolve_policy("rps", {"top_aggregation": "MEAN"}) == AggregationPolicy.AVERAGE
    assert resolve_policy("latency_ms", {"top_aggregation": "sum"}) == AggregationPolicy.SUM
    assert resolve_policy("memory_bytes", {"top_aggregation": "avg"}) == AggregationPolicy.AVERAGE
    assert resolve_policy("rps", {"top_aggregation": "  "}) == AggregationPolicy.SUM


def test_custom_table_and_override_key():
    table = PolicyTable(policies={"qps": AggregationPolicy.SUM}, override_key="agg")
    assert resolve_policy("qps", table=table) == AggregationPolicy.SUM
    assert resolve_policy("rps", table=table) is None
    assert resolve_policy("qps", {"agg": "average"}, table) == AggregationPolicy.AVERAGE


def test_parse_policy_defaults_to_sum():
    assert parse_policy("whatever") == AggregationPolicy.SUM


@pytest.mark.asyncio
async def test_group_sum_for_additive_metric():
    results = await AggregationService(_source()).aggregate_group("checkout", "rps")
    assert len(results) == 1
    assert results[0].values == {"rps": [8.0, 12.0]}
    assert results[0].timestamps == ["2024-01-01T00:00:00Z", "2024-01-01T00:00:30Z"]


@pytest.mark.asyncio
async def test_group_average_for_intensive_metric():
    results = await AggregationService(_source("latency_ms")).aggregate_group("checkout", "latency_ms")
    assert results[0].values == {"latency_ms": [4.0, 6.0]}


@pytest.mark.asyncio
async def test_group_passthrough_for_unknown_metric():
    results = await AggregationService(_source("memory_bytes")).aggregate_group("checkout", "memory_bytes")
    assert [r.values["memory_bytes"] for r in results] == [[2.0, 4.0], [6.0, 8.0]]


@pytest.mark.asyncio
async def test_group_without_members_is_empty():
    assert await AggregationService(_source()).aggregate_group("unknown", "rps") == []


@pytest.mark.asyncio
async def test_member_lookup_failure_is_wrapped():
    source = InMemorySeriesSource(strict=True)
    with pytest.raises(SeriesSourceError):
        await AggregationService(source).aggregate_group("checkout", "rps")


@pytest.mark.asyncio
async def test_failing_member_fetch_is_skipped():
    class FlakySource(SeriesSource):
        async def members(self, entity):
            return ["ok", "broken"]

        async def fetch(self, entity, metric, params=None):
            if entity == "broken":
                raise UnknownEntity(entity)
            return [Series.from_arrays("ok", [T0], [5.0])]

    results = await AggregationService(FlakySource()).aggregate_group("svc", "rps")
    assert results[0].values == {"rps": [5.0]}


@pytest.mark.asyncio
async def test_entities_default_to_sum_and_honour_override():
    service = AggregationService(_source("latency_ms"))
    summed = await service.aggregate_entities(["pod-0", "pod-1", None], "latency_ms")
    assert summed[0].values == {"latency_ms": [8.0, 12.0]}
    averaged = await service.aggregate_entities(["pod-0", "pod-1"], "latency_ms", {"top_aggregation": "avg"})
    assert averaged[0].values == {"latency_ms": [4.0, 6.0]}


@pytest.mark.asyncio
@pytest.mark.parametrize("entities, metric", [([], "rps"), (["pod-0"], ""), (["pod-9"], "rps")])
async def test_entities_degenerate_inputs_are_empty(entities, metric):
    assert await AggregationService(_source()).aggregate_entities(entities, metric) == []


@pytest.mark.asyncio
async def test_link_does_not_duplicate_members():
    source = _source()
    assert await source.members("checkout") == ["pod-0", "pod-1"]


@pytest.mark.asyncio
async def test_concurrent_fetches_are_bounded():
    class CountingSource(SeriesSource):
        def __init__(self):
            self.active = 0
            self.peak = 0
            self.calls = 0

        async def members(self, entity):
            return [f"pod-{i}" for i in range(6)]

        async def fetch(self, entity, metric, params=None):
            self.calls += 1
            self.active += 1
            self.peak = max(self.peak, self.active)
            await asyncio.sleep(0.01)
            self.active -= 1
            return [Series.from_arrays(entity, [T0], [1.0])]

    source = CountingSource()
    results = await AggregationService(source, max_parallel=2).aggregate_group("svc", "rps")
    assert source.calls == 6
    assert source.peak == 2
    assert results[0].values == {"rps": [6.0]}
