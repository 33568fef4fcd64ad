"""
Test Suite for API Routes - Analysis and Aggregation

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import pytest
from fastapi import HTTPException

from api.requests import (
    AggregateRequest,
    ChangepointRequest,
    JoinRequest,
    OutlierRequest,
    SeriesPayload,
    StatisticsRequest,
    TransformRequest,
)
from api.routes import aggregation as aggregation_route
from api.routes import analysis as analysis_route
from api.routes.health import health

TS = [f"2024-01-01T00:{m:02d}:00Z" for m in range(21)]


@pytest.mark.asyncio
async def test_health():
    assert await health() == {"status": "ok"}


@pytest.mark.asyncio
async def test_changepoints_route_passes_penalty(monkeypatch):
    captured = {}

    def fake_detect(timestamps, values, penalty=None):
        captured["penalty"] = penalty
        return {"m": []}

    monkeypatch.setattr(analysis_route, "changepoint_detect", fake_detect)
    req = ChangepointRequest(timestamps=TS[:3], values={"m": [1, 2, 3]}, penalty=7.0)
    resp = await analysis_route.changepoints(req)
    assert resp.changepoints == {"m": []}
    assert captured["penalty"] == 7.0


@pytest.mark.asyncio
async def test_changepoints_route_finds_shift():
    vals = [1.0] * 10 + [8.0] * 11
    resp = await analysis_route.changepoints(ChangepointRequest(timestamps=TS, values={"m": vals}))
    assert resp.changepoints == {"m": ["2024-01-01T00:10:00+00:00"]}


@pytest.mark.asyncio
async def test_outliers_route_flags_spike():
    vals = [2.0 * i for i in range(21)]
    vals[10] += 100.0
    req = OutlierRequest(timestamps=TS, values={"m": vals}, window_size=5, residual_threshold=50.0)
    resp = await analysis_route.outliers(req)
    assert resp.outliers == {"m": [TS[10]]}


@pytest.mark.asyncio
async def test_invalid_window_maps_to_400():
    req = OutlierRequest(timestamps=TS, values={"m": [0.0] * 21}, window_size=4, residual_threshold=1.0)
    with pytest.raises(HTTPException) as exc:
        await analysis_route.outliers(req)
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_length_mismatch_maps_to_400():
    req = ChangepointRequest(timestamps=TS, values={"m": [1.0, 2.0]})
    with pytest.raises(HTTPException) as exc:
        await analysis_route.changepoints(req)
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_transform_route():
    req = TransformRequest(timestamps=TS[:3], values={"m": [1.0, 4.0, 9.0]}, aggregation="difference")
    resp = await analysis_route.transform(req)
    assert resp.timestamps == TS[1:3]
    assert resp.values == {"m": [3.0, 5.0]}


def _payloads():
    return [
        SeriesPayload(name="pod-0", timestamps=TS[:2], values=[1.0, 3.0]),
        SeriesPayload(name="pod-1", timestamps=TS[1:3], values=[5.0, 7.0]),
    ]


@pytest.mark.asyncio
async def test_aggregate_route_resolves_policy_from_metric():
    resp = await aggregation_route.aggregate_series(AggregateRequest(metric="rps", series=_payloads()))
    assert resp.policy == "sum"
    assert resp.results[0].timestamps == TS[:3]
    assert resp.results[0].values == {"rps": [1.0, 8.0, 7.0]}


@pytest.mark.asyncio
async def test_aggregate_route_honours_override_and_explicit_policy():
    req = AggregateRequest(metric="rps", series=_payloads(), params={"top_aggregation": "Average"})
    resp = await aggregation_route.aggregate_series(req)
    assert resp.policy == "avg"
    assert resp.results[0].values == {"rps": [1.0, 4.0, 7.0]}

    req = AggregateRequest(metric="latency_ms", series=_payloads(), policy="sum")
    resp = await aggregation_route.aggregate_series(req)
    assert resp.results[0].values == {"latency_ms": [1.0, 8.0, 7.0]}


@pytest.mark.asyncio
async def test_aggregate_route_passthrough_and_empty():
    resp = await aggregation_route.aggregate_series(AggregateRequest(metric="gc_pauses", series=_payloads()))
    assert resp.policy == "none"
    assert len(resp.results) == 2

    resp = await aggregation_route.aggregate_series(AggregateRequest(metric="rps", series=[]))
    assert resp.results == []


@pytest.mark.asyncio
async def test_aggregate_route_rejects_mismatched_series_lengths():
    bad = SeriesPayload(name="pod-0", timestamps=TS[:3], values=[1.0, 2.0])
    with pytest.raises(HTTPException) as exc:
        await aggregation_route.aggregate_series(AggregateRequest(metric="rps", series=[bad]))
    assert exc.value.status_code == 400
    assert "pod-0" in exc.value.detail


@pytest.mark.asyncio
async def test_aggregate_route_rejects_unknown_explicit_policy():
    req = AggregateRequest(metric="rps", series=_payloads(), policy="median")
    with pytest.raises(HTTPException) as exc:
        await aggregation_route.aggregate_series(req)
    assert exc.value.status_code == 400

    req = AggregateRequest(metric="rps", series=_payloads(), policy="Mean")
    resp = await aggregation_route.aggregate_series(req)
    assert resp.policy == "avg"


@pytest.mark.asyncio
async def test_unknown_override_still_falls_back_to_sum():
    req = AggregateRequest(metric="latency_ms", series=_payloads(), params={"top_aggregation": "median"})
    resp = await aggregation_route.aggregate_series(req)
    assert resp.policy == "sum"


@pytest.mark.asyncio
async def test_statistics_route():
    req = StatisticsRequest(values={"a": [1.0, 2.0], "b": [3.0, None, 4.0]}, percentile=50)
    resp = await analysis_route.statistics(req)
    assert resp.statistics["count"] == 5.0
    assert resp.statistics["sum"] == pytest.approx(10.0)
    assert resp.statistics["min"] == 0.0
    assert resp.statistics["percentile_50.0"] == pytest.approx(2.0)

    empty = await analysis_route.statistics(StatisticsRequest(values={}))
    assert empty.statistics == {}


@pytest.mark.asyncio
async def test_statistics_route_rejects_out_of_range_percentile():
    with pytest.raises(HTTPException) as exc:
        await analysis_route.statistics(StatisticsRequest(values={"a": [1.0]}, percentile=150))
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_join_route():
    req = JoinRequest(
        strategy="interpolate",
        series_a=[SeriesPayload(timestamps=[TS[0], TS[2]], values=[0.0, 10.0])],
        series_b=[SeriesPayload(timestamps=[TS[1], TS[2]], values=[1.0, 3.0])],
    )
    resp = await aggregation_route.join_series(req)
    assert resp.timestamps == [TS[1], TS[2]]
    assert resp.values_a == pytest.approx([5.0, 10.0])
    assert resp.values_b == pytest.approx([1.0, 3.0])


@pytest.mark.asyncio
async def test_join_route_rejects_unknown_strategy():
    req = JoinRequest(strategy="nearest", series_a=_payloads(), series_b=_payloads())
    with pytest.raises(HTTPException) as exc:
        await aggregation_route.join_series(req)
    assert exc.value.status_code == 400
