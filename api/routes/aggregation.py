"""
Aggregation routes: combining caller-supplied series into one series, with the
policy taken from the request or resolved from the metric name, and joining
two series onto a shared time axis.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from fastapi import APIRouter

from api.requests import AggregateRequest, JoinRequest
from api.responses import AggregationResponse, JoinResponse, SeriesResponse
from api.routes.common import run_engine, to_series
from api.routes.exception import handle_exceptions
from engine.aggregation import aggregate, coerce_policy, join
from services.aggregation_service import passthrough, resolve_policy

router = APIRouter(tags=["Aggregation"])


@router.post("/aggregation", response_model=AggregationResponse)
@handle_exceptions
async def aggregate_series(req: AggregateRequest) -> AggregationResponse:
    series = to_series(req.series, req.metric)
    policy = coerce_policy(req.policy) if req.policy else resolve_policy(req.metric, req.params)

    if policy is None:
        results = passthrough(series, req.metric)
        return AggregationResponse(
            metric=req.metric,
            policy="none",
            results=[SeriesResponse.from_aggregated(r) for r in results],
        )

    combined = await run_engine(aggregate, series, req.metric, policy)
    return AggregationResponse(
        metric=req.metric,
        policy=policy.value,
        results=[] if combined.is_empty() else [SeriesResponse.from_aggregated(combined)],
    )


@router.post("/aggregation/join", response_model=JoinResponse)
@handle_exceptions
async def join_series(req: JoinRequest) -> JoinResponse:
    series_a = to_series(req.series_a, req.metric_a)
    series_b = to_series(req.series_b, req.metric_b)
    params = {} if req.interval_seconds is None else {"interval_seconds": req.interval_seconds}
    aligned = await run_engine(join, req.strategy, series_a, series_b, params)
    return JoinResponse.from_aligned(req.strategy, aligned)
