"""
Analysis routes: changepoint detection, trend outlier scoring, series
transforms and summary statistics over index-aligned property batches.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from fastapi import APIRouter

from api.requests import ChangepointRequest, OutlierRequest, StatisticsRequest, TransformRequest
from api.responses import ChangepointResponse, OutlierResponse, SeriesResponse, StatisticsResponse
from api.routes.common import run_engine
from api.routes.exception import handle_exceptions
from engine.changepoint import detect as changepoint_detect
from engine.outliers import detect as outlier_detect
from engine.series import SeriesBatch
from engine.statistics import compute as compute_statistics
from engine.transforms import apply as apply_transform

router = APIRouter(tags=["Analysis"])


@router.post("/analysis/changepoints", response_model=ChangepointResponse)
@handle_exceptions
async def changepoints(req: ChangepointRequest) -> ChangepointResponse:
    found = await run_engine(changepoint_detect, req.timestamps, req.values, req.penalty)
    return ChangepointResponse(changepoints=found)


@router.post("/analysis/outliers", response_model=OutlierResponse)
@handle_exceptions
async def outliers(req: OutlierRequest) -> OutlierResponse:
    found = await run_engine(
        outlier_detect,
        req.timestamps,
        req.values,
        req.window_size,
        req.residual_threshold,
    )
    return OutlierResponse(outliers=found)


@router.post("/analysis/transform", response_model=SeriesResponse)
@handle_exceptions
async def transform(req: TransformRequest) -> SeriesResponse:
    batch = SeriesBatch(timestamps=tuple(req.timestamps), values=req.values)
    result = await run_engine(apply_transform, req.aggregation, batch, req.period)
    return SeriesResponse.from_batch(result)


@router.post("/analysis/statistics", response_model=StatisticsResponse)
@handle_exceptions
async def statistics(req: StatisticsRequest) -> StatisticsResponse:
    summary = await run_engine(compute_statistics, req.values, req.percentile)
    return StatisticsResponse(statistics=summary.as_dict() if summary else {})
