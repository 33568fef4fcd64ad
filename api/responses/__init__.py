"""
Response models for API endpoints.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Any, Dict, List

import numpy as np
from pydantic import BaseModel, Field, model_serializer

from engine.aggregation import AlignedData
from engine.series import AggregatedSeries, SeriesBatch


def _coerce(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _coerce(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_coerce(v) for v in obj]
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    return obj


class NpModel(BaseModel):

    @model_serializer(mode="wrap")
    def _serialize(self, handler: Any) -> Any:
        return _coerce(handler(self))


class ChangepointResponse(NpModel):

    changepoints: Dict[str, List[str]] = Field(default_factory=dict)


class OutlierResponse(NpModel):

    outliers: Dict[str, List[str]] = Field(default_factory=dict)


class SeriesResponse(NpModel):

    timestamps: List[str] = Field(default_factory=list)
    values: Dict[str, List[float]] = Field(default_factory=dict)

    @classmethod
    def from_aggregated(cls, result: AggregatedSeries) -> SeriesResponse:
        return cls(timestamps=list(result.timestamps), values={k: list(v) for k, v in result.values.items()})

    @classmethod
    def from_batch(cls, batch: SeriesBatch) -> SeriesResponse:
        return cls(timestamps=list(batch.timestamps), values={k: list(v) for k, v in batch.values.items()})


class AggregationResponse(NpModel):

    metric: str
    policy: str
    results: List[SeriesResponse] = Field(default_factory=list)


class StatisticsResponse(NpModel):

    statistics: Dict[str, float] = Field(default_factory=dict)


class JoinResponse(NpModel):

    strategy: str
    timestamps: List[str] = Field(default_factory=list)
    values_a: List[float] = Field(default_factory=list)
    values_b: List[float] = Field(default_factory=list)

    @classmethod
    def from_aligned(cls, strategy: str, aligned: AlignedData) -> JoinResponse:
        return cls(
            strategy=strategy,
            timestamps=list(aligned.timestamps),
            values_a=list(aligned.values_a),
            values_b=list(aligned.values_b),
        )
