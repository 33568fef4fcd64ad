from __future__ import annotations

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from config import settings


class ChangepointRequest(BaseModel):
    timestamps: List[str]
    values: Dict[str, List[float]]
    penalty: Optional[float] = Field(default=None, ge=0.0)


class OutlierRequest(BaseModel):
    timestamps: List[str]
    values: Dict[str, List[float]]
    window_size: int = Field(default_factory=lambda: settings.outlier_default_window)
    residual_threshold: float = Field(default_factory=lambda: settings.outlier_default_threshold)


class TransformRequest(BaseModel):
    timestamps: List[str]
    values: Dict[str, List[float]]
    aggregation: str
    period: Optional[float] = Field(default=None, gt=0.0)


class SeriesPayload(BaseModel):
    name: Optional[str] = None
    timestamps: List[str]
    values: List[float]


class AggregateRequest(BaseModel):
    metric: str = Field(min_length=1)
    series: List[SeriesPayload] = Field(default_factory=list)
    policy: Optional[str] = None
    params: Dict[str, Any] = Field(default_factory=dict)


class StatisticsRequest(BaseModel):
    values: Dict[str, List[Optional[float]]]
    percentile: float = Field(default_factory=lambda: settings.statistics_default_percentile)


class JoinRequest(BaseModel):
    strategy: str = Field(min_length=1)
    metric_a: str = "a"
    metric_b: str = "b"
    series_a: List[SeriesPayload] = Field(default_factory=list)
    series_b: List[SeriesPayload] = Field(default_factory=list)
    interval_seconds: Optional[int] = Field(default=None, gt=0)
