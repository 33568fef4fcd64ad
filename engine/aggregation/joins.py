"""
Temporal joins: bring two series (each possibly made of several source series)
onto one shared time axis so their values can be compared pairwise.

Three strategies are available:

* ``forward_fill`` carries the last observation forward over the merged
  timestamps of both sides (step function, for state-like data).
* ``linear`` interpolates both sides at every timestamp inside their overlap.
* ``resample`` averages each side into fixed, epoch-aligned buckets and keeps
  the buckets both sides populate.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from config import settings
from engine.aggregation.combine import union_timeline
from engine.aggregation.interpolation import Interpolator
from engine.exceptions import InvalidParameterError
from engine.series import Series
from engine.timestamps import format_instant

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlignedData:
    """Two value arrays of equal length on a shared timestamp axis."""

    timestamps: Tuple[str, ...] = ()
    values_a: Tuple[float, ...] = ()
    values_b: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        if not (len(self.timestamps) == len(self.values_a) == len(self.values_b)):
            raise InvalidParameterError("aligned timestamps and both value arrays must have equal length")

    def __len__(self) -> int:
        return len(self.values_a)

    def is_empty(self) -> bool:
        return not self.values_a


JoinStrategy = Callable[[Sequence[Series], Sequence[Series], Optional[Mapping[str, Any]]], AlignedData]


def _aligned(instants: List[int], a: List[float], b: List[float]) -> AlignedData:
    if not a:
        return AlignedData()
    return AlignedData(
        timestamps=tuple(format_instant(t) for t in instants),
        values_a=tuple(a),
        values_b=tuple(b),
    )


def _pair(series_a: Sequence[Series], series_b: Sequence[Series]) -> Tuple[Interpolator, Interpolator]:
    return Interpolator.from_many(series_a or []), Interpolator.from_many(series_b or [])


def forward_fill(
    series_a: Sequence[Series],
    series_b: Sequence[Series],
    params: Optional[Mapping[str, Any]] = None,
) -> AlignedData:
    ia, ib = _pair(series_a, series_b)
    if not len(ia) or not len(ib):
        return AlignedData()
    (lo_a, hi_a), (lo_b, hi_b) = ia.bounds, ib.bounds
    if max(lo_a, lo_b) > min(hi_a, hi_b):
        return AlignedData()

    instants, out_a, out_b = [], [], []
    for t in union_timeline([ia, ib]):
        va, vb = ia.last_at(t), ib.last_at(t)
        # both sides need an observation at or before t
        if va is None or vb is None:
            continue
        instants.append(t)
        out_a.append(va)
        out_b.append(vb)
    return _aligned(instants, out_a, out_b)


def linear(
    series_a: Sequence[Series],
    series_b: Sequence[Series],
    params: Optional[Mapping[str, Any]] = None,
) -> AlignedData:
    ia, ib = _pair(series_a, series_b)
    if not len(ia) or not len(ib):
        return AlignedData()
    (lo_a, hi_a), (lo_b, hi_b) = ia.bounds, ib.bounds
    start, end = max(lo_a, lo_b), min(hi_a, hi_b)
    if start >= end:
        return AlignedData()

    timeline = [t for t in union_timeline([ia, ib]) if start <= t <= end]
    if len(timeline) < 2:
        return AlignedData()

    instants, out_a, out_b = [], [], []
    for t in timeline:
        va, vb = ia.interpolate(t), ib.interpolate(t)
        if va is None or vb is None:
            continue
        instants.append(t)
        out_a.append(va)
        out_b.append(vb)
    return _aligned(instants, out_a, out_b)


def _interval_seconds(params: Optional[Mapping[str, Any]]) -> int:
    raw = (params or {}).get("interval_seconds")
    if raw is None:
        raw = settings.join_default_interval_seconds
    try:
        interval = int(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(f"interval_seconds must be an integer, got {raw!r}") from exc
    if interval <= 0:
        raise InvalidParameterError(f"interval_seconds must be positive, got {raw!r}")
    return interval


def _bucket_means(interp: Interpolator, interval_ms: int) -> Dict[int, float]:
    if not len(interp):
        return {}
    buckets = (interp.xs // interval_ms) * interval_ms
    keys, inverse = np.unique(buckets, return_inverse=True)
    sums = np.bincount(inverse, weights=interp.ys)
    counts = np.bincount(inverse)
    return {int(k): float(s / c) for k, s, c in zip(keys, sums, counts)}


def resample(
    series_a: Sequence[Series],
    series_b: Sequence[Series],
    params: Optional[Mapping[str, Any]] = None,
) -> AlignedData:
    """Bucket means keyed by bucket start; params: ``interval_seconds``."""
    interval_ms = _interval_seconds(params) * 1000
    ia, ib = _pair(series_a, series_b)
    means_a = _bucket_means(ia, interval_ms)
    means_b = _bucket_means(ib, interval_ms)

    common = sorted(set(means_a) & set(means_b))
    log.debug("resample join: buckets a=%d b=%d common=%d", len(means_a), len(means_b), len(common))
    return _aligned(common, [means_a[t] for t in common], [means_b[t] for t in common])


_STRATEGIES: Dict[str, JoinStrategy] = {
    "linear": linear,
    "interpolate": linear,
    "interpolate_linear": linear,
    "forward_fill": forward_fill,
    "locf": forward_fill,
    "resample": resample,
    "resample_avg": resample,
    "aggregate": resample,
}


def get_strategy(name: Optional[str]) -> JoinStrategy:
    if name is None or not str(name).strip():
        raise InvalidParameterError("join strategy name must not be empty")
    try:
        return _STRATEGIES[str(name).strip().lower()]
    except KeyError as exc:
        raise InvalidParameterError(f"unknown temporal join strategy {name!r}") from exc


def join(
    strategy: str,
    series_a: Sequence[Series],
    series_b: Sequence[Series],
    params: Optional[Mapping[str, Any]] = None,
) -> AlignedData:
    aligned = get_strategy(strategy)(series_a, series_b, params)
    log.debug("temporal join %s: aligned=%d", strategy, len(aligned))
    return aligned
