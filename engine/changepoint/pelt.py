"""
PELT (Pruned Exact Linear Time) changepoint detection for locating indices where
the mean level of a metric shifts, scoring each candidate segmentation by its
residual sum of squares plus a per-segment penalty.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import math
from typing import Any, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from engine.exceptions import InvalidParameterError
from engine.series import ChangepointSet, SeriesBatch
from engine.timestamps import format_timestamp

log = logging.getLogger(__name__)


def default_penalty(n: int) -> float:
    return math.log(n)


def _prefix_sums(values: Sequence[float]) -> Tuple[List[float], List[float]]:
    arr = np.asarray(values, dtype=float)
    cumsum = np.concatenate(([0.0], np.cumsum(arr)))
    cumsum_sq = np.concatenate(([0.0], np.cumsum(arr * arr)))
    return cumsum.tolist(), cumsum_sq.tolist()


def segment_cost(start: int, end: int, cumsum: Sequence[float], cumsum_sq: Sequence[float]) -> float:
    """Residual sum of squares of ``values[start:end]`` around its mean."""
    total = cumsum[end] - cumsum[start]
    total_sq = cumsum_sq[end] - cumsum_sq[start]
    length = end - start
    # cancellation can leave tiny negatives on flat segments
    return max(0.0, total_sq - (total * total) / length)


def pelt(values: Sequence[float], penalty: float) -> List[int]:
    """Return ascending changepoint indices for ``values``.

    The candidate set keeps every ``tau`` whose score at ``t`` does not exceed
    ``F[t]``; no extra slack constant is subtracted before comparing.
    """
    n = len(values)
    if n < 2:
        return []

    cumsum, cumsum_sq = _prefix_sums(values)
    F = [0.0] * (n + 1)
    last_changepoint = [0] * (n + 1)
    candidates = [0]

    for t in range(1, n + 1):
        scores = [
            segment_cost(tau, t, cumsum, cumsum_sq) + F[tau] + penalty
            for tau in candidates
        ]
        best_cost = math.inf
        best_tau = 0
        for tau, score in zip(candidates, scores):
            if score < best_cost:
                best_cost = score
                best_tau = tau
        F[t] = best_cost
        last_changepoint[t] = best_tau

        candidates = [tau for tau, score in zip(candidates, scores) if score <= F[t]]
        candidates.append(t)

    indices: List[int] = []
    cp = last_changepoint[n]
    while cp > 0:
        indices.append(cp)
        cp = last_changepoint[cp]
    indices.reverse()
    return indices


def _resolve_penalty(penalty: Optional[float], n: int) -> float:
    from config import settings

    if penalty is None:
        penalty = settings.changepoint_penalty
    if penalty is None:
        return default_penalty(n)
    if not math.isfinite(penalty) or penalty < 0:
        raise InvalidParameterError(f"penalty must be a finite non-negative number, got {penalty!r}")
    return float(penalty)


def detect(
    timestamps: Sequence[Any],
    values_by_property: Mapping[str, Sequence[float]],
    penalty: float | None = None,
) -> ChangepointSet:
    batch = SeriesBatch(timestamps=tuple(timestamps), values=values_by_property)
    if penalty is not None:
        _resolve_penalty(penalty, len(batch))
    parsed = batch.parsed_timestamps() if batch.values else []
    # stable: equal timestamps keep their input order
    order = sorted(range(len(parsed)), key=lambda i: parsed[i])

    results: ChangepointSet = {}
    for name, values in batch.values.items():
        if len(order) < 2:
            results[name] = []
            continue

        sorted_values = [values[i] for i in order]
        beta = _resolve_penalty(penalty, len(sorted_values))
        indices = pelt(sorted_values, beta)
        results[name] = [format_timestamp(parsed[order[i]]) for i in indices]
        log.debug("pelt %s: n=%d penalty=%.4f changepoints=%d", name, len(order), beta, len(indices))

    return results
