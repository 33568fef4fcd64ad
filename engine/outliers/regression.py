"""
Sliding-window local linear regression outlier scoring: each interior sample is
compared with an ordinary least-squares line fitted over the window centred on
it, so slow drift is tolerated while sharp local spikes are flagged.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import math
from typing import Any, List, Mapping, Sequence, Tuple

import numpy as np

from engine.exceptions import InvalidParameterError
from engine.series import OutlierSet, SeriesBatch

log = logging.getLogger(__name__)


def validate_window(window_size: int, n: int) -> int:
    try:
        w = int(window_size)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(f"window size must be an integer, got {window_size!r}") from exc
    if isinstance(window_size, bool) or w != window_size:
        raise InvalidParameterError(f"window size must be an integer, got {window_size!r}")
    if w < 3 or w > n or w % 2 == 0:
        raise InvalidParameterError(
            f"window size must be odd, >= 3 and <= series length ({n}), got {w}"
        )
    return w


def fit_line(x: np.ndarray, y: np.ndarray) -> Tuple[float, float]:
    x_mean = float(x.mean())
    y_mean = float(y.mean())
    dx = x - x_mean
    den = float(np.dot(dx, dx))
    slope = float(np.dot(dx, y - y_mean)) / den if den != 0 else 0.0
    return slope, y_mean - slope * x_mean


def _score(values: Sequence[float], window: int, threshold: float) -> List[int]:
    y = np.asarray(values, dtype=float)
    n = len(y)
    half = window // 2
    flagged: List[int] = []
    for i in range(half, n - half):
        x_win = np.arange(i - half, i + half + 1, dtype=float)
        y_win = y[i - half:i + half + 1]
        slope, intercept = fit_line(x_win, y_win)
        residual = abs(y[i] - (slope * i + intercept))
        if residual > threshold:
            flagged.append(i)
    return flagged


def detect(
    timestamps: Sequence[Any],
    values_by_property: Mapping[str, Sequence[float]],
    window_size: int,
    residual_threshold: float,
) -> OutlierSet:
    batch = SeriesBatch(timestamps=tuple(timestamps), values=values_by_property)
    window = validate_window(window_size, len(batch))
    try:
        threshold = float(residual_threshold)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(f"residual threshold must be a number, got {residual_threshold!r}") from exc
    if not math.isfinite(threshold) or threshold <= 0:
        raise InvalidParameterError(f"residual threshold must be positive, got {residual_threshold!r}")

    results: OutlierSet = {}
    for name, values in batch.values.items():
        flagged = _score(values, window, threshold)
        log.debug("regression outliers %s: window=%d flagged=%d", name, window, len(flagged))
        if flagged:
            results[name] = [batch.timestamps[i] for i in flagged]
    return results
