"""
Per-property series transforms (moving and binned averages, differences,
derivatives, cumulative sums, integrals and straight-line fits) applied to
index-aligned batches before or after analysis.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Dict, Optional, Tuple

import numpy as np

from engine.enums import Transform
from engine.exceptions import InvalidParameterError
from engine.outliers import fit_line
from engine.series import SeriesBatch
from engine.timestamps import format_timestamp, to_epoch_millis

log = logging.getLogger(__name__)


def _elapsed_millis(batch: SeriesBatch) -> np.ndarray:
    ms = np.asarray([to_epoch_millis(ts) for ts in batch.timestamps], dtype=np.int64)
    return np.diff(ms)


def _empty_like(batch: SeriesBatch) -> SeriesBatch:
    return SeriesBatch(timestamps=(), values={name: () for name in batch.properties})


def _per_property(batch: SeriesBatch, fn) -> Dict[str, Tuple[float, ...]]:
    return {
        name: tuple(float(v) for v in fn(np.asarray(values, dtype=float)))
        for name, values in batch.values.items()
    }


def moving_average(batch: SeriesBatch, window: int) -> SeriesBatch:
    """Trailing mean; each output point is stamped with its window's last sample."""
    window = int(window)
    if window < 1:
        raise InvalidParameterError(f"moving average window must be >= 1, got {window}")
    if window > len(batch):
        return _empty_like(batch)

    kernel = np.ones(window)
    values = _per_property(batch, lambda y: np.convolve(y, kernel, mode="valid") / window)
    return SeriesBatch(timestamps=batch.timestamps[window - 1:], values=values)


def binned_average(batch: SeriesBatch, interval_seconds: float) -> SeriesBatch:
    """Mean per fixed-width bin from the earliest to the latest timestamp.

    Bins are half-open; a bin without samples averages to 0.0.
    """
    interval_ms = int(round(float(interval_seconds) * 1000))
    if interval_ms < 1:
        raise InvalidParameterError(f"bin interval must be positive, got {interval_seconds!r}")
    if not len(batch):
        return _empty_like(batch)

    parsed = batch.parsed_timestamps()
    ms = np.asarray([to_epoch_millis(ts) for ts in parsed], dtype=np.int64)
    first = int(ms.argmin())
    start_ms = int(ms[first])
    n_bins = (int(ms.max()) - start_ms) // interval_ms + 1
    bin_index = (ms - start_ms) // interval_ms

    counts = np.bincount(bin_index, minlength=n_bins).astype(float)

    def _means(y: np.ndarray) -> np.ndarray:
        sums = np.bincount(bin_index, weights=y, minlength=n_bins)
        return np.divide(sums, counts, out=np.zeros(n_bins), where=counts > 0)

    start = parsed[first]
    stamps = [
        format_timestamp(start + timedelta(milliseconds=i * interval_ms))
        for i in range(n_bins)
    ]
    return SeriesBatch(timestamps=tuple(stamps), values=_per_property(batch, _means))


def difference(batch: SeriesBatch) -> SeriesBatch:
    return SeriesBatch(timestamps=batch.timestamps[1:], values=_per_property(batch, np.diff))


def derivative(batch: SeriesBatch) -> SeriesBatch:
    """Change per second between consecutive samples."""
    dt = _elapsed_millis(batch)
    # coincident timestamps count as one millisecond apart
    seconds = np.where(dt == 0, 1, dt) / 1000.0
    return SeriesBatch(
        timestamps=batch.timestamps[1:],
        values=_per_property(batch, lambda y: np.diff(y) / seconds),
    )


def cumulative_sum(batch: SeriesBatch) -> SeriesBatch:
    # the running sum starts at the second sample, aligned with timestamps[1:]
    return SeriesBatch(
        timestamps=batch.timestamps[1:],
        values=_per_property(batch, lambda y: np.cumsum(y[1:])),
    )


def integral(batch: SeriesBatch) -> SeriesBatch:
    """Left Riemann sum in value-seconds."""
    seconds = _elapsed_millis(batch) / 1000.0
    return SeriesBatch(
        timestamps=batch.timestamps[1:],
        values=_per_property(batch, lambda y: np.cumsum(y[:-1] * seconds)),
    )


def linear_regression(batch: SeriesBatch) -> SeriesBatch:
    """Whole-series least-squares line (x = sample index), evaluated at every timestamp."""
    if not len(batch):
        return batch
    x = np.arange(len(batch), dtype=float)

    def _fitted(y: np.ndarray) -> np.ndarray:
        slope, intercept = fit_line(x, y)
        return slope * x + intercept

    return SeriesBatch(timestamps=batch.timestamps, values=_per_property(batch, _fitted))


def apply(name: Optional[str], batch: SeriesBatch, period: Optional[float] = None) -> SeriesBatch:
    from config import settings

    if not name or not str(name).strip():
        return batch
    try:
        transform = Transform(str(name).strip().lower())
    except ValueError:
        log.warning("unknown transform %r; returning raw data", name)
        return batch

    if period is None:
        period = settings.transform_default_period

    if transform is Transform.moving_average:
        return moving_average(batch, int(period))
    if transform is Transform.binned_average:
        return binned_average(batch, period)
    if transform is Transform.difference:
        return difference(batch)
    if transform is Transform.derivative:
        return derivative(batch)
    if transform is Transform.cumulative_sum:
        return cumulative_sum(batch)
    if transform is Transform.linear_regression:
        return linear_regression(batch)
    return integral(batch)


