"""
Summary statistics (min, max, mean, median, standard deviation, sum, count and
an interpolated percentile) over every value of a series batch.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence

import numpy as np

from config import settings
from engine.exceptions import InvalidParameterError


@dataclass(frozen=True)
class Summary:
    min: float
    max: float
    mean: float
    median: float
    stddev: float
    sum: float
    count: int
    percentile: float
    percentile_rank: float

    def as_dict(self) -> Dict[str, float]:
        return {
            "min": self.min,
            "max": self.max,
            "mean": self.mean,
            "median": self.median,
            "stddev": self.stddev,
            "sum": self.sum,
            "count": float(self.count),
            f"percentile_{self.percentile_rank}": self.percentile,
        }


def _pooled(values_by_property: Mapping[str, Sequence[Any]]) -> np.ndarray:
    pooled = []
    for raw in values_by_property.values():
        for v in raw or ():
            try:
                f = float(v)
            except (TypeError, ValueError):
                f = 0.0
            # missing and non-finite samples count as zero
            pooled.append(f if math.isfinite(f) else 0.0)
    return np.asarray(pooled, dtype=float)


def compute(
    values_by_property: Mapping[str, Sequence[Any]],
    percentile: float | None = None,
) -> Optional[Summary]:
    """Pool every property's values and summarise them; ``None`` when there are none.

    The standard deviation is the population one and the percentile is
    linearly interpolated between closest ranks.
    """
    if percentile is None:
        percentile = settings.statistics_default_percentile
    try:
        rank = float(percentile)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(f"percentile must be a number, got {percentile!r}") from exc
    if not math.isfinite(rank) or rank < 0 or rank > 100:
        raise InvalidParameterError(f"percentile must be within [0, 100], got {percentile!r}")

    arr = _pooled(values_by_property)
    if not arr.size:
        return None

    return Summary(
        min=float(arr.min()),
        max=float(arr.max()),
        mean=float(arr.mean()),
        median=float(np.median(arr)),
        stddev=float(arr.std()),
        sum=float(arr.sum()),
        count=int(arr.size),
        percentile=float(np.percentile(arr, rank)),
        percentile_rank=rank,
    )
