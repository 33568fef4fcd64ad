"""
Linear interpolation of a single series over absolute millisecond instants.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional

import numpy as np

from engine.series import Series
from engine.timestamps import to_epoch_millis


class Interpolator:
    """Evaluates a series at arbitrary instants inside its own range.

    Instants outside ``[min, max]`` are absent (``None``); nothing is
    extrapolated.
    """

    def __init__(self, points: Dict[int, float]):
        xs = sorted(points)
        self.xs = np.asarray(xs, dtype=np.int64)
        self.ys = np.asarray([points[x] for x in xs], dtype=float)

    @classmethod
    def from_series(cls, series: Series) -> Interpolator:
        return cls.from_many([series])

    @classmethod
    def from_many(cls, series: Iterable[Series]) -> Interpolator:
        """Pool several series into one knot set."""
        # duplicate instants: the last sample wins
        points: Dict[int, float] = {}
        for s in series:
            if s is None:
                continue
            for sample in s.samples:
                points[to_epoch_millis(sample.timestamp)] = sample.value
        return cls(points)

    def __len__(self) -> int:
        return len(self.xs)

    @property
    def bounds(self) -> Optional[tuple[int, int]]:
        if not len(self.xs):
            return None
        return int(self.xs[0]), int(self.xs[-1])

    def interpolate(self, t: int) -> Optional[float]:
        if not len(self.xs):
            return None
        if t < self.xs[0] or t > self.xs[-1]:
            return None

        idx = int(np.searchsorted(self.xs, t, side="left"))
        if idx < len(self.xs) and self.xs[idx] == t:
            return float(self.ys[idx])
        if idx == 0 or idx >= len(self.xs):
            return None

        x0, x1 = int(self.xs[idx - 1]), int(self.xs[idx])
        y0, y1 = float(self.ys[idx - 1]), float(self.ys[idx])
        if x1 == x0:
            return y0
        return y0 + (t - x0) / (x1 - x0) * (y1 - y0)

    def last_at(self, t: int) -> Optional[float]:
        """Value of the latest knot at or before ``t`` (step function)."""
        idx = int(np.searchsorted(self.xs, t, side="right")) - 1
        if idx < 0:
            return None
        return float(self.ys[idx])
