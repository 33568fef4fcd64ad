"""
Value objects for samples, series and index-aligned property batches consumed
and produced by the analysis engines.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from engine.exceptions import InvalidParameterError
from engine.timestamps import format_instant, format_timestamp, parse_timestamp, to_epoch_millis

log = logging.getLogger(__name__)

ChangepointSet = Dict[str, List[str]]
OutlierSet = Dict[str, List[str]]


@dataclass(frozen=True)
class Sample:
    timestamp: datetime
    value: float


@dataclass(frozen=True)
class Series:
    name: str
    samples: Tuple[Sample, ...] = ()

    def __post_init__(self) -> None:
        # stable sort keeps input order for equal timestamps
        ordered = tuple(sorted(self.samples, key=lambda s: s.timestamp))
        object.__setattr__(self, "samples", ordered)

    def __len__(self) -> int:
        return len(self.samples)

    @classmethod
    def from_arrays(cls, name: str, timestamps: Sequence[Any], values: Sequence[Any]) -> Series:
        """Build a series from loose arrays, skipping unusable points.

        Unparsable timestamps and non-finite or missing values are dropped;
        surplus timestamps without a value are ignored.
        """
        samples: List[Sample] = []
        for raw_ts, raw_val in zip(timestamps, values):
            if raw_ts is None or raw_val is None:
                continue
            try:
                ts = parse_timestamp(raw_ts)
                val = float(raw_val)
            except (InvalidParameterError, TypeError, ValueError):
                log.debug("series %s: skipping unusable point (%r, %r)", name, raw_ts, raw_val)
                continue
            if not math.isfinite(val):
                continue
            samples.append(Sample(ts, val))
        return cls(name=name, samples=tuple(samples))

    @classmethod
    def from_batch(cls, batch: SeriesBatch, metric: str) -> Series:
        """Pick ``metric`` from ``batch``, falling back to its first property."""
        if not batch.values:
            return cls(name=metric)
        values = batch.values.get(metric)
        if values is None:
            values = next(iter(batch.values.values()))
        return cls.from_arrays(metric, batch.timestamps, values)


def _label(ts: Any) -> str:
    if isinstance(ts, str):
        return ts
    return format_timestamp(parse_timestamp(ts))


@dataclass(frozen=True)
class SeriesBatch:
    """Several properties sharing one timestamp index of length n."""

    timestamps: Tuple[str, ...]
    values: Mapping[str, Tuple[float, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        stamps = tuple(_label(ts) for ts in self.timestamps)
        n = len(stamps)
        checked: Dict[str, Tuple[float, ...]] = {}
        for name, raw in self.values.items():
            if raw is None or isinstance(raw, (str, bytes)):
                raise InvalidParameterError(f"property {name!r} is not a numeric sequence")
            try:
                seq = tuple(float(v) for v in raw)
            except (TypeError, ValueError) as exc:
                raise InvalidParameterError(f"property {name!r} contains non-numeric values") from exc
            if len(seq) != n:
                raise InvalidParameterError(
                    f"property {name!r} has {len(seq)} values but there are {n} timestamps"
                )
            if not all(math.isfinite(v) for v in seq):
                raise InvalidParameterError(f"property {name!r} contains NaN or infinite values")
            checked[str(name)] = seq
        object.__setattr__(self, "timestamps", stamps)
        object.__setattr__(self, "values", checked)

    def __len__(self) -> int:
        return len(self.timestamps)

    @property
    def properties(self) -> List[str]:
        return list(self.values)

    def parsed_timestamps(self) -> List[datetime]:
        return [parse_timestamp(ts) for ts in self.timestamps]


@dataclass(frozen=True)
class AggregatedSeries:
    timestamps: List[str] = field(default_factory=list)
    values: Dict[str, List[float]] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> AggregatedSeries:
        return cls()

    @classmethod
    def from_series(cls, series: Series, metric: Optional[str] = None) -> AggregatedSeries:
        if not series.samples:
            return cls()
        return cls(
            timestamps=[format_instant(to_epoch_millis(s.timestamp)) for s in series.samples],
            values={metric or series.name: [s.value for s in series.samples]},
        )

    def is_empty(self) -> bool:
        return not self.timestamps
