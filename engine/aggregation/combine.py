"""
Aggregation of N series sampled on heterogeneous timestamp grids into a single
series.  All observed instants are kept (union timeline); each input series is
linearly interpolated onto that timeline and the present values are summed or
averaged per instant.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from config import AVERAGE_POLICY_ALIASES
from engine.aggregation.interpolation import Interpolator
from engine.enums import AggregationPolicy
from engine.exceptions import InvalidParameterError
from engine.series import AggregatedSeries, Series
from engine.timestamps import format_instant

log = logging.getLogger(__name__)


def union_timeline(interpolators: Iterable[Interpolator]) -> List[int]:
    instants: set[int] = set()
    for interp in interpolators:
        instants.update(int(x) for x in interp.xs)
    return sorted(instants)


def coerce_policy(policy: AggregationPolicy | str) -> AggregationPolicy:
    """Strict counterpart of :meth:`AggregationPolicy.parse`: unknown names raise."""
    if isinstance(policy, AggregationPolicy):
        return policy
    name = str(policy).strip().lower()
    if name in AVERAGE_POLICY_ALIASES:
        return AggregationPolicy.AVERAGE
    try:
        return AggregationPolicy(name)
    except ValueError as exc:
        raise InvalidParameterError(f"unknown aggregation policy {policy!r}") from exc


def aggregate(
    series: Sequence[Series],
    output_metric_name: str,
    policy: AggregationPolicy | str,
) -> AggregatedSeries:
    policy = coerce_policy(policy)
    helpers = [Interpolator.from_series(s) for s in (series or []) if s is not None and len(s)]
    if not helpers:
        return AggregatedSeries.empty()

    timeline = union_timeline(helpers)
    out_values: List[float] = []
    for t in timeline:
        total = 0.0
        present = 0
        for helper in helpers:
            v = helper.interpolate(t)
            if v is not None:
                total += v
                present += 1

        if policy is AggregationPolicy.SUM:
            out_values.append(total)
        else:
            out_values.append(total / present if present else 0.0)

    log.debug(
        "aggregate %s: series=%d timeline=%d policy=%s",
        output_metric_name, len(helpers), len(timeline), policy.value,
    )
    return AggregatedSeries(
        timestamps=[format_instant(t) for t in timeline],
        values={output_metric_name: out_values},
    )
