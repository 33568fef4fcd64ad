"""
Multi-series alignment and aggregation: union timelines, per-series linear
interpolation, SUM/AVERAGE combination and pairwise temporal joins.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.aggregation.combine import aggregate, coerce_policy, union_timeline
from engine.aggregation.interpolation import Interpolator
from engine.aggregation.joins import AlignedData, get_strategy, join

__all__ = [
    "AlignedData",
    "Interpolator",
    "aggregate",
    "coerce_policy",
    "get_strategy",
    "join",
    "union_timeline",
]
