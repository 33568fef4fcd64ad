"""
Enumerations for aggregation policies and series transforms.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from enum import Enum

from config import AVERAGE_POLICY_ALIASES


class AggregationPolicy(str, Enum):
    SUM = "sum"
    AVERAGE = "avg"

    @classmethod
    def parse(cls, text: str) -> AggregationPolicy:
        # anything that is not an average alias falls back to SUM
        if str(text or "").strip().lower() in AVERAGE_POLICY_ALIASES:
            return cls.AVERAGE
        return cls.SUM


class Transform(str, Enum):
    moving_average = "moving_average"
    binned_average = "binned_average"
    difference = "difference"
    derivative = "derivative"
    cumulative_sum = "cu_sum"
    integral = "integral"
    linear_regression = "linear_regression"
