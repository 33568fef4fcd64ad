"""
Constants and configuration for the GraphObs analytics engine.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import os
from typing import Dict, Optional

from pydantic_settings import BaseSettings


GRAPHOBS_HOST: str = os.getenv("GRAPHOBS_HOST", "0.0.0.0")
GRAPHOBS_PORT: int = int(os.getenv("GRAPHOBS_PORT", "4323"))
GRAPHOBS_LOG_LEVEL: str = os.getenv("GRAPHOBS_LOG_LEVEL", "INFO").upper()

HEALTH_PATH = "/health"

# metric name -> aggregation policy used when rolling child series up into a
# parent; metrics missing here are passed through without aggregation
DEFAULT_AGGREGATION_POLICIES: Dict[str, str] = {
    "rps": "sum",
    "cpu_total": "sum",
    "latency_ms": "avg",
    "error_rate_pct": "avg",
}

# spellings accepted for the AVERAGE policy in the override parameter
AVERAGE_POLICY_ALIASES = ("avg", "average", "mean")


class Settings(BaseSettings):
    log_level: str = GRAPHOBS_LOG_LEVEL

    # changepoint detection; None means ln(n) per property
    changepoint_penalty: Optional[float] = None

    # trend outlier scoring defaults used by the HTTP layer
    outlier_default_window: int = 5
    outlier_default_threshold: float = 1.0

    # series transforms
    transform_default_period: int = 5

    # summary statistics
    statistics_default_percentile: float = 95.0

    # temporal joins; bucket width for the resampling strategy
    join_default_interval_seconds: int = 60

    # orchestrator
    aggregation_max_parallel_fetches: int = 8
    aggregation_override_key: str = "top_aggregation"
    aggregation_default_override: str = "sum"

    model_config = {
        "env_prefix": "GRAPHOBS_",
        "extra": "ignore",
    }


settings = Settings()
