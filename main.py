"""
Entry point for the GraphObs analytics API server.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from fastapi import FastAPI

from api.routes import router
from config import GRAPHOBS_HOST, GRAPHOBS_PORT, settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    stream=sys.stdout,
)
log = logging.getLogger(__name__)


app = FastAPI(
    title="GraphObs Analytics Engine",
    description="Changepoint detection, trend outlier scoring and multi-series aggregation for monitoring time series.",
    version="1.0.0",
)

app.include_router(router, prefix="/api/v1")


if __name__ == "__main__":
    log.info("starting analytics engine on %s:%d", GRAPHOBS_HOST, GRAPHOBS_PORT)
    uvicorn.run(
        "main:app",
        host=GRAPHOBS_HOST,
        port=GRAPHOBS_PORT,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
