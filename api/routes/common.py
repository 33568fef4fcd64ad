"""
Shared utilities for API route modules.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, TypeVar

from api.requests import SeriesPayload
from engine.exceptions import InvalidParameterError
from engine.series import Series

_T = TypeVar("_T")


async def run_engine(func: Callable[..., _T], *args: Any, **kwargs: Any) -> _T:
    # engines are CPU bound; keep them off the event loop
    return await asyncio.to_thread(func, *args, **kwargs)


def to_series(payloads: List[SeriesPayload], metric: str) -> List[Series]:
    for i, p in enumerate(payloads):
        if len(p.timestamps) != len(p.values):
            raise InvalidParameterError(
                f"series {p.name or i!r} has {len(p.values)} values but {len(p.timestamps)} timestamps"
            )
    return [
        Series.from_arrays(p.name or metric, p.timestamps, p.values)
        for p in payloads
    ]
