"""
In-memory series source backed by plain dictionaries, used for local
evaluation, request-scoped data and tests.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Hashable, Iterable, List, Optional, Union

from datasources.base import SeriesSource
from datasources.exceptions import UnknownEntity
from engine.series import Series, SeriesBatch

log = logging.getLogger(__name__)

Stored = Union[Series, SeriesBatch]


class InMemorySeriesSource(SeriesSource):
    def __init__(
        self,
        series: Optional[Dict[Hashable, Dict[str, List[Stored]]]] = None,
        children: Optional[Dict[Hashable, Iterable[Hashable]]] = None,
        strict: bool = False,
    ):
        self._series: Dict[Hashable, Dict[str, List[Stored]]] = {
            entity: {metric: list(items) for metric, items in by_metric.items()}
            for entity, by_metric in (series or {}).items()
        }
        self._children: Dict[Hashable, List[Hashable]] = {
            parent: list(kids) for parent, kids in (children or {}).items()
        }
        self.strict = strict

    def add(self, entity: Hashable, metric: str, item: Stored) -> None:
        self._series.setdefault(entity, {}).setdefault(metric, []).append(item)

    def link(self, parent: Hashable, child: Hashable) -> None:
        kids = self._children.setdefault(parent, [])
        if child not in kids:
            kids.append(child)

    async def members(self, entity: Hashable) -> List[Hashable]:
        if self.strict and entity not in self._children:
            raise UnknownEntity(f"no group registered for {entity!r}")
        return list(self._children.get(entity, []))

    async def fetch(
        self,
        entity: Hashable,
        metric: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Series]:
        if self.strict and entity not in self._series:
            raise UnknownEntity(f"no series registered for {entity!r}")
        stored = self._series.get(entity, {}).get(metric, [])
        out: List[Series] = []
        for item in stored:
            if isinstance(item, SeriesBatch):
                out.append(Series.from_batch(item, metric))
            else:
                out.append(item)
        log.debug("in-memory fetch %r/%s -> %d series", entity, metric, len(out))
        return out
