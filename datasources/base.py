"""
Series source capability: the boundary through which the orchestration layer
discovers group members and retrieves already-extracted series for an entity.
Entity handles are opaque to the engine.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Hashable, List, Optional

from engine.series import Series


class SeriesSource(ABC):

    @abstractmethod
    async def members(self, entity: Hashable) -> List[Hashable]:
        """Child entities that roll up into ``entity``."""

    @abstractmethod
    async def fetch(
        self,
        entity: Hashable,
        metric: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Series]: ...
