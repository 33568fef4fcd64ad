"""
Change point subpackage for the GraphObs engine.

This module re-exports :func:`detect` and the helpers from
:mod:`engine.changepoint.pelt`, giving consumers a clean import path of
``engine.changepoint`` for changepoint analysis.  The implementation itself
lives in ``pelt.py``.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.changepoint.pelt import default_penalty, detect, pelt, segment_cost

__all__ = ["default_penalty", "detect", "pelt", "segment_cost"]
