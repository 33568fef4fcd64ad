"""
Outlier detection relative to a moving local regression trend.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.outliers.regression import detect, fit_line, validate_window

__all__ = ["detect", "fit_line", "validate_window"]
