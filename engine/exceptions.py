"""
Exception types raised by the analysis engines and the orchestration layer.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""


class AnalysisError(Exception):
    pass


class InvalidParameterError(AnalysisError, ValueError):
    """Raised for malformed input or parameters; fatal to the single call."""
