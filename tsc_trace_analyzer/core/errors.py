"""
Exceptions raised by the trace analysis pipeline.
"""


class TraceAnalysisError(Exception):
    """Base class for every error the analyzer raises on bad input."""


class InvalidOptionsError(TraceAnalysisError):
    """Analysis options are inconsistent (checked before any processing)."""


class TraceParseError(TraceAnalysisError):
    """A trace record does not match the schema of any known event kind."""

    def __init__(self, message: str, index: int = None):
        self.index = index
        if index is not None:
            message = f"trace.json event[{index}] validation error: {message}"
        super().__init__(message)


class TypesParseError(TraceAnalysisError):
    """A types.json record is not a valid type descriptor."""

    def __init__(self, message: str, index: int = None):
        self.index = index
        if index is not None:
            message = f"types.json entry[{index}] validation error: {message}"
        super().__init__(message)


class UnmatchedEndError(TraceAnalysisError):
    """An End event was seen while no Begin event was pending."""

    def __init__(self, name: str, ts: float, index: int):
        self.name = name
        self.ts = ts
        self.index = index
        super().__init__(
            f"Unmatched end event '{name}' at ts={ts} (event[{index}]): "
            f"no begin event is pending"
        )
