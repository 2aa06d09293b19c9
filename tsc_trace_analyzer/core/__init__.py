"""Core components for trace analysis."""

from .analyzer import TraceAnalyzer
from .errors import (
    InvalidOptionsError,
    TraceAnalysisError,
    TraceParseError,
    TypesParseError,
    UnmatchedEndError,
)
from .events import EventPhase, EventScope, TraceEvent
from .type_descriptors import TypeDescriptor, parse_type_descriptors
from .types import AnalyzeTraceOptions, HotSpot, TreemapNode, TypeGraph

__all__ = [
    "TraceAnalyzer",
    "AnalyzeTraceOptions",
    "TraceAnalysisError",
    "InvalidOptionsError",
    "TraceParseError",
    "TypesParseError",
    "UnmatchedEndError",
    "EventPhase",
    "EventScope",
    "TraceEvent",
    "TypeDescriptor",
    "parse_type_descriptors",
    "HotSpot",
    "TreemapNode",
    "TypeGraph",
]
