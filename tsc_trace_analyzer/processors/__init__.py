"""Processors for trace data transformation and analysis."""

from .file_processor import TraceFileProcessor
from .event_parser import TraceEventParser, parse_trace_events
from .span_builder import (
    ParseResult,
    Span,
    SpanTree,
    create_span_tree,
    create_spans,
    unterminated_events,
    unterminated_spans,
)
from .hotspot_extractor import HotspotExtractor, count_frames, get_hotspots
from .hot_types import create_type_registry, expand_hotspot_types, get_hot_type
from .depth_limits import DepthLimitKind, create_depth_limits, depth_limit_counts
from .treemap import build_check_source_file_treemap, build_treemap, get_file_statistics, get_hot_files
from .type_graph import LinkKind, NodeStatKind, TypeGraphBuilder, build_type_graph
from .parallel_processor import ParallelAnalysisRunner

__all__ = [
    "TraceFileProcessor",
    "TraceEventParser",
    "parse_trace_events",
    "ParseResult",
    "Span",
    "SpanTree",
    "create_spans",
    "create_span_tree",
    "unterminated_events",
    "unterminated_spans",
    "HotspotExtractor",
    "get_hotspots",
    "count_frames",
    "create_type_registry",
    "expand_hotspot_types",
    "get_hot_type",
    "DepthLimitKind",
    "create_depth_limits",
    "depth_limit_counts",
    "build_treemap",
    "build_check_source_file_treemap",
    "get_hot_files",
    "get_file_statistics",
    "LinkKind",
    "NodeStatKind",
    "TypeGraphBuilder",
    "build_type_graph",
    "ParallelAnalysisRunner",
]
