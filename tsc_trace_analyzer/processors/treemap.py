"""
Per-file duration treemap aggregation.
"""

import math
from collections import defaultdict
from typing import Dict, Iterable, List

from ..core.events import TraceEvent
from ..core.types import FileStatistics, HotFile, TreemapNode
from .span_builder import ParseResult, unterminated_spans


def _leaf_name(path: str) -> str:
    return path.rsplit('/', 1)[-1]


def _to_nodes(totals: Dict[str, float]) -> List[TreemapNode]:
    nodes = [
        {'name': _leaf_name(path), 'value': value, 'path': path}
        for path, value in totals.items()
    ]
    # Stable, so ties keep first-seen order
    nodes.sort(key=lambda node: node['value'], reverse=True)
    return nodes


def build_treemap(events: Iterable[TraceEvent]) -> List[TreemapNode]:
    """
    Sum explicit durations per file path.

    Only events that carry both a string `args.path` and a `dur` contribute.
    The result is flat: one leaf per distinct path, no directory grouping.

    Args:
        events: Validated trace events

    Returns:
        List of {name, value, path} sorted by value, largest first
    """
    totals = defaultdict(float)

    for event in events:
        if event.dur is None:
            continue
        path = event.str_arg('path')
        if path is None:
            continue
        totals[path] += event.dur

    return _to_nodes(totals)


def build_check_source_file_treemap(parse_result: ParseResult) -> List[TreemapNode]:
    """
    Sum checkSourceFile span durations per file path.

    Unterminated checkSourceFile spans count up to the last observed end.
    """
    totals = defaultdict(float)

    for span in parse_result.spans + unterminated_spans(parse_result):
        event = span.event
        if event is None or event.name != 'checkSourceFile':
            continue
        path = event.str_arg('path')
        if path is None:
            continue
        totals[path] += span.duration

    return _to_nodes(totals)


def get_hot_files(treemap: List[TreemapNode], limit: int = 10) -> List[HotFile]:
    """
    Top `limit` treemap leaves as {path, duration_ms}.

    Args:
        treemap: Output of build_treemap() (already sorted)
        limit: Maximum number of files to return
    """
    return [
        {'path': node['path'], 'duration_ms': node['value'] / 1000}
        for node in treemap[:limit]
    ]


FILE_SPAN_NAMES = ('createSourceFile', 'bindSourceFile', 'checkSourceFile')


def _round2(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def get_file_statistics(parse_result: ParseResult) -> FileStatistics:
    """
    Summarize time spent per source file.

    A file's duration is the sum of its closed createSourceFile,
    bindSourceFile and checkSourceFile spans, in microseconds. Values are
    rounded to two decimals; an empty log gives all zeros.
    """
    totals = defaultdict(float)

    for span in parse_result.spans:
        event = span.event
        if event is None or event.name not in FILE_SPAN_NAMES:
            continue
        path = event.str_arg('path')
        if path is None:
            continue
        totals[path] += span.duration

    if not totals:
        return {
            'total_files': 0,
            'total_duration': 0.0,
            'mean_duration': 0.0,
            'max_duration': 0.0,
            'min_duration': 0.0,
        }

    total_duration = _round2(sum(totals.values()))
    return {
        'total_files': len(totals),
        'total_duration': total_duration,
        'mean_duration': _round2(total_duration / len(totals)),
        'max_duration': _round2(max(totals.values())),
        'min_duration': _round2(min(totals.values())),
    }
