"""
Classification of compiler depth-limit diagnostics.
"""

from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from ..core.events import TraceEvent


class DepthLimitKind(str, Enum):
    """The fixed set of depth-limit events, keyed by their event name."""
    CHECK_CROSS_PRODUCT_UNION = 'checkCrossProductUnion_DepthLimit'
    CHECK_TYPE_RELATED_TO = 'checkTypeRelatedTo_DepthLimit'
    GET_TYPE_AT_FLOW_NODE = 'getTypeAtFlowNode_DepthLimit'
    INSTANTIATE_TYPE = 'instantiateType_DepthLimit'
    RECURSIVE_TYPE_RELATED_TO = 'recursiveTypeRelatedTo_DepthLimit'
    REMOVE_SUBTYPES = 'removeSubtypes_DepthLimit'
    TRACE_UNIONS_OR_INTERSECTIONS_TOO_LARGE = 'traceUnionsOrIntersectionsTooLarge_DepthLimit'
    TYPE_RELATED_TO_DISCRIMINATED_TYPE = 'typeRelatedToDiscriminatedType_DepthLimit'


DepthLimits = Dict[DepthLimitKind, List[TraceEvent]]

_KINDS_BY_NAME = {kind.value: kind for kind in DepthLimitKind}


def _arg(key: str) -> Callable[[TraceEvent], float]:
    return lambda event: event.num_arg(key)


def _union_size(event: TraceEvent) -> float:
    return event.num_arg('sourceSize') * event.num_arg('targetSize')


# Sort key per kind; None keeps insertion order
SORT_KEYS: Dict[DepthLimitKind, Optional[Callable[[TraceEvent], float]]] = {
    DepthLimitKind.CHECK_CROSS_PRODUCT_UNION: _arg('size'),
    DepthLimitKind.CHECK_TYPE_RELATED_TO: _arg('depth'),
    DepthLimitKind.GET_TYPE_AT_FLOW_NODE: _arg('flowId'),
    DepthLimitKind.INSTANTIATE_TYPE: _arg('instantiationDepth'),
    DepthLimitKind.RECURSIVE_TYPE_RELATED_TO: _arg('depth'),
    DepthLimitKind.REMOVE_SUBTYPES: None,
    DepthLimitKind.TRACE_UNIONS_OR_INTERSECTIONS_TOO_LARGE: _union_size,
    DepthLimitKind.TYPE_RELATED_TO_DISCRIMINATED_TYPE: _arg('numCombinations'),
}


def create_depth_limits(events: Iterable[TraceEvent]) -> DepthLimits:
    """
    Bucket depth-limit events by kind and rank each bucket, worst first.

    Every kind is present in the result, possibly with an empty list. Sorting
    is stable, so equal keys keep log order.

    Args:
        events: Validated trace events

    Returns:
        Dict mapping DepthLimitKind -> sorted list of events
    """
    depth_limits: DepthLimits = {kind: [] for kind in DepthLimitKind}

    for event in events:
        kind = _KINDS_BY_NAME.get(event.name)
        if kind is not None:
            depth_limits[kind].append(event)

    for kind, bucket in depth_limits.items():
        sort_key = SORT_KEYS[kind]
        if sort_key is not None:
            bucket.sort(key=sort_key, reverse=True)

    return depth_limits


def depth_limit_counts(depth_limits: DepthLimits) -> Dict[DepthLimitKind, int]:
    return {kind: len(depth_limits.get(kind, [])) for kind in DepthLimitKind}
