"""
Type definitions and options for trace analysis.
"""

from typing import Any, Dict, List, Optional, Tuple, TypedDict

from .errors import InvalidOptionsError


class HotType(TypedDict):
    """A type id expanded into the tree of types it refers to."""
    id: int
    name: str
    flags: List[str]
    children: List['HotType']


class HotSpot(TypedDict):
    """One labeled frame of the hotspot report."""
    description: str
    time_ms: int
    path: Optional[str]
    types: Optional[List[int]]
    type_trees: Optional[List[HotType]]
    children: List['HotSpot']


class TreemapNode(TypedDict):
    """Leaf of the file-duration treemap."""
    name: str
    value: float
    path: str


class HotFile(TypedDict):
    path: str
    duration_ms: float


class FileStatistics(TypedDict):
    total_files: int
    total_duration: float
    mean_duration: float
    max_duration: float
    min_duration: float


class DuplicatedPackageInstance(TypedDict):
    path: str
    version: str


class DuplicatedPackage(TypedDict):
    name: str
    instances: List[DuplicatedPackageInstance]


class GraphLink(TypedDict):
    source: int
    target: int
    kind: str


# (target_id, [source_ids], target_path)
EdgeStatEntry = Tuple[int, List[int], Optional[str]]

# (source_id, [target_ids], source_path)
SourceStatEntry = Tuple[int, List[int], Optional[str]]

# (type_id, display_name, count, path)
NodeStatEntry = Tuple[int, str, int, Optional[str]]


class SourceStats(TypedDict):
    max: int
    count: int
    links: List[SourceStatEntry]


class EdgeStats(TypedDict):
    """Targets ranked by distinct sources, plus the reverse ranking in by_source."""
    max: int
    count: int
    link_count: int
    links: List[EdgeStatEntry]
    by_source: SourceStats


class NodeStats(TypedDict):
    max: int
    count: int
    nodes: List[NodeStatEntry]


class TypeGraph(TypedDict):
    """Relationship graph over a type descriptor snapshot."""
    nodes: Dict[int, str]
    links: List[GraphLink]
    edge_stats: Dict[str, EdgeStats]
    node_stats: Dict[str, NodeStats]
    node_count: int
    link_count_by_kind: Dict[str, int]


class AnalyzeTraceOptions:
    """Configuration for trace analysis."""

    def __init__(
        self,
        force_millis: float = 500,
        skip_millis: float = 100,
        min_span_parent_percentage: float = 0.6,
        expand_types: bool = True,
        import_expression_threshold: int = 10
    ):
        """
        Initialize trace analysis options.

        Args:
            force_millis: Spans at least this long (in ms) are always kept in the
                          span tree, regardless of their parent's duration.
                          Default: 500

            skip_millis: Lower reporting bound in ms. Must not exceed force_millis.
                         Default: 100

            min_span_parent_percentage: A span shorter than force_millis is kept only
                                        if it covers at least this fraction of its
                                        parent's duration.
                                        Default: 0.6

            expand_types: Expand the type ids of hotspot frames into type trees
                          when a types.json snapshot is loaded.
                          Default: True

            import_expression_threshold: Reserved for import-expression reporting.
                                         Default: 10
        """
        self.force_millis = force_millis
        self.skip_millis = skip_millis
        self.min_span_parent_percentage = min_span_parent_percentage
        self.expand_types = expand_types
        self.import_expression_threshold = import_expression_threshold

    def validate(self) -> None:
        """
        Raises:
            InvalidOptionsError: If force_millis is less than skip_millis
        """
        if self.force_millis < self.skip_millis:
            raise InvalidOptionsError("forceMillis cannot be less than skipMillis")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'AnalyzeTraceOptions':
        """Create options from a camelCase dictionary (as sent by API clients)."""
        data = data or {}
        defaults = cls()
        return cls(
            force_millis=data.get('forceMillis', defaults.force_millis),
            skip_millis=data.get('skipMillis', defaults.skip_millis),
            min_span_parent_percentage=data.get(
                'minSpanParentPercentage', defaults.min_span_parent_percentage
            ),
            expand_types=data.get('expandTypes', defaults.expand_types),
            import_expression_threshold=data.get(
                'importExpressionThreshold', defaults.import_expression_threshold
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'forceMillis': self.force_millis,
            'skipMillis': self.skip_millis,
            'minSpanParentPercentage': self.min_span_parent_percentage,
            'expandTypes': self.expand_types,
            'importExpressionThreshold': self.import_expression_threshold,
        }
