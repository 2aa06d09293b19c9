"""
Main trace analyzer orchestrator.
"""

from typing import Callable, Dict, Iterable, List, Optional, Union

from ..core.events import TraceEvent
from ..core.type_descriptors import TypeDescriptor, parse_type_descriptors
from ..core.types import (
    AnalyzeTraceOptions,
    DuplicatedPackage,
    FileStatistics,
    HotFile,
    HotSpot,
    TreemapNode,
    TypeGraph,
)
from ..extractors import get_duplicate_packages, read_package_version
from ..formatters import format_micros, format_time
from ..processors import (
    ParallelAnalysisRunner,
    TraceEventParser,
    TraceFileProcessor,
    build_type_graph,
    count_frames,
    create_span_tree,
    create_spans,
    create_type_registry,
    depth_limit_counts,
    expand_hotspot_types,
    get_file_statistics,
    get_hot_files,
    unterminated_events,
)
from ..processors.depth_limits import DepthLimits
from ..processors.span_builder import ParseResult, SpanTree


class TraceAnalyzer:
    """Main orchestrator for trace analysis."""

    def __init__(
        self,
        force_millis: float = 500,
        skip_millis: float = 100,
        min_span_parent_percentage: float = 0.6,
        expand_types: bool = True,
        import_expression_threshold: int = 10,
        num_workers: int = 1,
        verbose: bool = True,
        version_reader: Callable[[str], str] = read_package_version
    ):
        """
        Initialize the TraceAnalyzer.

        Args:
            force_millis: Spans at least this long (ms) always stay in the span tree
            skip_millis: Lower reporting bound (ms); must not exceed force_millis
            min_span_parent_percentage: Fraction of the parent a shorter span must cover
            expand_types: Expand hotspot type ids into type trees when types are loaded
            import_expression_threshold: Reserved for import-expression reporting
            num_workers: Worker processes for the independent passes (1 = sequential)
            verbose: If False, suppresses progress output
            version_reader: Callable returning the package version installed at a path
        """
        # Configuration
        self.options = AnalyzeTraceOptions(
            force_millis=force_millis,
            skip_millis=skip_millis,
            min_span_parent_percentage=min_span_parent_percentage,
            expand_types=expand_types,
            import_expression_threshold=import_expression_threshold
        )
        self.verbose = verbose
        self.version_reader = version_reader

        # Trace analysis results
        self.events: List[TraceEvent] = []
        self.parse_result: Optional[ParseResult] = None
        self.span_tree: Optional[SpanTree] = None
        self.unterminated_events: List[TraceEvent] = []
        self.hotspots: List[HotSpot] = []
        self.depth_limits: DepthLimits = {}
        self.node_module_paths: Dict[str, List[str]] = {}
        self.duplicate_packages: List[DuplicatedPackage] = []
        self.treemap: List[TreemapNode] = []
        self.hot_files: List[HotFile] = []
        self.file_statistics: Optional[FileStatistics] = None

        # Type snapshot; the graph is rebuilt whenever the snapshot changes
        self.type_descriptors: List[TypeDescriptor] = []
        self._type_graph: Optional[TypeGraph] = None

        # Initialize components
        self.file_processor = TraceFileProcessor(verbose)
        self.event_parser = TraceEventParser()
        self.runner = ParallelAnalysisRunner(num_workers)

    @classmethod
    def from_options(cls, options: AnalyzeTraceOptions, **kwargs) -> 'TraceAnalyzer':
        """Create an analyzer from an existing AnalyzeTraceOptions instance."""
        return cls(
            force_millis=options.force_millis,
            skip_millis=options.skip_millis,
            min_span_parent_percentage=options.min_span_parent_percentage,
            expand_types=options.expand_types,
            import_expression_threshold=options.import_expression_threshold,
            **kwargs
        )

    def _log(self, message: str):
        if self.verbose:
            print(message)

    def analyze(self, records: Iterable[Union[Dict, TraceEvent]]):
        """
        Run the whole trace pipeline over an event log.

        Options are checked first, then every record is validated before any
        span is built. The hotspot, depth-limit, node-module and treemap passes
        only read the parsed events and span tree, so they go to the runner
        together (plus the type graph when a snapshot is loaded and not built).
        With expand_types on and a snapshot loaded, the type ids of hotspot
        frames are then expanded into type trees.

        Args:
            records: Raw trace.json records or already parsed TraceEvents

        Raises:
            InvalidOptionsError: If force_millis is less than skip_millis
            TraceParseError: If any record is invalid
            UnmatchedEndError: If an End event has no pending Begin
        """
        self.options.validate()

        records = list(records)
        if all(isinstance(r, TraceEvent) for r in records):
            self.events = records
        else:
            self.events = self.event_parser.parse(records)

        # Pass 1: Match Begin/End pairs into spans
        self.parse_result = create_spans(self.events)
        self.unterminated_events = unterminated_events(self.parse_result)

        # Pass 2: Build the pruned span tree
        self.span_tree = create_span_tree(self.parse_result, self.options)

        # Pass 3: Independent read-only consumers
        work_items = [
            ('hotspots', self.span_tree),
            ('depth_limits', self.events),
            ('node_module_paths', self.events),
            ('treemap', self.events),
        ]
        if self.type_descriptors and self._type_graph is None:
            work_items.append(('type_graph', self.type_descriptors))

        results = self.runner.run(work_items)

        self.hotspots = results['hotspots']
        self.depth_limits = results['depth_limits']
        self.node_module_paths = results['node_module_paths']
        self.treemap = results['treemap']
        if 'type_graph' in results:
            self._type_graph = results['type_graph']

        if self.options.expand_types and self.type_descriptors:
            expand_hotspot_types(self.hotspots, create_type_registry(self.type_descriptors))

        self.hot_files = get_hot_files(self.treemap)
        self.file_statistics = get_file_statistics(self.parse_result)

        # Pass 4: Collaborators that may touch the disk
        self.duplicate_packages = get_duplicate_packages(self.node_module_paths, self.version_reader)

    def load_types(self, records: Iterable[Union[Dict, TypeDescriptor]]):
        """
        Replace the type snapshot and drop any graph built from the old one.

        Args:
            records: Raw types.json records (index 0 the placeholder) or parsed descriptors

        Raises:
            TypesParseError: If any record is invalid
        """
        records = list(records)
        if all(isinstance(r, TypeDescriptor) for r in records):
            self.type_descriptors = records
        else:
            self.type_descriptors = parse_type_descriptors(records)
        self._type_graph = None

    @property
    def type_graph(self) -> Optional[TypeGraph]:
        """Graph over the current type snapshot, built on first access."""
        if self._type_graph is None and self.type_descriptors:
            self._type_graph = build_type_graph(self.type_descriptors)
        return self._type_graph

    def process_trace_file(self, file_path: str, types_path: Optional[str] = None):
        """
        Load a trace.json file (and optionally types.json) and analyze it.

        Args:
            file_path: Path to trace.json
            types_path: Optional path to types.json
        """
        if types_path:
            self.load_types(self.file_processor.load_types(types_path))

        self.analyze(self.file_processor.load_trace_events(file_path))
        self._report_summary()

    def process_trace_dir(self, dir_path: str):
        """
        Analyze a `tsc --generateTrace` output directory.

        Args:
            dir_path: Directory holding trace.json and, optionally, types.json
        """
        files = self.file_processor.find_trace_files(dir_path)
        self.process_trace_file(files['trace'], files.get('types'))

    def _report_summary(self):
        span_count = len(self.parse_result.spans) if self.parse_result else 0
        self._log(f"\nFound {len(self.events)} events forming {span_count} spans")
        self._log(f"Found {len(self.unterminated_events)} unterminated events")
        self._log(
            f"Found {len(self.hotspots)} top-level hot spots "
            f"({count_frames(self.hotspots)} frames in total)"
        )

        total_depth_limits = sum(depth_limit_counts(self.depth_limits).values())
        self._log(f"Found {total_depth_limits} depth limit events")
        self._log(
            f"Found {len(self.node_module_paths)} node_modules packages, "
            f"{len(self.duplicate_packages)} installed more than once"
        )

        if self.hot_files:
            hottest = self.hot_files[0]
            self._log(f"Hottest file: {hottest['path']} ({format_time(hottest['duration_ms'])})")

        if self.type_descriptors:
            graph = self.type_graph
            self._log(f"Type graph: {graph['node_count']} types, {len(graph['links'])} links")

    def summary(self) -> Dict:
        """Headline numbers of the last analysis."""
        wall_clock = 0.0
        tree_span_count = 0
        tree_depth = 0
        if self.span_tree is not None:
            wall_clock = self.span_tree.root.duration
            for depth, span in self.span_tree.walk():
                if not span.is_root:
                    tree_span_count += 1
                    tree_depth = max(tree_depth, depth)
        return {
            'event_count': len(self.events),
            'span_count': len(self.parse_result.spans) if self.parse_result else 0,
            'unterminated_count': len(self.unterminated_events),
            'tree_span_count': tree_span_count,
            'tree_depth': tree_depth,
            'hotspot_frame_count': count_frames(self.hotspots),
            'wall_clock_duration_us': wall_clock,
            'wall_clock_duration_formatted': format_micros(wall_clock),
            'depth_limit_counts': {
                kind.value: count for kind, count in depth_limit_counts(self.depth_limits).items()
            },
        }

    def format_time(self, ms: float) -> str:
        """
        Format time in milliseconds to a human-readable string.

        Args:
            ms: Time in milliseconds

        Returns:
            Formatted time string
        """
        return format_time(ms)
