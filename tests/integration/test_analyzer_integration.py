"""
Integration tests for the full trace analyzer workflow.
"""
import json
import pytest
from unittest.mock import Mock

from tsc_trace_analyzer import TraceAnalyzer
from tsc_trace_analyzer.core.errors import TraceParseError, TypesParseError, UnmatchedEndError
from tsc_trace_analyzer.processors.depth_limits import DepthLimitKind
from tsc_trace_analyzer.processors.file_processor import TraceFileProcessor
from tsc_trace_analyzer.web import hotspots_to_json, prepare_results, prepare_type_graph


class TestTraceAnalyzerIntegration:
    """Integration tests for end-to-end trace analysis."""

    def test_process_trace_dir(self, trace_dir, capsys):
        """Test analyzing a generateTrace output directory."""
        analyzer = TraceAnalyzer(version_reader=Mock(return_value="1.2.3"))
        analyzer.process_trace_dir(str(trace_dir))

        assert len(analyzer.events) == 15
        assert analyzer.unterminated_events == []
        assert [h["description"] for h in analyzer.hotspots] == ["Check file /proj/src/a.ts"]
        assert len(analyzer.depth_limits[DepthLimitKind.INSTANTIATE_TYPE]) == 1
        assert list(analyzer.node_module_paths) == ["foo", "bar", "@scope/pkg"]
        assert [p["name"] for p in analyzer.duplicate_packages] == ["foo"]
        assert analyzer.duplicate_packages[0]["instances"][0]["version"] == "1.2.3"
        assert analyzer.hot_files == [{"path": "/proj/src/a.ts", "duration_ms": pytest.approx(700.0)}]

        graph = analyzer.type_graph
        assert graph["node_count"] == 7
        assert len(graph["links"]) == 7

        out = capsys.readouterr().out
        assert "Completed reading file: 15 events found." in out
        assert "Found 1 top-level hot spots" in out

    def test_process_trace_dir_quiet(self, trace_dir, capsys):
        """Test that verbose=False also silences the file loader."""
        analyzer = TraceAnalyzer(verbose=False, version_reader=Mock(return_value="1.2.3"))
        analyzer.process_trace_dir(str(trace_dir))

        assert len(analyzer.events) == 15
        assert capsys.readouterr().out == ""

    def test_hotspot_type_trees(self, sample_records, sample_types):
        """Test that hotspot type ids are expanded once a snapshot is loaded."""
        analyzer = TraceAnalyzer(verbose=False)
        analyzer.load_types([{"id": 0, "flags": []}] + sample_types)
        analyzer.analyze(sample_records)

        check = analyzer.hotspots[0]
        compare = check["children"][0]["children"][0]
        assert check["type_trees"] is None
        assert [tree["name"] for tree in compare["type_trees"]] == ["Foo", "Bar"]

        bar = compare["type_trees"][1]
        assert [child["name"] for child in bar["children"]] == ["Foo", "[Type 9 Not Found]"]

        results = prepare_results(analyzer)
        assert "typeTrees" in results["hotSpots"][0]["children"][0]["children"][0]
        json.dumps(results)

    def test_hotspot_type_trees_disabled(self, sample_records, sample_types):
        """Test that expand_types=False keeps only the raw type ids."""
        analyzer = TraceAnalyzer(verbose=False, expand_types=False)
        analyzer.load_types([{"id": 0, "flags": []}] + sample_types)
        analyzer.analyze(sample_records)

        compare = analyzer.hotspots[0]["children"][0]["children"][0]
        assert compare["types"] == [5, 6]
        assert compare["type_trees"] is None

    def test_summary_counts(self, sample_records):
        """Test the span tree and hotspot counts in the summary."""
        analyzer = TraceAnalyzer(verbose=False)
        analyzer.analyze(sample_records)
        summary = analyzer.summary()

        assert summary["tree_span_count"] == 3
        assert summary["tree_depth"] == 3
        assert summary["hotspot_frame_count"] == 3

    def test_quiet_analyzer(self, sample_records, capsys):
        """Test that verbose=False silences the driver."""
        analyzer = TraceAnalyzer(verbose=False)
        analyzer.analyze(sample_records)
        analyzer._report_summary()
        assert capsys.readouterr().out == ""

    def test_parallel_workers_match_sequential(self, sample_records):
        """Test that running the passes on worker processes changes nothing."""
        sequential = TraceAnalyzer(verbose=False)
        sequential.analyze(sample_records)

        parallel = TraceAnalyzer(verbose=False, num_workers=2)
        parallel.analyze(sample_records)

        assert parallel.hotspots == sequential.hotspots
        assert parallel.treemap == sequential.treemap
        assert parallel.node_module_paths == sequential.node_module_paths

    def test_unterminated_begin(self, make_record):
        """Test that a lone Begin is reported and still drives the tree."""
        analyzer = TraceAnalyzer(force_millis=0, skip_millis=0, verbose=False)
        analyzer.analyze([make_record("createProgram", "B", 0, configFilePath="/tsconfig.json")])

        assert [e.name for e in analyzer.unterminated_events] == ["createProgram"]
        assert len(analyzer.span_tree.root.children) == 1

    def test_parse_error_aborts(self, sample_records):
        """Test that one bad record aborts with no partial results."""
        sample_records[5]["args"] = {}
        analyzer = TraceAnalyzer(verbose=False)
        with pytest.raises(TraceParseError):
            analyzer.analyze(sample_records)
        assert analyzer.hotspots == []
        assert analyzer.span_tree is None

    def test_unmatched_end_aborts(self, make_record):
        """Test that an orphan End aborts the analysis."""
        analyzer = TraceAnalyzer(verbose=False)
        with pytest.raises(UnmatchedEndError):
            analyzer.analyze([make_record("checkSourceFile", "E", 5, path="/a.ts")])

    def test_type_graph_rebuilt_on_new_snapshot(self, sample_types):
        """Test that loading a new snapshot invalidates the cached graph."""
        analyzer = TraceAnalyzer(verbose=False)
        analyzer.load_types([{"id": 0, "flags": []}] + sample_types)
        first = analyzer.type_graph
        assert analyzer.type_graph is first

        analyzer.load_types([{"id": 0, "flags": []}, {"id": 1, "flags": ["Any"], "intrinsicName": "any"}])
        second = analyzer.type_graph
        assert second is not first
        assert second["nodes"] == {1: "any"}

    def test_bad_types_rejected(self):
        """Test that invalid types.json records fail."""
        analyzer = TraceAnalyzer(verbose=False)
        with pytest.raises(TypesParseError):
            analyzer.load_types([{"id": 0, "flags": []}, {"id": "x"}])

    def test_no_type_graph_without_types(self, sample_records):
        """Test that the graph is None when no snapshot was loaded."""
        analyzer = TraceAnalyzer(verbose=False)
        analyzer.analyze(sample_records)
        assert analyzer.type_graph is None


class TestResultBuilder:
    """Integration tests for JSON output."""

    def test_prepare_results_layout(self, sample_records):
        """Test the camelCase analyze-trace.json layout."""
        analyzer = TraceAnalyzer(verbose=False, version_reader=Mock(return_value="unknown"))
        analyzer.analyze(sample_records)
        results = prepare_results(analyzer)

        assert set(results) == {
            "depthLimits", "duplicatePackages", "hotSpots", "unterminatedEvents",
            "nodeModulePaths", "treemap", "hotFiles", "fileStatistics", "summary",
        }
        assert results["fileStatistics"]["totalFiles"] == 2
        assert results["summary"]["hotspotFrameCount"] == 3
        assert set(results["depthLimits"]) == {kind.value for kind in DepthLimitKind}
        assert results["hotSpots"][0]["timeMs"] == 800
        assert "types" not in results["hotSpots"][0]
        assert results["hotSpots"][0]["children"][0]["children"][0]["types"] == [5, 6]
        assert results["summary"]["eventCount"] == 15
        assert results["summary"]["options"]["forceMillis"] == 500

        # Must be plain JSON
        json.dumps(results)

    def test_deep_hotspots_to_json(self):
        """Test converting a hotspot chain deeper than the recursion limit."""
        depth = 1500
        root = node = {
            "description": "frame", "time_ms": 1, "path": None, "types": None,
            "type_trees": None, "children": [],
        }
        for _ in range(depth - 1):
            child = dict(node, children=[])
            node["children"].append(child)
            node = child

        converted = hotspots_to_json([root])

        levels, current = 1, converted[0]
        while current["children"]:
            current = current["children"][0]
            levels += 1
        assert levels == depth
        assert "path" not in current

    def test_prepare_type_graph_layout(self, sample_types):
        """Test that the graph serializes with string node keys."""
        analyzer = TraceAnalyzer(verbose=False)
        analyzer.load_types([{"id": 0, "flags": []}] + sample_types)
        data = prepare_type_graph(analyzer.type_graph)

        assert data["nodes"]["5"] == "Foo"
        assert data["linkCount"] == 7
        assert data["edgeStats"]["union"]["links"][2] == [5, [2], "/proj/src/foo.ts"]
        assert data["nodeStats"]["typeArguments"]["nodes"] == [[6, "Bar", 2, "/proj/src/bar.ts"]]
        assert data["edgeStats"]["union"]["count"] == 3
        assert data["edgeStats"]["union"]["bySource"]["links"] == [[2, [3, 4, 5], None]]
        assert data["nodeStats"]["unionTypes"]["count"] == 1
        json.dumps(data)


class TestTraceFileProcessor:
    """Integration tests for the streaming loader."""

    def test_load_bare_array(self, temp_json_file, sample_records):
        """Test loading the compiler's bare-array trace format."""
        path = temp_json_file(sample_records, "trace.json")
        records = TraceFileProcessor(verbose=False).load_trace_events(path)

        assert len(records) == len(sample_records)
        assert isinstance(records[0]["ts"], int)

    def test_load_trace_events_object(self, temp_json_file, sample_records):
        """Test loading the {"traceEvents": [...]} form."""
        path = temp_json_file({"traceEvents": sample_records}, "wrapped.json")
        assert len(TraceFileProcessor(verbose=False).load_trace_events(path)) == len(sample_records)

    def test_float_timestamps_are_floats(self, temp_json_file, make_record):
        """Test that fractional timestamps are read as floats, not Decimals."""
        path = temp_json_file([make_record("createProgram", "B", 12.5, configFilePath="x")])
        records = TraceFileProcessor(verbose=False).load_trace_events(path)
        assert type(records[0]["ts"]) is float

    def test_load_types_inserts_placeholder(self, temp_json_file, sample_types):
        """Test that slot 0 is the placeholder."""
        path = temp_json_file(sample_types, "types.json")
        records = TraceFileProcessor(verbose=False).load_types(path)

        assert records[0] == {"id": 0, "flags": []}
        assert [r["id"] for r in records[1:]] == [t["id"] for t in sample_types]

    def test_missing_trace_json(self, tmp_path):
        """Test that a directory without trace.json fails."""
        with pytest.raises(FileNotFoundError):
            TraceFileProcessor.find_trace_files(str(tmp_path))

    def test_types_json_optional(self, temp_json_file, sample_records, tmp_path):
        """Test that types.json is optional."""
        temp_json_file(sample_records, "trace.json")
        files = TraceFileProcessor.find_trace_files(str(tmp_path))
        assert set(files) == {"trace"}
