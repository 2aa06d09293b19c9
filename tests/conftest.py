"""
Pytest configuration and shared fixtures for tsc trace analyzer tests.
"""
import json
import pytest

from tsc_trace_analyzer.core.events import EVENT_SCHEMAS
from tsc_trace_analyzer.processors.event_parser import TraceEventParser


@pytest.fixture
def make_record():
    """Build a raw trace.json record; `cat` is taken from the event schema."""
    def _make(event_name, ph, ts, dur=None, s=None, **args):
        record = {
            "name": event_name,
            "cat": EVENT_SCHEMAS[event_name].cat,
            "ph": ph,
            "pid": 1,
            "tid": 1,
            "ts": ts,
            "args": args,
        }
        if dur is not None:
            record["dur"] = dur
        if s is not None:
            record["s"] = s
        return record

    return _make


@pytest.fixture
def make_event(make_record):
    """Build a validated TraceEvent."""
    parser = TraceEventParser()

    def _make(event_name, ph, ts, dur=None, s=None, **args):
        return parser.parse_record(make_record(event_name, ph, ts, dur=dur, s=s, **args))

    return _make


@pytest.fixture
def sample_records(make_record):
    """
    Small but realistic compiler trace.

    With default options the pruned tree is
    root[checkSourceFile a.ts[checkExpression[structuredTypeRelatedTo]]].
    """
    return [
        make_record("TracingStartedInBrowser", "M", 0),
        make_record("process_name", "M", 0, name="tsc"),
        make_record("createProgram", "B", 100, configFilePath="/proj/tsconfig.json"),
        make_record("findSourceFile", "X", 200, dur=50,
                    fileName="/proj/node_modules/foo/index.d.ts"),
        make_record("findSourceFile", "X", 300, dur=50,
                    fileName="/proj/node_modules/bar/node_modules/foo/index.d.ts"),
        make_record("findSourceFile", "X", 350, dur=10,
                    fileName="/proj/node_modules/@scope/pkg/lib/a.d.ts"),
        make_record("createProgram", "E", 1000, configFilePath="/proj/tsconfig.json"),
        make_record("checkSourceFile", "B", 1000, path="/proj/src/a.ts"),
        make_record("checkExpression", "X", 1100, dur=700000,
                    kind=210, pos=0, end=42, path="/proj/src/a.ts"),
        make_record("structuredTypeRelatedTo", "X", 1200, dur=600000, sourceId=5, targetId=6),
        make_record("checkSourceFile", "E", 801000, path="/proj/src/a.ts"),
        make_record("checkSourceFile", "B", 801000, path="/proj/src/b.ts"),
        make_record("instantiateType_DepthLimit", "I", 850000, s="t",
                    typeId=3, instantiationDepth=100, instantiationCount=5000000),
        make_record("checkTypeRelatedTo_DepthLimit", "I", 860000, s="t",
                    sourceId=5, targetId=6, depth=3, targetDepth=3),
        make_record("checkSourceFile", "E", 901000, path="/proj/src/b.ts"),
    ]


@pytest.fixture
def sample_types():
    """Raw types.json records (without the id 0 placeholder)."""
    return [
        {"id": 1, "flags": ["Any"], "intrinsicName": "any"},
        {"id": 2, "flags": ["Union"], "unionTypes": [3, 4, 5]},
        {"id": 3, "flags": ["StringLiteral"], "display": "\"a\""},
        {"id": 4, "flags": ["StringLiteral"], "display": "\"b\""},
        {
            "id": 5,
            "flags": ["Object"],
            "symbolName": "Foo",
            "firstDeclaration": {
                "path": "/proj/src/foo.ts",
                "start": {"line": 1, "character": 0},
                "end": {"line": 3, "character": 1},
            },
        },
        {
            "id": 6,
            "flags": ["Object"],
            "symbolName": "Bar",
            "typeArguments": [5, 9],
            "referenceLocation": {
                "path": "/proj/src/bar.ts",
                "start": {"line": 2, "character": 4},
                "end": {"line": 2, "character": 12},
            },
        },
        {
            "id": 7,
            "flags": ["Conditional"],
            "conditionalCheckType": 5,
            "conditionalExtendsType": 6,
            "conditionalTrueType": -1,
            "conditionalFalseType": 3,
        },
    ]


@pytest.fixture
def trace_dir(tmp_path, sample_records, sample_types):
    """Directory laid out like `tsc --generateTrace` output."""
    with open(tmp_path / "trace.json", "w") as f:
        json.dump(sample_records, f)
    with open(tmp_path / "types.json", "w") as f:
        json.dump(sample_types, f)
    return tmp_path


@pytest.fixture
def temp_json_file(tmp_path):
    """Create a temporary JSON file and return a helper function."""
    def _create_file(data, name=None):
        file_path = tmp_path / (name or f"test_{id(data)}.json")
        with open(file_path, "w") as f:
            json.dump(data, f)
        return str(file_path)

    return _create_file
