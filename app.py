#!/usr/bin/env python3
"""
Flask Web Application for TSC Trace Analyzer
Provides a JSON REST API for analyzing compiler traces and type snapshots.
"""

from flask import Flask, request, jsonify
from werkzeug.exceptions import BadRequest

from tsc_trace_analyzer import AnalyzeTraceOptions, TraceAnalyzer, TraceAnalysisError
from tsc_trace_analyzer.core.type_descriptors import parse_type_descriptors, with_placeholder
from tsc_trace_analyzer.processors import (
    build_check_source_file_treemap,
    build_treemap,
    create_spans,
    get_file_statistics,
    get_hot_files,
)
from tsc_trace_analyzer.processors.event_parser import parse_trace_events
from tsc_trace_analyzer.processors.type_graph import build_type_graph
from tsc_trace_analyzer.web import file_statistics_to_json, prepare_results, prepare_type_graph

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = 500 * 1024 * 1024


def _json_body() -> dict:
    body = request.get_json()
    if not isinstance(body, dict):
        raise BadRequest('Request body must be a JSON object')
    return body


@app.errorhandler(TraceAnalysisError)
def handle_analysis_error(e):
    return jsonify({'error': str(e)}), 400


@app.errorhandler(BadRequest)
def handle_bad_request(e):
    return jsonify({'error': e.description}), 400


@app.route('/api/analyze', methods=['POST'])
def analyze_api():
    """
    API endpoint to analyze a trace.
    Accepts: application/json with fields:
      - 'events': array of trace.json records
      - 'types': array of types.json records (optional)
      - 'options': camelCase AnalyzeTraceOptions (optional)
    Returns: JSON with analysis results
    """
    body = _json_body()

    events = body.get('events')
    if not isinstance(events, list):
        return jsonify({'error': "'events' must be an array"}), 400

    try:
        options = AnalyzeTraceOptions.from_dict(body.get('options'))
        analyzer = TraceAnalyzer.from_options(options, verbose=False)

        types = body.get('types')
        if isinstance(types, list):
            analyzer.load_types(with_placeholder(types))

        analyzer.analyze(events)
        results = prepare_results(analyzer)
        if analyzer.type_graph is not None:
            results['typeGraph'] = prepare_type_graph(analyzer.type_graph)

        return jsonify(results)

    except TraceAnalysisError:
        raise
    except Exception as e:
        return jsonify({'error': str(e)}), 500


@app.route('/api/type-graph', methods=['POST'])
def type_graph_api():
    """
    API endpoint to build a type graph.
    Accepts: application/json with 'types': array of types.json records
    Returns: JSON type graph with edge and node statistics
    """
    body = _json_body()

    types = body.get('types')
    if not isinstance(types, list):
        return jsonify({'error': "'types' must be an array"}), 400

    try:
        descriptors = parse_type_descriptors(with_placeholder(types))
        return jsonify(prepare_type_graph(build_type_graph(descriptors)))
    except TraceAnalysisError:
        raise
    except Exception as e:
        return jsonify({'error': str(e)}), 500


@app.route('/api/treemap', methods=['POST'])
def treemap_api():
    """
    API endpoint for the per-file duration treemap.
    Accepts: application/json with fields:
      - 'events': array of trace.json records
      - 'source': 'duration' (default) or 'checkSourceFile'
      - 'limit': number of hot files to return (optional, default: 10)
    Returns: JSON with 'treemap', 'hotFiles' and 'fileStatistics'
    """
    body = _json_body()

    events = body.get('events')
    if not isinstance(events, list):
        return jsonify({'error': "'events' must be an array"}), 400

    source = body.get('source', 'duration')
    if source not in ('duration', 'checkSourceFile'):
        return jsonify({'error': f"Unknown treemap source '{source}'"}), 400

    try:
        limit = int(body.get('limit', 10))
    except (TypeError, ValueError):
        return jsonify({'error': "'limit' must be an integer"}), 400

    try:
        parsed = parse_trace_events(events)
        parse_result = create_spans(parsed)
        if source == 'checkSourceFile':
            treemap = build_check_source_file_treemap(parse_result)
        else:
            treemap = build_treemap(parsed)

        hot_files = [
            {'path': hot_file['path'], 'durationMs': hot_file['duration_ms']}
            for hot_file in get_hot_files(treemap, limit)
        ]
        return jsonify({
            'treemap': treemap,
            'hotFiles': hot_files,
            'fileStatistics': file_statistics_to_json(get_file_statistics(parse_result)),
        })
    except TraceAnalysisError:
        raise
    except Exception as e:
        return jsonify({'error': str(e)}), 500


if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5001)
