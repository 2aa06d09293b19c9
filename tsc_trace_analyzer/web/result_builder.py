"""
Result builder for JSON output.
"""

from typing import Dict, List

from ..core.types import FileStatistics, HotSpot, TypeGraph


def hotspots_to_json(hotspots: List[HotSpot]) -> List[Dict]:
    """
    Convert a hotspot forest to camelCase JSON.

    Uses an explicit stack so arbitrarily deep forests convert without
    recursion. `path`, `types` and `typeTrees` are left out when unset.
    """
    result: List[Dict] = []
    # (frame, list the converted frame is appended to)
    stack = [(hotspot, result) for hotspot in reversed(hotspots)]
    while stack:
        hotspot, siblings = stack.pop()
        node = {
            'description': hotspot['description'],
            'timeMs': hotspot['time_ms'],
            'children': [],
        }
        if hotspot['path'] is not None:
            node['path'] = hotspot['path']
        if hotspot['types'] is not None:
            node['types'] = hotspot['types']
        if hotspot.get('type_trees') is not None:
            node['typeTrees'] = hotspot['type_trees']
        siblings.append(node)
        for child in reversed(hotspot['children']):
            stack.append((child, node['children']))
    return result


def file_statistics_to_json(stats: FileStatistics) -> Dict:
    return {
        'totalFiles': stats['total_files'],
        'totalDuration': stats['total_duration'],
        'meanDuration': stats['mean_duration'],
        'maxDuration': stats['max_duration'],
        'minDuration': stats['min_duration'],
    }


def prepare_results(analyzer) -> Dict:
    """
    Convert analyzer results to the camelCase analyze-trace.json layout.

    Args:
        analyzer: TraceAnalyzer instance with completed analysis

    Returns:
        Dictionary ready for json.dump / jsonify
    """
    depth_limits = {
        kind.value: [event.to_dict() for event in events]
        for kind, events in analyzer.depth_limits.items()
    }

    duplicate_packages = [
        {
            'name': package['name'],
            'instances': [dict(instance) for instance in package['instances']],
        }
        for package in analyzer.duplicate_packages
    ]

    hot_files = [
        {
            'path': hot_file['path'],
            'durationMs': hot_file['duration_ms'],
            'durationFormatted': analyzer.format_time(hot_file['duration_ms']),
        }
        for hot_file in analyzer.hot_files
    ]

    summary = analyzer.summary()

    return {
        'depthLimits': depth_limits,
        'duplicatePackages': duplicate_packages,
        'hotSpots': hotspots_to_json(analyzer.hotspots),
        'unterminatedEvents': [event.to_dict() for event in analyzer.unterminated_events],
        'nodeModulePaths': {name: list(paths) for name, paths in analyzer.node_module_paths.items()},
        'treemap': [dict(node) for node in analyzer.treemap],
        'hotFiles': hot_files,
        'fileStatistics': file_statistics_to_json(analyzer.file_statistics),
        'summary': {
            'eventCount': summary['event_count'],
            'spanCount': summary['span_count'],
            'unterminatedCount': summary['unterminated_count'],
            'treeSpanCount': summary['tree_span_count'],
            'treeDepth': summary['tree_depth'],
            'hotspotFrameCount': summary['hotspot_frame_count'],
            'wallClockDurationUs': summary['wall_clock_duration_us'],
            'wallClockDurationFormatted': summary['wall_clock_duration_formatted'],
            'depthLimitCounts': summary['depth_limit_counts'],
            'options': analyzer.options.to_dict(),
        },
    }


def prepare_type_graph(graph: TypeGraph) -> Dict:
    """
    Convert a TypeGraph to camelCase JSON.

    Node ids become string keys (JSON objects only have string keys); stat
    tuples become arrays.
    """
    edge_stats = {
        kind: {
            'max': stats['max'],
            'count': stats['count'],
            'linkCount': stats['link_count'],
            'links': [[target, list(sources), path] for target, sources, path in stats['links']],
            'bySource': {
                'max': stats['by_source']['max'],
                'count': stats['by_source']['count'],
                'links': [
                    [source, list(targets), path]
                    for source, targets, path in stats['by_source']['links']
                ],
            },
        }
        for kind, stats in graph['edge_stats'].items()
    }

    node_stats = {
        kind: {
            'max': stats['max'],
            'count': stats['count'],
            'nodes': [list(entry) for entry in stats['nodes']],
        }
        for kind, stats in graph['node_stats'].items()
    }

    links: List[Dict] = [dict(link) for link in graph['links']]

    return {
        'nodes': {str(type_id): name for type_id, name in graph['nodes'].items()},
        'links': links,
        'edgeStats': edge_stats,
        'nodeStats': node_stats,
        'nodeCount': graph['node_count'],
        'linkCount': len(links),
        'linkCountByKind': dict(graph['link_count_by_kind']),
    }
