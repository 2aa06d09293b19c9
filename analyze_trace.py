#!/usr/bin/env python3
"""
TSC Trace Analyzer - Command Line Interface
"""

import json
import os
import sys

from tsc_trace_analyzer import TraceAnalyzer, TraceAnalysisError
from tsc_trace_analyzer.web import prepare_results, prepare_type_graph


def main(argv=None):
    import argparse
    parser = argparse.ArgumentParser(
        description='Analyze TypeScript compiler traces (tsc --generateTrace) and report hot spots.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python analyze_trace.py ./trace-dir
  python analyze_trace.py trace.json --types types.json
  python analyze_trace.py ./trace-dir --force-millis 200 --skip-millis 50
  python analyze_trace.py ./trace-dir --workers 4 -o report.json
        """
    )
    parser.add_argument('input', help='trace output directory, or path to trace.json')
    parser.add_argument('--types', dest='types_file', default=None,
                        help='Path to types.json (found automatically for a directory)')
    parser.add_argument('-o', '--output', dest='output_file', default='analyze-trace.json',
                        help='Output JSON file')
    parser.add_argument('--type-graph-output', dest='type_graph_file', default=None,
                        help='Also write the type graph to this JSON file')
    parser.add_argument('--force-millis', type=float, default=500,
                        help='Spans at least this long (ms) are always kept')
    parser.add_argument('--skip-millis', type=float, default=100,
                        help='Lower reporting bound (ms), must not exceed --force-millis')
    parser.add_argument('--min-span-parent-percentage', type=float, default=0.6,
                        help='Fraction of its parent a shorter span must cover to be kept')
    parser.add_argument('--workers', type=int, default=1,
                        help='Worker processes for the independent analysis passes')
    parser.add_argument('-q', '--quiet', action='store_true', help='Suppress progress output')
    args = parser.parse_args(argv)

    analyzer = TraceAnalyzer(
        force_millis=args.force_millis,
        skip_millis=args.skip_millis,
        min_span_parent_percentage=args.min_span_parent_percentage,
        num_workers=args.workers,
        verbose=not args.quiet
    )

    try:
        if not args.quiet:
            print(f"\nConfiguration:")
            print(f"  Input: {args.input}")
            print(f"  Force millis: {args.force_millis}")
            print(f"  Skip millis: {args.skip_millis}")
            print(f"  Min span parent percentage: {args.min_span_parent_percentage}")
            print(f"  Workers: {args.workers}\n")

        if os.path.isdir(args.input):
            analyzer.process_trace_dir(args.input)
        else:
            analyzer.process_trace_file(args.input, args.types_file)

        with open(args.output_file, 'w', encoding='utf-8') as f:
            json.dump(prepare_results(analyzer), f, indent=2)

        if args.type_graph_file and analyzer.type_graph is not None:
            with open(args.type_graph_file, 'w', encoding='utf-8') as f:
                json.dump(prepare_type_graph(analyzer.type_graph), f)

        if not args.quiet:
            print(f"\n✓ Analysis complete! Results written to {args.output_file}")
    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except TraceAnalysisError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
