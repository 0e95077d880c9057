#!/usr/bin/env python3
"""
Transaction Aggregate Analyzer - Command Line Interface
"""

import sys
from contextlib import redirect_stdout
from transaction_analyzer import TransactionAnalyzer, InvalidInputError
from transaction_analyzer.web import (
    dumps,
    prepare_flame_graph_results,
    prepare_overview_results,
    prepare_percentile_results,
    prepare_query_results,
)

VIEWS = ('average', 'percentiles', 'flame-graph', 'queries')


def build_view(analyzer, export, args):
    window_from = export.window_from if args.window_from is None else args.window_from
    window_to = export.window_to if args.window_to is None else args.window_to
    if args.view == 'average':
        view = analyzer.overview(export.overview_samples, window_from, window_to,
                                 export.interval_millis)
        return prepare_overview_results(view, analyzer.config.micros_per_milli)
    if args.view == 'percentiles':
        view = analyzer.percentiles(export.percentile_samples, window_from, window_to,
                                    export.interval_millis, args.percentiles)
        return prepare_percentile_results(view)
    if args.view == 'flame-graph':
        return prepare_flame_graph_results(
            analyzer.flame_graph(export.profile, args.include, args.exclude))
    return prepare_query_results(analyzer.queries(export.queries), export.should_have_queries)


def main():
    import argparse
    parser = argparse.ArgumentParser(
        description='Derive chart series and merged summaries from a transaction aggregate export.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python analyze_aggregates.py export.json
  python analyze_aggregates.py export.json --view percentiles -p 0.5 -p 0.99
  python analyze_aggregates.py export.json --view flame-graph --exclude java.lang.Thread
  python analyze_aggregates.py export.json --top-timers 8 -o overview.json
        """
    )
    parser.add_argument('input_file', help='Path to the aggregate export JSON file')
    parser.add_argument('-o', '--output', dest='output_file', default=None,
                        help='Output JSON file (default: stdout)')
    parser.add_argument('--view', choices=VIEWS, default='average', help='View to build')
    parser.add_argument('--from', dest='window_from', type=int, default=None,
                        help='Window start in epoch milliseconds (default: from export)')
    parser.add_argument('--to', dest='window_to', type=int, default=None,
                        help='Window end in epoch milliseconds (default: from export)')
    parser.add_argument('-p', '--percentile', dest='percentiles', type=float, action='append',
                        help='Percentile fraction in [0, 1], repeatable')
    parser.add_argument('--top-timers', type=int, default=5,
                        help='Named timer series in the stacked timer chart')
    parser.add_argument('--include', action='append', default=[],
                        help='Keep only profile samples with a matching frame, repeatable')
    parser.add_argument('--exclude', action='append', default=[],
                        help='Drop profile samples with a matching frame, repeatable')
    parser.add_argument('--workers', type=int, default=None,
                        help='Worker processes for merging very large windows')
    args = parser.parse_args()

    try:
        analyzer = TransactionAnalyzer(top_timer_count=args.top_timers, num_workers=args.workers)
        print("\nConfiguration:", file=sys.stderr)
        print(f"  Input file: {args.input_file}", file=sys.stderr)
        print(f"  View: {args.view}", file=sys.stderr)
        print(f"  Top timers: {args.top_timers}\n", file=sys.stderr)
        # progress goes to stderr so stdout stays valid JSON
        with redirect_stdout(sys.stderr):
            export = analyzer.file_processor.process_file(args.input_file)
        results = build_view(analyzer, export, args)
    except FileNotFoundError:
        print(f"Error: File '{args.input_file}' not found.", file=sys.stderr)
        sys.exit(1)
    except InvalidInputError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        sys.exit(2)

    output = dumps(results, indent=2)
    if args.output_file:
        with open(args.output_file, 'w', encoding='utf-8') as f:
            f.write(output)
        print(f"\n✓ Wrote {args.view} view to {args.output_file}", file=sys.stderr)
    else:
        print(output)


if __name__ == "__main__":
    main()
