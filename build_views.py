"""
Build Migration Flow Views
Reads a migration response JSON file and writes the graph, matrix and Sankey views
"""

import os
import json

from tabulate import tabulate

from migration_flow.matrix import SparseMonthlyMatrices
from migration_flow.models import parse_response
from migration_flow.pipeline import MigrationFlowEngine
from migration_flow.projection import LocationDirectory
from migration_flow.summary import top_flows, calculate_summary_stats
from migration_flow.diagnostics import PipelineBenchmark
from migration_flow.utils import Config, parse_args, ensure_dir


def write_json(payload, path):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    print(f"  ✓ Saved: {path}")


def main(argv=None):
    """Main execution function"""
    args = parse_args(argv)
    config = Config.from_args(args)
    benchmark = PipelineBenchmark()

    print("="*80)
    print("MIGRATION FLOW VIEW PIPELINE")
    print("="*80)
    print(f"Input: {args.response}")
    print(f"Layout: {config.layout}")
    print("="*80)

    # ========================================
    # Stage 1: Load response
    # ========================================
    benchmark.start_stage("Data Loading")
    print("\nLoading response...")

    with open(args.response, 'r', encoding='utf-8') as f:
        response = parse_response(json.load(f))

    print(f"  Response type: {type(response).__name__}")
    print(f"  Periods: {len(response.time_periods):,}")
    print(f"  Flows: {len(response.flows):,}")
    print(f"  Locations: {len(response.data):,}")

    directory = None
    if args.locations:
        directory = LocationDirectory.from_json(args.locations)
        print(f"  Directory units: {len(directory):,}")

    monthly = None
    if args.monthly:
        monthly = SparseMonthlyMatrices.from_json(args.monthly, config.district_separator)
        print(f"  Monthly matrices: {len(monthly.available_months()):,}")
    benchmark.end_stage("Data Loading")

    # ========================================
    # Stage 2: Build views
    # ========================================
    benchmark.start_stage("View Construction")
    engine = MigrationFlowEngine(config, directory=directory)

    graph = engine.build_graph_view(response, args.period)
    print(f"\nGraph view ({graph.period_id}): {len(graph.nodes):,} nodes, "
          f"{len(graph.connections):,} connections")

    matrix = engine.build_matrix_view(response)
    print(f"Matrix view: {len(matrix.names)} x {len(matrix.names)}")

    sankey = engine.build_sankey_view(response)
    print(f"Sankey view: {len(sankey.nodes):,} nodes, {len(sankey.links):,} links")

    monthly_views = monthly.monthly_matrices() if monthly is not None else None
    if monthly_views is not None:
        print(f"Monthly matrices: {len(monthly_views):,} months")
    benchmark.end_stage("View Construction")

    # ========================================
    # Stage 3: Save
    # ========================================
    benchmark.start_stage("Save Views")
    print("\nSaving views...")
    ensure_dir(config.output_dir)
    write_json(graph.to_dict(), os.path.join(config.output_dir, 'graph.json'))
    write_json(matrix.to_dict(), os.path.join(config.output_dir, 'matrix.json'))
    write_json(sankey.to_dict(), os.path.join(config.output_dir, 'sankey.json'))
    write_json(engine.periods(response), os.path.join(config.output_dir, 'periods.json'))
    if monthly_views is not None:
        write_json(monthly_views, os.path.join(config.output_dir, 'monthly.json'))
    benchmark.end_stage("Save Views")

    # ========================================
    # Stage 4: Summary
    # ========================================
    print("\n" + "="*80)
    print("TOP FLOWS")
    print("="*80)
    rows = [
        [f.origin.name or f.origin.id, f.destination.name or f.destination.id, f.period_id, f"{f.count:,.0f}"]
        for f in top_flows(response.flows, limit=10)
    ]
    print(tabulate(rows, headers=['Origin', 'Destination', 'Period', 'Count'], tablefmt='simple'))

    if response.data:
        stats = calculate_summary_stats(response.data)
        print(f"\nTotal move-in: {stats['total_move_in']:,.0f}")
        print(f"Total move-out: {stats['total_move_out']:,.0f}")
        print(f"Locations: {stats['location_count']:,}")

    engine.diagnostics.print_report()
    benchmark.print_report()

    print("="*80)
    print("VIEW PIPELINE COMPLETE")
    print("="*80)
    print(f"Output: {config.output_dir}")


if __name__ == "__main__":
    main()
