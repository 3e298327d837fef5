"""Command-line entry point."""

import argparse
import logging

from cell_vsm.cli.analyze import analyze as analyze_func
from cell_vsm.cli.flow import flow as flow_func
from cell_vsm.cli.report import report as report_func
from cell_vsm.cli.store import list_saved as list_func
from cell_vsm.cli.store import save as save_func


def _analyze_command(args: argparse.Namespace) -> None:
    """Handle 'analyze' subcommand."""
    analyze_func(
        map_name=args.map,
        config_dir=args.config,
        raw_material_uph=args.raw_uph,
    )


def _report_command(args: argparse.Namespace) -> None:
    """Handle 'report' subcommand."""
    report_func(
        map_name=args.map,
        config_dir=args.config,
        output_dir=args.output,
        raw_material_uph=args.raw_uph,
    )


def _flow_command(args: argparse.Namespace) -> None:
    """Handle 'flow' subcommand."""
    flow_func(
        map_name=args.map,
        config_dir=args.config,
        duration_sec=args.duration,
        sample_every_sec=args.sample_every,
        output=args.export,
    )


def _save_command(args: argparse.Namespace) -> None:
    """Handle 'save' subcommand."""
    save_func(map_name=args.map, config_dir=args.config, db_path=args.db_path)


def _list_command(args: argparse.Namespace) -> None:
    """Handle 'list' subcommand."""
    list_func(config_dir=args.config, db_path=args.db_path)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="cell-vsm",
        description="Value stream map metrics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  analyze   Print system and per-operation metrics for a map
  report    Write a Markdown report for a map
  flow      Run the deterministic WIP flow model
  save      Store a map in the DuckDB database
  list      List stored maps with their save-time snapshot

Examples:
  cell-vsm analyze --map machining_cell
  cell-vsm analyze --map machining_cell --raw-uph 40
  cell-vsm report --map machining_cell --output reports
  cell-vsm save --map machining_cell --db-path vsm.duckdb
        """,
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # === 'analyze' subcommand ===
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Print metrics for a map",
        description="Compute and print value stream metrics for a map config.",
    )
    analyze_parser.add_argument("--map", required=True, help="Map config name (required)")
    analyze_parser.add_argument(
        "--config", default="config", help="Config directory path (default: config)"
    )
    analyze_parser.add_argument(
        "--raw-uph",
        type=float,
        default=None,
        help="Raw material supply rate override (UPH)",
    )
    analyze_parser.set_defaults(func=_analyze_command)

    # === 'report' subcommand ===
    report_parser = subparsers.add_parser(
        "report",
        help="Write a Markdown report",
        description="Render a Markdown report with constraint analysis and insights.",
    )
    report_parser.add_argument("--map", required=True, help="Map config name (required)")
    report_parser.add_argument(
        "--config", default="config", help="Config directory path (default: config)"
    )
    report_parser.add_argument(
        "--output", default="output", help="Output directory (default: output)"
    )
    report_parser.add_argument(
        "--raw-uph",
        type=float,
        default=None,
        help="Raw material supply rate override (UPH)",
    )
    report_parser.set_defaults(func=_report_command)

    # === 'flow' subcommand ===
    flow_parser = subparsers.add_parser(
        "flow",
        help="Run the WIP flow model",
        description="Run the deterministic WIP flow model over a map's operations.",
    )
    flow_parser.add_argument("--map", required=True, help="Map config name (required)")
    flow_parser.add_argument(
        "--config", default="config", help="Config directory path (default: config)"
    )
    flow_parser.add_argument(
        "--duration",
        type=float,
        default=600.0,
        help="Simulated time in seconds (default: 600)",
    )
    flow_parser.add_argument(
        "--sample-every",
        type=float,
        default=60.0,
        help="Seconds between recorded rows (default: 60)",
    )
    flow_parser.add_argument(
        "--export", default=None, help="Write the trace to this CSV path"
    )
    flow_parser.set_defaults(func=_flow_command)

    # === 'save' subcommand ===
    save_parser = subparsers.add_parser(
        "save",
        help="Store a map in the database",
        description="Store a map config in DuckDB with a metrics snapshot.",
    )
    save_parser.add_argument("--map", required=True, help="Map config name (required)")
    save_parser.add_argument(
        "--config", default="config", help="Config directory path (default: config)"
    )
    save_parser.add_argument(
        "--db-path",
        default=None,
        help="Custom path for DuckDB file (default: ./cell_vsm.duckdb)",
    )
    save_parser.set_defaults(func=_save_command)

    # === 'list' subcommand ===
    list_parser = subparsers.add_parser(
        "list",
        help="List stored maps",
        description="List stored maps with their save-time snapshot values.",
    )
    list_parser.add_argument(
        "--config", default="config", help="Config directory path (default: config)"
    )
    list_parser.add_argument(
        "--db-path",
        default=None,
        help="Custom path for DuckDB file (default: ./cell_vsm.duckdb)",
    )
    list_parser.set_defaults(func=_list_command)

    return parser


def main(argv=None):
    """CLI entry point with subcommands."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    args.func(args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
