"""Command-line interface for dagscope."""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from pathlib import Path
from time import perf_counter
from typing import Any, Dict, List, Optional

from dagscope.analysis import AnalysisReport, GraphAnalysis, analyze_documents
from dagscope.config import AnalysisConfig
from dagscope.generator import DatasetGenerator
from dagscope.io import ensure_parent_dir, read_document, split_documents, write_json
from dagscope.logging import (
    disable_debug_logging,
    enable_debug_logging,
    get_logger,
    set_global_log_level,
)

logger = get_logger(__name__)


def _format_table(
    headers: List[str],
    rows: List[List[str]],
    min_width: int = 8,
    max_col_width: Optional[int] = None,
) -> str:
    """Format data as a simple ASCII table.

    Args:
        headers: Column headers
        rows: Data rows
        min_width: Minimum column width
        max_col_width: Cells longer than this are clipped with "..."

    Returns:
        Formatted table string
    """
    if not rows:
        return ""

    def clip(val: Any) -> str:
        s = str(val)
        if max_col_width is not None and len(s) > max_col_width:
            return s[: max_col_width - 3] + "..."
        return s

    clipped_headers = [clip(h) for h in headers]
    clipped_rows = [[clip(item) for item in row] for row in rows]

    all_data = [clipped_headers] + clipped_rows
    col_widths = []
    for col_idx in range(len(clipped_headers)):
        max_width = max(len(str(row[col_idx])) for row in all_data)
        col_widths.append(max(max_width, min_width))

    def format_row(row_data: List[str]) -> str:
        return "   " + " | ".join(
            f"{str(item):<{col_widths[i]}}" for i, item in enumerate(row_data)
        )

    lines = [format_row(clipped_headers)]
    lines.append("   " + "-+-".join("-" * width for width in col_widths))
    for row in clipped_rows:
        lines.append(format_row(row))
    return "\n".join(lines)


def _format_length(value: Any) -> str:
    """Return a path length with up to three decimals, or "-" when unset.

    Examples:
        10.0 -> "10"; 1234.5 -> "1,234.5"; None -> "-".
    """
    if value is None:
        return "-"
    v = float(value)
    if not math.isfinite(v):
        return "-"
    s = f"{v:,.3f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s


def _format_duration(seconds: float) -> str:
    """Return a concise human-readable duration string.

    Examples:
        0.123 -> "123.0 ms"; 1.234 -> "1.23 s"; 75.2 -> "1m 15.2s".
    """
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f} ms"
    if seconds < 60.0:
        return f"{seconds:.2f} s"
    minutes = int(seconds // 60)
    rem = seconds - minutes * 60
    return f"{minutes}m {rem:.1f}s"


def _summary_row(analysis: GraphAnalysis) -> List[str]:
    graph = analysis.graph_input.graph
    sp = analysis.shortest_path_summary()
    critical = analysis.critical
    return [
        str(analysis.graph_id),
        str(graph.vertex_count),
        str(graph.edge_count),
        str(len(analysis.components)),
        str(analysis.condensation.graph.edge_count),
        _format_length(sp["path_length"]) if sp else "-",
        _format_length(critical.length) if critical else "-",
        " -> ".join(str(v) for v in critical.path) if critical else "-",
    ]


def _print_report(report: AnalysisReport) -> None:
    headers = [
        "Graph",
        "Vertices",
        "Edges",
        "SCCs",
        "DAG edges",
        "Shortest",
        "Critical",
        "Critical path",
    ]
    rows = [_summary_row(a) for a in report.analyses]
    if rows:
        print(_format_table(headers, rows, min_width=5, max_col_width=40))
    for failure in report.failures:
        print(
            f"❌ Graph {failure.graph_id}: {failure.error_type}: {failure.message}"
        )


def _run_analysis(
    inputs: List[Path],
    config: AnalysisConfig,
    results_path: Optional[Path],
    csv_path: Optional[Path],
    stdout: bool,
) -> None:
    """Analyse every graph in ``inputs`` and export the results.

    Args:
        inputs: Graph document files (JSON or YAML).
        config: Pipeline options.
        results_path: JSON results file, or ``None`` to skip.
        csv_path: CSV summary file, or ``None`` to skip.
        stdout: Whether to also print the JSON results.
    """
    start = perf_counter()
    entries: List[Any] = []
    for path in inputs:
        logger.info(f"Loading graphs from: {path}")
        try:
            entries.extend(split_documents(read_document(path)))
        except FileNotFoundError:
            logger.error(f"Input file not found: {path}")
            print(f"❌ ERROR: Input file not found: {path}")
            sys.exit(1)
        except ValueError as e:
            logger.error(f"Failed to read {path}: {e}")
            print(f"❌ ERROR: Failed to read {path}: {e}")
            sys.exit(1)

    report = analyze_documents(entries, config)
    _print_report(report)

    results: Dict[str, Any] = report.to_dict()
    if results_path is not None:
        written = write_json(results_path, results)
        logger.info(f"Results written to: {written}")
        print(f"✅ Results written to: {written}")
    if csv_path is not None:
        ensure_parent_dir(csv_path)
        report.to_dataframe().to_csv(csv_path, index=False, float_format="%.3f")
        logger.info(f"Summary written to: {csv_path}")
        print(f"✅ Summary written to: {csv_path}")
    if stdout:
        print(json.dumps(results, indent=2, default=str))

    logger.info(
        f"Analyzed {len(report.analyses)} graph(s), {len(report.failures)} "
        f"failed in {_format_duration(perf_counter() - start)}"
    )


def _run_generate(out_dir: Path, seed: Optional[int]) -> None:
    paths = DatasetGenerator(seed).generate_suite(out_dir)
    print(f"✅ Generated {len(paths)} datasets in {out_dir}")


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``dagscope`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="dagscope",
        description="Analyze directed graphs: SCCs, condensation, topological "
        "order, DAG shortest and critical paths.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Suppress info logs (warnings only)"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{analyze,generate}",
        help="Available commands",
    )

    analyze_parser = subparsers.add_parser("analyze", help="Analyze graph files")
    analyze_parser.add_argument(
        "inputs", type=Path, nargs="+", help="Graph documents (JSON or YAML)"
    )
    analyze_parser.add_argument(
        "--results",
        "-r",
        type=Path,
        default=None,
        help="Export full results to this JSON file",
    )
    analyze_parser.add_argument(
        "--csv", type=Path, default=None, help="Export a summary table as CSV"
    )
    analyze_parser.add_argument(
        "--stdout", action="store_true", help="Print JSON results to stdout"
    )
    analyze_parser.add_argument(
        "--topo-strategy",
        choices=["kahn", "dfs"],
        default="kahn",
        help="Topological sort strategy (default: kahn)",
    )
    analyze_parser.add_argument(
        "--critical-path-method",
        choices=["exhaustive", "super_source"],
        default="exhaustive",
        help="Critical path search (default: exhaustive)",
    )
    analyze_parser.add_argument(
        "--parallel-edges",
        choices=["first", "min"],
        default="first",
        help="Weight kept for parallel condensation edges (default: first)",
    )
    analyze_parser.add_argument(
        "--no-critical-path",
        action="store_true",
        help="Skip the critical path search",
    )

    generate_parser = subparsers.add_parser(
        "generate", help="Generate the synthetic dataset suite"
    )
    generate_parser.add_argument("out_dir", type=Path, help="Output directory")
    generate_parser.add_argument(
        "--seed", type=int, default=42, help="Master seed (default: 42)"
    )

    effective_args = sys.argv[1:] if argv is None else argv
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        enable_debug_logging()
        logger.debug("Debug logging enabled")
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        disable_debug_logging()

    if args.command == "analyze":
        config = AnalysisConfig.from_options(
            topo_strategy=args.topo_strategy,
            critical_path_method=args.critical_path_method,
            parallel_edge_policy=args.parallel_edges,
            compute_critical_path=not args.no_critical_path,
        )
        _run_analysis(
            inputs=args.inputs,
            config=config,
            results_path=args.results,
            csv_path=args.csv,
            stdout=args.stdout,
        )
    elif args.command == "generate":
        _run_generate(args.out_dir, args.seed)


if __name__ == "__main__":
    main()
