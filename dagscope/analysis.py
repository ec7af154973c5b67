"""Analysis pipeline orchestration.

`analyze_graph` runs the four stages for one input graph:

1. Tarjan SCC decomposition of the input graph.
2. Condensation of the components into a DAG.
3. Topological sort of the condensation.
4. Shortest paths from the source (remapped to its component) and the
   critical path, both on the condensation.

Each run allocates its own working state, so graphs can be analysed
independently in any order or in separate processes. `analyze_batch` and
`analyze_documents` keep going when a graph fails and record the failure
next to the successful analyses.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from dagscope.algorithms.dagsp import (
    CriticalPathResult,
    DagPathSolver,
    NotADAGError,
    PathResult,
    PathStats,
    path_edges,
)
from dagscope.algorithms.scc import (
    Condensation,
    SCCStats,
    build_condensation,
    tarjan_scc,
)
from dagscope.algorithms.topo import TopoStats, topological_sort
from dagscope.config import DEFAULT_CONFIG, AnalysisConfig
from dagscope.graph.digraph import Graph
from dagscope.io import GraphInput, parse_graph
from dagscope.logging import get_logger
from dagscope.types import Vertex

logger = get_logger(__name__)

SHORTEST_PATH_LABEL = "DAG-ShortestPath"
LONGEST_PATH_LABEL = "DAG-LongestPath"

REPORT_COLUMNS = [
    "graph_id",
    "vertices",
    "edges",
    "density",
    "variant",
    "algorithm",
    "operations",
    "path_length",
    "time_ms",
]


def _longest_reached_path(result: PathResult, source: Vertex) -> List[Vertex]:
    """Return the path with the most hops among vertices reached from the source.

    Vertices at distance zero are skipped; ties keep the lowest vertex id. A
    result that reaches nothing else yields ``[source]``.
    """
    best: List[Vertex] = []
    for v, d in enumerate(result.distances):
        if not math.isfinite(d) or d == 0:
            continue
        path: List[Vertex] = []
        current: Optional[Vertex] = v
        while current is not None:
            path.append(current)
            current = result.predecessors[current]
        if len(path) > len(best):
            best = path[::-1]
    return best or [source]


def _edges_payload(graph: Graph, path: Sequence[Vertex]) -> Dict[str, Any]:
    edges, total = path_edges(graph, path)
    return {"edges": [e.to_dict() for e in edges], "path_length": total}


@dataclass
class GraphAnalysis:
    """Outputs of one pipeline run.

    Attributes:
        graph_input: The analysed input.
        config: Options used for the run.
        components: SCCs of the input graph in root-closing order.
        scc_stats: Counters of the SCC stage.
        condensation: Condensation DAG with its vertex-to-component map.
        topo_order: Topological order of the condensation; empty signals a
            cycle, which cannot happen for a correct condensation.
        topo_stats: Counters of the sorting stage.
        dag_source: Component of the input source vertex.
        shortest: Shortest paths on the condensation from ``dag_source``, or
            ``None`` when the stage failed.
        shortest_stats: Counters of the shortest-path stage.
        critical: Critical path of the condensation, or ``None`` when the
            stage failed or was disabled.
        critical_stats: Counters of the critical-path stage.
        errors: Stage name to error message for failed stages.
        elapsed_ms: Wall-clock time of the whole run in milliseconds.
    """

    graph_input: GraphInput
    config: AnalysisConfig
    components: List[List[Vertex]]
    scc_stats: SCCStats
    condensation: Condensation
    topo_order: List[Vertex]
    topo_stats: TopoStats
    dag_source: Vertex
    shortest: Optional[PathResult] = None
    shortest_stats: Optional[PathStats] = None
    critical: Optional[CriticalPathResult] = None
    critical_stats: Optional[PathStats] = None
    errors: Dict[str, str] = field(default_factory=dict)
    elapsed_ms: float = 0.0

    @property
    def graph_id(self) -> int:
        return self.graph_input.graph_id

    @property
    def ok(self) -> bool:
        return not self.errors

    def _base_operations(self) -> int:
        return self.scc_stats.total_operations + self.topo_stats.total_operations

    def _base_time(self) -> float:
        return self.scc_stats.elapsed_ms + self.topo_stats.elapsed_ms

    def shortest_path_summary(self) -> Optional[Dict[str, Any]]:
        """Longest-hop shortest path from the source and its weight."""
        if self.shortest is None:
            return None
        path = _longest_reached_path(self.shortest, self.dag_source)
        summary: Dict[str, Any] = {"path": path}
        summary.update(_edges_payload(self.condensation.graph, path))
        return summary

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready mapping of every stage's output."""
        graph = self.graph_input.graph
        data: Dict[str, Any] = {
            "graph_id": self.graph_id,
            "input_stats": {
                "vertices": graph.vertex_count,
                "edges": graph.edge_count,
                "directed": graph.directed,
                "density": self.graph_input.density,
                "variant": self.graph_input.variant,
                "source": self.graph_input.source,
            },
            "config": self.config.to_dict(),
            "tarjan_scc": {
                "num_sccs": len(self.components),
                "sccs": [list(c) for c in self.components],
                **self.scc_stats.to_dict(),
            },
            "condensation_graph": {
                **self.condensation.to_dict(),
                "vertex_to_component": list(self.condensation.vertex_to_component),
            },
            "topological_sort": {
                "topological_order": list(self.topo_order),
                **self.topo_stats.to_dict(),
            },
            "elapsed_ms": self.elapsed_ms,
        }

        if self.shortest is not None and self.shortest_stats is not None:
            section: Dict[str, Any] = {
                "source": self.graph_input.source,
                "dag_source": self.dag_source,
            }
            section.update(self.shortest_path_summary() or {})
            section["distances"] = self.shortest.to_dict()["distances"]
            section["predecessors"] = list(self.shortest.predecessors)
            section.update(self.shortest_stats.to_dict())
            section["total_operations_count"] = (
                self._base_operations() + self.shortest_stats.total_operations
            )
            section["total_execution_time_ms"] = (
                self._base_time() + self.shortest_stats.elapsed_ms
            )
            data["shortest_path"] = section

        if self.critical is not None and self.critical_stats is not None:
            cp_edges, _ = path_edges(self.condensation.graph, self.critical.path)
            section = {
                "critical_path_length": self.critical.to_dict()["length"],
                "critical_path": list(self.critical.path),
                "source": self.critical.source,
                "target": self.critical.target,
                "edges": [e.to_dict() for e in cp_edges],
            }
            section.update(self.critical_stats.to_dict())
            section["total_operations_count"] = (
                self._base_operations() + self.critical_stats.total_operations
            )
            section["total_execution_time_ms"] = (
                self._base_time() + self.critical_stats.elapsed_ms
            )
            data["longest_path"] = section

        if self.errors:
            data["errors"] = dict(self.errors)
        return data

    def report_rows(self) -> List[Dict[str, Any]]:
        """Return one summary row per path algorithm that ran."""
        graph = self.graph_input.graph
        base = {
            "graph_id": self.graph_id,
            "vertices": graph.vertex_count,
            "edges": graph.edge_count,
            "density": self.graph_input.density,
            "variant": self.graph_input.variant,
        }
        rows: List[Dict[str, Any]] = []
        summary = self.shortest_path_summary()
        if summary is not None and self.shortest_stats is not None:
            rows.append(
                {
                    **base,
                    "algorithm": SHORTEST_PATH_LABEL,
                    "operations": self._base_operations()
                    + self.shortest_stats.total_operations,
                    "path_length": summary["path_length"],
                    "time_ms": self._base_time() + self.shortest_stats.elapsed_ms,
                }
            )
        if self.critical is not None and self.critical_stats is not None:
            rows.append(
                {
                    **base,
                    "algorithm": LONGEST_PATH_LABEL,
                    "operations": self._base_operations()
                    + self.critical_stats.total_operations,
                    "path_length": self.critical.length,
                    "time_ms": self._base_time() + self.critical_stats.elapsed_ms,
                }
            )
        return rows


@dataclass(frozen=True)
class AnalysisFailure:
    """A graph that could not be loaded or analysed.

    Attributes:
        graph_id: Identifier of the graph, or its position in the batch when
            the document has no integer ``id``.
        error_type: Exception class name.
        message: Exception message.
    """

    graph_id: int
    error_type: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "graph_id": self.graph_id,
            "error_type": self.error_type,
            "message": self.message,
        }


@dataclass
class AnalysisReport:
    """Results of a batch run: successful analyses and isolated failures."""

    analyses: List[GraphAnalysis] = field(default_factory=list)
    failures: List[AnalysisFailure] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.analyses) + len(self.failures)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [a.to_dict() for a in self.analyses],
            "failures": [f.to_dict() for f in self.failures],
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Summary table with one row per graph and path algorithm."""
        rows = [row for a in self.analyses for row in a.report_rows()]
        return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def analyze_graph(
    graph_input: GraphInput, config: AnalysisConfig = DEFAULT_CONFIG
) -> GraphAnalysis:
    """Run the full pipeline on one validated input graph.

    A path stage that fails because its graph is not a DAG is recorded in
    ``errors`` and leaves its result as ``None``; no partial distances are
    reported.

    Args:
        graph_input: Validated graph with its source vertex.
        config: Pipeline options.

    Returns:
        The `GraphAnalysis` for the graph.
    """
    start = perf_counter()
    graph = graph_input.graph
    logger.info(
        f"Analyzing graph {graph_input.graph_id}: {graph.vertex_count} vertices, "
        f"{graph.edge_count} edges, source {graph_input.source}"
    )

    components, scc_stats = tarjan_scc(graph)
    condensation = build_condensation(graph, components, config.parallel_edge_policy)
    topo_order, topo_stats = topological_sort(condensation.graph, config.topo_strategy)
    dag_source = condensation.component_of(graph_input.source)

    analysis = GraphAnalysis(
        graph_input=graph_input,
        config=config,
        components=components,
        scc_stats=scc_stats,
        condensation=condensation,
        topo_order=topo_order,
        topo_stats=topo_stats,
        dag_source=dag_source,
    )
    if not topo_order and condensation.component_count > 0:
        logger.error(
            f"Graph {graph_input.graph_id}: condensation has no topological order"
        )

    solver = DagPathSolver(condensation.graph, config.topo_strategy)
    try:
        analysis.shortest, analysis.shortest_stats = solver.shortest_paths(dag_source)
    except NotADAGError as exc:
        logger.error(f"Graph {graph_input.graph_id}: shortest paths failed: {exc}")
        analysis.errors["shortest_path"] = str(exc)

    if config.compute_critical_path:
        try:
            analysis.critical, analysis.critical_stats = solver.find_critical_path(
                config.critical_path_method
            )
        except NotADAGError as exc:
            logger.error(f"Graph {graph_input.graph_id}: critical path failed: {exc}")
            analysis.errors["longest_path"] = str(exc)

    analysis.elapsed_ms = (perf_counter() - start) * 1000.0
    critical_length = analysis.critical.length if analysis.critical else None
    logger.info(
        f"Graph {graph_input.graph_id}: {len(components)} SCCs, "
        f"condensation {condensation.graph.edge_count} edges, "
        f"critical path length {critical_length} "
        f"({analysis.elapsed_ms:.3f} ms)"
    )
    return analysis


def analyze(
    graph: Graph, source: Vertex = 0, config: AnalysisConfig = DEFAULT_CONFIG
) -> GraphAnalysis:
    """Convenience wrapper: analyse a bare `Graph` from ``source``."""
    return analyze_graph(GraphInput(graph=graph, source=source), config)


def _record_failure(report: AnalysisReport, graph_id: int, exc: Exception) -> None:
    logger.error(f"Graph {graph_id}: {type(exc).__name__}: {exc}")
    report.failures.append(
        AnalysisFailure(
            graph_id=graph_id, error_type=type(exc).__name__, message=str(exc)
        )
    )


def analyze_batch(
    inputs: Iterable[GraphInput], config: AnalysisConfig = DEFAULT_CONFIG
) -> AnalysisReport:
    """Analyse several graphs; a failing graph does not stop the others."""
    report = AnalysisReport()
    for graph_input in inputs:
        try:
            report.analyses.append(analyze_graph(graph_input, config))
        except Exception as exc:
            _record_failure(report, graph_input.graph_id, exc)
    return report


def _document_id(entry: Any, position: int) -> int:
    graph_id = entry.get("id") if isinstance(entry, dict) else None
    if isinstance(graph_id, int) and not isinstance(graph_id, bool):
        return graph_id
    return position


def analyze_documents(
    entries: Sequence[Any], config: AnalysisConfig = DEFAULT_CONFIG
) -> AnalysisReport:
    """Validate and analyse raw graph documents one by one.

    Entries that fail validation are recorded as failures with their ``id``
    (or position when it is missing or not an integer); valid entries are
    analysed as usual.
    """
    report = AnalysisReport()
    for position, entry in enumerate(entries):
        graph_id = _document_id(entry, position)
        try:
            graph_input = parse_graph(entry, position)
        except ValueError as exc:
            _record_failure(report, graph_id, exc)
            continue
        try:
            report.analyses.append(analyze_graph(graph_input, config))
        except Exception as exc:
            _record_failure(report, graph_id, exc)
    return report
