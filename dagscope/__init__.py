"""dagscope: directed graph analysis pipeline.

dagscope decomposes a weighted directed graph into strongly connected
components, condenses them into a DAG, orders the DAG topologically and
computes shortest, longest and critical paths over it.

Primary API:
    analyze() / analyze_graph() - Run the whole pipeline on one graph
    analyze_batch() - Run it on many graphs with per-graph failure isolation
    Graph, Edge - Adjacency-list graph model
    tarjan_scc(), build_condensation() - SCC stage
    topological_sort() - Kahn or DFS ordering
    DagPathSolver - Shortest/longest/critical paths on a DAG

Example:
    from dagscope import Graph, analyze

    g = Graph.from_edges(4, [(0, 1, 5), (1, 2, 3), (2, 3, 2)])
    result = analyze(g, source=0)
    result.critical.length  # 10.0
"""

from __future__ import annotations

from dagscope import cli, logging
from dagscope._version import __version__
from dagscope.algorithms import (
    Condensation,
    CriticalPathResult,
    DagPathSolver,
    NotADAGError,
    PathResult,
    build_condensation,
    reconstruct_path,
    tarjan_scc,
    topological_sort,
)
from dagscope.analysis import (
    AnalysisFailure,
    AnalysisReport,
    GraphAnalysis,
    analyze,
    analyze_batch,
    analyze_graph,
)
from dagscope.config import AnalysisConfig
from dagscope.graph import Edge, Graph
from dagscope.io import GraphInput, load_graphs
from dagscope.types import CriticalPathMethod, ParallelEdgePolicy, TopoStrategy

__all__ = [
    # Version
    "__version__",
    # Model
    "Graph",
    "Edge",
    "GraphInput",
    # Algorithms
    "tarjan_scc",
    "build_condensation",
    "Condensation",
    "topological_sort",
    "DagPathSolver",
    "PathResult",
    "CriticalPathResult",
    "reconstruct_path",
    "NotADAGError",
    # Analysis (primary API)
    "analyze",
    "analyze_graph",
    "analyze_batch",
    "GraphAnalysis",
    "AnalysisReport",
    "AnalysisFailure",
    "AnalysisConfig",
    # Options
    "TopoStrategy",
    "CriticalPathMethod",
    "ParallelEdgePolicy",
    # I/O
    "load_graphs",
    # Utilities
    "cli",
    "logging",
]
