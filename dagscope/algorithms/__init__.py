"""Graph algorithms: SCC decomposition, topological sorting and DAG paths."""

from dagscope.algorithms.dagsp import (
    CriticalPathResult,
    DagPathSolver,
    NotADAGError,
    PathResult,
    PathStats,
    path_edges,
    reconstruct_path,
)
from dagscope.algorithms.scc import (
    Condensation,
    SCCStats,
    build_condensation,
    condense,
    tarjan_scc,
)
from dagscope.algorithms.topo import (
    TopoStats,
    dfs_sort,
    is_valid_order,
    kahn_sort,
    topological_sort,
)

__all__ = [
    "Condensation",
    "CriticalPathResult",
    "DagPathSolver",
    "NotADAGError",
    "PathResult",
    "PathStats",
    "SCCStats",
    "TopoStats",
    "build_condensation",
    "condense",
    "dfs_sort",
    "is_valid_order",
    "kahn_sort",
    "path_edges",
    "reconstruct_path",
    "tarjan_scc",
    "topological_sort",
]
