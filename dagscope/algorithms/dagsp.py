"""Single-source shortest/longest paths and critical paths on DAGs.

Distances are computed by relaxing edges once, vertex by vertex, in
topological order: when a vertex is processed every one of its predecessors
has already been finalized, so a single O(V+E) pass suffices and negative
weights are handled.

Notes:
    Unreached vertices keep ``+inf`` (shortest) or ``-inf`` (longest) and a
    ``None`` predecessor; that is normal output, not an error. A graph for
    which no topological order exists raises `NotADAGError` instead of
    producing partial distances.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Dict, List, Optional, Sequence, Tuple

from dagscope.algorithms.topo import topological_sort
from dagscope.graph.digraph import Edge, Graph
from dagscope.logging import get_logger
from dagscope.types import CriticalPathMethod, TopoStrategy, Vertex

logger = get_logger(__name__)

SHORTEST = "shortest"
LONGEST = "longest"


class NotADAGError(ValueError):
    """Raised when a path computation is requested on a cyclic graph."""


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


@dataclass(frozen=True)
class PathResult:
    """Distances and predecessors from one source.

    Attributes:
        source: Source vertex.
        mode: ``"shortest"`` or ``"longest"``.
        distances: Distance per vertex; ``+inf``/``-inf`` marks unreached.
        predecessors: Predecessor per vertex on the best path, ``None`` for the
            source and for unreached vertices.
    """

    source: Vertex
    mode: str
    distances: List[float]
    predecessors: List[Optional[Vertex]]

    def reached(self, vertex: Vertex) -> bool:
        return math.isfinite(self.distances[vertex])

    def reached_vertices(self) -> List[Vertex]:
        return [v for v, d in enumerate(self.distances) if math.isfinite(d)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "mode": self.mode,
            "distances": [_finite_or_none(d) for d in self.distances],
            "predecessors": list(self.predecessors),
        }


@dataclass(frozen=True)
class CriticalPathResult:
    """Maximum-weight path over all vertex pairs of a DAG.

    Attributes:
        path: Vertices from ``source`` to ``target``; empty for an empty graph.
        length: Total weight of ``path``; ``-inf`` for an empty graph.
        source: First vertex of the path, or ``None``.
        target: Last vertex of the path, or ``None``.
    """

    path: List[Vertex]
    length: float
    source: Optional[Vertex]
    target: Optional[Vertex]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": list(self.path),
            "length": _finite_or_none(self.length),
            "source": self.source,
            "target": self.target,
        }


@dataclass(frozen=True)
class PathStats:
    """Operation counters for a path computation.

    Attributes:
        mode: ``"shortest"``, ``"longest"`` or ``"critical"``.
        relaxations: Edge relaxations attempted.
        improvements: Relaxations that changed a distance.
        passes: Single-source passes performed.
        elapsed_ms: Wall-clock time in milliseconds, topological sort included.
    """

    mode: str
    relaxations: int = 0
    improvements: int = 0
    passes: int = 0
    elapsed_ms: float = 0.0

    @property
    def total_operations(self) -> int:
        # Each edge visit counts a comparison and a relaxation
        return 2 * self.relaxations

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "relaxations": self.relaxations,
            "improvements": self.improvements,
            "passes": self.passes,
            "operations_count": self.total_operations,
            "execution_time_ms": self.elapsed_ms,
        }


def reconstruct_path(result: PathResult, target: Vertex) -> List[Vertex]:
    """Return the best path from ``result.source`` to ``target``.

    The path is empty only when ``target`` was never reached (no predecessor
    and a nonzero stored distance). The source itself yields ``[source]``.

    Raises:
        IndexError: If ``target`` is out of range.
    """
    n = len(result.distances)
    if not 0 <= target < n:
        raise IndexError(f"Vertex {target} is out of range [0, {n}).")
    if result.predecessors[target] is None and result.distances[target] != 0:
        return []

    path: List[Vertex] = []
    current: Optional[Vertex] = target
    while current is not None:
        path.append(current)
        current = result.predecessors[current]
    path.reverse()
    return path


def path_edges(graph: Graph, path: Sequence[Vertex]) -> Tuple[List[Edge], float]:
    """Return the edges along ``path`` and their total weight.

    For each hop the first stored edge ``u -> v`` is used, which in a
    condensation is the only one.

    Raises:
        ValueError: If some hop has no edge in ``graph``.
    """
    edges: List[Edge] = []
    total = 0.0
    for u, v in zip(path, path[1:]):
        for edge in graph.neighbors(u):
            if edge.target == v:
                edges.append(edge)
                total += edge.weight
                break
        else:
            raise ValueError(f"No edge {u} -> {v} in graph.")
    return edges, total


class DagPathSolver:
    """Shortest, longest and critical path computations on a DAG.

    The solver holds only the graph and the sorting strategy; each call
    allocates its own distance and predecessor arrays, so one solver can
    serve any number of independent queries.
    """

    def __init__(
        self, graph: Graph, topo_strategy: TopoStrategy = TopoStrategy.KAHN
    ) -> None:
        self.graph = graph
        self.topo_strategy = topo_strategy

    def _topological_order(self) -> List[Vertex]:
        order, _ = topological_sort(self.graph, self.topo_strategy)
        if not order and self.graph.vertex_count > 0:
            raise NotADAGError("Graph contains a cycle - not a DAG")
        return order

    def _check_source(self, source: Vertex) -> None:
        n = self.graph.vertex_count
        if not 0 <= source < n:
            raise IndexError(f"Source vertex {source} is out of range [0, {n}).")

    def _relax(
        self, order: Sequence[Vertex], source: Vertex, longest: bool
    ) -> Tuple[PathResult, int, int]:
        n = self.graph.vertex_count
        adj = self.graph.adjacency()
        unreached = -math.inf if longest else math.inf
        dist = [unreached] * n
        pred: List[Optional[Vertex]] = [None] * n
        dist[source] = 0.0

        relaxations = 0
        improvements = 0
        for u in order:
            du = dist[u]
            if du == unreached:
                continue
            for edge in adj[u]:
                relaxations += 1
                candidate = du + edge.weight
                t = edge.target
                if (candidate > dist[t]) if longest else (candidate < dist[t]):
                    dist[t] = candidate
                    pred[t] = u
                    improvements += 1

        result = PathResult(
            source=source,
            mode=LONGEST if longest else SHORTEST,
            distances=dist,
            predecessors=pred,
        )
        return result, relaxations, improvements

    def _single_source(
        self, source: Vertex, longest: bool
    ) -> Tuple[PathResult, PathStats]:
        self._check_source(source)
        start = perf_counter()
        order = self._topological_order()
        result, relaxations, improvements = self._relax(order, source, longest)
        stats = PathStats(
            mode=result.mode,
            relaxations=relaxations,
            improvements=improvements,
            passes=1,
            elapsed_ms=(perf_counter() - start) * 1000.0,
        )
        logger.debug(
            f"DAG {result.mode} paths from {source}: {relaxations} relaxations "
            f"in {stats.elapsed_ms:.3f} ms"
        )
        return result, stats

    def shortest_paths(self, source: Vertex) -> Tuple[PathResult, PathStats]:
        """Compute shortest distances from ``source``.

        Raises:
            IndexError: If ``source`` is out of range.
            NotADAGError: If the graph has a cycle.
        """
        return self._single_source(source, longest=False)

    def longest_paths(self, source: Vertex) -> Tuple[PathResult, PathStats]:
        """Compute longest distances from ``source``.

        Raises:
            IndexError: If ``source`` is out of range.
            NotADAGError: If the graph has a cycle.
        """
        return self._single_source(source, longest=True)

    def find_critical_path(
        self, method: CriticalPathMethod = CriticalPathMethod.EXHAUSTIVE
    ) -> Tuple[CriticalPathResult, PathStats]:
        """Find the maximum-weight path between any two vertices.

        With `CriticalPathMethod.EXHAUSTIVE` a longest-path pass is run from
        every source; the largest finite distance wins, ties going to the
        first pair in ascending (source, target) order. With
        `CriticalPathMethod.SUPER_SOURCE` one pass starts every vertex at
        distance zero; the length is the same, although among equally long
        paths a different one may be reported.

        Raises:
            NotADAGError: If the graph has a cycle.
        """
        start = perf_counter()
        order = self._topological_order()
        n = self.graph.vertex_count

        if n == 0:
            empty = CriticalPathResult(
                path=[], length=-math.inf, source=None, target=None
            )
            elapsed = (perf_counter() - start) * 1000.0
            return empty, PathStats(mode="critical", elapsed_ms=elapsed)

        if method == CriticalPathMethod.SUPER_SOURCE:
            outcome = self._critical_super_source(order)
        elif method == CriticalPathMethod.EXHAUSTIVE:
            outcome = self._critical_exhaustive(order)
        else:
            raise ValueError(f"Unsupported critical path method: {method}")
        result, relaxations, improvements, passes = outcome

        stats = PathStats(
            mode="critical",
            relaxations=relaxations,
            improvements=improvements,
            passes=passes,
            elapsed_ms=(perf_counter() - start) * 1000.0,
        )
        logger.debug(
            f"Critical path {result.source} -> {result.target}, length "
            f"{result.length} ({passes} passes, {relaxations} relaxations)"
        )
        return result, stats

    def _critical_exhaustive(
        self, order: Sequence[Vertex]
    ) -> Tuple[CriticalPathResult, int, int, int]:
        n = self.graph.vertex_count
        best_length = -math.inf
        best: Optional[PathResult] = None
        best_target = -1
        relaxations = 0
        improvements = 0

        for source in range(n):
            result, r, i = self._relax(order, source, longest=True)
            relaxations += r
            improvements += i
            for target, d in enumerate(result.distances):
                if d != -math.inf and d > best_length:
                    best_length = d
                    best = result
                    best_target = target

        # The source itself is always reached at distance 0, so best is set
        assert best is not None
        path = reconstruct_path(best, best_target)
        critical = CriticalPathResult(
            path=path, length=best_length, source=best.source, target=best_target
        )
        return critical, relaxations, improvements, n

    def _critical_super_source(
        self, order: Sequence[Vertex]
    ) -> Tuple[CriticalPathResult, int, int, int]:
        n = self.graph.vertex_count
        adj = self.graph.adjacency()
        dist = [0.0] * n
        pred: List[Optional[Vertex]] = [None] * n
        relaxations = 0
        improvements = 0

        for u in order:
            for edge in adj[u]:
                relaxations += 1
                candidate = dist[u] + edge.weight
                if candidate > dist[edge.target]:
                    dist[edge.target] = candidate
                    pred[edge.target] = u
                    improvements += 1

        best_target = max(range(n), key=lambda v: dist[v])
        path: List[Vertex] = []
        current: Optional[Vertex] = best_target
        while current is not None:
            path.append(current)
            current = pred[current]
        path.reverse()
        critical = CriticalPathResult(
            path=path, length=dist[best_target], source=path[0], target=best_target
        )
        return critical, relaxations, improvements, 1
