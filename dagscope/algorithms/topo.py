"""Topological sorting with cycle detection.

Two interchangeable strategies are provided:

- `kahn_sort`: BFS over in-degrees. The FIFO queue is seeded with every
  in-degree-0 vertex in ascending id order; further vertices are enqueued the
  moment their in-degree reaches zero.
- `dfs_sort`: reverse DFS post-order with an on-path check, using an explicit
  stack.

Both return an empty list when the graph has a cycle. Only a graph with zero
vertices returns an empty list as a successful result, so callers must treat
``order == [] and graph.vertex_count > 0`` as failure.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Deque, Dict, List, Sequence, Tuple

from dagscope.graph.digraph import Graph
from dagscope.logging import get_logger
from dagscope.types import TopoStrategy, Vertex

logger = get_logger(__name__)


@dataclass(frozen=True)
class TopoStats:
    """Operation counters for one topological sort.

    Attributes:
        strategy: Strategy that produced the order.
        pushes: Vertices pushed on the queue (Kahn) or DFS stack.
        pops: Vertices popped from the queue or finished by the DFS.
        in_degree_updates: In-degree decrements (Kahn only).
        cycle_detected: True when the sort failed because of a cycle.
        elapsed_ms: Wall-clock time in milliseconds.
    """

    strategy: TopoStrategy = TopoStrategy.KAHN
    pushes: int = 0
    pops: int = 0
    in_degree_updates: int = 0
    cycle_detected: bool = False
    elapsed_ms: float = 0.0

    @property
    def total_operations(self) -> int:
        return self.pushes + self.pops + self.in_degree_updates

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy.name.lower(),
            "pushes": self.pushes,
            "pops": self.pops,
            "in_degree_updates": self.in_degree_updates,
            "cycle_detected": self.cycle_detected,
            "operations_count": self.total_operations,
            "execution_time_ms": self.elapsed_ms,
        }


def kahn_sort(graph: Graph) -> Tuple[List[Vertex], TopoStats]:
    """Topologically sort ``graph`` with Kahn's algorithm.

    Returns:
        ``(order, stats)``; ``order`` is empty if a cycle exists.
    """
    start = perf_counter()
    n = graph.vertex_count
    adj = graph.adjacency()

    in_degree = [0] * n
    for edges in adj:
        for edge in edges:
            in_degree[edge.target] += 1

    queue: Deque[Vertex] = deque(v for v in range(n) if in_degree[v] == 0)
    pushes = len(queue)
    pops = 0
    updates = 0
    order: List[Vertex] = []

    while queue:
        u = queue.popleft()
        pops += 1
        order.append(u)
        for edge in adj[u]:
            t = edge.target
            in_degree[t] -= 1
            updates += 1
            if in_degree[t] == 0:
                queue.append(t)
                pushes += 1

    cycle = len(order) != n
    stats = TopoStats(
        strategy=TopoStrategy.KAHN,
        pushes=pushes,
        pops=pops,
        in_degree_updates=updates,
        cycle_detected=cycle,
        elapsed_ms=(perf_counter() - start) * 1000.0,
    )
    if cycle:
        logger.debug(
            f"Kahn sort: cycle detected ({len(order)} of {n} vertices ordered)"
        )
        return [], stats
    return order, stats


def dfs_sort(graph: Graph) -> Tuple[List[Vertex], TopoStats]:
    """Topologically sort ``graph`` by reversing the DFS finishing order.

    Roots are taken in ascending id order. Meeting a vertex that is still on
    the current DFS path means a back edge, i.e. a cycle.

    Returns:
        ``(order, stats)``; ``order`` is empty if a cycle exists.
    """
    start = perf_counter()
    n = graph.vertex_count
    adj = graph.adjacency()

    # 0 = unvisited, 1 = on the current path, 2 = finished
    state = [0] * n
    finished: List[Vertex] = []
    pushes = 0
    cycle = False

    for root in range(n):
        if state[root]:
            continue
        state[root] = 1
        pushes += 1
        work: List[Tuple[Vertex, int]] = [(root, 0)]
        while work and not cycle:
            v, pos = work[-1]
            edges = adj[v]
            if pos < len(edges):
                work[-1] = (v, pos + 1)
                t = edges[pos].target
                if state[t] == 0:
                    state[t] = 1
                    pushes += 1
                    work.append((t, 0))
                elif state[t] == 1:
                    cycle = True
            else:
                work.pop()
                state[v] = 2
                finished.append(v)
        if cycle:
            break

    stats = TopoStats(
        strategy=TopoStrategy.DFS,
        pushes=pushes,
        pops=len(finished),
        cycle_detected=cycle,
        elapsed_ms=(perf_counter() - start) * 1000.0,
    )
    if cycle:
        logger.debug("DFS sort: back edge found, graph has a cycle")
        return [], stats
    finished.reverse()
    return finished, stats


def topological_sort(
    graph: Graph, strategy: TopoStrategy = TopoStrategy.KAHN
) -> Tuple[List[Vertex], TopoStats]:
    """Sort ``graph`` with the selected strategy.

    Args:
        graph: Graph expected to be acyclic.
        strategy: `TopoStrategy.KAHN` (default) or `TopoStrategy.DFS`.

    Returns:
        ``(order, stats)``; ``order`` is empty if a cycle exists.

    Raises:
        ValueError: If ``strategy`` is not a known strategy.
    """
    if strategy == TopoStrategy.KAHN:
        return kahn_sort(graph)
    if strategy == TopoStrategy.DFS:
        return dfs_sort(graph)
    raise ValueError(f"Unsupported topological sort strategy: {strategy}")


def is_valid_order(graph: Graph, order: Sequence[Vertex]) -> bool:
    """Check that ``order`` is a permutation respecting every edge of ``graph``."""
    n = graph.vertex_count
    if len(order) != n:
        return False
    position = [-1] * n
    for i, v in enumerate(order):
        if not 0 <= v < n or position[v] != -1:
            return False
        position[v] = i
    return all(position[e.source] < position[e.target] for e in graph.edges())
