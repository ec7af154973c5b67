"""Strongly connected components (Tarjan) and condensation graphs.

`tarjan_scc` runs Tarjan's single-pass algorithm with an explicit work stack of
``(vertex, next edge position)`` frames instead of host recursion, so deep
chains do not exhaust the interpreter stack. Discovery indices, low-links and
pop order match the textbook recursive form exactly.

Notes:
    Components are returned in the order their roots close, which is a reverse
    topological order of the condensation. Vertices inside a component appear
    in stack pop order, i.e. the root is always last.
"""

from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Any, Dict, List, Sequence, Tuple

from dagscope.graph.digraph import Graph
from dagscope.logging import get_logger
from dagscope.types import ParallelEdgePolicy, Vertex

logger = get_logger(__name__)

Component = List[Vertex]

_UNVISITED = -1


@dataclass(frozen=True)
class SCCStats:
    """Operation counters for one SCC decomposition.

    Attributes:
        dfs_visits: Vertices discovered by the DFS.
        edges_explored: Edges examined from discovered vertices.
        stack_operations: Pushes plus pops on the component stack.
        low_link_updates: Low-link relaxations that lowered a value.
        component_count: Number of components emitted.
        elapsed_ms: Wall-clock time in milliseconds.
    """

    dfs_visits: int = 0
    edges_explored: int = 0
    stack_operations: int = 0
    low_link_updates: int = 0
    component_count: int = 0
    elapsed_ms: float = 0.0

    @property
    def total_operations(self) -> int:
        return (
            self.dfs_visits
            + self.edges_explored
            + self.stack_operations
            + self.low_link_updates
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dfs_visits": self.dfs_visits,
            "edges_explored": self.edges_explored,
            "stack_operations": self.stack_operations,
            "low_link_updates": self.low_link_updates,
            "component_count": self.component_count,
            "operations_count": self.total_operations,
            "execution_time_ms": self.elapsed_ms,
        }


@dataclass(frozen=True)
class Condensation:
    """Quotient DAG obtained by contracting each component to one vertex.

    Attributes:
        graph: Directed graph over component ids ``0..k-1``.
        components: Component list the condensation was built from.
        vertex_to_component: Component id of every original vertex.
    """

    graph: Graph
    components: Tuple[Tuple[Vertex, ...], ...]
    vertex_to_component: Tuple[int, ...]

    @property
    def component_count(self) -> int:
        return len(self.components)

    def component_of(self, vertex: Vertex) -> int:
        """Map an original vertex id into condensation space.

        Raises:
            IndexError: If ``vertex`` is not a vertex of the original graph.
        """
        if not 0 <= vertex < len(self.vertex_to_component):
            raise IndexError(
                f"Vertex {vertex} is out of range "
                f"[0, {len(self.vertex_to_component)})."
            )
        return self.vertex_to_component[vertex]

    def members(self, component: int) -> Tuple[Vertex, ...]:
        return self.components[component]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vertices": self.graph.vertex_count,
            "edges": self.graph.edge_count,
            "edge_list": [edge.to_dict() for edge in self.graph.edges()],
        }


def tarjan_scc(graph: Graph) -> Tuple[List[Component], SCCStats]:
    """Decompose ``graph`` into strongly connected components.

    DFS roots are taken in ascending vertex order and every vertex's edges are
    followed in stored order. A vertex whose low-link equals its discovery
    index closes a component: the component stack is popped down to and
    including it.

    Args:
        graph: Graph to decompose. Undirected graphs work as well; each
            connected component then forms one SCC.

    Returns:
        ``(components, stats)``. The components partition ``0..n-1``.
    """
    start = perf_counter()
    n = graph.vertex_count
    adj = graph.adjacency()

    index = [_UNVISITED] * n
    low = [0] * n
    on_stack = [False] * n
    comp_stack: List[Vertex] = []
    components: List[Component] = []

    next_index = 0
    dfs_visits = 0
    edges_explored = 0
    stack_ops = 0
    low_updates = 0

    for root in range(n):
        if index[root] != _UNVISITED:
            continue

        index[root] = low[root] = next_index
        next_index += 1
        dfs_visits += 1
        comp_stack.append(root)
        on_stack[root] = True
        stack_ops += 1
        work: List[Tuple[Vertex, int]] = [(root, 0)]

        while work:
            v, pos = work[-1]
            edges = adj[v]
            if pos < len(edges):
                work[-1] = (v, pos + 1)
                edges_explored += 1
                t = edges[pos].target
                if index[t] == _UNVISITED:
                    # Descend; the low-link of v is relaxed when t finishes
                    index[t] = low[t] = next_index
                    next_index += 1
                    dfs_visits += 1
                    comp_stack.append(t)
                    on_stack[t] = True
                    stack_ops += 1
                    work.append((t, 0))
                elif on_stack[t] and low[t] < low[v]:
                    low[v] = low[t]
                    low_updates += 1
                continue

            # All edges of v explored
            work.pop()
            if low[v] == index[v]:
                component: Component = []
                while True:
                    w = comp_stack.pop()
                    on_stack[w] = False
                    stack_ops += 1
                    component.append(w)
                    if w == v:
                        break
                components.append(component)
            if work:
                parent = work[-1][0]
                if low[v] < low[parent]:
                    low[parent] = low[v]
                    low_updates += 1

    stats = SCCStats(
        dfs_visits=dfs_visits,
        edges_explored=edges_explored,
        stack_operations=stack_ops,
        low_link_updates=low_updates,
        component_count=len(components),
        elapsed_ms=(perf_counter() - start) * 1000.0,
    )
    logger.debug(
        f"Tarjan SCC: {n} vertices, {len(components)} components, "
        f"{edges_explored} edges explored in {stats.elapsed_ms:.3f} ms"
    )
    return components, stats


def vertex_component_map(
    components: Sequence[Sequence[Vertex]], vertex_count: int
) -> Tuple[int, ...]:
    """Return the component id of each vertex.

    Raises:
        ValueError: If the components do not partition ``0..vertex_count-1``
            (a vertex is missing, repeated, or out of range).
    """
    mapping = [_UNVISITED] * vertex_count
    for comp_id, component in enumerate(components):
        for v in component:
            if not 0 <= v < vertex_count:
                raise ValueError(
                    f"Component {comp_id} contains vertex {v} outside "
                    f"[0, {vertex_count})."
                )
            if mapping[v] != _UNVISITED:
                raise ValueError(
                    f"Vertex {v} appears in components {mapping[v]} and {comp_id}."
                )
            mapping[v] = comp_id
    missing = [v for v, c in enumerate(mapping) if c == _UNVISITED]
    if missing:
        raise ValueError(f"Vertices not covered by any component: {missing[:10]}")
    return tuple(mapping)


def build_condensation(
    graph: Graph,
    components: Sequence[Sequence[Vertex]],
    policy: ParallelEdgePolicy = ParallelEdgePolicy.FIRST,
) -> Condensation:
    """Contract every component of ``graph`` into a single vertex.

    Vertices are walked in ascending id order and their edges in stored order.
    Edges inside a component are dropped. Several original edges between the
    same ordered component pair collapse into one condensation edge; with
    ``ParallelEdgePolicy.FIRST`` the first weight seen is kept and later ones
    are ignored, with ``ParallelEdgePolicy.MIN`` the smallest weight is kept.
    Either way condensation edges are inserted in first-seen order.

    Args:
        graph: Original graph.
        components: Any component list covering every vertex exactly once.
        policy: Weight kept for parallel inter-component edges.

    Returns:
        The `Condensation`, whose graph is acyclic when ``components`` are
        the SCCs of ``graph``.
    """
    vertex_to_comp = vertex_component_map(components, graph.vertex_count)

    pair_weight: Dict[Tuple[int, int], float] = {}
    for edge in graph.edges():
        a = vertex_to_comp[edge.source]
        b = vertex_to_comp[edge.target]
        if a == b:
            continue
        key = (a, b)
        if key not in pair_weight:
            pair_weight[key] = edge.weight
        elif policy == ParallelEdgePolicy.MIN and edge.weight < pair_weight[key]:
            pair_weight[key] = edge.weight

    dag = Graph(len(components), directed=True)
    for (a, b), weight in pair_weight.items():
        dag.add_edge(a, b, weight)

    logger.debug(
        f"Condensation: {len(components)} vertices, {dag.edge_count} edges "
        f"(policy={policy.name})"
    )
    return Condensation(
        graph=dag,
        components=tuple(tuple(c) for c in components),
        vertex_to_component=vertex_to_comp,
    )


def condense(
    graph: Graph, policy: ParallelEdgePolicy = ParallelEdgePolicy.FIRST
) -> Tuple[Condensation, SCCStats]:
    """Run `tarjan_scc` and build the condensation from its components."""
    components, stats = tarjan_scc(graph)
    return build_condensation(graph, components, policy), stats
