"""Adjacency-list weighted graph over dense integer vertices.

`Graph` stores, for each vertex ``0..n-1``, the ordered list of its outgoing
`Edge` records. Edge order is insertion order and every algorithm in
`dagscope.algorithms` iterates it as stored, so results are deterministic for
a fixed insertion sequence. Undirected graphs materialize the mirror edge
explicitly at insertion time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Sequence, Tuple

from dagscope.types import Vertex, Weight

EdgeTuple = Tuple[Vertex, Vertex, Weight]


@dataclass(frozen=True)
class Edge:
    """Directed weighted edge owned by the adjacency list of ``source``.

    Attributes:
        source: Tail vertex.
        target: Head vertex.
        weight: Edge weight.
    """

    source: Vertex
    target: Vertex
    weight: float

    def to_dict(self) -> Dict[str, Any]:
        return {"u": self.source, "v": self.target, "w": self.weight}


class Graph:
    """Weighted graph with a fixed vertex set ``0..vertex_count-1``.

    This class enforces:
      - The vertex set is fixed at construction; edges are only appended.
      - Edge endpoints outside ``[0, vertex_count)`` raise ``IndexError``
        (negative ids included, which a plain list would silently wrap).
      - Edges are immutable once inserted.
    """

    __slots__ = ("_n", "_directed", "_adj", "_inserted")

    def __init__(self, vertex_count: int, directed: bool = True) -> None:
        """Initialize an empty graph.

        Args:
            vertex_count: Number of vertices; must not be negative.
            directed: Whether ``add_edge`` inserts a single directed edge
                (True) or an edge pair (False).

        Raises:
            ValueError: If ``vertex_count`` is negative.
        """
        if vertex_count < 0:
            raise ValueError(f"Vertex count must be >= 0, got {vertex_count}.")
        self._n = int(vertex_count)
        self._directed = bool(directed)
        self._adj: List[List[Edge]] = [[] for _ in range(self._n)]
        self._inserted: List[Edge] = []

    @classmethod
    def from_edges(
        cls,
        vertex_count: int,
        edges: Iterable[EdgeTuple],
        directed: bool = True,
    ) -> Graph:
        """Build a graph from ``(u, v, w)`` tuples, inserted in the given order."""
        graph = cls(vertex_count, directed)
        for u, v, w in edges:
            graph.add_edge(u, v, w)
        return graph

    @property
    def vertex_count(self) -> int:
        return self._n

    @property
    def directed(self) -> bool:
        return self._directed

    @property
    def edge_count(self) -> int:
        """Number of stored edges (an undirected edge counts twice)."""
        return sum(len(edges) for edges in self._adj)

    def __len__(self) -> int:
        return self._n

    def __repr__(self) -> str:
        kind = "directed" if self._directed else "undirected"
        return f"Graph(vertex_count={self._n}, edges={self.edge_count}, {kind})"

    def _check_vertex(self, v: Vertex) -> None:
        if not 0 <= v < self._n:
            raise IndexError(f"Vertex {v} is out of range [0, {self._n}).")

    def add_edge(self, u: Vertex, v: Vertex, weight: Weight) -> None:
        """Append the edge ``u -> v`` (and ``v -> u`` for undirected graphs).

        Raises:
            IndexError: If ``u`` or ``v`` is outside ``[0, vertex_count)``.
        """
        self._check_vertex(u)
        self._check_vertex(v)
        w = float(weight)
        edge = Edge(u, v, w)
        self._adj[u].append(edge)
        self._inserted.append(edge)
        if not self._directed:
            self._adj[v].append(Edge(v, u, w))

    def neighbors(self, u: Vertex) -> Sequence[Edge]:
        """Return the outgoing edges of ``u`` in insertion order.

        The returned tuple is a snapshot; the graph itself is not exposed.
        """
        self._check_vertex(u)
        return tuple(self._adj[u])

    def adjacency(self) -> Sequence[Sequence[Edge]]:
        """Return the adjacency lists for all vertices.

        Exposed for the algorithms' inner loops; treat as read-only.
        """
        return self._adj

    def vertices(self) -> range:
        return range(self._n)

    def edges(self) -> Iterator[Edge]:
        """Iterate all stored edges, vertex by vertex in ascending order."""
        for edges in self._adj:
            yield from edges

    def out_degree(self, u: Vertex) -> int:
        self._check_vertex(u)
        return len(self._adj[u])

    def reverse(self) -> Graph:
        """Return a new directed graph with every stored edge flipped."""
        rev = Graph(self._n, directed=True)
        for edge in self.edges():
            rev.add_edge(edge.target, edge.source, edge.weight)
        return rev

    def to_dict(self) -> Dict[str, Any]:
        """Return a mapping suitable for JSON serialization.

        Edges are listed in insertion order as passed to `add_edge`, so mirror
        edges of undirected graphs are not repeated and the mapping loads back
        into an equal graph.
        """
        return {
            "n": self._n,
            "directed": self._directed,
            "edges": [edge.to_dict() for edge in self._inserted],
        }
