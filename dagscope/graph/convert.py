"""Conversion utilities between `Graph` and NetworkX graphs.

NetworkX graphs may use any hashable node names; `from_networkx` maps them to
dense integer ids in iteration order and returns a `NodeMap` so results can be
translated back. `to_networkx` always produces a ``MultiDiGraph`` holding every
stored edge (mirror edges of undirected graphs included) with its weight.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Tuple, Union

import networkx as nx

from dagscope.graph.digraph import Graph

NxGraph = Union[nx.DiGraph, nx.MultiDiGraph, nx.Graph, nx.MultiGraph]


@dataclass
class NodeMap:
    """Bidirectional mapping between node names and integer vertex ids.

    Attributes:
        to_index: Maps original node names to vertex ids.
        to_name: Maps vertex ids back to original node names.
    """

    to_index: Dict[Hashable, int] = field(default_factory=dict)
    to_name: Dict[int, Hashable] = field(default_factory=dict)

    @classmethod
    def from_names(cls, names: List[Hashable]) -> "NodeMap":
        """Create a NodeMap from node names listed in id order."""
        to_index = {name: i for i, name in enumerate(names)}
        to_name = {i: name for i, name in enumerate(names)}
        return cls(to_index=to_index, to_name=to_name)

    def names(self, vertices: List[int]) -> List[Hashable]:
        """Translate a vertex id sequence (e.g. a path) into node names."""
        return [self.to_name[v] for v in vertices]

    def __len__(self) -> int:
        return len(self.to_index)


def from_networkx(
    G: NxGraph,
    *,
    weight_attr: str = "weight",
    default_weight: float = 1.0,
) -> Tuple[Graph, NodeMap]:
    """Convert a NetworkX graph into a `Graph`.

    Directedness follows ``G.is_directed()``. For undirected inputs each
    NetworkX edge is inserted once and mirrored by `Graph.add_edge`.

    Args:
        G: Source NetworkX graph (simple or multi, directed or not).
        weight_attr: Edge attribute holding the weight.
        default_weight: Weight used when the attribute is absent.

    Returns:
        ``(graph, node_map)``.
    """
    node_map = NodeMap.from_names(list(G.nodes()))
    graph = Graph(len(node_map), directed=G.is_directed())
    for u, v, data in G.edges(data=True):
        weight = data.get(weight_attr, default_weight)
        graph.add_edge(node_map.to_index[u], node_map.to_index[v], weight)
    return graph, node_map


def to_networkx(graph: Graph, weight_attr: str = "weight") -> nx.MultiDiGraph:
    """Convert a `Graph` into a NetworkX ``MultiDiGraph``.

    Nodes are the integer ids ``0..n-1``; parallel edges are kept.
    """
    nx_graph = nx.MultiDiGraph()
    nx_graph.add_nodes_from(graph.vertices())
    for edge in graph.edges():
        nx_graph.add_edge(edge.source, edge.target, **{weight_attr: edge.weight})
    return nx_graph
