"""Graph primitives and helpers.

This package provides the adjacency-list graph type `Graph` with its `Edge`
record, and NetworkX conversion helpers in `convert`.
"""

from dagscope.graph.digraph import Edge, Graph

__all__ = ["Edge", "Graph"]
