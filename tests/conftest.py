"""Shared pytest fixtures: small sample graphs with known answers."""

from __future__ import annotations

import pytest

from dagscope.graph.digraph import Graph


@pytest.fixture
def chain4() -> Graph:
    # 0 --5--> 1 --3--> 2 --2--> 3
    return Graph.from_edges(4, [(0, 1, 5), (1, 2, 3), (2, 3, 2)])


@pytest.fixture
def diamond() -> Graph:
    #        [5]      [1]
    #   ┌─────────►1─────────┐
    #   │                    ▼
    #   0                    3
    #   │                    ▲
    #   └─────────►2─────────┘
    #        [1]      [10]
    return Graph.from_edges(4, [(0, 1, 5), (0, 2, 1), (1, 3, 1), (2, 3, 10)])


@pytest.fixture
def triangle_with_isolated() -> Graph:
    # 0 -> 1 -> 2 -> 0 plus isolated vertices 3 and 4
    return Graph.from_edges(5, [(0, 1, 1), (1, 2, 1), (2, 0, 1)])


@pytest.fixture
def mixed_sccs() -> Graph:
    # SCCs: {0, 1, 2}, {3, 4}, {5}
    #
    #   {0,1,2} --(0->5, 7)--------------> {5}
    #      │                                ▲
    #      └--(1->3, 9) and (2->3, 4)--> {3,4} --(4->5, 2)
    return Graph.from_edges(
        6,
        [
            (0, 1, 1),
            (1, 2, 2),
            (2, 0, 3),
            (2, 3, 4),
            (3, 4, 1),
            (4, 3, 1),
            (4, 5, 2),
            (0, 5, 7),
            (1, 3, 9),
        ],
    )


@pytest.fixture
def branching_dag() -> Graph:
    # Two sources (0, 5), a sink (4) and an unreachable-from-0 vertex (5)
    return Graph.from_edges(
        6,
        [
            (0, 1, 2),
            (0, 2, 4),
            (1, 3, 7),
            (2, 3, 1),
            (3, 4, 3),
            (5, 4, 20),
        ],
    )
