import math

import networkx as nx
import pytest

from dagscope.algorithms.dagsp import (
    LONGEST,
    SHORTEST,
    CriticalPathResult,
    DagPathSolver,
    NotADAGError,
    PathResult,
    path_edges,
    reconstruct_path,
)
from dagscope.generator import DatasetGenerator
from dagscope.graph.convert import to_networkx
from dagscope.graph.digraph import Graph
from dagscope.types import CriticalPathMethod, TopoStrategy


class TestSingleSource:
    def test_simple_chain_shortest_and_longest_match(self):
        g = Graph.from_edges(3, [(0, 1, 3), (1, 2, 2)])
        solver = DagPathSolver(g)
        shortest, _ = solver.shortest_paths(0)
        longest, _ = solver.longest_paths(0)
        assert shortest.distances == [0, 3, 5]
        assert longest.distances == [0, 3, 5]
        assert shortest.mode == SHORTEST
        assert longest.mode == LONGEST

    def test_diamond_shortest(self, diamond):
        result, stats = DagPathSolver(diamond).shortest_paths(0)
        assert result.distances[3] == 6
        assert reconstruct_path(result, 3) == [0, 1, 3]
        assert stats.relaxations == 4
        assert stats.passes == 1

    def test_diamond_longest(self, diamond):
        result, _ = DagPathSolver(diamond).longest_paths(0)
        assert result.distances[3] == 11
        assert reconstruct_path(result, 3) == [0, 2, 3]

    @pytest.mark.parametrize("strategy", [TopoStrategy.KAHN, TopoStrategy.DFS])
    def test_strategy_does_not_change_distances(self, strategy, branching_dag):
        result, _ = DagPathSolver(branching_dag, strategy).shortest_paths(0)
        assert result.distances == [0, 2, 4, 5, 8, math.inf]
        assert result.predecessors == [None, 0, 0, 2, 3, None]

    def test_unreachable_vertex_shortest(self, branching_dag):
        result, _ = DagPathSolver(branching_dag).shortest_paths(0)
        assert result.distances[5] == math.inf
        assert result.predecessors[5] is None
        assert not result.reached(5)
        assert reconstruct_path(result, 5) == []
        assert result.reached_vertices() == [0, 1, 2, 3, 4]

    def test_unreachable_vertex_longest(self, branching_dag):
        result, _ = DagPathSolver(branching_dag).longest_paths(0)
        assert result.distances == [0, 2, 4, 9, 12, -math.inf]
        assert result.predecessors[5] is None
        assert reconstruct_path(result, 4) == [0, 1, 3, 4]
        assert reconstruct_path(result, 5) == []

    def test_source_path_is_single_vertex(self, chain4):
        result, _ = DagPathSolver(chain4).shortest_paths(2)
        assert reconstruct_path(result, 2) == [2]
        assert reconstruct_path(result, 0) == []

    def test_negative_weights(self):
        g = Graph.from_edges(3, [(0, 1, -2), (1, 2, -3), (0, 2, 1)])
        solver = DagPathSolver(g)
        shortest, _ = solver.shortest_paths(0)
        longest, _ = solver.longest_paths(0)
        assert shortest.distances == [0, -2, -5]
        assert longest.distances == [0, -2, 1]

    def test_cycle_raises_not_a_dag(self, triangle_with_isolated):
        solver = DagPathSolver(triangle_with_isolated)
        with pytest.raises(NotADAGError, match="not a DAG"):
            solver.shortest_paths(0)
        with pytest.raises(NotADAGError):
            solver.longest_paths(3)

    def test_not_a_dag_is_value_error(self):
        assert issubclass(NotADAGError, ValueError)

    @pytest.mark.parametrize("source", [-1, 4, 100])
    def test_source_out_of_range(self, chain4, source):
        with pytest.raises(IndexError):
            DagPathSolver(chain4).shortest_paths(source)

    def test_repeated_queries_are_independent(self, diamond):
        solver = DagPathSolver(diamond)
        first, _ = solver.shortest_paths(0)
        solver.longest_paths(0)
        solver.shortest_paths(1)
        again, _ = solver.shortest_paths(0)
        assert again.distances == first.distances
        assert again.predecessors == first.predecessors

    def test_to_dict_replaces_infinities(self, branching_dag):
        result, stats = DagPathSolver(branching_dag).shortest_paths(0)
        data = result.to_dict()
        assert data["distances"][5] is None
        assert data["distances"][4] == 8
        assert data["predecessors"][0] is None
        assert stats.to_dict()["operations_count"] == 2 * stats.relaxations

    @pytest.mark.parametrize("seed", [1, 5, 9, 42])
    def test_shortest_matches_networkx(self, seed):
        g = DatasetGenerator(seed).generate_dag(30, 90)
        result, _ = DagPathSolver(g).shortest_paths(0)
        expected = nx.single_source_dijkstra_path_length(to_networkx(g), 0)
        for v in range(g.vertex_count):
            if v in expected:
                assert result.distances[v] == pytest.approx(expected[v])
            else:
                assert result.distances[v] == math.inf

    @pytest.mark.parametrize("seed", [2, 8, 77])
    def test_reconstructed_paths_sum_to_distance(self, seed):
        g = DatasetGenerator(seed).generate_dag(30, 80)
        result, _ = DagPathSolver(g).longest_paths(0)
        for v in result.reached_vertices():
            path = reconstruct_path(result, v)
            assert path[0] == 0 and path[-1] == v
            _, total = path_edges(g, path)
            assert total == pytest.approx(result.distances[v])


class TestReconstructPath:
    def test_out_of_range_target(self):
        result = PathResult(
            source=0, mode=SHORTEST, distances=[0.0, 1.0], predecessors=[None, 0]
        )
        with pytest.raises(IndexError):
            reconstruct_path(result, 2)

    def test_zero_distance_without_predecessor_is_a_path(self):
        # Only the source has no predecessor at distance zero
        result = PathResult(
            source=0,
            mode=SHORTEST,
            distances=[0.0, math.inf],
            predecessors=[None, None],
        )
        assert reconstruct_path(result, 0) == [0]
        assert reconstruct_path(result, 1) == []


class TestCriticalPath:
    def test_chain(self, chain4):
        critical, stats = DagPathSolver(chain4).find_critical_path()
        assert critical.length == 10
        assert critical.source == 0
        assert critical.target == 3
        assert critical.path == [0, 1, 2, 3]
        assert stats.passes == 4
        assert stats.mode == "critical"

    def test_diamond(self, diamond):
        critical, _ = DagPathSolver(diamond).find_critical_path()
        assert critical.path == [0, 2, 3]
        assert critical.length == 11

    def test_best_pair_not_from_first_source(self, branching_dag):
        critical, _ = DagPathSolver(branching_dag).find_critical_path()
        assert critical.path == [5, 4]
        assert critical.length == 20
        assert (critical.source, critical.target) == (5, 4)

    def test_ties_go_to_first_pair(self):
        # 0->1 and 2->3 both weigh 4; (0, 1) comes first
        g = Graph.from_edges(4, [(2, 3, 4), (0, 1, 4)])
        critical, _ = DagPathSolver(g).find_critical_path()
        assert critical.path == [0, 1]

    def test_single_vertex(self):
        critical, _ = DagPathSolver(Graph(1)).find_critical_path()
        assert critical.path == [0]
        assert critical.length == 0
        assert critical.source == 0 and critical.target == 0

    def test_empty_graph(self):
        critical, stats = DagPathSolver(Graph(0)).find_critical_path()
        assert critical.path == []
        assert critical.length == -math.inf
        assert critical.source is None and critical.target is None
        assert critical.to_dict()["length"] is None
        assert stats.relaxations == 0

    def test_cycle_raises(self, triangle_with_isolated):
        with pytest.raises(NotADAGError):
            DagPathSolver(triangle_with_isolated).find_critical_path()

    def test_super_source_on_branching_dag(self, branching_dag):
        critical, stats = DagPathSolver(branching_dag).find_critical_path(
            CriticalPathMethod.SUPER_SOURCE
        )
        assert critical.path == [5, 4]
        assert critical.length == 20
        assert stats.passes == 1

    @pytest.mark.parametrize("seed", [1, 4, 16, 64, 256])
    def test_super_source_matches_exhaustive_length(self, seed):
        g = DatasetGenerator(seed).generate_dag(35, 100)
        solver = DagPathSolver(g)
        exhaustive, _ = solver.find_critical_path(CriticalPathMethod.EXHAUSTIVE)
        fast, _ = solver.find_critical_path(CriticalPathMethod.SUPER_SOURCE)
        assert fast.length == pytest.approx(exhaustive.length)
        _, total = path_edges(g, fast.path)
        assert total == pytest.approx(fast.length)

    @pytest.mark.parametrize("seed", [3, 21, 99])
    def test_length_matches_networkx(self, seed):
        g = DatasetGenerator(seed).generate_dag(30, 70)
        critical, _ = DagPathSolver(g).find_critical_path()
        expected = nx.dag_longest_path_length(nx.DiGraph(to_networkx(g)))
        assert critical.length == pytest.approx(expected)
        _, total = path_edges(g, critical.path)
        assert total == pytest.approx(critical.length)

    def test_to_dict(self, chain4):
        critical, _ = DagPathSolver(chain4).find_critical_path()
        assert critical.to_dict() == {
            "path": [0, 1, 2, 3],
            "length": 10.0,
            "source": 0,
            "target": 3,
        }

    def test_result_is_frozen(self):
        result = CriticalPathResult(path=[0], length=0.0, source=0, target=0)
        with pytest.raises(AttributeError):
            result.length = 1.0


class TestPathEdges:
    def test_edges_and_total(self, diamond):
        edges, total = path_edges(diamond, [0, 2, 3])
        assert [(e.source, e.target) for e in edges] == [(0, 2), (2, 3)]
        assert total == 11

    def test_single_vertex_path(self, diamond):
        assert path_edges(diamond, [1]) == ([], 0.0)

    def test_missing_hop(self, diamond):
        with pytest.raises(ValueError, match="No edge"):
            path_edges(diamond, [0, 3])
