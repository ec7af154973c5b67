"""Tests for seeded synthetic dataset generation."""

import json
from pathlib import Path

import networkx as nx
import pytest

from dagscope.algorithms.scc import tarjan_scc
from dagscope.generator import (
    DEFAULT_SUITE,
    MAX_WEIGHT,
    MIN_WEIGHT,
    DatasetGenerator,
    DatasetSpec,
    derive_seed,
)
from dagscope.graph.convert import to_networkx
from dagscope.io import load_graph


def _edge_tuples(graph):
    return [(e.source, e.target, e.weight) for e in graph.edges()]


def test_derive_seed_is_stable_and_positive():
    a = derive_seed(42, "dataset", "x")
    b = derive_seed(42, "dataset", "x")
    c = derive_seed(42, "dataset", "y")
    assert a == b
    assert a != c
    assert 0 <= a <= 0x7FFFFFFF
    assert derive_seed(None, "dataset") is None


def test_dag_edges_point_upwards():
    g = DatasetGenerator(7).generate_dag(20, 50)
    assert g.edge_count == 50
    assert all(e.source < e.target for e in g.edges())
    assert nx.is_directed_acyclic_graph(to_networkx(g))


def test_edges_are_distinct_weighted_and_loop_free():
    g = DatasetGenerator(3).generate_with_cycles(15, 40, 3)
    pairs = [(e.source, e.target) for e in g.edges()]
    assert len(pairs) == len(set(pairs))
    assert all(u != v for u, v in pairs)
    assert all(MIN_WEIGHT <= e.weight <= MAX_WEIGHT for e in g.edges())
    assert all(float(e.weight).is_integer() for e in g.edges())


def test_planted_cycles_create_nontrivial_components():
    g = DatasetGenerator(11).generate_with_cycles(30, 10, 2)
    components, _ = tarjan_scc(g)
    assert max(len(c) for c in components) >= 2


def test_dag_edge_budget_is_bounded():
    # A 4-vertex DAG has at most 6 edges; asking for more must terminate
    g = DatasetGenerator(1).generate_dag(4, 50)
    assert g.edge_count <= 6


def test_single_vertex_dag():
    g = DatasetGenerator(1).generate_dag(1, 5)
    assert g.vertex_count == 1
    assert g.edge_count == 0


def test_cycles_need_two_vertices():
    with pytest.raises(ValueError):
        DatasetGenerator(1).generate_with_cycles(1, 3, 1)


def test_same_seed_same_graph():
    spec = DEFAULT_SUITE[4]
    first = DatasetGenerator(42).generate(spec, graph_id=5)
    second = DatasetGenerator(42).generate(spec, graph_id=5)
    assert _edge_tuples(first.graph) == _edge_tuples(second.graph)


def test_different_seed_different_graph():
    spec = DEFAULT_SUITE[7]
    first = DatasetGenerator(1).generate(spec)
    second = DatasetGenerator(2).generate(spec)
    assert _edge_tuples(first.graph) != _edge_tuples(second.graph)


def test_dataset_labels():
    dag = DatasetSpec("d", 10, 12, 0, "dag")
    dense = DatasetSpec("c", 10, 30, 2, "dense cyclic")
    assert (dag.density, dag.variant) == ("sparse", "dag")
    assert (dense.density, dense.variant) == ("dense", "cyclic")


def test_generate_sets_metadata():
    spec = DEFAULT_SUITE[1]
    graph_input = DatasetGenerator(42).generate(spec, graph_id=2)
    assert graph_input.graph_id == 2
    assert graph_input.source == 0
    assert graph_input.graph.vertex_count == spec.vertices
    assert graph_input.variant == "cyclic"
    assert graph_input.description == spec.description


def test_default_suite_shape():
    assert len(DEFAULT_SUITE) == 9
    assert len({s.name for s in DEFAULT_SUITE}) == 9
    assert [s.cycles == 0 for s in DEFAULT_SUITE].count(True) == 3


def test_generate_suite_writes_loadable_files(tmp_path: Path):
    paths = DatasetGenerator(42).generate_suite(tmp_path / "datasets")
    assert len(paths) == len(DEFAULT_SUITE)
    assert [p.stem for p in paths] == [s.name for s in DEFAULT_SUITE]

    for graph_id, (path, spec) in enumerate(zip(paths, DEFAULT_SUITE), start=1):
        raw = json.loads(path.read_text())
        assert raw["id"] == graph_id
        assert raw["n"] == spec.vertices
        loaded = load_graph(path)
        assert loaded.variant == spec.variant
        assert loaded.density == spec.density
        if spec.cycles == 0:
            assert nx.is_directed_acyclic_graph(to_networkx(loaded.graph))
