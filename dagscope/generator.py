"""Seeded synthetic graph datasets.

Every dataset draws from its own ``random.Random`` whose seed is derived from
the master seed and the dataset name with SHA-256, so a dataset's content does
not depend on which other datasets were generated before it.
"""

from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Set, Tuple

from dagscope.graph.digraph import Graph
from dagscope.io import GraphInput, PathLike, write_json
from dagscope.logging import get_logger

logger = get_logger(__name__)

MIN_WEIGHT = 1
MAX_WEIGHT = 10


@dataclass(frozen=True)
class DatasetSpec:
    """Parameters of one generated dataset file.

    Attributes:
        name: File stem, e.g. ``"small_1_simple_dag"``.
        vertices: Vertex count.
        edges: Requested number of distinct directed edges.
        cycles: Planted cycles; zero produces a DAG.
        description: Human-readable description.
    """

    name: str
    vertices: int
    edges: int
    cycles: int
    description: str

    @property
    def density(self) -> str:
        return "dense" if self.edges >= 2 * self.vertices else "sparse"

    @property
    def variant(self) -> str:
        return "cyclic" if self.cycles else "dag"


#: Small (6-10), medium (10-20) and large (20-50 vertex) datasets.
DEFAULT_SUITE: Tuple[DatasetSpec, ...] = (
    DatasetSpec("small_1_simple_dag", 8, 10, 0, "Simple DAG"),
    DatasetSpec("small_2_one_cycle", 10, 15, 1, "One small cycle"),
    DatasetSpec("small_3_dense_cycles", 8, 20, 2, "Dense with cycles"),
    DatasetSpec("medium_1_sparse_dag", 15, 20, 0, "Sparse DAG"),
    DatasetSpec("medium_2_multiple_sccs", 18, 35, 3, "Multiple SCCs"),
    DatasetSpec("medium_3_mixed", 20, 40, 2, "Mixed structure"),
    DatasetSpec("large_1_dag", 40, 60, 0, "Large DAG"),
    DatasetSpec("large_2_dense", 30, 120, 4, "Large dense with SCCs"),
    DatasetSpec("large_3_sparse_sccs", 50, 80, 5, "Large sparse with SCCs"),
)


def derive_seed(master_seed: Optional[int], *components: Any) -> Optional[int]:
    """Derive a positive 31-bit seed from a master seed and identifiers.

    Returns ``None`` when ``master_seed`` is ``None`` (non-deterministic).
    """
    if master_seed is None:
        return None
    seed_input = f"{master_seed}:" + ":".join(str(c) for c in components)
    digest = hashlib.sha256(seed_input.encode()).digest()
    return int.from_bytes(digest[:4], byteorder="big") & 0x7FFFFFFF


class DatasetGenerator:
    """Random weighted digraphs with optional planted cycles.

    Edges are distinct ordered pairs without self-loops, weighted with
    integers in ``[MIN_WEIGHT, MAX_WEIGHT]``.
    """

    def __init__(self, seed: Optional[int] = 42) -> None:
        self.seed = seed

    def _rng(self, *components: Any) -> random.Random:
        rng = random.Random()
        derived = derive_seed(self.seed, *components)
        if derived is not None:
            rng.seed(derived)
        return rng

    @staticmethod
    def _add_random_edges(
        rng: random.Random,
        graph: Graph,
        existing: Set[Tuple[int, int]],
        count: int,
        acyclic: bool,
    ) -> int:
        n = graph.vertex_count
        added = 0
        attempts = 0
        max_attempts = count * 10
        while added < count and attempts < max_attempts:
            attempts += 1
            u = rng.randrange(n)
            v = rng.randrange(n)
            if u == v:
                continue
            if acyclic and u > v:
                # Edges only go from lower to higher ids
                u, v = v, u
            if (u, v) in existing:
                continue
            graph.add_edge(u, v, rng.randint(MIN_WEIGHT, MAX_WEIGHT))
            existing.add((u, v))
            added += 1
        return added

    def generate_dag(
        self, vertices: int, edges: int, rng: Optional[random.Random] = None
    ) -> Graph:
        """Generate a DAG whose edges all point from lower to higher ids.

        Fewer than ``edges`` edges are produced when the attempt budget runs
        out, e.g. when more edges are requested than ``n*(n-1)/2``.
        """
        rng = rng or self._rng("dag", vertices, edges)
        graph = Graph(vertices, directed=True)
        if vertices > 1:
            self._add_random_edges(rng, graph, set(), edges, acyclic=True)
        return graph

    def generate_with_cycles(
        self,
        vertices: int,
        edges: int,
        cycles: int,
        rng: Optional[random.Random] = None,
    ) -> Graph:
        """Generate a digraph with ``cycles`` planted cycles plus random edges.

        Each planted cycle joins 2 to ``min(6, vertices)`` distinct vertices.

        Raises:
            ValueError: If cycles are requested on fewer than two vertices.
        """
        if cycles and vertices < 2:
            raise ValueError("Cycles need at least two vertices.")
        rng = rng or self._rng("cyclic", vertices, edges, cycles)
        graph = Graph(vertices, directed=True)
        existing: Set[Tuple[int, int]] = set()
        added = 0

        for _ in range(cycles):
            if added >= edges:
                break
            size = 2 + rng.randrange(min(5, vertices - 1))
            members = rng.sample(range(vertices), size)
            for i, u in enumerate(members):
                v = members[(i + 1) % size]
                if (u, v) not in existing:
                    graph.add_edge(u, v, rng.randint(MIN_WEIGHT, MAX_WEIGHT))
                    existing.add((u, v))
                    added += 1

        if added < edges:
            self._add_random_edges(rng, graph, existing, edges - added, acyclic=False)
        return graph

    def generate(self, spec: DatasetSpec, graph_id: int = 0) -> GraphInput:
        """Generate the graph described by ``spec`` with source vertex 0."""
        rng = self._rng("dataset", spec.name)
        if spec.cycles:
            graph = self.generate_with_cycles(
                spec.vertices, spec.edges, spec.cycles, rng
            )
        else:
            graph = self.generate_dag(spec.vertices, spec.edges, rng)
        return GraphInput(
            graph=graph,
            source=0,
            graph_id=graph_id,
            density=spec.density,
            variant=spec.variant,
            description=spec.description,
        )

    def generate_suite(
        self, out_dir: PathLike, suite: Tuple[DatasetSpec, ...] = DEFAULT_SUITE
    ) -> List[Path]:
        """Write one JSON file per dataset in ``suite`` and return the paths."""
        out_dir = Path(out_dir)
        written: List[Path] = []
        for graph_id, spec in enumerate(suite, start=1):
            graph_input = self.generate(spec, graph_id)
            path = write_json(out_dir / f"{spec.name}.json", graph_input.to_dict())
            logger.info(
                f"Generated {path} ({spec.description}: {spec.vertices} vertices, "
                f"{graph_input.graph.edge_count} edges)"
            )
            written.append(path)
        return written
