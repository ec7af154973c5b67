"""Graph document loading and result export.

Input documents are JSON or YAML mappings describing one graph, or a mapping
with a ``graphs`` list holding several::

    {"id": 1, "directed": true, "n": 3, "source": 0,
     "edges": [{"u": 0, "v": 1, "w": 3}, {"u": 1, "v": 2, "w": 2}]}

Each graph is checked against the packaged JSON schema and then for value
ranges (vertex count, source and edge endpoints). A violation rejects the
whole graph with ``ValueError`` before any algorithm runs.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import jsonschema
import yaml

from dagscope.graph.digraph import Graph
from dagscope.logging import get_logger
from dagscope.types import Vertex

logger = get_logger(__name__)

PathLike = Union[str, Path]

_YAML_SUFFIXES = {".yaml", ".yml"}


@dataclass(frozen=True)
class GraphInput:
    """A validated graph together with its run parameters.

    Attributes:
        graph: The input graph.
        source: Source vertex for single-source path queries.
        graph_id: Identifier carried into the results.
        weight_model: Where weights live (only ``"edge"`` is produced).
        density: Free-form dataset label, e.g. ``"sparse"``.
        variant: Free-form dataset label, e.g. ``"cyclic"``.
        description: Optional human-readable description.
    """

    graph: Graph
    source: Vertex = 0
    graph_id: int = 0
    weight_model: str = "edge"
    density: str = "unknown"
    variant: str = "unknown"
    description: Optional[str] = None

    def __post_init__(self) -> None:
        n = self.graph.vertex_count
        if not 0 <= self.source < n:
            raise ValueError(
                f"Graph {self.graph_id}: source {self.source} is out of range "
                f"[0, {n})."
            )

    def to_dict(self) -> Dict[str, Any]:
        """Return the graph in input-document form."""
        data = self.graph.to_dict()
        data.update(
            {
                "id": self.graph_id,
                "source": self.source,
                "weight_model": self.weight_model,
                "density": self.density,
                "variant": self.variant,
            }
        )
        if self.description is not None:
            data["description"] = self.description
        return data


@lru_cache(maxsize=1)
def _graph_schema() -> Dict[str, Any]:
    with (
        resources.files("dagscope.schemas")
        .joinpath("graph.json")
        .open("r", encoding="utf-8")
    ) as f:
        return json.load(f)


def parse_graph(data: Any, position: int = 0) -> GraphInput:
    """Validate one graph document and build its `GraphInput`.

    Args:
        data: Mapping in the input-document format.
        position: Index of the document within its file, used in messages.

    Returns:
        The validated `GraphInput`.

    Raises:
        ValueError: If the document does not match the schema, the vertex
            count is not positive, the source or an edge endpoint is out of
            range, or an edge weight is NaN or infinite.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Graph entry {position} must be a mapping.")

    label = f"Graph {data.get('id', position)}"
    try:
        jsonschema.validate(data, _graph_schema())
    except jsonschema.ValidationError as exc:
        location = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise ValueError(
            f"{label}: invalid field '{location}': {exc.message}"
        ) from exc

    n = data["n"]
    if n <= 0:
        raise ValueError(f"{label}: vertex count must be > 0, got {n}.")

    source = data.get("source", 0)
    if not 0 <= source < n:
        raise ValueError(f"{label}: source {source} is out of range [0, {n}).")

    graph = Graph(n, directed=data.get("directed", True))
    for i, edge in enumerate(data.get("edges") or []):
        u, v = edge["u"], edge["v"]
        if not (0 <= u < n and 0 <= v < n):
            raise ValueError(
                f"{label}: edge {i} ({u} -> {v}) has a vertex out of range [0, {n})."
            )
        w = edge["w"]
        if not math.isfinite(w):
            raise ValueError(
                f"{label}: edge {i} ({u} -> {v}) has non-finite weight {w}."
            )
        graph.add_edge(u, v, w)

    return GraphInput(
        graph=graph,
        source=source,
        graph_id=data.get("id", 0),
        weight_model=data.get("weight_model", "edge"),
        density=data.get("density", "unknown"),
        variant=data.get("variant", "unknown"),
        description=data.get("description"),
    )


def read_document(path: PathLike) -> Any:
    """Read a JSON or YAML document; the format follows the file suffix.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the content cannot be parsed.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in _YAML_SUFFIXES:
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ValueError(f"Failed to parse {path}: {exc}") from exc


def split_documents(document: Any) -> List[Any]:
    """Return the graph entries of a single- or multi-graph document."""
    if isinstance(document, dict) and "graphs" in document:
        graphs = document["graphs"]
        if not isinstance(graphs, list):
            raise ValueError("'graphs' must be a list of graph mappings.")
        return list(graphs)
    if document is None:
        raise ValueError("Document is empty.")
    return [document]


def load_graphs(path: PathLike) -> List[GraphInput]:
    """Load and validate every graph in ``path``.

    Any invalid graph aborts the whole load. Use `split_documents` with
    `dagscope.analysis.analyze_documents` to process the valid graphs of a
    file while recording the invalid ones.
    """
    entries = split_documents(read_document(path))
    graphs = [parse_graph(entry, i) for i, entry in enumerate(entries)]
    logger.info(f"Loaded {len(graphs)} graph(s) from {path}")
    return graphs


def load_graph(path: PathLike) -> GraphInput:
    """Load a file that must contain exactly one graph."""
    graphs = load_graphs(path)
    if len(graphs) != 1:
        raise ValueError(
            f"{path} holds {len(graphs)} graphs, expected exactly one."
        )
    return graphs[0]


def ensure_parent_dir(path: Path) -> None:
    """Create the parent directory of ``path`` if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)


def write_json(path: PathLike, payload: Any) -> Path:
    """Write ``payload`` as indented JSON and return the path written."""
    path = Path(path)
    ensure_parent_dir(path)
    text = json.dumps(payload, indent=2, default=str)
    path.write_text(text + "\n", encoding="utf-8")
    return path


def write_graph_documents(path: PathLike, graphs: List[GraphInput]) -> Path:
    """Write graphs in multi-graph document form (``{"graphs": [...]}``)."""
    return write_json(path, {"graphs": [g.to_dict() for g in graphs]})
