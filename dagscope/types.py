"""Enums and aliases shared by the analysis pipeline."""

from __future__ import annotations

from enum import IntEnum
from typing import Type, TypeVar, Union

#: Vertex identifier: a dense integer in ``[0, vertex_count)``.
Vertex = int

#: Numeric edge weight / path distance.
Weight = Union[int, float]

_E = TypeVar("_E", bound="_ParsableEnum")


class _ParsableEnum(IntEnum):
    """IntEnum with case-insensitive parsing from option strings."""

    @classmethod
    def from_string(cls: Type[_E], value: str) -> _E:
        """Parse a string into an enum member.

        Args:
            value: Case-insensitive member name; dashes are accepted for
                underscores (``"super-source"`` equals ``"SUPER_SOURCE"``).

        Returns:
            The corresponding enum member.

        Raises:
            ValueError: If the string doesn't match any member.
        """
        try:
            return cls[value.strip().upper().replace("-", "_")]
        except KeyError:
            valid = ", ".join(e.name.lower() for e in cls)
            raise ValueError(
                f"Invalid {cls.__name__} '{value}'. Valid values are: {valid}"
            ) from None


class TopoStrategy(_ParsableEnum):
    """Topological sorting strategy."""

    #: Kahn's algorithm (BFS over in-degrees).
    KAHN = 1
    #: Depth-first post-order reversal with an on-path cycle check.
    DFS = 2


class CriticalPathMethod(_ParsableEnum):
    """How the all-pairs longest path is searched."""

    #: Longest-path pass from every vertex, O(V*(V+E)).
    EXHAUSTIVE = 1
    #: Single pass where every vertex starts at distance zero, O(V+E).
    SUPER_SOURCE = 2


class ParallelEdgePolicy(_ParsableEnum):
    """Weight kept when several original edges join the same component pair."""

    #: First edge seen in ascending vertex / stored edge order wins.
    FIRST = 1
    #: Smallest weight among the parallel edges wins.
    MIN = 2
