"""Configuration classes for dagscope analysis runs."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict

from dagscope.types import CriticalPathMethod, ParallelEdgePolicy, TopoStrategy


@dataclass(frozen=True)
class AnalysisConfig:
    """Options for one run of the analysis pipeline."""

    # Sorting strategy used for the condensation and by the path solver
    topo_strategy: TopoStrategy = TopoStrategy.KAHN

    # All-pairs longest path search
    critical_path_method: CriticalPathMethod = CriticalPathMethod.EXHAUSTIVE

    # Weight kept for parallel inter-component edges in the condensation
    parallel_edge_policy: ParallelEdgePolicy = ParallelEdgePolicy.FIRST

    # Critical path search is quadratic for the exhaustive method
    compute_critical_path: bool = True

    @classmethod
    def from_options(cls, **options: Any) -> "AnalysisConfig":
        """Build a config from string or enum option values.

        Unknown keys raise ``TypeError`` like a dataclass constructor would.
        ``None`` values fall back to defaults.
        """
        parsers = {
            "topo_strategy": TopoStrategy,
            "critical_path_method": CriticalPathMethod,
            "parallel_edge_policy": ParallelEdgePolicy,
        }
        kwargs: Dict[str, Any] = {}
        for key, value in options.items():
            if value is None:
                continue
            enum_cls = parsers.get(key)
            if enum_cls is not None and isinstance(value, str):
                value = enum_cls.from_string(value)
            kwargs[key] = value
        return cls(**kwargs)

    def with_overrides(self, **changes: Any) -> "AnalysisConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topo_strategy": self.topo_strategy.name.lower(),
            "critical_path_method": self.critical_path_method.name.lower(),
            "parallel_edge_policy": self.parallel_edge_policy.name.lower(),
            "compute_critical_path": self.compute_critical_path,
        }


# Global default configuration instance
DEFAULT_CONFIG = AnalysisConfig()
