"""
Analysis module for SliceWise

Provides the graph engine:
- Class dependency graph construction and metrics
- Community detection and service boundary refinement
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List

# Subpackages are imported on first attribute access.

__all__ = ["GraphBuilder", "DependencyGraph", "BoundaryDetector", "Suggestion"]

_LAZY_EXPORTS: Dict[str, str] = {
    "GraphBuilder": "slicewise.analysis.graph.graph_builder",
    "DependencyGraph": "slicewise.analysis.graph.models",
    "BoundaryDetector": "slicewise.analysis.decomposition.boundary_detector",
    "Suggestion": "slicewise.analysis.decomposition.models",
}

if TYPE_CHECKING:
    from slicewise.analysis.graph.graph_builder import GraphBuilder as GraphBuilder
    from slicewise.analysis.graph.models import DependencyGraph as DependencyGraph
    from slicewise.analysis.decomposition.boundary_detector import BoundaryDetector as BoundaryDetector
    from slicewise.analysis.decomposition.models import Suggestion as Suggestion


def __getattr__(name: str) -> Any:
    """Lazy attribute loading (PEP 562)."""
    mod_path = _LAZY_EXPORTS.get(name)
    if not mod_path:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    import importlib

    mod = importlib.import_module(mod_path)
    return getattr(mod, name)


def __dir__() -> List[str]:
    return sorted(set(globals().keys()) | set(_LAZY_EXPORTS.keys()))
