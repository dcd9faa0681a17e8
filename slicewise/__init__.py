"""
SliceWise - Service Boundary Suggestions for Monolithic Codebases

Builds a weighted class dependency graph from Python sources, clusters it
with label propagation and refines the clusters into named, measured
service boundaries.
"""

__version__ = "0.1.0"

# Only expose version by default - everything else is lazy loaded
__all__ = [
    "__version__",
    "SliceWise",
    "AnalysisResult",
    "SliceWiseConfig",
    "load_config",
    "SliceWiseError",
    "GraphIntegrityError",
    "SourceCollectionError",
]


def __getattr__(name):
    """Lazy loading of main API classes to prevent heavy imports at module level."""
    if name in {"SliceWise", "AnalysisResult"}:
        from .api import AnalysisResult, SliceWise
        return {"SliceWise": SliceWise, "AnalysisResult": AnalysisResult}[name]

    if name in {"SliceWiseConfig", "load_config"}:
        from .config import SliceWiseConfig, load_config
        return {"SliceWiseConfig": SliceWiseConfig, "load_config": load_config}[name]

    if name in {"SliceWiseError", "GraphIntegrityError", "SourceCollectionError"}:
        from . import exceptions
        return getattr(exceptions, name)

    raise AttributeError(f"module 'slicewise' has no attribute '{name}'")
