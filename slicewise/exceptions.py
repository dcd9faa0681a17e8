"""
Exception hierarchy for SliceWise.

Resolution misses are not errors (they are skipped silently); these types are
reserved for conditions that must surface to the caller.
"""


class SliceWiseError(Exception):
    """Base class for all SliceWise errors."""

    pass


class GraphIntegrityError(SliceWiseError):
    """
    Raised when the dependency graph violates one of its invariants.

    Typical causes: an edge or community member that references a class absent
    from the node map, a self-edge, or a zero-weight edge. These indicate a bug
    in graph construction and are never recovered from.
    """

    pass


class SourceCollectionError(SliceWiseError):
    """Raised when a project source tree cannot be collected at all."""

    pass
