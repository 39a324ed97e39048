"""Exceptions raised while building or mutating a network.

Out-of-range matrix, node-data and threshold-value indices raise the
builtin :class:`IndexError`.
"""

from __future__ import annotations

__all__ = ["ConnvizError", "ShapeError", "LinkageError", "ClusterError"]


class ConnvizError(Exception):
    """Base class for all :mod:`connviz` errors."""


class ShapeError(ConnvizError, ValueError):
    """A matrix, data array or label list has an incompatible size."""


class LinkageError(ConnvizError, ValueError):
    """A linkage table row references an invalid node or tree node."""


class ClusterError(ConnvizError, ValueError):
    """An invalid number of clusters was requested."""
