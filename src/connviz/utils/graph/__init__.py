"""Node/edge records and edge construction."""

from .builder import build_edges, gather_submatrix
from .elements import Edge, Node

__all__ = ["Edge", "Node", "build_edges", "gather_submatrix"]
