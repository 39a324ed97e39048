"""Node and edge records of a network.

Relations between records are stored as integer indices into the owning
network's ``nodes``/``edges``/``tree_nodes`` lists rather than as object
references.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

__all__ = ["Node", "Edge"]


@dataclass
class Node:
    """A network node.

    Attributes
    ----------
    index:
        Position of the node in its network, in ``[0, N)``.
    name:
        Display name; the 1-based index for a full network, inherited from
        the parent network for an extracted sub-network.
    node_data:
        One value per node-data array.
    thumbnail:
        Optional path/URL of an image representing the node.
    cluster:
        Cluster id assigned after the dendrogram has been flattened.
    neighbours, edges:
        Indices of adjacent nodes and incident edges.
    parent:
        Index of the tree node this node hangs from in the dendrogram.
    full_net_index:
        For sub-network nodes, the index of the same node in the parent
        network.
    """

    index: int
    name: str
    node_data: Tuple[float, ...] = ()
    thumbnail: Optional[str] = None
    cluster: Optional[int] = None
    neighbours: List[int] = field(default_factory=list)
    edges: List[int] = field(default_factory=list)
    parent: Optional[int] = None
    full_net_index: Optional[int] = None

    @property
    def degree(self) -> int:
        return len(self.neighbours)


@dataclass(frozen=True)
class Edge:
    """An undirected edge between nodes ``i < j``.

    ``weights`` holds the value of every network matrix at ``(i, j)``.
    """

    index: int
    i: int
    j: int
    weights: Tuple[float, ...]

    @property
    def key(self) -> Tuple[int, int]:
        return (self.i, self.j)
