"""Dendrogram trees built from agglomerative-clustering linkage tables.

A linkage table has one row per merge, ``[left, right, distance]``, with
1-based ids: ids up to ``N`` refer to the network nodes, id ``N + k``
refers to the tree node created by row ``k - 1`` (the MATLAB ``linkage``
convention).  Tree nodes share one index space with the network nodes:
``0 .. N-1`` are the nodes themselves, ``N + i`` is the tree node of row
``i``.

Flattening the tree to at most ``K`` clusters performs the same job as
MATLAB's ``cluster(linkages, 'maxclust', K)``: the tree node with the
smallest merge distance among the current clusters is repeatedly squeezed
out of the tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.cluster.hierarchy import linkage as scipy_linkage
from scipy.spatial.distance import squareform

from ...exceptions import ClusterError, LinkageError
from ..graph.elements import Node

__all__ = [
    "TreeNode",
    "build_dendrogram_tree",
    "join_components",
    "make_single_cluster_tree",
    "flatten_dendrogram_tree",
    "get_clusters",
    "assign_clusters",
    "linkage_from_scipy",
    "compute_linkage",
]

logger = logging.getLogger(__name__)


@dataclass
class TreeNode:
    """An internal dendrogram node.

    ``children`` holds indices in the shared node/tree-node index space.
    """

    index: int
    children: List[int] = field(default_factory=list)
    distance: float = np.inf
    parent: Optional[int] = None


def _resolve_id(raw: float, row: int, n_nodes: int) -> int:
    """Map a 1-based linkage id of ``row`` to a 0-based shared index."""

    if not np.isfinite(raw) or float(raw) != int(raw):
        raise LinkageError(f"Linkage row {row}: id {raw} is not an integer")
    ident = int(raw)
    if ident < 1 or ident > n_nodes + row:
        raise LinkageError(
            f"Linkage row {row}: id {ident} is out of range [1, {n_nodes + row}]"
        )
    return ident - 1


def build_dendrogram_tree(nodes: List[Node], linkage: ArrayLike) -> List[TreeNode]:
    """Create the tree nodes described by ``linkage`` over ``nodes``.

    The ``parent`` attribute of every merged node is set.  Rows are
    processed in order, so a row may only reference tree nodes created by
    earlier rows.  A table with fewer than ``N - 1`` rows leaves a forest;
    see :func:`join_components`.

    Raises
    ------
    LinkageError
        On rows with fewer than three columns, non-integer ids, references
        outside the constructed range, self merges, or a node being merged
        twice.
    """

    n_nodes = len(nodes)
    rows = np.asarray(linkage, dtype=np.float64)
    if rows.size == 0:
        rows = rows.reshape(0, 3)
    if rows.ndim != 2 or rows.shape[1] < 3:
        raise LinkageError(f"Linkage table must have at least 3 columns; got shape {rows.shape}")

    for node in nodes:
        node.parent = None

    tree_nodes: List[TreeNode] = []

    def lookup(index: int) -> Union[Node, TreeNode]:
        return nodes[index] if index < n_nodes else tree_nodes[index - n_nodes]

    for i, (left_id, right_id, distance) in enumerate(rows[:, :3]):
        left = _resolve_id(left_id, i, n_nodes)
        right = _resolve_id(right_id, i, n_nodes)
        if left == right:
            raise LinkageError(f"Linkage row {i}: id {left + 1} is merged with itself")

        tree_node = TreeNode(index=n_nodes + i, children=[left, right], distance=float(distance))
        for child in (left, right):
            element = lookup(child)
            if element.parent is not None:
                raise LinkageError(f"Linkage row {i}: id {child + 1} has already been merged")
            element.parent = tree_node.index
        tree_nodes.append(tree_node)

    return tree_nodes


def join_components(nodes: List[Node], tree_nodes: List[TreeNode]) -> Optional[TreeNode]:
    """Hang every parentless node and tree node from a new synthetic root.

    The root has an infinite merge distance and the next free index.  Does
    nothing (and returns ``None``) if there is at most one component.
    """

    roots = [node.index for node in nodes if node.parent is None]
    roots += [tn.index for tn in tree_nodes if tn.parent is None]
    if len(roots) < 2:
        return None

    next_index = max([len(nodes) - 1] + [tn.index for tn in tree_nodes]) + 1
    root = TreeNode(index=next_index, children=roots)
    by_index = {tn.index: tn for tn in tree_nodes}
    for child in roots:
        element = nodes[child] if child < len(nodes) else by_index[child]
        element.parent = root.index
    tree_nodes.append(root)
    logger.debug("Joined %d dendrogram components under a synthetic root", len(roots))
    return root


def make_single_cluster_tree(nodes: List[Node]) -> List[TreeNode]:
    """Return a one-node tree whose root is the parent of every node."""

    root = TreeNode(index=len(nodes), children=[node.index for node in nodes])
    for node in nodes:
        node.parent = root.index
    return [root]


def get_clusters(nodes: Sequence[Node]) -> List[int]:
    """Return the unique tree-node parents of ``nodes``, in node order."""

    clusters: List[int] = []
    for node in nodes:
        if node.parent is not None and node.parent not in clusters:
            clusters.append(node.parent)
    return clusters


def _count_groups(nodes: Sequence[Node], clusters: List[int]) -> int:
    return len(clusters) + any(node.parent is None for node in nodes)


def flatten_dendrogram_tree(
    nodes: List[Node],
    tree_nodes: List[TreeNode],
    max_clusters: int,
) -> int:
    """Squeeze tree nodes out until at most ``max_clusters`` clusters remain.

    The clusters are the distinct parents of ``nodes``; nodes without a
    parent count together as one more group.  At each step the
    cluster with the smallest merge distance that has a parent of its own
    is removed from ``tree_nodes`` and its children are attached to its
    parent.  Among equal distances the first cluster in node order wins.
    A forest is first joined under a synthetic root, so any tree can be
    flattened down to a single cluster.  Does nothing if there already
    are at most ``max_clusters`` groups.

    Returns the number of groups left.

    Raises
    ------
    ClusterError
        If ``max_clusters < 1``.
    """

    if max_clusters < 1:
        raise ClusterError(f"Number of clusters must be at least 1; received {max_clusters}")

    clusters = get_clusters(nodes)
    if _count_groups(nodes, clusters) > max_clusters:
        if join_components(nodes, tree_nodes) is not None:
            clusters = get_clusters(nodes)

    by_index: Dict[int, TreeNode] = {tn.index: tn for tn in tree_nodes}
    n_nodes = len(nodes)

    def lookup(index: int) -> Union[Node, TreeNode]:
        return nodes[index] if index < n_nodes else by_index[index]

    while len(clusters) > max_clusters:
        candidates = [by_index[c] for c in clusters if by_index[c].parent is not None]
        if not candidates:
            break
        clust = min(candidates, key=lambda tn: tn.distance)
        parent = by_index[clust.parent]

        parent.children.remove(clust.index)
        tree_nodes.remove(clust)
        del by_index[clust.index]

        for child in clust.children:
            lookup(child).parent = parent.index
            parent.children.append(child)

        clusters = get_clusters(nodes)

    return _count_groups(nodes, clusters)


def assign_clusters(nodes: Sequence[Node]) -> int:
    """Number the clusters of ``nodes`` and store the id on every node.

    Ids are consecutive integers starting at 0, in the order each parent
    is first met scanning ``nodes``.  Nodes without a parent get ``None``.
    Returns the number of distinct clusters.
    """

    ids: Dict[int, int] = {}
    for node in nodes:
        if node.parent is None:
            node.cluster = None
            continue
        node.cluster = ids.setdefault(node.parent, len(ids))
    return len(ids)


def linkage_from_scipy(Z: ArrayLike) -> NDArray[np.float64]:
    """Convert a 0-based :func:`scipy.cluster.hierarchy.linkage` table.

    Returns the ``[left, right, distance]`` columns with 1-based ids.
    """

    Z = np.asarray(Z, dtype=np.float64)
    table = Z[:, :3].copy()
    table[:, :2] += 1
    return table


def compute_linkage(matrix: ArrayLike, method: str = "average") -> NDArray[np.float64]:
    """Cluster the nodes of a connectivity matrix.

    Node distances are ``1 - |matrix|`` (NaN entries count as unrelated,
    distance 1) with a zero diagonal.  The returned table uses 1-based ids
    and can be passed as the ``linkage`` of a network.
    """

    strength = np.nan_to_num(np.abs(np.asarray(matrix, dtype=np.float64)), nan=0.0)
    strength = (strength + strength.T) / 2.0
    distances = np.clip(1.0 - strength, 0.0, None)
    np.fill_diagonal(distances, 0.0)
    Z = scipy_linkage(squareform(distances, checks=False), method=method)
    return linkage_from_scipy(Z)
