"""Edge construction from a thresholded adjacency matrix."""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple
import warnings

import numpy as np
from numpy.typing import NDArray

from ...exceptions import ShapeError
from ..matrices.store import WeightStatistics
from .elements import Edge, Node

__all__ = ["build_edges", "gather_submatrix"]

logger = logging.getLogger(__name__)


def gather_submatrix(matrix: NDArray, indices: Sequence[int]) -> NDArray:
    """Return rows and columns ``indices`` of ``matrix``, in that order."""

    idx = np.asarray(indices, dtype=int)
    return np.asarray(matrix)[np.ix_(idx, idx)]


def build_edges(
    nodes: List[Node],
    adjacency: NDArray,
    matrices: Sequence[NDArray],
) -> Tuple[List[Edge], WeightStatistics]:
    """Create one edge per non-NaN upper-triangular entry of ``adjacency``.

    Edges are created scanning ``i < j`` in row-major order.  Every edge
    carries the value of each of ``matrices`` at ``(i, j)``; the neighbour
    and edge lists of ``nodes`` are reset and refilled so that ``i`` is a
    neighbour of ``j`` exactly when ``j`` is a neighbour of ``i``.

    Returns
    -------
    edges:
        The new edge list.
    statistics:
        Minimum/maximum (real and absolute) weights per matrix over all
        edges.  With no edges the sentinels ``+inf``/``-inf`` are used.
    """

    n_nodes = len(nodes)
    adjacency = np.asarray(adjacency, dtype=np.float64)
    if adjacency.shape != (n_nodes, n_nodes):
        raise ShapeError(
            f"Adjacency matrix has shape {adjacency.shape}; expected {(n_nodes, n_nodes)}"
        )

    for node in nodes:
        node.neighbours = []
        node.edges = []

    rows, cols = np.triu_indices(n_nodes, k=1)
    present = ~np.isnan(adjacency[rows, cols])
    rows, cols = rows[present], cols[present]
    weights = np.column_stack([np.asarray(m, dtype=np.float64)[rows, cols] for m in matrices])

    edges: List[Edge] = []
    for idx, (i, j) in enumerate(zip(rows.tolist(), cols.tolist())):
        edge = Edge(index=idx, i=i, j=j, weights=tuple(weights[idx].tolist()))
        edges.append(edge)
        nodes[i].neighbours.append(j)
        nodes[j].neighbours.append(i)
        nodes[i].edges.append(idx)
        nodes[j].edges.append(idx)

    if n_nodes > 1 and not edges:
        warnings.warn("Thresholding produced a network without edges.", RuntimeWarning)

    stats = WeightStatistics.from_weights(weights, len(matrices))
    logger.debug("Built %d edges over %d nodes", len(edges), n_nodes)
    return edges, stats
