"""Create and modify network objects.

A :class:`Network` owns its matrices, nodes, edges and dendrogram.  The
functions of this module are the only operations that mutate a network;
each one runs the stages downstream of what it changes:

* threshold matrix / threshold value -> edges, weight statistics, scales
* number of clusters                 -> dendrogram tree, cluster ids
* scale indices                      -> scales

Edges are always rebuilt from scratch, so references to the previous
``edges`` list must not be used after a threshold change.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Any, List, Optional, Sequence

import networkx as nx
import numpy as np
import pandas as pd
from numpy.typing import ArrayLike, NDArray

from .config.const import (
    DEFAULT_NUM_CLUSTERS,
    DEFAULT_THRESHOLD_LABEL,
    DEFAULT_THRESHOLD_PERCENTAGE,
    THUMBNAIL_NAME_FORMAT,
)
from .exceptions import ClusterError
from .scales import ScaleInfo
from .utils.clustering.dendrogram import (
    TreeNode,
    assign_clusters,
    build_dendrogram_tree,
    flatten_dendrogram_tree,
    make_single_cluster_tree,
)
from .utils.graph.builder import build_edges, gather_submatrix
from .utils.graph.elements import Edge, Node
from .utils.matrices.store import MatrixStore, WeightStatistics
from .utils.matrices.thresholds import (
    ThresholdEngine,
    ThresholdFunction,
    percentile_threshold,
)

__all__ = [
    "Network",
    "create_network",
    "threshold_network",
    "set_num_clusters",
    "set_threshold_matrix",
    "set_threshold_value",
    "set_edge_width_index",
    "set_edge_colour_index",
    "set_node_colour_index",
    "extract_subnetwork",
    "to_networkx",
]

logger = logging.getLogger(__name__)


def _thumbnail_path(thumbnails: Optional[str], index: int) -> Optional[str]:
    if thumbnails is None:
        return None
    return str(PurePosixPath(thumbnails) / THUMBNAIL_NAME_FORMAT.format(index))


class Network:
    """A thresholded, optionally clustered, connectivity network.

    Attributes
    ----------
    store:
        The validated matrices and node data.
    threshold:
        Threshold function, parameter values and source-matrix index.
    adjacency:
        Output of the threshold function for the current parameters; the
        non-NaN upper-triangular entries are the edges.
    nodes, edges:
        Node and edge records, see :mod:`connviz.utils.graph.elements`.
    weight_stats:
        Per-matrix weight statistics over the current edges.
    linkage:
        Linkage table used to rebuild the dendrogram, or ``None``.
    tree_nodes:
        Tree nodes of the (flattened) dendrogram.
    num_clusters:
        Requested maximum number of clusters.
    thumbnails:
        Directory/URL prefix of the node thumbnails, or ``None``.
    scale_info:
        Edge width/colour and node colour selection.
    """

    def __init__(
        self,
        store: MatrixStore,
        threshold: ThresholdEngine,
        linkage: Optional[NDArray[np.float64]] = None,
        thumbnails: Optional[str] = None,
        num_clusters: int = DEFAULT_NUM_CLUSTERS,
    ) -> None:
        self.store = store
        self.threshold = threshold
        self.linkage = linkage
        self.thumbnails = thumbnails
        self.num_clusters = num_clusters

        self.nodes: List[Node] = [
            Node(
                index=i,
                name=str(i + 1),
                node_data=store.node_values(i),
                thumbnail=_thumbnail_path(thumbnails, i),
            )
            for i in range(store.num_nodes)
        ]
        self.adjacency: NDArray[np.float64] = np.full(
            (store.num_nodes, store.num_nodes), np.nan
        )
        self.edges: List[Edge] = []
        self.weight_stats: WeightStatistics = WeightStatistics.from_weights(
            np.empty((0, store.num_matrices)), store.num_matrices
        )
        self.tree_nodes: List[TreeNode] = []
        self.scale_info = ScaleInfo()

    def __repr__(self) -> str:
        return (
            f"Network(nodes={len(self.nodes)}, edges={len(self.edges)}, "
            f"matrices={list(self.matrix_labels)}, clusters={self.num_clusters})"
        )

    @property
    def matrices(self):
        return self.store.matrices

    @property
    def matrix_labels(self):
        return self.store.matrix_labels

    @property
    def node_data(self):
        return self.store.node_data

    @property
    def node_data_labels(self):
        return self.store.node_data_labels

    @property
    def threshold_values(self) -> List[Any]:
        return list(self.threshold.values)

    @property
    def threshold_idx(self) -> int:
        return self.threshold.matrix_idx

    def edge_between(self, i: int, j: int) -> Optional[Edge]:
        """Return the edge joining nodes ``i`` and ``j``, if there is one."""

        for idx in self.nodes[i].edges:
            edge = self.edges[idx]
            if {edge.i, edge.j} == {i, j}:
                return edge
        return None

    def node_table(self) -> pd.DataFrame:
        """One row per node: name, cluster, degree and node data."""

        table = pd.DataFrame(
            {
                "name": [node.name for node in self.nodes],
                "cluster": pd.array([node.cluster for node in self.nodes], dtype="Int64"),
                "degree": [node.degree for node in self.nodes],
            },
            index=pd.RangeIndex(len(self.nodes), name="index"),
        )
        for label, array in zip(self.node_data_labels, self.node_data):
            table[label] = array
        if any(node.full_net_index is not None for node in self.nodes):
            table["full_net_index"] = [node.full_net_index for node in self.nodes]
        return table

    def edge_table(self) -> pd.DataFrame:
        """One row per edge: endpoints and one weight column per matrix."""

        weights = np.array([edge.weights for edge in self.edges], dtype=np.float64)
        weights = weights.reshape(len(self.edges), len(self.matrix_labels))
        table = pd.DataFrame(weights, columns=list(self.matrix_labels))
        table.insert(0, "i", [edge.i for edge in self.edges])
        table.insert(1, "j", [edge.j for edge in self.edges])
        return table


def _regenerate_scales(network: Network) -> None:
    network.scale_info.generate(network.weight_stats, network.node_data)


def threshold_network(network: Network, engine: Optional[ThresholdEngine] = None) -> None:
    """Threshold the network with ``engine`` and rebuild its edges.

    ``engine`` defaults to the network's own.  It is stored on the network
    only once thresholding has succeeded, so a failing threshold function
    leaves the network as it was.
    """

    engine = network.threshold if engine is None else engine
    adjacency = engine.apply(network.store)
    network.edges, network.weight_stats = build_edges(
        network.nodes, adjacency, network.matrices
    )
    network.adjacency = adjacency
    network.threshold = engine


def set_num_clusters(network: Network, num_clusters: int) -> None:
    """Rebuild the dendrogram and flatten it to ``num_clusters`` clusters.

    Networks without linkage data only record the new number.

    Raises
    ------
    ClusterError
        If ``num_clusters < 1``.
    """

    if num_clusters < 1:
        raise ClusterError(f"Number of clusters must be at least 1; received {num_clusters}")

    network.num_clusters = num_clusters
    if network.linkage is None:
        return

    network.tree_nodes = build_dendrogram_tree(network.nodes, network.linkage)
    remaining = flatten_dendrogram_tree(network.nodes, network.tree_nodes, num_clusters)
    assign_clusters(network.nodes)
    logger.debug("Flattened dendrogram to %d clusters (max %d)", remaining, num_clusters)


def create_network(
    matrices: Sequence[ArrayLike],
    matrix_labels: Sequence[str],
    node_data: Sequence[ArrayLike] = (),
    node_data_labels: Sequence[str] = (),
    linkage: Optional[ArrayLike] = None,
    thumbnails: Optional[str] = None,
    threshold_func: ThresholdFunction = percentile_threshold,
    threshold_values: Sequence[Any] = (DEFAULT_THRESHOLD_PERCENTAGE,),
    threshold_labels: Sequence[str] = (DEFAULT_THRESHOLD_LABEL,),
    threshold_idx: int = 0,
    num_clusters: int = DEFAULT_NUM_CLUSTERS,
) -> Network:
    """Create a network from validated data.

    Parameters
    ----------
    matrices, matrix_labels:
        Square ``N x N`` matrices and their labels.  Every matrix value at
        ``(i, j)`` becomes a weight of edge ``(i, j)``.
    node_data, node_data_labels:
        Length-``N`` arrays of per-node values and their labels.
    linkage:
        Optional ``[left, right, distance]`` table with 1-based ids.
    thumbnails:
        Optional directory holding one ``%04d.png`` image per node.
    threshold_func, threshold_values, threshold_labels:
        Function mapping ``(matrix, values)`` to a matrix where suppressed
        entries are NaN, and its labelled parameter values.
    threshold_idx:
        Index of the matrix that is thresholded to define the edges.
    num_clusters:
        Maximum number of dendrogram clusters.

    Raises
    ------
    ShapeError, IndexError, LinkageError, ClusterError
        On invalid input; nothing is coerced.
    """

    store = MatrixStore.build(matrices, matrix_labels, node_data, node_data_labels)
    engine = ThresholdEngine(threshold_func, threshold_values, threshold_labels)
    engine.set_matrix_index(threshold_idx, store.num_matrices)
    table = None if linkage is None else np.asarray(linkage, dtype=np.float64)

    network = Network(store, engine, linkage=table, thumbnails=thumbnails)
    threshold_network(network)
    set_num_clusters(network, num_clusters)
    _regenerate_scales(network)

    logger.info(
        "Created network with %d nodes, %d edges and %d matrices",
        len(network.nodes),
        len(network.edges),
        store.num_matrices,
    )
    return network


def set_threshold_matrix(network: Network, idx: int) -> None:
    """Threshold the network on the matrix at ``idx`` instead."""

    engine = network.threshold.copy()
    engine.set_matrix_index(idx, network.store.num_matrices)
    threshold_network(network, engine)
    _regenerate_scales(network)


def set_threshold_value(network: Network, idx: int, value: Any) -> None:
    """Set threshold parameter ``idx`` to ``value`` and re-threshold."""

    engine = network.threshold.copy()
    engine.set_value(idx, value)
    threshold_network(network, engine)
    _regenerate_scales(network)
    logger.debug("Threshold %s set to %s: %d edges", idx, value, len(network.edges))


def _check_index(idx: int, count: int, what: str) -> None:
    if idx < 0 or idx >= count:
        raise IndexError(f"{what} index out of range: {idx}")


def set_edge_width_index(network: Network, idx: int) -> None:
    """Scale edge widths by the weights of the matrix at ``idx``."""

    _check_index(idx, network.store.num_matrices, "Matrix")
    network.scale_info.edge_width_idx = idx
    _regenerate_scales(network)


def set_edge_colour_index(network: Network, idx: int) -> None:
    """Colour edges by the weights of the matrix at ``idx``."""

    _check_index(idx, network.store.num_matrices, "Matrix")
    network.scale_info.edge_colour_idx = idx
    _regenerate_scales(network)


def set_node_colour_index(network: Network, idx: int) -> None:
    """Colour nodes by the node-data array at ``idx``."""

    _check_index(idx, network.store.num_node_data, "Node data")
    network.scale_info.node_colour_idx = idx
    _regenerate_scales(network)


def extract_subnetwork(network: Network, root_idx: int) -> Network:
    """Return the sub-network of node ``root_idx`` and its neighbours.

    The sub-network holds the rows/columns of every matrix and node-data
    array for the sorted node indices, shares the threshold function (with
    a copy of its values), and has exactly the edges the parent network
    has between those nodes.  Nodes keep the parent node's name and
    thumbnail and record the parent index in ``full_net_index``.  The
    dendrogram is a single cluster containing every node.
    """

    _check_index(root_idx, len(network.nodes), "Node")

    root = network.nodes[root_idx]
    node_idxs = sorted([root_idx] + list(root.neighbours))

    store = MatrixStore.build(
        network.store.submatrices(node_idxs),
        network.matrix_labels,
        network.store.sub_node_data(node_idxs),
        network.node_data_labels,
    )
    subnet = Network(store, network.threshold.copy(), thumbnails=network.thumbnails, num_clusters=1)

    subnet.adjacency = gather_submatrix(network.adjacency, node_idxs)
    subnet.edges, subnet.weight_stats = build_edges(subnet.nodes, subnet.adjacency, subnet.matrices)

    for node, parent_idx in zip(subnet.nodes, node_idxs):
        parent = network.nodes[parent_idx]
        node.name = parent.name
        node.thumbnail = parent.thumbnail
        node.full_net_index = parent.index

    subnet.tree_nodes = make_single_cluster_tree(subnet.nodes)
    assign_clusters(subnet.nodes)

    subnet.scale_info = ScaleInfo(
        edge_width_idx=network.scale_info.edge_width_idx,
        edge_colour_idx=network.scale_info.edge_colour_idx,
        node_colour_idx=network.scale_info.node_colour_idx,
    )
    _regenerate_scales(subnet)

    logger.debug(
        "Extracted sub-network of node %s: %d nodes, %d edges",
        root.name,
        len(subnet.nodes),
        len(subnet.edges),
    )
    return subnet


def to_networkx(network: Network) -> nx.Graph:
    """Return the network as a :class:`networkx.Graph`.

    Nodes carry ``name``, ``cluster`` and one attribute per node-data label;
    edges carry one attribute per matrix label.
    """

    G = nx.Graph()
    for node in network.nodes:
        attrs = dict(zip(network.node_data_labels, node.node_data))
        attrs.update(name=node.name, cluster=node.cluster)
        G.add_node(node.index, **attrs)
    for edge in network.edges:
        G.add_edge(edge.i, edge.j, **dict(zip(network.matrix_labels, edge.weights)))
    return G
