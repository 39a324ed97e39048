"""Dendrogram construction and flattening."""

from .dendrogram import (
    TreeNode,
    assign_clusters,
    build_dendrogram_tree,
    compute_linkage,
    flatten_dendrogram_tree,
    get_clusters,
    join_components,
    linkage_from_scipy,
    make_single_cluster_tree,
)

__all__ = [
    "TreeNode",
    "assign_clusters",
    "build_dendrogram_tree",
    "compute_linkage",
    "flatten_dendrogram_tree",
    "get_clusters",
    "join_components",
    "linkage_from_scipy",
    "make_single_cluster_tree",
]
