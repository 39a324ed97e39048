"""Tests for dendrogram construction and flattening."""

import numpy as np
import pytest
from scipy.cluster.hierarchy import linkage as scipy_linkage

from connviz.exceptions import ClusterError, LinkageError
from connviz.utils.clustering.dendrogram import (
    assign_clusters,
    build_dendrogram_tree,
    compute_linkage,
    flatten_dendrogram_tree,
    get_clusters,
    linkage_from_scipy,
    make_single_cluster_tree,
)
from connviz.utils.graph.elements import Node


def _nodes(n):
    return [Node(index=i, name=str(i + 1)) for i in range(n)]


@pytest.fixture
def linkage5():
    """5 nodes: {0,1} at 0.1, {2,3} at 0.3, {4,{0,1}} at 0.4, root at 0.9."""
    return np.array([
        [1, 2, 0.1],
        [3, 4, 0.3],
        [5, 6, 0.4],
        [7, 8, 0.9],
    ])


class TestBuildTree:
    def test_structure(self, linkage4):
        nodes = _nodes(4)
        tree = build_dendrogram_tree(nodes, linkage4)

        assert [tn.index for tn in tree] == [4, 5, 6]
        assert tree[0].children == [0, 1]
        assert tree[2].children == [4, 5]
        assert tree[2].distance == 0.7
        assert [n.parent for n in nodes] == [4, 4, 5, 5]
        assert tree[0].parent == 6
        assert tree[2].parent is None

    def test_two_rows_two_internal_nodes(self):
        nodes = _nodes(4)
        tree = build_dendrogram_tree(nodes, [[1, 2, 0.1], [3, 4, 0.2]])
        assert len(tree) == 2
        assert get_clusters(nodes) == [4, 5]

    def test_empty_linkage(self):
        nodes = _nodes(3)
        assert build_dendrogram_tree(nodes, []) == []
        assert all(n.parent is None for n in nodes)

    @pytest.mark.parametrize(
        "rows",
        [
            [[1, 6, 0.1]],                 # forward reference
            [[1, 2, 0.1], [5, 7, 0.2]],    # row 1 may only reference ids <= 5
            [[0, 2, 0.1]],                 # ids are 1-based
            [[1.5, 2, 0.1]],               # non-integer id
            [[1, 1, 0.1]],                 # self merge
            [[1, 2, 0.1], [1, 3, 0.2]],    # node merged twice
            [[1, 2]],                      # missing distance
        ],
    )
    def test_malformed(self, rows):
        with pytest.raises(LinkageError):
            build_dendrogram_tree(_nodes(4), rows)

    def test_from_scipy(self):
        rng = np.random.default_rng(1)
        Z = scipy_linkage(rng.normal(size=(6, 2)), method="average")
        nodes = _nodes(6)
        tree = build_dendrogram_tree(nodes, linkage_from_scipy(Z))
        assert len(tree) == 5
        assert sum(tn.parent is None for tn in tree) == 1


class TestFlatten:
    def test_reduce_to_one(self, linkage4):
        nodes = _nodes(4)
        tree = build_dendrogram_tree(nodes, linkage4)
        assert flatten_dendrogram_tree(nodes, tree, 1) == 1
        assert [tn.index for tn in tree] == [6]
        assert sorted(tree[0].children) == [0, 1, 2, 3]
        assert all(n.parent == 6 for n in nodes)

    def test_forest_collapses_to_single_root(self):
        nodes = _nodes(4)
        tree = build_dendrogram_tree(nodes, [[1, 2, 0.1], [3, 4, 0.2]])
        assert flatten_dendrogram_tree(nodes, tree, 1) == 1
        assert len(tree) == 1
        assert sorted(tree[0].children) == [0, 1, 2, 3]
        assert assign_clusters(nodes) == 1
        assert [n.cluster for n in nodes] == [0, 0, 0, 0]

    def test_removes_minimum_distance_first(self, linkage5):
        nodes = _nodes(5)
        tree = build_dendrogram_tree(nodes, linkage5)
        assert len(get_clusters(nodes)) == 3

        assert flatten_dendrogram_tree(nodes, tree, 2) == 2
        assert [tn.index for tn in tree] == [6, 7, 8]
        assert [n.parent for n in nodes] == [7, 7, 6, 6, 7]
        assert sorted(tree[1].children) == [0, 1, 4]

    def test_noop_when_enough_clusters(self, linkage4):
        nodes = _nodes(4)
        tree = build_dendrogram_tree(nodes, linkage4)
        assert flatten_dendrogram_tree(nodes, tree, 2) == 2
        assert flatten_dendrogram_tree(nodes, tree, 10) == 2
        assert len(tree) == 3

    def test_monotonic(self, linkage5):
        nodes = _nodes(5)
        tree = build_dendrogram_tree(nodes, linkage5)
        counts = [flatten_dendrogram_tree(nodes, tree, k) for k in (3, 2, 3, 1, 2)]
        assert counts == [3, 2, 2, 1, 1]

    def test_partial_linkage_joins_unmerged_nodes(self):
        nodes = _nodes(4)
        tree = build_dendrogram_tree(nodes, [[1, 2, 0.1]])
        assert flatten_dendrogram_tree(nodes, tree, 1) == 1
        assert [tn.index for tn in tree] == [5]
        assert sorted(tree[0].children) == [0, 1, 2, 3]
        assert [n.parent for n in nodes] == [5, 5, 5, 5]
        assign_clusters(nodes)
        assert [n.cluster for n in nodes] == [0, 0, 0, 0]

    def test_unmerged_nodes_count_as_one_group(self):
        nodes = _nodes(4)
        tree = build_dendrogram_tree(nodes, [[1, 2, 0.1]])
        assert flatten_dendrogram_tree(nodes, tree, 2) == 2
        assert len(tree) == 1
        assert [n.parent for n in nodes] == [4, 4, None, None]

    @pytest.mark.parametrize("k", [0, -3])
    def test_invalid_count(self, linkage4, k):
        nodes = _nodes(4)
        tree = build_dendrogram_tree(nodes, linkage4)
        with pytest.raises(ClusterError):
            flatten_dendrogram_tree(nodes, tree, k)


class TestAssignClusters:
    def test_first_encounter_order(self, linkage5):
        nodes = _nodes(5)
        tree = build_dendrogram_tree(nodes, linkage5)
        flatten_dendrogram_tree(nodes, tree, 2)
        assert assign_clusters(nodes) == 2
        assert [n.cluster for n in nodes] == [0, 0, 1, 1, 0]

    def test_unparented_nodes(self):
        nodes = _nodes(3)
        build_dendrogram_tree(nodes, [[2, 3, 0.5]])
        assign_clusters(nodes)
        assert [n.cluster for n in nodes] == [None, 0, 0]

    def test_single_cluster_tree(self):
        nodes = _nodes(3)
        tree = make_single_cluster_tree(nodes)
        assert tree[0].index == 3
        assert tree[0].children == [0, 1, 2]
        assert assign_clusters(nodes) == 1


def test_compute_linkage_groups_strong_pairs():
    m = np.array([
        [0.0, 0.95, 0.1, 0.1],
        [0.95, 0.0, 0.1, 0.1],
        [0.1, 0.1, 0.0, -0.9],
        [0.1, 0.1, -0.9, 0.0],
    ])
    table = compute_linkage(m)
    assert table.shape == (3, 3)
    assert set(table[0, :2]) == {1.0, 2.0}
    assert set(table[1, :2]) == {3.0, 4.0}

    nodes = _nodes(4)
    tree = build_dendrogram_tree(nodes, table)
    flatten_dendrogram_tree(nodes, tree, 2)
    assign_clusters(nodes)
    assert [n.cluster for n in nodes] == [0, 0, 1, 1]
