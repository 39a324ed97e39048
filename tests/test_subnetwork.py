"""Tests for sub-network extraction."""

import numpy as np
import pytest

from connviz import create_network, extract_subnetwork, set_threshold_value


@pytest.fixture
def network(corr_matrix, linkage4):
    return create_network(
        [corr_matrix], ["corr"], [[5, 6, 7, 8]], ["group"],
        linkage=linkage4, thumbnails="thumbs",
        threshold_values=[0.5], threshold_labels=["p"], num_clusters=2,
    )


def test_reference_example(network):
    subnet = extract_subnetwork(network, 0)

    assert [n.name for n in subnet.nodes] == ["1", "2", "4"]
    assert [n.full_net_index for n in subnet.nodes] == [0, 1, 3]
    assert {e.key for e in subnet.edges} == {(0, 1), (0, 2)}
    assert subnet.nodes[2].node_data == (8.0,)
    assert subnet.nodes[2].thumbnail == "thumbs/0003.png"
    np.testing.assert_allclose(subnet.matrices[0][0], [0.0, 0.9, -0.8])


def test_single_cluster(network):
    subnet = extract_subnetwork(network, 0)
    assert len(subnet.tree_nodes) == 1
    assert subnet.tree_nodes[0].index == 3
    assert subnet.tree_nodes[0].children == [0, 1, 2]
    assert [n.cluster for n in subnet.nodes] == [0, 0, 0]
    assert subnet.num_clusters == 1
    assert subnet.linkage is None


def test_edges_are_contained_in_parent(random_matrix):
    parent = create_network([random_matrix], ["r"], threshold_values=[0.4])
    parent_keys = {e.key for e in parent.edges}
    for root in range(len(parent.nodes)):
        subnet = extract_subnetwork(parent, root)
        idxs = [n.full_net_index for n in subnet.nodes]
        assert root in idxs
        assert idxs == sorted(idxs)
        for edge in subnet.edges:
            assert (idxs[edge.i], idxs[edge.j]) in parent_keys
        # every parent edge incident to the root survives
        assert sum(1 for e in subnet.edges if root in (idxs[e.i], idxs[e.j])) == len(
            parent.nodes[root].neighbours
        )


def test_isolated_root(corr_matrix):
    parent = create_network([corr_matrix], ["corr"], threshold_values=[1.0], threshold_labels=["p"])
    subnet = extract_subnetwork(parent, 2)
    assert [n.full_net_index for n in subnet.nodes] == [2]
    assert subnet.edges == []


def test_threshold_values_are_copied(network):
    subnet = extract_subnetwork(network, 0)
    assert subnet.threshold.func is network.threshold.func
    set_threshold_value(subnet, 0, 0.0)
    assert network.threshold_values == [0.5]
    assert len(subnet.edges) == 3


def test_scale_indices_inherited(network):
    subnet = extract_subnetwork(network, 1)
    assert subnet.scale_info.edge_width_idx == network.scale_info.edge_width_idx
    assert subnet.scale_info.edge_colour_domain == pytest.approx((-0.9, -0.5, 0.0, 0.5, 0.9))


@pytest.mark.parametrize("root", [-1, 4])
def test_invalid_root(network, root):
    with pytest.raises(IndexError):
        extract_subnetwork(network, root)
