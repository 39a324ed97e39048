"""Tests for loading network files."""

import numpy as np
import pytest
from scipy.io import savemat

from connviz import LinkageError, ShapeError
from connviz.io import (
    load_matrix,
    load_network,
    load_network_bundle,
    load_node_data,
    parse_text_matrix,
)


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def files(tmp_path):
    return {
        "corr": _write(tmp_path / "corr.txt",
                       "0 0.9 0.2 -0.8\n0.9 0 0.5 0.1\n0.2 0.5 0 0.3\n-0.8 0.1 0.3 0\n"),
        "group": _write(tmp_path / "group.txt", "1 1 2 2\n"),
        "column": _write(tmp_path / "column.txt", "4\n3\n2\n1\n"),
        "linkage": _write(tmp_path / "linkage.txt", "1 2 0.1\n3 4 0.2\n5 6 0.7\n"),
    }


def test_parse_text_matrix():
    rows = parse_text_matrix("1 2\n\n  3\tNaN\nx 4\n")
    assert rows[0] == [1.0, 2.0]
    assert rows[1][0] == 3.0 and np.isnan(rows[1][1])
    assert np.isnan(rows[2][0]) and rows[2][1] == 4.0
    assert len(rows) == 3


def test_load_matrix_formats(tmp_path, corr_matrix):
    np.save(tmp_path / "m.npy", corr_matrix)
    savemat(tmp_path / "m.mat", {"W": corr_matrix})
    np.testing.assert_allclose(load_matrix(tmp_path / "m.npy"), corr_matrix)
    np.testing.assert_allclose(load_matrix(tmp_path / "m.mat"), corr_matrix)


def test_load_node_data(files, tmp_path):
    np.testing.assert_allclose(load_node_data(files["group"]), [1, 1, 2, 2])
    np.testing.assert_allclose(load_node_data(files["column"]), [4, 3, 2, 1])
    np.save(tmp_path / "d.npy", np.arange(4))
    np.testing.assert_allclose(load_node_data(tmp_path / "d.npy"), [0, 1, 2, 3])


def test_load_node_data_rejects_matrix(files):
    with pytest.raises(ShapeError):
        load_node_data(files["corr"])


def test_bundle_keeps_order(files):
    bundle = load_network_bundle(
        [files["corr"], files["group"]], ["corr", "flat"],
        [files["group"], files["column"]], ["group", "column"],
        linkage_path=files["linkage"], thumbnails="thumbs",
    )
    assert bundle.matrix_labels == ["corr", "flat"]
    assert len(bundle.matrices[0]) == 4
    assert bundle.matrices[1] == [[1.0, 1.0, 2.0, 2.0]]
    np.testing.assert_allclose(bundle.node_data[1], [4, 3, 2, 1])
    assert bundle.linkage.shape == (3, 3)
    assert bundle.thumbnails == "thumbs"


def test_bundle_label_mismatch(files):
    with pytest.raises(ShapeError):
        load_network_bundle([files["corr"]], [])
    with pytest.raises(ShapeError):
        load_network_bundle([files["corr"]], ["corr"], [files["group"]], [])


def test_load_network(files):
    bundle = load_network_bundle(
        [files["corr"]], ["corr"], [files["group"]], ["group"], linkage_path=files["linkage"],
    )
    network = load_network(bundle, threshold_values=[0.5], threshold_labels=["p"], num_clusters=2)
    assert {e.key for e in network.edges} == {(0, 1), (0, 3), (1, 2)}
    assert [n.cluster for n in network.nodes] == [0, 0, 1, 1]
    assert network.nodes[2].node_data == (2.0,)


def test_ragged_text_matrix_is_rejected(tmp_path):
    path = _write(tmp_path / "bad.txt", "0 1 2\n1 0\n2 1 0\n")
    bundle = load_network_bundle([path], ["bad"])
    with pytest.raises(ShapeError):
        load_network(bundle)


def test_ragged_linkage_file(files, tmp_path):
    path = _write(tmp_path / "ragged.txt", "1 2 0.1\n3 4\n")
    with pytest.raises(LinkageError):
        load_network_bundle([files["corr"]], ["corr"], linkage_path=path)
