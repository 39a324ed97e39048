"""Helpers for loading the matrix, node-data and linkage files of a network."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

import h5py
import numpy as np
from numpy.typing import NDArray
from scipy.io import loadmat

from .config.const import (
    DEFAULT_NUM_CLUSTERS,
    DEFAULT_THRESHOLD_LABEL,
    DEFAULT_THRESHOLD_PERCENTAGE,
)
from .exceptions import LinkageError, ShapeError
from .network import Network, create_network
from .utils.matrices.thresholds import ThresholdFunction, percentile_threshold

__all__ = [
    "NetworkBundle",
    "parse_text_matrix",
    "load_text_matrix",
    "load_mat_file",
    "load_matrix",
    "load_node_data",
    "load_network_bundle",
    "load_network",
]

PathLike = Union[str, Path]


def _parse_value(token: str) -> float:
    try:
        return float(token)
    except ValueError:
        return float("nan")


def parse_text_matrix(text: str) -> List[List[float]]:
    """Turn whitespace-delimited numeric text into a list of rows.

    Blank lines are skipped.  Tokens which are not numbers become NaN
    rather than raising; rows are returned as they are, so ragged input is
    left for :class:`~connviz.utils.matrices.store.MatrixStore` to reject.
    """

    return [
        [_parse_value(token) for token in line.split()]
        for line in text.splitlines()
        if line.strip()
    ]


def load_text_matrix(path: PathLike) -> List[List[float]]:
    """Read and parse a whitespace-delimited text matrix."""

    return parse_text_matrix(Path(path).read_text(encoding="utf-8"))


def load_mat_file(path: PathLike) -> Mapping[str, Any]:
    """Load a ``.mat`` file using :func:`scipy.io.loadmat` with an ``h5py`` fallback.

    MATLAB v7.3 files are HDF5 containers that :func:`scipy.io.loadmat`
    cannot read; those are loaded eagerly via ``h5py``.
    """

    try:
        return loadmat(str(path))
    except NotImplementedError:
        logging.debug("Falling back to h5py for %s", path)
        with h5py.File(path, "r") as handle:
            return {key: np.array(handle[key]) for key in handle.keys()}


def load_matrix(path: PathLike) -> Union[NDArray, List[List[float]]]:
    """Load a matrix from a ``.npy``, ``.mat`` or whitespace-delimited text file.

    For ``.mat`` files the first variable not starting with ``__`` is used.
    """

    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".npy":
        return np.load(path)
    if suffix == ".mat":
        mat = load_mat_file(path)
        names = [name for name in mat if not name.startswith("__")]
        if not names:
            raise KeyError(f"No data variable found in MAT file {path}")
        return np.asarray(mat[names[0]], dtype=np.float64)
    return load_text_matrix(path)


def load_node_data(path: PathLike) -> NDArray[np.float64]:
    """Load a per-node data vector stored as a single row or column."""

    rows = load_matrix(path)
    if isinstance(rows, np.ndarray) and rows.ndim == 1:
        return rows.astype(np.float64)
    if len(rows) == 1:
        return np.asarray(rows[0], dtype=np.float64)
    if all(np.size(row) == 1 for row in rows):
        return np.asarray(rows, dtype=np.float64).reshape(-1)
    raise ShapeError(f"Node data file {path} must hold a single row or column")


@dataclass
class NetworkBundle:
    """Everything read from disk that is needed to create a network."""

    matrices: List[Any]
    matrix_labels: List[str]
    node_data: List[NDArray[np.float64]] = field(default_factory=list)
    node_data_labels: List[str] = field(default_factory=list)
    linkage: Optional[NDArray[np.float64]] = None
    thumbnails: Optional[str] = None


def load_network_bundle(
    matrix_paths: Sequence[PathLike],
    matrix_labels: Sequence[str],
    node_data_paths: Sequence[PathLike] = (),
    node_data_labels: Sequence[str] = (),
    linkage_path: Optional[PathLike] = None,
    thumbnails: Optional[str] = None,
    max_workers: Optional[int] = None,
) -> NetworkBundle:
    """Read every network file and return them together.

    All files are read as one batch; the function returns only once every
    read has completed, in the order the paths were given.

    Raises
    ------
    ShapeError
        If the number of paths and labels differ.
    LinkageError
        If the linkage file does not hold a rectangular table.
    """

    if len(matrix_paths) != len(matrix_labels):
        raise ShapeError("Matrix path and label lengths do not match")
    if len(node_data_paths) != len(node_data_labels):
        raise ShapeError("Node data path and label lengths do not match")

    jobs: List[Tuple[Any, PathLike]] = [(load_matrix, p) for p in matrix_paths]
    jobs += [(load_node_data, p) for p in node_data_paths]
    if linkage_path is not None:
        jobs.append((load_matrix, linkage_path))

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        results = list(pool.map(lambda job: job[0](job[1]), jobs))

    n_mat = len(matrix_paths)
    n_data = len(node_data_paths)
    linkage = None
    if linkage_path is not None:
        try:
            linkage = np.asarray(results[n_mat + n_data], dtype=np.float64)
        except ValueError as exc:
            raise LinkageError(f"Linkage file {linkage_path} is not a table: {exc}") from exc

    logging.info(
        "Loaded %d matrices, %d node data arrays%s",
        n_mat,
        n_data,
        " and a linkage table" if linkage is not None else "",
    )
    return NetworkBundle(
        matrices=results[:n_mat],
        matrix_labels=list(matrix_labels),
        node_data=results[n_mat:n_mat + n_data],
        node_data_labels=list(node_data_labels),
        linkage=linkage,
        thumbnails=thumbnails,
    )


def load_network(
    bundle: NetworkBundle,
    threshold_func: ThresholdFunction = percentile_threshold,
    threshold_values: Sequence[Any] = (DEFAULT_THRESHOLD_PERCENTAGE,),
    threshold_labels: Sequence[str] = (DEFAULT_THRESHOLD_LABEL,),
    threshold_idx: int = 0,
    num_clusters: int = DEFAULT_NUM_CLUSTERS,
) -> Network:
    """Create a network from a loaded :class:`NetworkBundle`."""

    return create_network(
        bundle.matrices,
        bundle.matrix_labels,
        bundle.node_data,
        bundle.node_data_labels,
        linkage=bundle.linkage,
        thumbnails=bundle.thumbnails,
        threshold_func=threshold_func,
        threshold_values=threshold_values,
        threshold_labels=threshold_labels,
        threshold_idx=threshold_idx,
        num_clusters=num_clusters,
    )
