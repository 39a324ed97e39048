"""Validated container for the matrices and node data of one network."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Sequence, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ...exceptions import ShapeError

__all__ = ["WeightStatistics", "MatrixStore"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeightStatistics:
    """Per-matrix minimum/maximum weights, real and absolute.

    Every attribute holds one value per matrix.  When there are no
    (non-NaN) weights for a matrix the sentinels ``+inf`` (minima) and
    ``-inf`` (maxima) are used.
    """

    mins: NDArray[np.float64]
    maxs: NDArray[np.float64]
    abs_mins: NDArray[np.float64]
    abs_maxs: NDArray[np.float64]

    @classmethod
    def from_weights(cls, weights: ArrayLike, n_matrices: int) -> "WeightStatistics":
        """Compute statistics from an ``(n_weights, n_matrices)`` array.

        NaN weights are ignored, as ``fmin``/``fmax`` skip them.
        """

        w = np.asarray(weights, dtype=np.float64).reshape(-1, n_matrices)
        aw = np.abs(w)
        return cls(
            mins=np.fmin.reduce(w, axis=0, initial=np.inf),
            maxs=np.fmax.reduce(w, axis=0, initial=-np.inf),
            abs_mins=np.fmin.reduce(aw, axis=0, initial=np.inf),
            abs_maxs=np.fmax.reduce(aw, axis=0, initial=-np.inf),
        )

    def is_defined(self, idx: int) -> bool:
        """Return ``True`` if matrix ``idx`` had at least one weight."""

        return bool(np.isfinite(self.abs_mins[idx]) and np.isfinite(self.abs_maxs[idx]))


def _as_square(matrix: ArrayLike, label: str, n_nodes: int) -> NDArray[np.float64]:
    """Return ``matrix`` as an ``(n_nodes, n_nodes)`` float array or raise."""

    rows = list(matrix)
    msg = f"Matrix {label} has invalid size"
    if len(rows) != n_nodes:
        raise ShapeError(f"{msg} (num rows: {len(rows)})")
    for row in rows:
        row_length = np.size(row)
        if np.ndim(row) != 1 or row_length != n_nodes:
            raise ShapeError(f"{msg} (column length {row_length})")
    return np.array(rows, dtype=np.float64).reshape(n_nodes, n_nodes)


class MatrixStore:
    """Equal-dimension square matrices plus per-node data arrays.

    Use :meth:`build` to create a store; it validates every input and
    never truncates or pads.

    Attributes
    ----------
    matrices:
        Tuple of ``(N, N)`` ``float64`` arrays.  NaN means "no relationship".
    matrix_labels:
        One label per matrix.
    node_data:
        Tuple of length-``N`` ``float64`` arrays.
    node_data_labels:
        One label per node-data array.
    """

    def __init__(
        self,
        matrices: Tuple[NDArray[np.float64], ...],
        matrix_labels: Tuple[str, ...],
        node_data: Tuple[NDArray[np.float64], ...],
        node_data_labels: Tuple[str, ...],
    ) -> None:
        self.matrices = matrices
        self.matrix_labels = matrix_labels
        self.node_data = node_data
        self.node_data_labels = node_data_labels
        self._statistics = None

    @classmethod
    def build(
        cls,
        matrices: Sequence[ArrayLike],
        matrix_labels: Sequence[str],
        node_data: Sequence[ArrayLike] = (),
        node_data_labels: Sequence[str] = (),
    ) -> "MatrixStore":
        """Validate the inputs and return a new store.

        Raises
        ------
        ShapeError
            If no matrix is given, a matrix is not ``N x N`` (``N`` being
            the row count of the first matrix), a node-data array is not a
            length-``N`` vector, or a label list does not match its data.
        """

        matrices = list(matrices)
        node_data = list(node_data)
        if not matrices:
            raise ShapeError("At least one matrix is required")
        if len(matrix_labels) != len(matrices):
            raise ShapeError(
                f"Matrix and label lengths do not match "
                f"({len(matrices)} != {len(matrix_labels)})"
            )
        if len(node_data_labels) != len(node_data):
            raise ShapeError(
                f"Node data and label lengths do not match "
                f"({len(node_data)} != {len(node_data_labels)})"
            )

        n_nodes = len(matrices[0])
        checked = tuple(
            _as_square(matrix, str(label), n_nodes)
            for matrix, label in zip(matrices, matrix_labels)
        )

        arrays = []
        for array, label in zip(node_data, node_data_labels):
            arr = np.array(array, dtype=np.float64)
            if arr.ndim != 1 or arr.shape[0] != n_nodes:
                raise ShapeError(
                    f"Node data array {label} has invalid length ({arr.shape})"
                )
            arrays.append(arr)

        logger.debug(
            "Validated %d matrices and %d node data arrays (N=%d)",
            len(checked),
            len(arrays),
            n_nodes,
        )
        return cls(checked, tuple(matrix_labels), tuple(arrays), tuple(node_data_labels))

    @property
    def num_nodes(self) -> int:
        return self.matrices[0].shape[0]

    @property
    def num_matrices(self) -> int:
        return len(self.matrices)

    @property
    def num_node_data(self) -> int:
        return len(self.node_data)

    @property
    def statistics(self) -> WeightStatistics:
        """Weight statistics over every node pair of the raw matrices."""

        if self._statistics is None:
            iu = np.triu_indices(self.num_nodes, k=1)
            weights = np.column_stack([m[iu] for m in self.matrices])
            self._statistics = WeightStatistics.from_weights(weights, self.num_matrices)
        return self._statistics

    def node_values(self, index: int) -> Tuple[float, ...]:
        """Return the node-data values of node ``index``, one per array."""

        return tuple(float(array[index]) for array in self.node_data)

    def submatrices(self, indices: Sequence[int]) -> Tuple[NDArray[np.float64], ...]:
        """Gather rows and columns ``indices`` (in order) of every matrix."""

        idx = np.asarray(indices, dtype=int)
        return tuple(m[np.ix_(idx, idx)] for m in self.matrices)

    def sub_node_data(self, indices: Sequence[int]) -> Tuple[NDArray[np.float64], ...]:
        """Gather entries ``indices`` (in order) of every node-data array."""

        idx = np.asarray(indices, dtype=int)
        return tuple(array[idx] for array in self.node_data)
