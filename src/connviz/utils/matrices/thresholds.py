"""Thresholding of connectivity matrices.

A threshold function maps a raw matrix and an ordered list of parameter
values to a matrix of the same shape in which suppressed entries are NaN.
Node pairs whose thresholded entry is not NaN become network edges.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Sequence

import numpy as np
from numpy.typing import NDArray

from ...exceptions import ShapeError
from .store import MatrixStore

__all__ = [
    "ThresholdFunction",
    "ThresholdEngine",
    "percentile_threshold",
    "absolute_threshold",
]

logger = logging.getLogger(__name__)

ThresholdFunction = Callable[[NDArray[np.float64], Sequence[Any]], NDArray[np.float64]]


def percentile_threshold(matrix: NDArray, values: Sequence[Any]) -> NDArray:
    """Keep entries reaching a fraction of both endpoints' strongest link.

    For every row ``i`` the node threshold is ``max_j |matrix[i, j]| * p``
    where ``p = values[0]``.  Entry ``(i, j)`` is suppressed if
    ``|matrix[i, j]|`` is below the threshold of node ``i`` or
    ``|matrix[j, i]|`` is below the threshold of node ``j``, so suppression
    is symmetric even for asymmetric input.
    """

    p = float(values[0])
    if not 0.0 <= p <= 1.0:
        raise ValueError(f"Threshold percentage must lie in [0, 1]; received {p}.")

    absolute = np.abs(np.asarray(matrix, dtype=np.float64))
    # fmax skips NaN; rows with no values keep a NaN threshold and suppress nothing.
    node_thresholds = np.fmax.reduce(absolute, axis=1, initial=-np.inf) * p
    node_thresholds[np.isneginf(node_thresholds)] = np.nan

    suppress = (absolute < node_thresholds[:, None]) | (absolute.T < node_thresholds[None, :])
    thresholded = np.array(matrix, dtype=np.float64)
    thresholded[suppress] = np.nan
    return thresholded


def absolute_threshold(matrix: NDArray, values: Sequence[Any]) -> NDArray:
    """Suppress entries whose magnitude is below ``values[0]``."""

    thresholded = np.array(matrix, dtype=np.float64)
    thresholded[np.abs(thresholded) < float(values[0])] = np.nan
    return thresholded


class ThresholdEngine:
    """Holds a threshold function, its parameter values and source matrix.

    The engine does not interpret the parameter values; it only hands them
    to ``func`` together with the matrix at ``matrix_idx``.
    """

    def __init__(
        self,
        func: ThresholdFunction,
        values: Sequence[Any],
        labels: Sequence[str],
        matrix_idx: int = 0,
    ) -> None:
        if len(values) != len(labels):
            raise ShapeError(
                f"Threshold value and label lengths do not match "
                f"({len(values)} != {len(labels)})"
            )
        self.func = func
        self.values: List[Any] = list(values)
        self.labels: List[str] = list(labels)
        self.matrix_idx = matrix_idx

    def copy(self) -> "ThresholdEngine":
        return ThresholdEngine(self.func, list(self.values), list(self.labels), self.matrix_idx)

    def set_value(self, idx: int, value: Any) -> None:
        if idx < 0 or idx >= len(self.values):
            raise IndexError(f"Threshold value index out of range: {idx}")
        self.values[idx] = value

    def set_matrix_index(self, idx: int, num_matrices: int) -> None:
        if idx < 0 or idx >= num_matrices:
            raise IndexError(f"Matrix index out of range: {idx}")
        self.matrix_idx = idx

    def apply(self, store: MatrixStore) -> NDArray[np.float64]:
        """Threshold the active matrix of ``store`` and return the result."""

        if self.matrix_idx < 0 or self.matrix_idx >= store.num_matrices:
            raise IndexError(f"Matrix index out of range: {self.matrix_idx}")

        matrix = store.matrices[self.matrix_idx]
        thresholded = np.asarray(self.func(matrix.copy(), list(self.values)), dtype=np.float64)
        if thresholded.shape != matrix.shape:
            raise ShapeError(
                f"Threshold function returned shape {thresholded.shape}; "
                f"expected {matrix.shape}"
            )

        logger.debug(
            "Thresholded matrix %s with %s=%s",
            store.matrix_labels[self.matrix_idx],
            self.labels,
            self.values,
        )
        return thresholded
