"""Shared fixtures: small synthetic connectivity matrices."""

import numpy as np
import pytest


@pytest.fixture
def identity():
    """Threshold function for matrices which are already thresholded."""
    return lambda matrix, values: matrix


@pytest.fixture
def thresholded_matrix():
    """Already thresholded 3 node matrix: edges (0,1) w=5 and (1,2) w=1."""
    nan = np.nan
    return [[0, 5, nan],
            [5, 0, 1],
            [nan, 1, 0]]


@pytest.fixture
def corr_matrix():
    """A 4 node correlation-like matrix with a zero diagonal.

    Absolute row maxima are 0.9, 0.9, 0.5 and 0.8.  With a threshold
    percentage of 0.5 the kept pairs are (0,1), (0,3) and (1,2); (2,3)
    passes node 2's threshold (0.25) but not node 3's (0.4).
    """
    return np.array([
        [0.0, 0.9, 0.2, -0.8],
        [0.9, 0.0, 0.5, 0.1],
        [0.2, 0.5, 0.0, 0.3],
        [-0.8, 0.1, 0.3, 0.0],
    ])


@pytest.fixture
def second_matrix(corr_matrix):
    """Same as ``corr_matrix`` with (2,3) raised to 0.45."""
    m = corr_matrix.copy()
    m[2, 3] = m[3, 2] = 0.45
    return m


@pytest.fixture
def linkage4():
    """Complete linkage over 4 nodes: {0,1} at 0.1, {2,3} at 0.2, all at 0.7."""
    return np.array([
        [1, 2, 0.1],
        [3, 4, 0.2],
        [5, 6, 0.7],
    ])


@pytest.fixture
def random_matrix():
    """A symmetric 12 x 12 random matrix with a few missing entries."""
    rng = np.random.default_rng(0)
    m = rng.uniform(-1, 1, size=(12, 12))
    m = (m + m.T) / 2
    m[2, 7] = m[7, 2] = np.nan
    np.fill_diagonal(m, 0.0)
    return m
