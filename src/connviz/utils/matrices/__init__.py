"""Matrix validation and thresholding."""

from .store import MatrixStore, WeightStatistics
from .thresholds import ThresholdEngine, absolute_threshold, percentile_threshold

__all__ = [
    "MatrixStore",
    "WeightStatistics",
    "ThresholdEngine",
    "absolute_threshold",
    "percentile_threshold",
]
