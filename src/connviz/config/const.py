"""Default values used across :mod:`connviz`.

The values defined in this module import without touching the filesystem.
They are shared by the thresholding, scaling and loading utilities, so
keeping them together avoids circular dependencies.
"""
#
from __future__ import annotations
#
from typing import Tuple
#
__all__ = [
    "DEFAULT_THRESHOLD_PERCENTAGE",
    "DEFAULT_THRESHOLD_LABEL",
    "DEFAULT_NUM_CLUSTERS",
    "THUMBNAIL_NAME_FORMAT",
    "EDGE_WIDTH_RANGE",
    "EDGE_COLOUR_RANGE",
    "DEFAULT_EDGE_CHANNEL_RANGE",
    "NODE_COLOUR_MAP",
    "DEFAULT_NODE_COLOUR",
]
#
#: Fraction of each node's strongest connection an edge must reach.
DEFAULT_THRESHOLD_PERCENTAGE: float = 0.75
DEFAULT_THRESHOLD_LABEL: str = "Threshold percentage"
DEFAULT_NUM_CLUSTERS: int = 1
#
#: Thumbnails are looked up as ``<thumbnails>/<0-padded node index>.png``.
THUMBNAIL_NAME_FORMAT: str = "{:04d}.png"
#
#: Edge widths, mapped from the domain ``[-max, -min, 0, min, max]``.
EDGE_WIDTH_RANGE: Tuple[float, ...] = (15.0, 2.0, 0.0, 2.0, 15.0)
#: Highlighted edge colours over the same five-point domain.
EDGE_COLOUR_RANGE: Tuple[str, ...] = (
    "#0000dd",
    "#ccccdd",
    "#ffffff",
    "#ddaaaa",
    "#dd0000",
)
#: Non-highlighted edges are a washed out version of the highlighted colour:
#: every RGB channel in ``[0, 255]`` is squeezed into this range.
DEFAULT_EDGE_CHANNEL_RANGE: Tuple[float, float] = (210.0, 240.0)
#
NODE_COLOUR_MAP: str = "tab10"
DEFAULT_NODE_COLOUR: str = "#1f77b4"
