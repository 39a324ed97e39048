"""Edge width and colour scales derived from a network's edge weights.

The scale set records which matrix drives edge widths, which matrix drives
edge colours and which node-data array drives node colours.  Whenever one
of those indices (or the network's edges) change, the domains are
recomputed from the cached edge weight statistics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

import matplotlib
import numpy as np
from matplotlib.colors import to_hex, to_rgb

from .config.const import (
    DEFAULT_EDGE_CHANNEL_RANGE,
    DEFAULT_NODE_COLOUR,
    EDGE_COLOUR_RANGE,
    EDGE_WIDTH_RANGE,
    NODE_COLOUR_MAP,
)
from .utils.graph.elements import Edge, Node
from .utils.matrices.store import WeightStatistics

__all__ = ["ScaleInfo", "symmetric_domain"]


def symmetric_domain(stats: WeightStatistics, idx: int) -> Tuple[float, ...]:
    """Return ``(-max, -min, 0, min, max)`` of the absolute weights of ``idx``.

    Collapses to zeros when the matrix has no edge weights.
    """

    if not stats.is_defined(idx):
        return (0.0, 0.0, 0.0, 0.0, 0.0)
    lo = float(stats.abs_mins[idx])
    hi = float(stats.abs_maxs[idx])
    return (-hi, -lo, 0.0, lo, hi)


@dataclass
class ScaleInfo:
    """Indices selecting the data behind edge widths and colours.

    The ``*_domain`` attributes and the node colour table are derived by
    :meth:`generate` and must not be set directly.
    """

    edge_width_idx: int = 0
    edge_colour_idx: int = 0
    node_colour_idx: int = 0
    edge_width_domain: Tuple[float, ...] = (0.0, 0.0, 0.0, 0.0, 0.0)
    edge_colour_domain: Tuple[float, ...] = (0.0, 0.0, 0.0, 0.0, 0.0)
    node_colours: Dict[float, str] = field(default_factory=dict)

    def generate(self, stats: WeightStatistics, node_data: Sequence[np.ndarray]) -> None:
        self.edge_width_domain = symmetric_domain(stats, self.edge_width_idx)
        self.edge_colour_domain = symmetric_domain(stats, self.edge_colour_idx)

        self.node_colours = {}
        if self.node_colour_idx < len(node_data):
            cmap = matplotlib.colormaps[NODE_COLOUR_MAP]
            for value in node_data[self.node_colour_idx]:
                value = float(value)
                if np.isnan(value):
                    continue
                if value not in self.node_colours:
                    self.node_colours[value] = to_hex(cmap(len(self.node_colours) % cmap.N))

    def edge_width(self, edge: Edge) -> float:
        """Width of ``edge``; grows with the magnitude of its weight."""

        weight = abs(edge.weights[self.edge_width_idx])
        if np.isnan(weight):
            return 0.0
        _, _, zero, lo, hi = self.edge_width_domain
        _, _, w_zero, w_lo, w_hi = EDGE_WIDTH_RANGE
        return float(np.interp(weight, [zero, lo, hi], [w_zero, w_lo, w_hi]))

    def hlt_edge_colour(self, edge: Edge) -> str:
        """Colour of ``edge`` when highlighted: blue negative, red positive."""

        weight = edge.weights[self.edge_colour_idx]
        if np.isnan(weight):
            return EDGE_COLOUR_RANGE[2]
        channels = np.array([to_rgb(c) for c in EDGE_COLOUR_RANGE])
        rgb = [np.interp(weight, self.edge_colour_domain, channels[:, k]) for k in range(3)]
        return to_hex(rgb)

    def def_edge_colour(self, edge: Edge) -> str:
        """Washed out version of :meth:`hlt_edge_colour`."""

        lo, hi = DEFAULT_EDGE_CHANNEL_RANGE
        rgb = np.round(np.array(to_rgb(self.hlt_edge_colour(edge))) * 255.0)
        washed = np.ceil(lo + rgb * (hi - lo) / 255.0) / 255.0
        return to_hex(np.clip(washed, 0.0, 1.0))

    def node_colour(self, node: Node) -> str:
        value: Optional[float] = None
        if self.node_colour_idx < len(node.node_data):
            value = float(node.node_data[self.node_colour_idx])
        return self.node_colours.get(value, DEFAULT_NODE_COLOUR)
