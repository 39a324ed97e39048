"""JSON export of a network for external renderers."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Dict, Optional

from .network import Network

__all__ = ["network_to_dict", "save_network_json"]


def _finite(value: float) -> Optional[float]:
    """JSON has no NaN/infinity; those become ``null``."""

    value = float(value)
    return value if math.isfinite(value) else None


def network_to_dict(network: Network) -> Dict[str, Any]:
    """Return a JSON-serialisable description of ``network``."""

    scale = network.scale_info
    nodes = [
        {
            "index": node.index,
            "name": node.name,
            "cluster": node.cluster,
            "thumbnail": node.thumbnail,
            "node_data": [_finite(v) for v in node.node_data],
            "neighbours": list(node.neighbours),
            "full_net_index": node.full_net_index,
            "colour": scale.node_colour(node),
        }
        for node in network.nodes
    ]
    edges = [
        {
            "i": edge.i,
            "j": edge.j,
            "weights": [_finite(w) for w in edge.weights],
            "width": scale.edge_width(edge),
            "colour": scale.hlt_edge_colour(edge),
            "default_colour": scale.def_edge_colour(edge),
        }
        for edge in network.edges
    ]
    stats = network.weight_stats
    return {
        "matrix_labels": list(network.matrix_labels),
        "node_data_labels": list(network.node_data_labels),
        "threshold": {
            "matrix_idx": network.threshold_idx,
            "labels": list(network.threshold.labels),
            "values": list(network.threshold_values),
        },
        "num_clusters": network.num_clusters,
        "statistics": {
            "mins": [_finite(v) for v in stats.mins],
            "maxs": [_finite(v) for v in stats.maxs],
            "abs_mins": [_finite(v) for v in stats.abs_mins],
            "abs_maxs": [_finite(v) for v in stats.abs_maxs],
        },
        "scales": {
            "edge_width_idx": scale.edge_width_idx,
            "edge_colour_idx": scale.edge_colour_idx,
            "node_colour_idx": scale.node_colour_idx,
        },
        "tree": [
            {"index": tn.index, "children": list(tn.children), "distance": _finite(tn.distance)}
            for tn in network.tree_nodes
        ],
        "nodes": nodes,
        "edges": edges,
    }


def save_network_json(network: Network, path: Path) -> Path:
    """Write :func:`network_to_dict` of ``network`` to ``path``."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(network_to_dict(network), handle, indent=2)
    return path
