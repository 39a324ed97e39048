"""Connectivity network data model: matrices, thresholds, dendrograms."""

__version__ = "0.1.0"

from .exceptions import ClusterError, ConnvizError, LinkageError, ShapeError
from .io import (
    NetworkBundle,
    load_matrix,
    load_network,
    load_network_bundle,
    load_node_data,
    parse_text_matrix,
)
from .network import (
    Network,
    create_network,
    extract_subnetwork,
    set_edge_colour_index,
    set_edge_width_index,
    set_node_colour_index,
    set_num_clusters,
    set_threshold_matrix,
    set_threshold_value,
    to_networkx,
)
from .export import network_to_dict, save_network_json
from .scales import ScaleInfo
from .utils import *  # noqa: F401,F403
from .config.const import *  # noqa: F401,F403
