"""Command line entry point for :mod:`connviz`."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable, Optional

from .config.const import DEFAULT_NUM_CLUSTERS, DEFAULT_THRESHOLD_PERCENTAGE
from .export import save_network_json
from .io import load_network, load_network_bundle
from .network import extract_subnetwork
from .utils.clustering.dendrogram import compute_linkage

__all__ = ["create_build_parser", "build_network"]


def _configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format="%(asctime)s %(levelname)s %(message)s")


def create_build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build a thresholded, clustered network from connectivity matrices",
    )
    parser.add_argument(
        "--matrix",
        "-m",
        dest="matrices",
        type=Path,
        action="append",
        required=True,
        help="Matrix file (text, .npy or .mat); repeat for several matrices",
    )
    parser.add_argument(
        "--matrix-label",
        dest="matrix_labels",
        action="append",
        default=None,
        help="Label of each matrix, in order (defaults to the file stem)",
    )
    parser.add_argument(
        "--node-data",
        dest="node_data",
        type=Path,
        action="append",
        default=[],
        help="Per-node data file; repeat for several arrays",
    )
    parser.add_argument(
        "--node-data-label",
        dest="node_data_labels",
        action="append",
        default=None,
        help="Label of each node data array, in order (defaults to the file stem)",
    )
    linkage = parser.add_mutually_exclusive_group()
    linkage.add_argument("--linkage", type=Path, default=None, help="Linkage table file")
    linkage.add_argument(
        "--compute-linkage",
        metavar="METHOD",
        default=None,
        help="Compute the linkage from the threshold matrix (e.g. average, complete)",
    )
    parser.add_argument("--thumbnails", default=None, help="Directory of node thumbnails")
    parser.add_argument(
        "--threshold",
        "-t",
        type=float,
        default=DEFAULT_THRESHOLD_PERCENTAGE,
        help="Threshold percentage in [0, 1]",
    )
    parser.add_argument(
        "--threshold-matrix",
        type=int,
        default=0,
        help="Index of the matrix used to define the edges",
    )
    parser.add_argument(
        "--clusters",
        "-k",
        type=int,
        default=DEFAULT_NUM_CLUSTERS,
        help="Maximum number of dendrogram clusters",
    )
    parser.add_argument(
        "--subnetwork",
        type=int,
        default=None,
        help="Export only the sub-network of this (0-based) node index",
    )
    parser.add_argument("--output", "-o", type=Path, required=True, help="Output JSON file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ...)",
    )
    return parser


def build_network(argv: Optional[Iterable[str]] = None) -> int:
    parser = create_build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    matrix_labels = args.matrix_labels or [p.stem for p in args.matrices]
    node_data_labels = args.node_data_labels or [p.stem for p in args.node_data]

    bundle = load_network_bundle(
        args.matrices,
        matrix_labels,
        args.node_data,
        node_data_labels,
        linkage_path=args.linkage,
        thumbnails=args.thumbnails,
    )
    if args.compute_linkage is not None:
        bundle.linkage = compute_linkage(
            bundle.matrices[args.threshold_matrix], method=args.compute_linkage
        )
        logging.info("Computed %s linkage from matrix %s", args.compute_linkage, args.threshold_matrix)

    network = load_network(
        bundle,
        threshold_values=[args.threshold],
        threshold_idx=args.threshold_matrix,
        num_clusters=args.clusters,
    )

    if args.subnetwork is not None:
        network = extract_subnetwork(network, args.subnetwork)
        logging.info("Extracted sub-network of node %d", args.subnetwork)

    path = save_network_json(network, args.output)
    logging.info("Network with %d nodes and %d edges written to %s", len(network.nodes), len(network.edges), path)
    return 0


def main() -> int:  # pragma: no cover - convenience wrapper
    return build_network()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
