"""Helper functions for cluster_articles CLI."""

from __future__ import annotations

import argparse
from dataclasses import replace

from cluster_articles.config import REFINEMENT_MODES, ClusteringConfig
from common.cli_helpers import parse_positive_int


def parse_cluster_articles_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for cluster_articles."""

    parser = argparse.ArgumentParser(description="Cluster recent articles into topics.")

    # Config options
    parser.add_argument(
        "--config",
        default=None,
        help="Config name under configs/ (default: CONFIG_ENV or prod)",
    )

    # Input options
    parser.add_argument(
        "--limit",
        type=lambda v: parse_positive_int(v, "limit"),
        default=None,
        help="Number of most recent articles to cluster (default: from config, 200)",
    )

    # Clustering options
    parser.add_argument(
        "--min-cluster-size",
        type=lambda v: parse_positive_int(v, "min-cluster-size"),
        default=None,
        help="Minimum articles per cluster (default: from config, 2)",
    )
    parser.add_argument(
        "--refinement-mode",
        choices=REFINEMENT_MODES,
        default=None,
        help="'research' enables embedding-based subclustering (default: from config)",
    )

    # Output options
    parser.add_argument("--load-local", action="store_true", help="Also save created clusters to a local file")

    return parser.parse_args(argv)


def apply_overrides(config: ClusteringConfig, args: argparse.Namespace) -> ClusteringConfig:
    """Return ``config`` with any CLI flags that were given applied on top."""
    overrides = {}
    if args.limit is not None:
        overrides["article_window"] = args.limit
    if args.min_cluster_size is not None:
        overrides["min_cluster_size"] = args.min_cluster_size
    if args.refinement_mode is not None:
        overrides["refinement_mode"] = args.refinement_mode
    return replace(config, **overrides) if overrides else config
