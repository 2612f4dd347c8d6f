"""Helper functions for compute_embeddings CLI."""

from __future__ import annotations

import argparse

from common.cli_helpers import parse_positive_int
from compute_embeddings.compute_embeddings import DEFAULT_MODEL


def parse_compute_embeddings_args() -> argparse.Namespace:
    """Parse CLI arguments for compute_embeddings."""

    parser = argparse.ArgumentParser(description="Precompute embeddings for recent articles.")

    # Input options
    parser.add_argument(
        "--limit",
        type=lambda v: parse_positive_int(v, "limit"),
        default=200,
        help="Number of most recent articles to consider (default: 200)",
    )
    parser.add_argument(
        "--offset",
        type=int,
        default=0,
        help="Skip this many recent articles first (default: 0)",
    )

    # Model options
    parser.add_argument(
        "--model",
        default=DEFAULT_MODEL,
        help=f"Sentence transformer model (default: {DEFAULT_MODEL})",
    )
    parser.add_argument(
        "--batch-size",
        type=lambda v: parse_positive_int(v, "batch-size"),
        default=32,
        help="Batch size for encoding (default: 32)",
    )

    # Output options
    parser.add_argument("--load-local", action="store_true", help="Also save results to a local file")

    return parser.parse_args()
