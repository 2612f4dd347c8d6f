"""Split coarse clusters into tighter subclusters with k-means over embeddings."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import numpy as np
from sklearn.cluster import KMeans

from compute_embeddings.cache import EmbeddingCache

logger = logging.getLogger(__name__)

MIN_EMBEDDINGS_TO_REFINE = 3
ARTICLES_PER_SUBCLUSTER = 3


def choose_subcluster_count(embedding_count: int, max_subclusters: int = 3) -> int:
    return min(embedding_count // ARTICLES_PER_SUBCLUSTER, max_subclusters)


def partition_embeddings(vectors: Sequence[Sequence[float]], k: int) -> np.ndarray:
    """Return one k-means label per vector (Euclidean, k-means++ seeding)."""
    matrix = np.asarray(vectors, dtype="float32")
    if matrix.ndim != 2:
        raise ValueError(f"Expected a 2-D embedding matrix, got shape {matrix.shape}")
    kmeans = KMeans(n_clusters=k, init="k-means++", n_init=10, random_state=0)
    return kmeans.fit_predict(matrix)


def refine_cluster(
    articles: list[Any],
    embeddings: EmbeddingCache | None,
    min_cluster_size: int = 2,
    enabled: bool = False,
    max_subclusters: int = 3,
) -> list[list[Any]]:
    """
    Optionally split a coarse cluster into semantic subclusters.

    Args:
        articles: Members of one coarse cluster.
        embeddings: Cache used to fetch or lazily compute article vectors.
        min_cluster_size: Subclusters smaller than this are dropped.
        enabled: Semantic refinement switch; when False the input is returned as is.
        max_subclusters: Upper bound on k.

    Returns:
        Surviving subclusters, or ``[articles]`` when refinement is disabled,
        skipped or fails.
    """
    if not enabled or embeddings is None:
        return [articles]

    try:
        vectors = []
        for article in articles:
            vector = embeddings.get_or_compute(article)
            if vector is None:
                logger.warning("Skipping refinement: embedding missing for %d-article cluster", len(articles))
                return [articles]
            vectors.append(vector)

        if len(vectors) < MIN_EMBEDDINGS_TO_REFINE:
            return [articles]

        k = choose_subcluster_count(len(vectors), max_subclusters)
        labels = partition_embeddings(vectors, k)
    except Exception:
        logger.exception("Error refining cluster with embeddings; keeping coarse cluster")
        return [articles]

    subclusters: list[list[Any]] = [[] for _ in range(k)]
    for label, article in zip(labels, articles, strict=True):
        subclusters[int(label)].append(article)

    survivors = [group for group in subclusters if len(group) >= min_cluster_size]
    logger.info(
        "Refined %d-article cluster into %d subclusters (%d kept)",
        len(articles),
        k,
        len(survivors),
    )
    return survivors
