"""Group recent articles into topic clusters and persist them."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from cluster_articles.config import ClusteringConfig, get_config
from cluster_articles.metadata import FactExtractor, derive_metadata
from cluster_articles.models import ClusteringResult, SavedCluster, SimilarityThresholds
from cluster_articles.similarity import TfidfCorpus, article_document, title_similarity
from cluster_articles.subclusters import refine_cluster
from common.utils import get_value
from compute_embeddings.cache import EmbeddingCache
from news_db.store import ArticleStore

logger = logging.getLogger(__name__)

MIN_ARTICLES = 2


def thresholds_from_config(config: ClusteringConfig) -> SimilarityThresholds:
    return SimilarityThresholds(
        title_gate=config.title_gate,
        corpus=config.corpus_threshold,
        strong_title=config.strong_title_threshold,
    )


def group_by_keywords(
    articles: list[Any],
    min_cluster_size: int = 2,
    thresholds: SimilarityThresholds | None = None,
) -> list[list[Any]]:
    """
    Greedy single-pass grouping by lexical similarity.

    Each unclaimed article seeds a group and claims every later unclaimed
    article whose title overlaps the seed's by more than ``title_gate`` and
    that also clears either the TF-IDF or the strong-title threshold. Groups
    below ``min_cluster_size`` are dropped; their members stay unclustered.
    The result depends on input order.

    Args:
        articles: Articles in processing order.
        min_cluster_size: Smallest group that is kept.
        thresholds: Similarity gates (defaults 0.3 / 0.2 / 0.5).

    Returns:
        Kept groups, each in input order.
    """
    thresholds = thresholds or SimilarityThresholds()
    corpus = TfidfCorpus([article_document(article) for article in articles])

    claimed: set[int] = set()
    groups: list[list[Any]] = []

    for i, article in enumerate(articles):
        if i in claimed:
            continue

        group = [article]
        claimed.add(i)
        seed_title = get_value(article, "title")

        # Every earlier index has already been claimed as a seed or member.
        for j in range(i + 1, len(articles)):
            if j in claimed:
                continue

            title_score = title_similarity(seed_title, get_value(articles[j], "title"))
            if title_score <= thresholds.title_gate:
                continue

            corpus_score = corpus.similarity(i, j)
            if corpus_score > thresholds.corpus or title_score > thresholds.strong_title:
                group.append(articles[j])
                claimed.add(j)

        if len(group) >= min_cluster_size:
            groups.append(group)

    logger.info(
        "Grouped %d articles into %d keyword clusters (%d unclustered)",
        len(articles),
        len(groups),
        len(articles) - sum(len(group) for group in groups),
    )
    return groups


def save_cluster(
    articles: list[Any],
    store: ArticleStore,
    config: ClusteringConfig,
    fact_extractor: FactExtractor | None = None,
) -> SavedCluster | None:
    """Derive metadata and persist one cluster; None if the write failed."""
    metadata = derive_metadata(articles, fact_extractor)
    article_ids = [get_value(article, "id") for article in articles]

    try:
        cluster_id = store.save_cluster(
            title=metadata.title,
            summary=metadata.summary,
            fact_core=metadata.fact_core,
            confidence_score=metadata.confidence_score,
            article_ids=article_ids,
            similarity_score=config.membership_similarity,
        )
    except SQLAlchemyError:
        logger.exception("Error saving cluster %r (%d articles)", metadata.title, len(articles))
        return None

    return SavedCluster(
        id=cluster_id,
        title=metadata.title,
        confidence_score=metadata.confidence_score,
        article_ids=article_ids,
    )


def cluster_articles(
    articles: list[Any],
    store: ArticleStore,
    config: ClusteringConfig | None = None,
    embeddings: EmbeddingCache | None = None,
    fact_extractor: FactExtractor | None = None,
) -> list[SavedCluster]:
    """
    Cluster articles and persist every resulting group.

    Args:
        articles: Articles in processing order.
        store: Persistence collaborator for clusters and memberships.
        config: Clustering configuration; defaults to the active config.
        embeddings: Embedding cache used when semantic refinement is on.
        fact_extractor: Optional LLM capability for the fact core.

    Returns:
        Clusters that were saved successfully.
    """
    config = config or get_config()

    if len(articles) < MIN_ARTICLES:
        logger.warning("Not enough articles to cluster")
        return []

    keyword_clusters = group_by_keywords(
        articles,
        min_cluster_size=config.min_cluster_size,
        thresholds=thresholds_from_config(config),
    )

    refined_clusters = []
    for group in keyword_clusters:
        refined_clusters.extend(
            refine_cluster(
                group,
                embeddings,
                min_cluster_size=config.min_cluster_size,
                enabled=config.semantic_refinement,
                max_subclusters=config.max_subclusters,
            )
        )

    saved = []
    for group in refined_clusters:
        cluster = save_cluster(group, store, config, fact_extractor)
        if cluster is not None:
            saved.append(cluster)

    failed = len(refined_clusters) - len(saved)
    if failed:
        logger.warning("%d of %d clusters failed to save", failed, len(refined_clusters))
    return saved


def run_clustering(
    store: ArticleStore,
    config: ClusteringConfig | None = None,
    embeddings: EmbeddingCache | None = None,
    fact_extractor: FactExtractor | None = None,
) -> ClusteringResult:
    """Cluster the most recent article window; errors reading articles propagate."""
    config = config or get_config()
    logger.info("Starting clustering (window=%d, refinement=%s)", config.article_window, config.refinement_mode)

    recent_articles = store.get_recent_articles(limit=config.article_window, offset=0)

    if len(recent_articles) < MIN_ARTICLES:
        logger.warning("Not enough articles for clustering (%d)", len(recent_articles))
        return ClusteringResult(
            articles_processed=len(recent_articles),
            clusters_created=0,
            message="Not enough articles",
        )

    logger.info("Processing %d recent articles", len(recent_articles))
    clusters = cluster_articles(recent_articles, store, config, embeddings, fact_extractor)

    logger.info("Created %d new clusters", len(clusters))
    for i, cluster in enumerate(clusters, 1):
        logger.info("  Cluster %d: %d articles - %s", i, len(cluster.article_ids), cluster.title)

    return ClusteringResult(
        articles_processed=len(recent_articles),
        clusters_created=len(clusters),
        clusters=clusters,
    )
