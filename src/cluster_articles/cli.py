"""CLI for clustering articles."""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone

from dotenv import load_dotenv

from cluster_articles.cluster_articles import run_clustering
from cluster_articles.config import ClusteringConfig, load_config, set_config
from cluster_articles.helpers import apply_overrides, parse_cluster_articles_args
from common.cli_helpers import save_jsonl_local, setup_logging
from common.serialization import serialize_dataclass
from compute_embeddings.cache import EmbeddingCache
from compute_embeddings.compute_embeddings import SentenceEmbedder
from llm_analysis.llm_analysis import LLMCapability
from news_db.connection import get_session_factory, init_db
from news_db.store import ArticleStore

load_dotenv()

setup_logging()
logger = logging.getLogger(__name__)


def build_fact_extractor(config: ClusteringConfig) -> LLMCapability | None:
    if config.fact_core_mode != "llm":
        return None
    logger.info("Using %s for fact extraction", config.llm_provider)
    return LLMCapability(provider=config.llm_provider)


def main(argv: list[str] | None = None) -> None:
    args = parse_cluster_articles_args(argv)

    embedder = None
    try:
        config = apply_overrides(load_config(args.config), args)
        set_config(config)

        init_db()
        store = ArticleStore(get_session_factory())
        fact_extractor = build_fact_extractor(config)

        embedder = SentenceEmbedder(config.embedding_model, timeout=config.embedding_timeout)
        embeddings = None
        if config.semantic_refinement:
            embeddings = EmbeddingCache(store, embedder, config.embedding_model)

        result = run_clustering(store, embeddings=embeddings, fact_extractor=fact_extractor)
    except Exception:
        logger.exception("Clustering failed")
        sys.exit(1)
    finally:
        if embedder is not None:
            embedder.close()

    logger.info("Clustering complete: %s", result.to_dict())

    if args.load_local and result.clusters:
        now = datetime.now(timezone.utc)
        records = [serialize_dataclass(cluster) for cluster in result.clusters]
        filepath = save_jsonl_local(records, "clusters", now)
        logger.info("Saved %d clusters to %s", len(records), filepath)


if __name__ == "__main__":
    main()
