"""CLI for precomputing article embeddings into the cache."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from dotenv import load_dotenv

from common.cli_helpers import save_jsonl_local, setup_logging
from common.serialization import serialize_dataclass
from compute_embeddings.compute_embeddings import SentenceEmbedder, compute_embeddings
from compute_embeddings.helpers import parse_compute_embeddings_args
from news_db.connection import get_session_factory, init_db
from news_db.store import ArticleStore

load_dotenv()

setup_logging()
logger = logging.getLogger(__name__)


def main() -> None:
    args = parse_compute_embeddings_args()

    init_db()
    store = ArticleStore(get_session_factory())

    articles = store.get_recent_articles(limit=args.limit, offset=args.offset)
    missing = [a for a in articles if store.get_cached_embedding(a.id) is None]
    logger.info("%d of %d recent articles have no cached embedding", len(missing), len(articles))

    if not missing:
        logger.warning("No articles to process")
        return

    with SentenceEmbedder(args.model) as embedder:
        embedded_articles = compute_embeddings(missing, embedder, batch_size=args.batch_size)

    if not embedded_articles:
        logger.warning("No articles embedded")
        return

    cached = 0
    for embedded in embedded_articles:
        if store.cache_embedding(embedded.article_id, embedded.embedding, embedded.embedding_model):
            cached += 1
    logger.info("Cached %d embeddings (%d already present)", cached, len(embedded_articles) - cached)

    if args.load_local:
        now = datetime.now(timezone.utc)
        records = [serialize_dataclass(article) for article in embedded_articles]
        filepath = save_jsonl_local(records, "embedded_articles", now)
        logger.info("Saved %d embedded articles to %s", len(embedded_articles), filepath)


if __name__ == "__main__":
    main()
