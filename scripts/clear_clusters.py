"""Clear all rows from cluster tables (articles and embeddings are kept)."""

from __future__ import annotations

import logging

from dotenv import load_dotenv


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    logger = logging.getLogger(__name__)

    load_dotenv()

    from sqlalchemy import text

    from news_db.connection import get_session

    with get_session() as session:
        membership_result = session.execute(text("DELETE FROM article_clusters"))
        cluster_result = session.execute(text("DELETE FROM clusters"))
        session.commit()

    logger.info(
        "Deleted %d rows from article_clusters and %d rows from clusters",
        membership_result.rowcount or 0,
        cluster_result.rowcount or 0,
    )


if __name__ == "__main__":
    main()
