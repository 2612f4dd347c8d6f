"""Print clusters, their articles and source bias labels from the database."""

from __future__ import annotations

import logging

from dotenv import load_dotenv


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    logger = logging.getLogger(__name__)

    load_dotenv()

    from sqlalchemy import text

    from news_db.connection import get_session

    stmt = text(
        """
        SELECT
            c.id AS cluster_id,
            c.title AS cluster_title,
            c.confidence_score,
            a.id AS article_id,
            a.title,
            s.name AS source_name,
            s.bias AS source_bias,
            a.published_at
        FROM clusters c
        JOIN article_clusters ac
            ON ac.cluster_id = c.id
        JOIN articles a
            ON a.id = ac.article_id
        JOIN sources s
            ON s.id = a.source_id
        ORDER BY c.id DESC, a.published_at DESC, a.id
        """
    )

    with get_session() as session:
        rows = session.execute(stmt).mappings().all()

    if not rows:
        logger.info("No clusters found")
        return

    logger.info("Fetched %d cluster rows", len(rows))
    current_cluster = None
    for row in rows:
        cluster_id = row["cluster_id"]
        if cluster_id != current_cluster:
            if current_cluster is not None:
                print()
            print(f"Cluster {cluster_id}: {row['cluster_title']} ({row['confidence_score']:.2f})")
            current_cluster = cluster_id

        published_at = str(row["published_at"]) if row["published_at"] is not None else "None"
        print(
            f"- {row['article_id']} | {row['source_name']} [{row['source_bias']}] | "
            f"{published_at} | {row['title']}"
        )


if __name__ == "__main__":
    main()
