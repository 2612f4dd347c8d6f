"""Article store: the reads and writes the clustering core depends on."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from news_db.models import Article, StoredCluster
from news_db.schema import (
    ArticleClusterRecord,
    ArticleRecord,
    ClusterRecord,
    EmbeddingRecord,
    SourceRecord,
)

logger = logging.getLogger(__name__)


def _to_article(article: ArticleRecord, source: SourceRecord) -> Article:
    bias_score = article.bias_score if article.bias_score is not None else source.bias_score
    return Article(
        id=article.id,
        title=article.title,
        excerpt=article.excerpt,
        content=article.content,
        url=article.url,
        source_id=source.id,
        source_name=source.name,
        source_bias=source.bias,
        bias_score=bias_score if bias_score is not None else 0.0,
        published_at=article.published_at,
        detected_bias=article.bias,
    )


def _to_cluster(cluster: ClusterRecord, article_count: int = 0) -> StoredCluster:
    return StoredCluster(
        id=cluster.id,
        title=cluster.title,
        summary=cluster.summary,
        fact_core=cluster.fact_core or "",
        confidence_score=cluster.confidence_score,
        created_at=cluster.created_at,
        article_count=article_count,
    )


class ArticleStore:
    """Read articles and embeddings; write clusters, memberships and embeddings.

    Each public method opens its own session from ``session_factory``.
    ``create_cluster`` and ``add_article_to_cluster`` take an open session so
    callers can compose them inside one transaction (see ``save_cluster``).
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    # Sources and articles

    def add_source(
        self,
        name: str,
        bias: str,
        bias_score: float = 0.0,
        url: str | None = None,
        rss_url: str | None = None,
    ) -> int:
        with self._session_factory() as session, session.begin():
            source = SourceRecord(name=name, bias=bias, bias_score=bias_score, url=url, rss_url=rss_url)
            session.add(source)
            session.flush()
            return source.id

    def add_article(
        self,
        source_id: int,
        title: str,
        url: str,
        excerpt: str | None = None,
        content: str | None = None,
        published_at: datetime | None = None,
        bias_score: float | None = None,
        bias: str | None = None,
    ) -> int:
        with self._session_factory() as session, session.begin():
            article = ArticleRecord(
                source_id=source_id,
                title=title,
                url=url,
                excerpt=excerpt,
                content=content,
                published_at=published_at,
                bias_score=bias_score,
                bias=bias,
            )
            session.add(article)
            session.flush()
            return article.id

    def get_recent_articles(self, limit: int = 200, offset: int = 0) -> list[Article]:
        """Return articles newest first; ties on published_at are broken by id."""
        stmt = (
            select(ArticleRecord, SourceRecord)
            .join(SourceRecord, ArticleRecord.source_id == SourceRecord.id)
            .order_by(ArticleRecord.published_at.desc().nulls_last(), ArticleRecord.id.asc())
            .limit(limit)
            .offset(offset)
        )
        with self._session_factory() as session:
            rows = session.execute(stmt).all()
        articles = [_to_article(article, source) for article, source in rows]
        logger.debug("Loaded %d recent articles (limit=%d, offset=%d)", len(articles), limit, offset)
        return articles

    # Clusters

    def create_cluster(
        self,
        session: Session,
        title: str,
        summary: str,
        fact_core: str,
        confidence_score: float,
    ) -> int:
        cluster = ClusterRecord(
            title=title,
            summary=summary,
            fact_core=fact_core,
            confidence_score=confidence_score,
        )
        session.add(cluster)
        session.flush()
        return cluster.id

    def add_article_to_cluster(
        self,
        session: Session,
        cluster_id: int,
        article_id: int,
        similarity_score: float,
    ) -> None:
        session.merge(
            ArticleClusterRecord(
                cluster_id=cluster_id,
                article_id=article_id,
                similarity_score=similarity_score,
            )
        )

    def save_cluster(
        self,
        title: str,
        summary: str,
        fact_core: str,
        confidence_score: float,
        article_ids: Sequence[int],
        similarity_score: float,
    ) -> int:
        """Insert a cluster and all its memberships in a single transaction."""
        with self._session_factory() as session, session.begin():
            cluster_id = self.create_cluster(session, title, summary, fact_core, confidence_score)
            for article_id in dict.fromkeys(article_ids):
                self.add_article_to_cluster(session, cluster_id, article_id, similarity_score)
        return cluster_id

    def get_cluster(self, cluster_id: int) -> StoredCluster | None:
        with self._session_factory() as session:
            cluster = session.get(ClusterRecord, cluster_id)
            if cluster is None:
                return None
            count = session.scalar(
                select(func.count()).select_from(ArticleClusterRecord).where(
                    ArticleClusterRecord.cluster_id == cluster_id
                )
            )
            return _to_cluster(cluster, count or 0)

    def list_clusters(self, limit: int = 50, offset: int = 0) -> list[StoredCluster]:
        stmt = (
            select(ClusterRecord, func.count(ArticleClusterRecord.article_id))
            .outerjoin(ArticleClusterRecord, ArticleClusterRecord.cluster_id == ClusterRecord.id)
            .group_by(ClusterRecord.id)
            .order_by(ClusterRecord.created_at.desc(), ClusterRecord.id.desc())
            .limit(limit)
            .offset(offset)
        )
        with self._session_factory() as session:
            rows = session.execute(stmt).all()
        return [_to_cluster(cluster, count) for cluster, count in rows]

    def get_cluster_articles(self, cluster_id: int) -> list[Article]:
        stmt = (
            select(ArticleRecord, SourceRecord)
            .join(ArticleClusterRecord, ArticleClusterRecord.article_id == ArticleRecord.id)
            .join(SourceRecord, ArticleRecord.source_id == SourceRecord.id)
            .where(ArticleClusterRecord.cluster_id == cluster_id)
            .order_by(ArticleClusterRecord.similarity_score.desc(), ArticleRecord.id.asc())
        )
        with self._session_factory() as session:
            rows = session.execute(stmt).all()
        return [_to_article(article, source) for article, source in rows]

    # Embeddings

    def get_cached_embedding(self, article_id: int) -> list[float] | None:
        with self._session_factory() as session:
            raw = session.scalar(
                select(EmbeddingRecord.embedding).where(EmbeddingRecord.article_id == article_id)
            )
        if raw is None:
            return None
        return [float(v) for v in json.loads(raw)]

    def cache_embedding(self, article_id: int, vector: Sequence[float], model_name: str) -> bool:
        """Store ``vector`` unless the article already has one. Returns True if written."""
        with self._session_factory() as session, session.begin():
            if session.get(EmbeddingRecord, article_id) is not None:
                return False
            session.add(
                EmbeddingRecord(
                    article_id=article_id,
                    embedding=json.dumps([float(v) for v in vector]),
                    model_name=model_name,
                )
            )
        return True
