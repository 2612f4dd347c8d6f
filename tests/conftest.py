"""Shared fixtures: an in-memory article store and an article factory."""

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from news_db.connection import create_db_engine, get_session_factory, init_db
from news_db.models import Article
from news_db.store import ArticleStore


@pytest.fixture
def store() -> ArticleStore:
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield ArticleStore(get_session_factory(engine))
    engine.dispose()


@pytest.fixture
def make_article():
    ids = count(1)
    base_time = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def _make(
        title: str,
        excerpt: str | None = None,
        source_id: int = 1,
        source_bias: str = "center",
        source_name: str | None = None,
        article_id: int | None = None,
    ) -> Article:
        article_id = article_id if article_id is not None else next(ids)
        return Article(
            id=article_id,
            title=title,
            excerpt=excerpt,
            content=None,
            url=f"https://example.com/{article_id}",
            source_id=source_id,
            source_name=source_name or f"source-{source_id}",
            source_bias=source_bias,
            bias_score=0.0,
            published_at=base_time - timedelta(minutes=article_id),
        )

    return _make
