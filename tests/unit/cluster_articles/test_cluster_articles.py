"""Tests for cluster_articles.cluster_articles module."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from cluster_articles.cluster_articles import cluster_articles, group_by_keywords, run_clustering
from cluster_articles.config import ClusteringConfig, reset_config, set_config
from cluster_articles.models import SimilarityThresholds

SENATE_GROUP = [
    "Senate passes climate bill today",
    "Senate passes climate bill tonight",
    "Senate passes climate bill quickly",
]
UNRELATED = [
    "Local bakery wins pastry award",
    "Stock markets rally on tech earnings",
]
WILDFIRE_GROUP = [
    "Wildfire forces evacuations across northern California",
    "Wildfire forces evacuations across northern Oregon",
]


class FakeEmbeddingCache:
    def __init__(self) -> None:
        self.calls = []

    def get_or_compute(self, article):
        self.calls.append(article.id)
        return [1.0, 0.0] if article.id % 2 else [0.0, 1.0]


class TestGroupByKeywords:
    def test_groups_related_and_drops_singletons(self, make_article) -> None:
        articles = [make_article(title) for title in SENATE_GROUP + UNRELATED]

        groups = group_by_keywords(articles, min_cluster_size=2)

        assert len(groups) == 1
        assert [a.id for a in groups[0]] == [1, 2, 3]

    def test_title_gate_blocks_corpus_match(self, make_article) -> None:
        # Shared excerpt gives a high TF-IDF cosine but the titles do not overlap.
        excerpt = "The central bank raised interest rates by half a point on Wednesday"
        articles = [
            make_article("Rates climb again", excerpt=excerpt),
            make_article("Borrowing costs jump", excerpt=excerpt),
        ]
        assert group_by_keywords(articles) == []

    def test_corpus_similarity_admits_moderate_title_overlap(self, make_article) -> None:
        # Title Jaccard is 3/6, above the gate but not above the strong-title threshold.
        excerpt = "Lawmakers approved the spending package after a long overnight session"
        articles = [
            make_article("Congress approves spending package", excerpt=excerpt),
            make_article("House approves spending package vote", excerpt=excerpt),
        ]
        groups = group_by_keywords(articles)
        assert len(groups) == 1
        assert len(groups[0]) == 2

    def test_thresholds_are_configurable(self, make_article) -> None:
        articles = [make_article(title) for title in SENATE_GROUP]
        strict = SimilarityThresholds(title_gate=0.9, corpus=0.99, strong_title=0.99)
        assert group_by_keywords(articles, thresholds=strict) == []

    def test_min_cluster_size(self, make_article) -> None:
        articles = [make_article(title) for title in SENATE_GROUP + WILDFIRE_GROUP]
        groups = group_by_keywords(articles, min_cluster_size=3)
        assert [len(g) for g in groups] == [3]

    def test_article_in_at_most_one_group(self, make_article) -> None:
        articles = [make_article(title) for title in SENATE_GROUP + WILDFIRE_GROUP + SENATE_GROUP]
        groups = group_by_keywords(articles)
        ids = [a.id for group in groups for a in group]
        assert len(ids) == len(set(ids))


class TestClusterArticles:
    def test_saves_each_group(self, store, make_article) -> None:
        left = store.add_source("Left", "left")
        right = store.add_source("Right", "right")
        articles = []
        for i, title in enumerate(SENATE_GROUP + UNRELATED):
            article_id = store.add_article(left if i % 2 else right, title, f"https://a/{i}")
            articles.append(make_article(title, article_id=article_id))

        saved = cluster_articles(articles, store, ClusteringConfig())

        assert len(saved) == 1
        assert saved[0].article_ids == [articles[0].id, articles[1].id, articles[2].id]
        stored = store.get_cluster(saved[0].id)
        assert stored.article_count == 3
        assert "senate" in stored.title

    def test_persistence_failure_does_not_stop_run(self, make_article) -> None:
        store = MagicMock()
        store.save_cluster.side_effect = [OperationalError("INSERT", {}, Exception("locked")), 11]
        articles = [make_article(title) for title in SENATE_GROUP + WILDFIRE_GROUP]

        saved = cluster_articles(articles, store, ClusteringConfig())

        assert store.save_cluster.call_count == 2
        assert [c.id for c in saved] == [11]

    def test_membership_similarity_is_constant(self, make_article) -> None:
        store = MagicMock()
        store.save_cluster.return_value = 1
        articles = [make_article(title) for title in SENATE_GROUP]

        cluster_articles(articles, store, ClusteringConfig())

        assert store.save_cluster.call_args.kwargs["similarity_score"] == 0.8

    def test_fewer_than_two_articles(self, make_article) -> None:
        store = MagicMock()
        assert cluster_articles([make_article("Only one")], store, ClusteringConfig()) == []
        store.save_cluster.assert_not_called()

    def test_safe_mode_never_touches_embeddings(self, make_article) -> None:
        store = MagicMock()
        store.save_cluster.return_value = 1
        cache = FakeEmbeddingCache()
        articles = [make_article(title) for title in SENATE_GROUP + SENATE_GROUP]

        cluster_articles(articles, store, ClusteringConfig(refinement_mode="safe"), embeddings=cache)

        assert cache.calls == []

    def test_research_mode_refines_groups(self, make_article) -> None:
        store = MagicMock()
        store.save_cluster.side_effect = [1, 2]
        cache = FakeEmbeddingCache()
        articles = [make_article(title) for title in SENATE_GROUP + SENATE_GROUP]

        saved = cluster_articles(articles, store, ClusteringConfig(refinement_mode="research"), embeddings=cache)

        assert sorted(cache.calls) == [1, 2, 3, 4, 5, 6]
        assert sorted(sorted(c.article_ids) for c in saved) == [[1, 3, 5], [2, 4, 6]]


class TestRunClustering:
    def test_not_enough_articles(self, store) -> None:
        source_id = store.add_source("Wire", "center")
        store.add_article(source_id, "Lonely headline", "https://a/1")

        result = run_clustering(store, ClusteringConfig())

        assert result.articles_processed == 1
        assert result.clusters_created == 0
        assert result.to_dict() == {
            "articles_processed": 1,
            "clusters_created": 0,
            "message": "Not enough articles",
        }

    def test_empty_store(self, store) -> None:
        result = run_clustering(store, ClusteringConfig())
        assert result.clusters_created == 0

    def test_clusters_recent_window(self, store) -> None:
        left = store.add_source("Left", "left")
        right = store.add_source("Right", "right")
        for i, title in enumerate(SENATE_GROUP + UNRELATED + WILDFIRE_GROUP):
            store.add_article(left if i % 2 else right, title, f"https://a/{i}")

        result = run_clustering(store, ClusteringConfig())

        assert result.articles_processed == 7
        assert result.clusters_created == 2
        assert len(store.list_clusters()) == 2
        assert "message" not in result.to_dict()

    def test_window_limits_articles(self, store) -> None:
        source_id = store.add_source("Wire", "center")
        for i, title in enumerate(SENATE_GROUP):
            store.add_article(source_id, title, f"https://a/{i}")

        result = run_clustering(store, ClusteringConfig(article_window=2))

        assert result.articles_processed == 2


class TestActiveConfig:
    @pytest.fixture(autouse=True)
    def _reset(self):
        yield
        reset_config()

    def test_run_clustering_uses_active_config(self, store) -> None:
        source_id = store.add_source("Wire", "center")
        for i, title in enumerate(SENATE_GROUP):
            store.add_article(source_id, title, f"https://a/{i}")
        set_config(ClusteringConfig(article_window=2))

        result = run_clustering(store)

        assert result.articles_processed == 2

    def test_explicit_config_wins(self, store) -> None:
        source_id = store.add_source("Wire", "center")
        for i, title in enumerate(SENATE_GROUP):
            store.add_article(source_id, title, f"https://a/{i}")
        set_config(ClusteringConfig(article_window=2))

        result = run_clustering(store, ClusteringConfig(article_window=1))

        assert result.articles_processed == 1
        assert result.message == "Not enough articles"
