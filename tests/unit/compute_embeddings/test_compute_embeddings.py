"""Tests for compute_embeddings.compute_embeddings module."""

import time
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from compute_embeddings.compute_embeddings import (
    MAX_EMBED_CHARS,
    SentenceEmbedder,
    build_embedding_text,
    compute_embeddings,
)


class TestBuildEmbeddingText:
    def test_combines_title_and_excerpt(self) -> None:
        article = {"title": "Title", "excerpt": "Excerpt"}
        assert build_embedding_text(article) == "Title Excerpt"

    def test_title_only(self) -> None:
        assert build_embedding_text({"title": "Title", "excerpt": None}) == "Title"

    def test_truncates(self) -> None:
        article = {"title": "x" * 600, "excerpt": "y"}
        assert len(build_embedding_text(article)) == MAX_EMBED_CHARS

    def test_empty_fields(self) -> None:
        assert build_embedding_text({"title": None, "excerpt": None}) == ""


class TestSentenceEmbedder:
    @patch("compute_embeddings.compute_embeddings.SentenceTransformer")
    def test_returns_vector(self, mock_st_cls) -> None:
        mock_model = MagicMock()
        mock_model.encode.return_value = np.array([[0.1, 0.2, 0.3]])
        mock_st_cls.return_value = mock_model

        with SentenceEmbedder("test-model") as embedder:
            vector = embedder.compute_embedding({"id": 1, "title": "T", "excerpt": "E"})

        assert vector == pytest.approx([0.1, 0.2, 0.3])
        mock_st_cls.assert_called_once_with("test-model")
        assert mock_model.encode.call_args.args[0] == ["T E"]

    @patch("compute_embeddings.compute_embeddings.SentenceTransformer")
    def test_empty_text_skips_model(self, mock_st_cls) -> None:
        embedder = SentenceEmbedder("test-model")
        assert embedder.compute_embedding({"id": 1, "title": "", "excerpt": None}) is None
        mock_st_cls.assert_not_called()

    @patch("compute_embeddings.compute_embeddings.SentenceTransformer")
    def test_encoder_error_returns_none(self, mock_st_cls) -> None:
        mock_model = MagicMock()
        mock_model.encode.side_effect = RuntimeError("boom")
        mock_st_cls.return_value = mock_model

        embedder = SentenceEmbedder("test-model")
        try:
            assert embedder.compute_embedding({"id": 1, "title": "T"}) is None
        finally:
            embedder.close()

    @patch("compute_embeddings.compute_embeddings.SentenceTransformer")
    def test_load_error_returns_none(self, mock_st_cls) -> None:
        mock_st_cls.side_effect = OSError("model not found")

        embedder = SentenceEmbedder("missing-model")
        assert embedder.compute_embedding({"id": 1, "title": "T"}) is None
        assert not embedder.ready

    @patch("compute_embeddings.compute_embeddings.SentenceTransformer")
    def test_non_finite_vector_returns_none(self, mock_st_cls) -> None:
        mock_model = MagicMock()
        mock_model.encode.return_value = np.array([[np.nan, 0.2]])
        mock_st_cls.return_value = mock_model

        with SentenceEmbedder("test-model") as embedder:
            assert embedder.compute_embedding({"id": 1, "title": "T"}) is None

    @patch("compute_embeddings.compute_embeddings.SentenceTransformer")
    def test_timeout_returns_none(self, mock_st_cls) -> None:
        def slow_encode(*args, **kwargs):
            time.sleep(0.5)
            return np.array([[0.1]])

        mock_model = MagicMock()
        mock_model.encode.side_effect = slow_encode
        mock_st_cls.return_value = mock_model

        with SentenceEmbedder("test-model", timeout=0.01) as embedder:
            assert embedder.compute_embedding({"id": 1, "title": "T"}) is None

    @patch("compute_embeddings.compute_embeddings.SentenceTransformer")
    def test_recovers_after_timeout(self, mock_st_cls) -> None:
        calls = []

        def encode(*args, **kwargs):
            calls.append(1)
            if len(calls) == 1:
                time.sleep(1.0)
            return np.array([[0.6, 0.8]])

        mock_model = MagicMock()
        mock_model.encode.side_effect = encode
        mock_st_cls.return_value = mock_model

        with SentenceEmbedder("test-model", timeout=0.2) as embedder:
            assert embedder.compute_embedding({"id": 1, "title": "Slow"}) is None
            vector = embedder.compute_embedding({"id": 2, "title": "Fast"})

        assert vector == pytest.approx([0.6, 0.8])

    @patch("compute_embeddings.compute_embeddings.SentenceTransformer")
    def test_close_releases_model(self, mock_st_cls) -> None:
        embedder = SentenceEmbedder("test-model")
        embedder.init()
        assert embedder.ready
        embedder.close()
        assert not embedder.ready


class TestComputeEmbeddings:
    @patch("compute_embeddings.compute_embeddings.SentenceTransformer")
    def test_computes_embeddings(self, mock_st_cls) -> None:
        mock_model = MagicMock()
        mock_model.encode.return_value = np.array([[0.5, 0.25], [0.75, 1.0]])
        mock_st_cls.return_value = mock_model

        articles = [
            {"id": 1, "title": "T1", "excerpt": "E1"},
            {"id": 2, "title": "T2", "excerpt": "E2"},
        ]
        with SentenceEmbedder("test-model") as embedder:
            result = compute_embeddings(articles, embedder)

        assert [r.article_id for r in result] == [1, 2]
        assert result[0].embedding == [0.5, 0.25]
        assert result[1].embedded_text == "T2 E2"
        assert result[0].embedding_model == "test-model"

    @patch("compute_embeddings.compute_embeddings.SentenceTransformer")
    def test_filters_invalid_articles(self, mock_st_cls) -> None:
        mock_model = MagicMock()
        mock_model.encode.return_value = np.array([[0.5, 0.5]])
        mock_st_cls.return_value = mock_model

        articles = [
            {"id": None, "title": "T"},
            {"id": 2, "title": "", "excerpt": None},
            {"id": 3, "title": "Valid"},
        ]
        with SentenceEmbedder("test-model") as embedder:
            result = compute_embeddings(articles, embedder)

        assert [r.article_id for r in result] == [3]

    def test_empty_input(self) -> None:
        embedder = MagicMock()
        assert compute_embeddings([], embedder) == []
        embedder.encode_batch.assert_not_called()
