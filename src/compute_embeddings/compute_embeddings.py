"""Sentence-transformer embedding provider."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any

import numpy as np
from sentence_transformers import SentenceTransformer

from common.utils import get_value
from compute_embeddings.models import EmbeddedArticle

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
MAX_EMBED_CHARS = 512


def build_embedding_text(article: Any, max_chars: int = MAX_EMBED_CHARS) -> str:
    """Build the text string to embed: title and excerpt, truncated."""
    parts = []

    title = get_value(article, "title")
    if title:
        parts.append(title)

    excerpt = get_value(article, "excerpt")
    if excerpt:
        parts.append(excerpt)

    return " ".join(parts)[:max_chars]


def _to_vector(raw: Any) -> list[float] | None:
    """Flatten an encoder output row; None if empty or non-finite."""
    if raw is None:
        return None
    array = np.asarray(raw, dtype="float32").ravel()
    if array.size == 0 or not np.all(np.isfinite(array)):
        return None
    return [float(v) for v in array]


class SentenceEmbedder:
    """Embedding provider with an explicit init/close lifecycle.

    ``compute_embedding`` never raises: load errors, encoder errors, timeouts
    and malformed vectors are logged and reported as ``None``.
    """

    def __init__(self, model_name: str = DEFAULT_MODEL, timeout: float | None = 30.0) -> None:
        self.model_name = model_name
        self.timeout = timeout
        self._model: SentenceTransformer | None = None
        self._executor: ThreadPoolExecutor | None = None

    def __enter__(self) -> SentenceEmbedder:
        self.init()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def ready(self) -> bool:
        return self._model is not None

    def init(self) -> None:
        if self._model is not None:
            return
        logger.info("Loading model: %s", self.model_name)
        self._model = SentenceTransformer(self.model_name)
        self._executor = self._new_executor()

    @staticmethod
    def _new_executor() -> ThreadPoolExecutor:
        return ThreadPoolExecutor(max_workers=1, thread_name_prefix="embedder")

    def _replace_executor(self) -> None:
        """Abandon a worker stuck on a timed-out encode and start a fresh one."""
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
        self._executor = self._new_executor()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
        self._executor = None
        self._model = None

    def _encode(self, texts: list[str], batch_size: int = 32, show_progress_bar: bool = False) -> Any:
        return self._model.encode(
            texts,
            batch_size=batch_size,
            show_progress_bar=show_progress_bar,
            convert_to_numpy=True,
            normalize_embeddings=True,
        )

    def compute_embedding(self, article: Any) -> list[float] | None:
        """Embed one article, or None when the embedding is unavailable."""
        article_id = get_value(article, "id")
        text = build_embedding_text(article)
        if not text:
            logger.warning("Empty text to embed for article: id=%s", article_id)
            return None

        try:
            self.init()
            future = self._executor.submit(self._encode, [text])
            encoded = future.result(timeout=self.timeout)
            vector = _to_vector(encoded[0]) if len(encoded) else None
        except FutureTimeoutError:
            logger.warning(
                "Embedding timed out after %ss for article: id=%s", self.timeout, article_id
            )
            self._replace_executor()
            return None
        except Exception:
            logger.exception("Error generating embedding for article: id=%s", article_id)
            return None

        if vector is None:
            logger.warning("Malformed embedding for article: id=%s", article_id)
        return vector

    def encode_batch(self, texts: list[str], batch_size: int = 32) -> Any:
        """Encode many texts in one call (no timeout; used by the precompute CLI)."""
        self.init()
        return self._encode(texts, batch_size=batch_size, show_progress_bar=True)


def compute_embeddings(
    articles: list[Any],
    embedder: SentenceEmbedder,
    batch_size: int = 32,
) -> list[EmbeddedArticle]:
    """
    Compute embeddings for a list of articles.

    Args:
        articles: List of article objects or dicts with id, title, excerpt fields
        embedder: Embedding provider to encode with
        batch_size: Batch size for encoding

    Returns:
        List of EmbeddedArticle objects; articles with no id, no text or an
        invalid vector are skipped
    """
    if not articles:
        logger.warning("No articles to embed")
        return []

    valid_articles = []
    texts_to_embed = []
    for article in articles:
        article_id = get_value(article, "id")
        text = build_embedding_text(article)
        if article_id is None or not text:
            logger.warning("Skipping article with missing id or text: id=%s", article_id)
            continue
        valid_articles.append(article)
        texts_to_embed.append(text)

    if not valid_articles:
        logger.warning("No valid articles to embed after filtering")
        return []

    logger.info("Computing embeddings for %d articles (batch_size=%d)", len(valid_articles), batch_size)
    embeddings = embedder.encode_batch(texts_to_embed, batch_size=batch_size)

    results = []
    for article, embedded_text, raw in zip(valid_articles, texts_to_embed, embeddings):
        vector = _to_vector(raw)
        if vector is None:
            logger.warning("Malformed embedding for article: id=%s", get_value(article, "id"))
            continue
        results.append(
            EmbeddedArticle(
                article_id=get_value(article, "id"),
                embedded_text=embedded_text,
                embedding=vector,
                embedding_model=embedder.model_name,
            )
        )

    logger.info("Computed embeddings for %d articles", len(results))
    return results
