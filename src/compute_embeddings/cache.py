"""Cache-through access to article embeddings."""

from __future__ import annotations

import logging
from typing import Any, Protocol, Sequence

from common.utils import get_value

logger = logging.getLogger(__name__)


class EmbeddingStore(Protocol):
    def get_cached_embedding(self, article_id: Any) -> list[float] | None: ...

    def cache_embedding(self, article_id: Any, vector: Sequence[float], model_name: str) -> bool: ...


class EmbeddingProvider(Protocol):
    def compute_embedding(self, article: Any) -> list[float] | None: ...


class EmbeddingCache:
    """Return cached embeddings, computing and storing missing ones.

    An article whose embedding is already stored is never sent to the
    provider again; one stored vector per article id.
    """

    def __init__(self, store: EmbeddingStore, provider: EmbeddingProvider, model_name: str) -> None:
        self.store = store
        self.provider = provider
        self.model_name = model_name

    def get_or_compute(self, article: Any) -> list[float] | None:
        article_id = get_value(article, "id")
        cached = self.store.get_cached_embedding(article_id)
        if cached is not None:
            return cached

        vector = self.provider.compute_embedding(article)
        if vector is None:
            logger.warning("Embedding unavailable for article: id=%s", article_id)
            return None

        self.store.cache_embedding(article_id, vector, self.model_name)
        return vector
