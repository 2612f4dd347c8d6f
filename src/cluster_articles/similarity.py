"""Lexical similarity between articles: title Jaccard and TF-IDF cosine."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sklearn.feature_extraction.text import TfidfVectorizer

from common.utils import get_value

logger = logging.getLogger(__name__)


def title_words(title: str | None) -> set[str]:
    return set((title or "").lower().split())


def title_similarity(title_a: str | None, title_b: str | None) -> float:
    """Jaccard similarity of the lower-cased whitespace-split word sets."""
    words_a = title_words(title_a)
    words_b = title_words(title_b)
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


def article_document(article: Any) -> str:
    """Lower-cased title + excerpt, the text each article contributes to the corpus."""
    title = get_value(article, "title") or ""
    excerpt = get_value(article, "excerpt") or ""
    return f"{title} {excerpt}".lower()


class TfidfCorpus:
    """TF-IDF model over a fixed, ordered list of documents.

    Weights are raw term counts times the smoothed idf
    ``ln((1 + n) / (1 + df)) + 1`` (scikit-learn's default), rows are L2
    normalised, so the cosine of two documents is the dot product of their
    rows. Tokens are runs of two or more word characters.
    """

    def __init__(self, documents: Sequence[str]) -> None:
        self.size = len(documents)
        self._vectorizer = TfidfVectorizer(lowercase=True, smooth_idf=True, sublinear_tf=False, norm="l2")
        try:
            self._matrix = self._vectorizer.fit_transform(documents)
        except ValueError:
            # Raised when no document has a single token
            logger.debug("Empty TF-IDF vocabulary for %d documents", self.size)
            self._matrix = None

    def similarity(self, index_a: int, index_b: int) -> float:
        """Cosine similarity of documents ``index_a`` and ``index_b``; 0.0 for zero vectors."""
        for index in (index_a, index_b):
            if not 0 <= index < self.size:
                raise IndexError(f"Document index {index} out of range for corpus of {self.size}")
        if self._matrix is None:
            return 0.0
        value = self._matrix[index_a].multiply(self._matrix[index_b]).sum()
        return float(min(max(value, 0.0), 1.0))


def corpus_similarity(corpus: TfidfCorpus, index_a: int, index_b: int) -> float:
    return corpus.similarity(index_a, index_b)
