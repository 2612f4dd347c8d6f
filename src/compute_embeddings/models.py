"""Data models for compute_embeddings pipeline stage."""

from dataclasses import dataclass


@dataclass
class EmbeddedArticle:
    """Article id with the text that was embedded and its vector."""
    article_id: int
    embedded_text: str
    embedding: list[float]
    embedding_model: str
