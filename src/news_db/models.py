"""Data models returned by the article store."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Article:
    """Article joined with its source's name and bias label."""
    id: int
    title: str
    excerpt: Optional[str]
    content: Optional[str]
    url: str
    source_id: int
    source_name: str
    source_bias: str
    bias_score: float
    published_at: Optional[datetime]
    # Label assigned to this article itself, as opposed to its source
    detected_bias: Optional[str] = None


@dataclass
class StoredCluster:
    """Persisted cluster row with its current membership count."""
    id: int
    title: str
    summary: str
    fact_core: str
    confidence_score: float
    created_at: datetime
    article_count: int = 0
