"""Data models for cluster_articles pipeline stage."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class SimilarityThresholds:
    """Coarse grouping gates: a candidate must clear ``title_gate`` and then
    either ``corpus`` (TF-IDF cosine) or ``strong_title`` (Jaccard)."""
    title_gate: float = 0.3
    corpus: float = 0.2
    strong_title: float = 0.5


@dataclass
class ClusterMetadata:
    title: str
    summary: str
    fact_core: str
    confidence_score: float


@dataclass
class SavedCluster:
    """Cluster persisted during a run."""
    id: int
    title: str
    confidence_score: float
    article_ids: list[int]


@dataclass
class ClusteringResult:
    articles_processed: int
    clusters_created: int
    message: Optional[str] = None
    clusters: list[SavedCluster] = field(default_factory=list)

    def to_dict(self) -> dict:
        summary = {
            "articles_processed": self.articles_processed,
            "clusters_created": self.clusters_created,
        }
        if self.message:
            summary["message"] = self.message
        return summary
