"""Data models for bias distribution."""

from dataclasses import dataclass


@dataclass
class BiasDistribution:
    """Per-label counts and percentages plus a normalised entropy score.

    ``percentages`` values are strings rounded to one decimal ("50.0").
    ``diversity_score`` is in [0, 1]; 0 for empty or single-label sets.
    """
    counts: dict[str, int]
    percentages: dict[str, str]
    total: int
    diversity_score: float
