"""Bias distribution and diversity scoring for a set of articles."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from typing import Any

from bias_distribution.labels import BIAS_LABELS, is_bias_label
from bias_distribution.models import BiasDistribution
from common.utils import get_value

logger = logging.getLogger(__name__)

MAX_ENTROPY = math.log2(len(BIAS_LABELS))


def count_bias_labels(articles: Iterable[Any]) -> tuple[dict[str, int], int]:
    """Count articles per bias label.

    Returns:
        (counts, total) where counts has every label and total is the number
        of articles supplied, including those with unrecognised labels.
    """
    counts = {label: 0 for label in BIAS_LABELS}
    total = 0
    for article in articles:
        total += 1
        label = get_value(article, "source_bias")
        if is_bias_label(label):
            counts[label] += 1
        else:
            logger.debug("Ignoring unrecognised bias label %r", label)
    return counts, total


def calculate_diversity_score(counts: dict[str, int], total: int) -> float:
    """Shannon entropy of the observed labels normalised by log2(5)."""
    if total == 0:
        return 0.0
    entropy = 0.0
    for count in counts.values():
        if count <= 0:
            continue
        p = count / total
        entropy -= p * math.log2(p)
    return round(entropy / MAX_ENTROPY, 2)


def calculate_bias_distribution(articles: Iterable[Any]) -> BiasDistribution:
    """
    Compute the bias distribution of an article set.

    Args:
        articles: Article objects or dicts carrying a ``source_bias`` label.

    Returns:
        BiasDistribution with counts, percentages, total and diversity_score.
    """
    counts, total = count_bias_labels(articles)
    percentages = {
        label: f"{counts[label] / total * 100:.1f}" if total > 0 else "0.0"
        for label in BIAS_LABELS
    }
    return BiasDistribution(
        counts=counts,
        percentages=percentages,
        total=total,
        diversity_score=calculate_diversity_score(counts, total),
    )


def group_by_bias(articles: Iterable[Any]) -> dict[str, list[Any]]:
    """Group articles under their bias label for side-by-side comparison."""
    grouped: dict[str, list[Any]] = {label: [] for label in BIAS_LABELS}
    for article in articles:
        label = get_value(article, "source_bias")
        if is_bias_label(label):
            grouped[label].append(article)
    return grouped
