"""Consensus and disputed points across the bias groups of a cluster."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from common.utils import get_value
from llm_analysis.models import ConsensusResult

logger = logging.getLogger(__name__)

BIAS_GROUPS = ("left", "center", "right")

SHARED_WORD_MIN_CHARS = 4
ANGLE_WORD_MIN_CHARS = 6
MAX_POINTS = 10
MAX_ANGLES = 5


class ConsensusFinder(Protocol):
    def find_consensus(self, articles: list[Any]) -> ConsensusResult: ...


def simplify_bias(label: str | None) -> str:
    """Collapse the five bias labels into left, center or right."""
    label = label or ""
    if "left" in label:
        return "left"
    if "right" in label:
        return "right"
    return "center"


def _article_words(article: Any, min_chars: int) -> list[str]:
    title = get_value(article, "title") or ""
    excerpt = get_value(article, "excerpt") or ""
    return [word for word in f"{title} {excerpt}".lower().split() if len(word) > min_chars]


def format_consensus_articles(articles: list[Any]) -> str:
    """Numbered article list, each tagged with its source bias, for the LLM prompt."""
    blocks = []
    for i, article in enumerate(articles, 1):
        blocks.append(
            f"Article {i} ({get_value(article, 'source_bias')}): {get_value(article, 'title') or ''}\n"
            f"{get_value(article, 'excerpt') or ''}"
        )
    return "\n\n".join(blocks)


def find_basic_consensus(articles: list[Any]) -> ConsensusResult:
    """
    Word-level consensus without an LLM.

    A word longer than four characters is a consensus point when it appears in
    articles from two or more of the left/center/right groups, and a disputed
    point when only one group uses it. Unique angles are the first five words
    longer than six characters from each group.
    """
    groups_by_word: dict[str, set[str]] = {}
    articles_by_group: dict[str, list[Any]] = {group: [] for group in BIAS_GROUPS}

    for article in articles:
        group = simplify_bias(get_value(article, "source_bias"))
        articles_by_group[group].append(article)
        for word in _article_words(article, SHARED_WORD_MIN_CHARS):
            groups_by_word.setdefault(word, set()).add(group)

    consensus_facts = [word for word, groups in groups_by_word.items() if len(groups) >= 2]
    disputed_points = [word for word, groups in groups_by_word.items() if len(groups) == 1]

    unique_angles: dict[str, list[str]] = {}
    for group, members in articles_by_group.items():
        words: dict[str, None] = {}
        for article in members:
            words.update(dict.fromkeys(_article_words(article, ANGLE_WORD_MIN_CHARS)))
        unique_angles[group] = list(words)[:MAX_ANGLES]

    return ConsensusResult(
        consensus_facts=consensus_facts[:MAX_POINTS],
        disputed_points=disputed_points[:MAX_POINTS],
        unique_angles=unique_angles,
        method="basic_consensus",
    )


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def validate_consensus(data: Any, method: str = "llm") -> ConsensusResult:
    """Coerce a model response into a ConsensusResult; missing parts become empty lists."""
    if not isinstance(data, dict):
        data = {}
    raw_angles = data.get("unique_angles")
    if not isinstance(raw_angles, dict):
        raw_angles = {}
    return ConsensusResult(
        consensus_facts=_string_list(data.get("consensus_facts")),
        disputed_points=_string_list(data.get("disputed_points")),
        unique_angles={group: _string_list(raw_angles.get(group)) for group in BIAS_GROUPS},
        method=method,
    )


def find_cluster_consensus(articles: list[Any], finder: ConsensusFinder | None = None) -> ConsensusResult:
    """Consensus from ``finder`` when given, the word-level heuristic otherwise or on failure."""
    if finder is None:
        return find_basic_consensus(articles)

    try:
        return finder.find_consensus(articles)
    except Exception:
        logger.exception("LLM consensus finding failed for %d articles; using basic consensus", len(articles))
        return find_basic_consensus(articles)
