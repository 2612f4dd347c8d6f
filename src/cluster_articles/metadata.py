"""Derive title, summary, fact core and confidence for a cluster of articles."""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from typing import Any, Protocol

from cluster_articles.models import ClusterMetadata
from common.utils import distinct_values, get_value

logger = logging.getLogger(__name__)

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "is", "are", "was", "were", "been", "be",
})

TITLE_WORDS = 5
FALLBACK_TITLE_CHARS = 50
MIN_FACT_CHARS = 20
MAX_FACTS = 3

FACTUAL_INDICATORS = [
    re.compile(r"\d"),
    re.compile(r"percent|%", re.IGNORECASE),
    re.compile(r"million|billion|thousand", re.IGNORECASE),
    re.compile(r"according to", re.IGNORECASE),
    re.compile(r"reported", re.IGNORECASE),
    re.compile(r"announced", re.IGNORECASE),
]

_NON_ALNUM = re.compile(r"[^a-z0-9]")


class FactExtractor(Protocol):
    def extract_facts(self, text: str) -> Any: ...


def _title_keywords(title: str) -> list[str]:
    """Distinct cleaned keywords of one title, in order of appearance."""
    keywords: dict[str, None] = {}
    for word in title.lower().split():
        cleaned = _NON_ALNUM.sub("", word)
        if len(cleaned) > 2 and cleaned not in STOP_WORDS:
            keywords[cleaned] = None
    return list(keywords)


def find_common_words(titles: list[str]) -> list[str]:
    """Words found in at least max(2, ceil(0.4 * n)) titles, most frequent first."""
    frequency: Counter[str] = Counter()
    for title in titles:
        frequency.update(_title_keywords(title or ""))

    min_frequency = max(2, math.ceil(len(titles) * 0.4))
    return [word for word, count in frequency.most_common() if count >= min_frequency]


def generate_cluster_title(articles: list[Any]) -> str:
    titles = [get_value(article, "title") or "" for article in articles]
    common_words = find_common_words(titles)
    if common_words:
        return " ".join(common_words[:TITLE_WORDS])
    return titles[0][:FALLBACK_TITLE_CHARS] + "..."


def generate_cluster_summary(articles: list[Any]) -> str:
    sources = distinct_values(articles, "source_name")
    biases = distinct_values(articles, "source_bias")
    return f"Coverage from {len(sources)} sources across {len(biases)} perspectives."


def contains_factual_indicator(sentence: str) -> bool:
    return any(pattern.search(sentence) for pattern in FACTUAL_INDICATORS)


def extract_fact_core(articles: list[Any]) -> str:
    """Up to three distinct factual-looking excerpt sentences, joined with '. '."""
    facts: list[str] = []
    for article in articles:
        excerpt = get_value(article, "excerpt") or ""
        # Length is measured before stripping the leading space after each period.
        for segment in excerpt.split("."):
            if len(segment) > MIN_FACT_CHARS and contains_factual_indicator(segment):
                facts.append(segment.strip())

    unique_facts = list(dict.fromkeys(facts))
    return ". ".join(unique_facts[:MAX_FACTS])


def extract_fact_core_with_llm(articles: list[Any], fact_extractor: FactExtractor) -> str:
    """Fact core from an LLM over the joined excerpts; heuristic on failure or no facts."""
    excerpts = [get_value(article, "excerpt") for article in articles]
    text = "\n".join(excerpt for excerpt in excerpts if excerpt)
    if not text:
        return extract_fact_core(articles)

    try:
        extraction = fact_extractor.extract_facts(text)
    except Exception:
        logger.exception("LLM fact extraction failed; using heuristic fact core")
        return extract_fact_core(articles)

    claims = list(dict.fromkeys(fact.claim for fact in extraction.facts if fact.claim))
    if not claims:
        return extract_fact_core(articles)
    return ". ".join(claims[:MAX_FACTS])


def calculate_confidence_score(articles: list[Any]) -> float:
    """Weighted 0.3 article count, 0.3 distinct sources, 0.4 distinct bias labels."""
    article_factor = min(len(articles) / 10, 1.0)
    source_factor = min(len(distinct_values(articles, "source_id")) / 5, 1.0)
    bias_factor = min(len(distinct_values(articles, "source_bias")) / 5, 1.0)
    return 0.3 * article_factor + 0.3 * source_factor + 0.4 * bias_factor


def derive_metadata(articles: list[Any], fact_extractor: FactExtractor | None = None) -> ClusterMetadata:
    if fact_extractor is not None:
        fact_core = extract_fact_core_with_llm(articles, fact_extractor)
    else:
        fact_core = extract_fact_core(articles)

    return ClusterMetadata(
        title=generate_cluster_title(articles),
        summary=generate_cluster_summary(articles),
        fact_core=fact_core,
        confidence_score=calculate_confidence_score(articles),
    )
