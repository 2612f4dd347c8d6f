"""CLI for printing the bias distribution of stored clusters."""

from __future__ import annotations

import argparse
import logging

from dotenv import load_dotenv

from bias_distribution.bias_distribution import calculate_bias_distribution, group_by_bias
from bias_distribution.labels import BIAS_LABELS
from common.cli_helpers import parse_positive_int, setup_logging
from llm_analysis.consensus import ConsensusFinder, find_cluster_consensus
from llm_analysis.llm_analysis import PROVIDERS, LLMCapability
from news_db.connection import get_session_factory
from news_db.store import ArticleStore

load_dotenv()

setup_logging()
logger = logging.getLogger(__name__)


def _print_consensus(articles: list, finder: ConsensusFinder | None) -> None:
    consensus = find_cluster_consensus(articles, finder)
    print(f"  Consensus ({consensus.method}): {', '.join(consensus.consensus_facts) or '-'}")
    print(f"  Disputed: {', '.join(consensus.disputed_points) or '-'}")
    for group, angles in consensus.unique_angles.items():
        if angles:
            print(f"  {group} angle: {', '.join(angles)}")


def _print_cluster(
    store: ArticleStore,
    cluster_id: int,
    compare: bool,
    finder: ConsensusFinder | None = None,
) -> bool:
    cluster = store.get_cluster(cluster_id)
    if cluster is None:
        logger.warning("Cluster %d not found", cluster_id)
        return False

    articles = store.get_cluster_articles(cluster_id)
    distribution = calculate_bias_distribution(articles)

    print(f"Cluster {cluster.id}: {cluster.title}")
    print(f"  {cluster.summary} (confidence {cluster.confidence_score:.2f})")
    if cluster.fact_core:
        print(f"  Facts: {cluster.fact_core}")
    for label in BIAS_LABELS:
        print(
            f"  {label:<13} {distribution.counts[label]:>3}  "
            f"{distribution.percentages[label]:>5}%"
        )
    print(f"  diversity score: {distribution.diversity_score:.2f}")

    if compare:
        for label, grouped in group_by_bias(articles).items():
            if not grouped:
                continue
            print(f"  [{label}]")
            for article in grouped:
                print(f"    - {article.source_name}: {article.title}")
        _print_consensus(articles, finder)
    print()
    return True


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Print bias distribution for clusters.")
    parser.add_argument(
        "--cluster-id",
        type=lambda v: parse_positive_int(v, "cluster-id"),
        default=None,
        help="Single cluster to show (default: most recent clusters)",
    )
    parser.add_argument(
        "--limit",
        type=lambda v: parse_positive_int(v, "limit"),
        default=10,
        help="Number of recent clusters to show (default: 10)",
    )
    parser.add_argument(
        "--compare",
        action="store_true",
        help="List article titles per bias label and cross-bias consensus",
    )
    parser.add_argument(
        "--llm-provider",
        choices=sorted(PROVIDERS),
        default=None,
        help="LLM used for --compare consensus (default: word-level heuristic)",
    )
    args = parser.parse_args(argv)

    store = ArticleStore(get_session_factory())
    finder = LLMCapability(provider=args.llm_provider) if args.llm_provider else None

    if args.cluster_id is not None:
        _print_cluster(store, args.cluster_id, args.compare, finder)
        return

    clusters = store.list_clusters(limit=args.limit)
    if not clusters:
        logger.warning("No clusters found")
        return
    for cluster in clusters:
        _print_cluster(store, cluster.id, args.compare, finder)


if __name__ == "__main__":
    main()
