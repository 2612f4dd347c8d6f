"""Configuration loader for cluster_articles."""

from __future__ import annotations

from dataclasses import dataclass

from common.config import ConfigSingleton, env_override, find_config_path, get_config_dir, load_yaml
from compute_embeddings.compute_embeddings import DEFAULT_MODEL

REFINEMENT_MODES = ("safe", "research")
FACT_CORE_MODES = ("heuristic", "llm")


@dataclass
class ClusteringConfig:
    article_window: int = 200
    min_cluster_size: int = 2
    title_gate: float = 0.3
    corpus_threshold: float = 0.2
    strong_title_threshold: float = 0.5
    membership_similarity: float = 0.8
    refinement_mode: str = "safe"  # "safe" or "research"
    max_subclusters: int = 3
    embedding_model: str = DEFAULT_MODEL
    embedding_timeout: float = 30.0
    fact_core_mode: str = "heuristic"  # "heuristic" or "llm"
    llm_provider: str = "openai"

    def __post_init__(self) -> None:
        if self.refinement_mode not in REFINEMENT_MODES:
            raise ValueError(
                f"refinement_mode must be one of {', '.join(REFINEMENT_MODES)}, got {self.refinement_mode!r}"
            )
        if self.fact_core_mode not in FACT_CORE_MODES:
            raise ValueError(
                f"fact_core_mode must be one of {', '.join(FACT_CORE_MODES)}, got {self.fact_core_mode!r}"
            )
        if self.min_cluster_size < 1:
            raise ValueError("min_cluster_size must be >= 1")
        if self.article_window < 1:
            raise ValueError("article_window must be >= 1")
        if self.max_subclusters < 1:
            raise ValueError("max_subclusters must be >= 1")

    @property
    def semantic_refinement(self) -> bool:
        return self.refinement_mode == "research"


def load_config(config_name: str | None = None) -> ClusteringConfig:
    """Load configuration from YAML file.

    Args:
        config_name: Name of config file (without .yaml extension).
                    If None, uses CONFIG_ENV env var or "prod".

    Returns:
        Loaded ClusteringConfig object
    """
    config_path = find_config_path(config_name, get_config_dir(), env_var="CONFIG_ENV")
    return _parse_config(load_yaml(config_path))


def _parse_config(data: dict) -> ClusteringConfig:
    """Parse config dictionary into ClusteringConfig; MIN_CLUSTER_SIZE and CONTENT_MODE env vars win."""
    clustering = data.get("clustering", {})
    thresholds = clustering.get("thresholds", {})
    refinement = data.get("refinement", {})
    embeddings = data.get("embeddings", {})
    fact_core = data.get("fact_core", {})

    return ClusteringConfig(
        article_window=clustering.get("article_window", 200),
        min_cluster_size=env_override("MIN_CLUSTER_SIZE", clustering.get("min_cluster_size", 2), int),
        title_gate=thresholds.get("title_gate", 0.3),
        corpus_threshold=thresholds.get("corpus", 0.2),
        strong_title_threshold=thresholds.get("strong_title", 0.5),
        membership_similarity=clustering.get("membership_similarity", 0.8),
        refinement_mode=env_override("CONTENT_MODE", refinement.get("mode", "safe"), str),
        max_subclusters=refinement.get("max_subclusters", 3),
        embedding_model=embeddings.get("model", DEFAULT_MODEL),
        embedding_timeout=float(embeddings.get("timeout_seconds", 30.0)),
        fact_core_mode=fact_core.get("mode", "heuristic"),
        llm_provider=fact_core.get("llm_provider", "openai"),
    )


_manager: ConfigSingleton[ClusteringConfig] = ConfigSingleton(load_config)

get_config = _manager.get
set_config = _manager.set
reset_config = _manager.reset
