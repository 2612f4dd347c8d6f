"""Data models for LLM analysis results."""

from dataclasses import dataclass, field


@dataclass
class BiasAssessment:
    score: float
    confidence: float
    label: str
    reasoning: str = ""
    indicators: list[str] = field(default_factory=list)


@dataclass
class ExtractedFact:
    claim: str
    type: str = "event"
    confidence: float = 0.5


@dataclass
class FactExtraction:
    facts: list[ExtractedFact]
    entities: dict[str, list[str]]


@dataclass
class ConsensusResult:
    """What a cluster's sources agree on, disagree on, and raise alone.

    ``unique_angles`` always has the keys left, center and right.
    ``method`` is "llm" or "basic_consensus".
    """
    consensus_facts: list[str]
    disputed_points: list[str]
    unique_angles: dict[str, list[str]]
    method: str = "llm"
