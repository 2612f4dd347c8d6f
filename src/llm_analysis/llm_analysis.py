"""Bias detection and fact extraction through an OpenAI-compatible chat API."""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from openai import OpenAI

from bias_distribution.labels import get_bias_label
from llm_analysis.consensus import format_consensus_articles, validate_consensus
from llm_analysis.instructions import (
    BIAS_DETECTION_INSTRUCTIONS,
    CONSENSUS_INSTRUCTIONS,
    FACT_EXTRACTION_INSTRUCTIONS,
)
from llm_analysis.models import BiasAssessment, ConsensusResult, ExtractedFact, FactExtraction

logger = logging.getLogger(__name__)

ENTITY_TYPES = ("people", "organizations", "locations", "dates")

# Local servers expose the same chat-completions API, so providers differ
# only in endpoint, key and default model.
PROVIDERS: dict[str, dict[str, str | None]] = {
    "openai": {
        "base_url": None,
        "api_key_env": "OPENAI_API_KEY",
        "default_api_key": None,
        "model": "gpt-4o-mini",
    },
    "ollama": {
        "base_url": "http://localhost:11434/v1",
        "api_key_env": "OLLAMA_API_KEY",
        "default_api_key": "ollama",
        "model": "llama3.2:latest",
    },
    "lmstudio": {
        "base_url": "http://localhost:1234/v1",
        "api_key_env": "LMSTUDIO_API_KEY",
        "default_api_key": "lm-studio",
        "model": "local-model",
    },
}


class LLMResponseError(ValueError):
    """The model returned something that is not the expected JSON object."""


def _clamp(value: Any, low: float, high: float, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return max(low, min(high, number))


class LLMCapability:
    """Provider-selected LLM with ``detect_bias``, ``extract_facts`` and ``find_consensus``."""

    def __init__(
        self,
        provider: str = "openai",
        model: str | None = None,
        base_url: str | None = None,
    ) -> None:
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown LLM provider: {provider}. Valid: {', '.join(sorted(PROVIDERS))}")
        settings = PROVIDERS[provider]
        self.provider = provider
        self.model = model or os.environ.get(f"{provider.upper()}_MODEL") or settings["model"]
        api_key = os.environ.get(settings["api_key_env"]) or settings["default_api_key"]
        self.client = OpenAI(
            api_key=api_key,
            base_url=base_url or os.environ.get(f"{provider.upper()}_BASE_URL") or settings["base_url"],
        )

    def _complete_json(self, instructions: str, text: str) -> dict[str, Any]:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": instructions},
                {"role": "user", "content": text},
            ],
            response_format={"type": "json_object"},
        )
        content = response.choices[0].message.content
        try:
            data = json.loads(content or "")
        except json.JSONDecodeError as exc:
            raise LLMResponseError(f"Invalid JSON from {self.provider}: {content!r}") from exc
        if not isinstance(data, dict):
            raise LLMResponseError(f"Expected JSON object from {self.provider}, got {type(data).__name__}")
        return data

    def detect_bias(self, text: str) -> BiasAssessment:
        data = self._complete_json(BIAS_DETECTION_INSTRUCTIONS, text)
        score = _clamp(data.get("bias_score"), -1.0, 1.0, 0.0)
        indicators = data.get("indicators") or []
        return BiasAssessment(
            score=score,
            confidence=_clamp(data.get("confidence"), 0.0, 1.0, 0.5),
            label=get_bias_label(score),
            reasoning=str(data.get("reasoning") or ""),
            indicators=[str(i) for i in indicators if i],
        )

    def extract_facts(self, text: str) -> FactExtraction:
        data = self._complete_json(FACT_EXTRACTION_INSTRUCTIONS, text)

        facts = []
        for item in data.get("facts") or []:
            if not isinstance(item, dict):
                continue
            claim = item.get("claim")
            if not isinstance(claim, str) or not claim.strip():
                continue
            facts.append(
                ExtractedFact(
                    claim=claim.strip(),
                    type=str(item.get("type") or "event"),
                    confidence=_clamp(item.get("confidence"), 0.0, 1.0, 0.5),
                )
            )

        raw_entities = data.get("entities")
        if not isinstance(raw_entities, dict):
            raw_entities = {}
        entities = {}
        for entity_type in ENTITY_TYPES:
            values = raw_entities.get(entity_type)
            if not isinstance(values, list):
                values = []
            # dict.fromkeys keeps first-seen order while dropping duplicates
            entities[entity_type] = list(dict.fromkeys(v for v in values if isinstance(v, str) and v))

        logger.debug("Extracted %d facts via %s", len(facts), self.provider)
        return FactExtraction(facts=facts, entities=entities)

    def find_consensus(self, articles: list[Any]) -> ConsensusResult:
        """Consensus facts, disputed points and per-bias angles across a cluster."""
        data = self._complete_json(CONSENSUS_INSTRUCTIONS, format_consensus_articles(articles))
        return validate_consensus(data, method="llm")
