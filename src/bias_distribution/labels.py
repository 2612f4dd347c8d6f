"""Political bias labels and their numeric scores."""

BIAS_LABELS: tuple[str, ...] = ("left", "center-left", "center", "center-right", "right")

BIAS_SCORES: dict[str, float] = {
    "left": -1.0,
    "center-left": -0.5,
    "center": 0.0,
    "center-right": 0.5,
    "right": 1.0,
}


def is_bias_label(value: object) -> bool:
    return isinstance(value, str) and value in BIAS_SCORES


def get_bias_score(label: str | None) -> float:
    """Numeric score for a label; unknown labels score as center (0.0)."""
    return BIAS_SCORES.get(label or "", 0.0)


def get_bias_label(score: float) -> str:
    """Label whose score is nearest to ``score`` (ties go to the leftmost label)."""
    return min(BIAS_LABELS, key=lambda label: abs(BIAS_SCORES[label] - score))
