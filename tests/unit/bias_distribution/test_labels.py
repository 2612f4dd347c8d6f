"""Tests for bias_distribution.labels module."""

import pytest

from bias_distribution.labels import get_bias_label, get_bias_score, is_bias_label


class TestGetBiasScore:
    @pytest.mark.parametrize(
        ("label", "score"),
        [("left", -1.0), ("center-left", -0.5), ("center", 0.0), ("center-right", 0.5), ("right", 1.0)],
    )
    def test_known_labels(self, label: str, score: float) -> None:
        assert get_bias_score(label) == score

    def test_unknown_label_is_center(self) -> None:
        assert get_bias_score("unknown") == 0.0
        assert get_bias_score(None) == 0.0


class TestGetBiasLabel:
    @pytest.mark.parametrize(
        ("score", "label"),
        [(-0.9, "left"), (-0.4, "center-left"), (0.1, "center"), (0.6, "center-right"), (2.0, "right")],
    )
    def test_nearest_label(self, score: float, label: str) -> None:
        assert get_bias_label(score) == label


class TestIsBiasLabel:
    def test_values(self) -> None:
        assert is_bias_label("center")
        assert not is_bias_label("Center")
        assert not is_bias_label(None)
