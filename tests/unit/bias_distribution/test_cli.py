"""Tests for bias_distribution.cli module."""

from unittest.mock import MagicMock, patch

import pytest

from bias_distribution import cli
from llm_analysis.models import ConsensusResult
from news_db.store import ArticleStore


def _seed_cluster(store: ArticleStore) -> int:
    left = store.add_source("Left Daily", "left", -1.0)
    right = store.add_source("Right Times", "right", 1.0)
    a1 = store.add_article(left, "Senate passes budget", "https://a/1", excerpt="Democrats celebrate")
    a2 = store.add_article(right, "Senate passes budget", "https://a/2", excerpt="Republicans object")
    return store.save_cluster("senate budget", "2 articles", "", 0.4, [a1, a2], 0.8)


class TestPrintCluster:
    def test_compare_prints_heuristic_consensus(
        self, store: ArticleStore, capsys: pytest.CaptureFixture[str]
    ) -> None:
        cluster_id = _seed_cluster(store)

        assert cli._print_cluster(store, cluster_id, compare=True) is True

        out = capsys.readouterr().out
        assert "[left]" in out
        assert "Consensus (basic_consensus): senate, passes, budget" in out
        assert "Disputed: democrats, celebrate, republicans, object" in out
        assert "left angle: democrats, celebrate" in out
        assert "right angle: republicans\n" in out

    def test_compare_uses_finder(self, store: ArticleStore, capsys: pytest.CaptureFixture[str]) -> None:
        cluster_id = _seed_cluster(store)
        finder = MagicMock()
        finder.find_consensus.return_value = ConsensusResult(
            consensus_facts=["The budget passed"],
            disputed_points=[],
            unique_angles={"left": [], "center": [], "right": []},
        )

        cli._print_cluster(store, cluster_id, compare=True, finder=finder)

        assert "Consensus (llm): The budget passed" in capsys.readouterr().out

    def test_without_compare_skips_consensus(
        self, store: ArticleStore, capsys: pytest.CaptureFixture[str]
    ) -> None:
        cluster_id = _seed_cluster(store)

        cli._print_cluster(store, cluster_id, compare=False)

        assert "Consensus" not in capsys.readouterr().out

    def test_missing_cluster(self, store: ArticleStore) -> None:
        assert cli._print_cluster(store, 42, compare=True) is False


class TestMain:
    @patch("bias_distribution.cli.LLMCapability")
    @patch("bias_distribution.cli.get_session_factory")
    def test_llm_provider_builds_finder(self, mock_factory, mock_llm_cls) -> None:
        with patch("bias_distribution.cli._print_cluster") as mock_print:
            cli.main(["--cluster-id", "3", "--compare", "--llm-provider", "ollama"])

        mock_llm_cls.assert_called_once_with(provider="ollama")
        assert mock_print.call_args.args[1:] == (3, True, mock_llm_cls.return_value)

    @patch("bias_distribution.cli.LLMCapability")
    @patch("bias_distribution.cli.get_session_factory")
    def test_default_has_no_finder(self, mock_factory, mock_llm_cls) -> None:
        with patch("bias_distribution.cli._print_cluster") as mock_print:
            cli.main(["--cluster-id", "3", "--compare"])

        mock_llm_cls.assert_not_called()
        assert mock_print.call_args.args[3] is None
