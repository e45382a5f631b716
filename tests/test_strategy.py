"""Tests for review strategy selection."""

import pytest


class TestSelectStrategy:
    """Tests for select_strategy."""

    @pytest.mark.parametrize(
        "line_count, change_pct, expected",
        [
            (501, 100, "quick-scan"),
            (5000, 1, "quick-scan"),
            (500, 100, "standard"),
            (201, 100, "standard"),
            (200, 19.9, "standard"),
            (50, 5, "standard"),
            (200, 100, "thorough"),
            (100, 20, "thorough"),
            (1, 100, "thorough"),
        ],
    )
    def test_tiers(self, line_count, change_pct, expected):
        """Test each size and change-density tier maps to its strategy."""
        from ci_reviewer.orchestrator.strategy import select_strategy

        assert select_strategy(line_count, change_pct).name.value == expected

    def test_budgets_and_temperatures(self):
        """Test token budgets and temperatures of each strategy."""
        from ci_reviewer.orchestrator.strategy import select_strategy

        quick = select_strategy(600, 100)
        standard = select_strategy(300, 100)
        thorough = select_strategy(100, 100)

        assert (quick.token_budget, quick.temperature) == (2048, 0.1)
        assert (standard.token_budget, standard.temperature) == (3072, 0.2)
        assert (thorough.token_budget, thorough.temperature) == (4096, 0.1)
        assert "security" in quick.directive

    def test_pure_and_total(self):
        """Same inputs give the same strategy, and every input maps to one tier."""
        from ci_reviewer.orchestrator.strategy import select_strategy

        for line_count in range(0, 700, 7):
            for change_pct in (0, 10, 19.99, 20, 50, 100):
                first = select_strategy(line_count, change_pct)
                assert select_strategy(line_count, change_pct) == first
                assert first.name.value in {"quick-scan", "standard", "thorough"}


class TestChangePercent:
    """Tests for change_percent."""

    def test_whole_file_when_no_changed_lines(self):
        """Test whole file when no changed lines."""
        from ci_reviewer.orchestrator.strategy import change_percent

        assert change_percent(100, None) == 100
        assert change_percent(100, []) == 100

    def test_share_of_lines(self):
        """Test change percent is the share of changed lines."""
        from ci_reviewer.orchestrator.strategy import change_percent

        assert change_percent(200, list(range(1, 11))) == 5
