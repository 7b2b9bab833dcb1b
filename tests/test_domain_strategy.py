"""
Tests for the strategy domain layer: catalog and proposal rules.
"""

import pytest

from app.domain.strategy.catalog import DEFAULT_STRATEGY_ID, get_strategy, strategy_names
from app.domain.strategy.entities import TradeProposal, TradingStrategy
from app.domain.strategy.proposals import allocate_within_budget, sanitize_strategy
from app.domain.trading.entities import ContractType


def _proposal(stake: float, duration: int = 60, instrument: str = "EUR/USD") -> TradeProposal:
    return TradeProposal(
        instrument=instrument,
        action=ContractType.CALL,
        stake=stake,
        duration_seconds=duration,
        reasoning="because",
    )


class TestCatalog:
    """Tests for the strategy catalog."""

    def test_known_strategies(self) -> None:
        assert strategy_names() == {
            "default_dynamic": "Dynamic Adaptive",
            "trend_rider": "Trend Rider",
            "range_bound": "Range Negotiator",
        }

    def test_lookup(self) -> None:
        assert get_strategy("range_bound").name == "Range Negotiator"

    @pytest.mark.parametrize("strategy_id", [None, "", "does_not_exist"])
    def test_unknown_falls_back_to_default(self, strategy_id) -> None:
        assert get_strategy(strategy_id).id == DEFAULT_STRATEGY_ID


class TestSanitizeStrategy:
    """Tests for filtering generated proposals."""

    def test_drops_tiny_stakes_and_bad_durations(self) -> None:
        strategy = TradingStrategy(
            trades=(_proposal(5.0), _proposal(0.001), _proposal(3.0, duration=0)),
            overall_reasoning="mixed",
        )
        cleaned = sanitize_strategy(strategy, total_stake=10.0)
        assert [p.stake for p in cleaned.trades] == [5.0]
        assert cleaned.overall_reasoning == "mixed"

    def test_overspending_plan_is_kept_with_warning(self, caplog) -> None:
        strategy = TradingStrategy(trades=(_proposal(8.0), _proposal(7.0)), overall_reasoning="")
        with caplog.at_level("WARNING"):
            cleaned = sanitize_strategy(strategy, total_stake=10.0)
        assert cleaned.total_stake == 15.0
        assert "exceeds the session limit" in caplog.text


class TestAllocateWithinBudget:
    """Tests for capping simulated stakes at the session budget."""

    def test_skips_proposals_that_do_not_fit(self) -> None:
        proposals = [_proposal(6.0, instrument="A"), _proposal(5.0, instrument="B"), _proposal(4.0, instrument="C")]
        accepted = allocate_within_budget(proposals, total_stake=10.0)
        assert [p.instrument for p in accepted] == ["A", "C"]

    def test_exact_budget_is_allowed(self) -> None:
        assert len(allocate_within_budget([_proposal(5.0), _proposal(5.0)], 10.0)) == 2
