"""
Unit tests for the leg builders.
"""

import pytest

from portfolio_kelly.strategies.kelly import LegSource
from portfolio_kelly.strategies.legs import (
    arbitrage_locked_return,
    build_arbitrage_leg,
    build_multi_arbitrage_leg,
    build_polymarket_leg,
    build_standard_leg,
    build_stock_leg,
)


class TestStandardLeg:

    def test_payoff(self):
        leg = build_standard_leg(2.5, 0.45)

        assert leg.win_prob == 0.45
        assert leg.win_return == pytest.approx(1.5)
        assert leg.loss_return == -1.0
        assert leg.source is LegSource.STANDARD
        assert "2.500" in leg.summary

    def test_rejects_odds_at_or_below_one(self):
        with pytest.raises(ValueError):
            build_standard_leg(1.0, 0.6)

        with pytest.raises(ValueError):
            build_standard_leg(0.9, 0.6)

    def test_rejects_infinite_odds(self):
        with pytest.raises(ValueError):
            build_standard_leg(float("inf"), 0.6)

        with pytest.raises(ValueError):
            build_standard_leg(float("nan"), 0.6)

    def test_rejects_bad_probability(self):
        with pytest.raises(ValueError):
            build_standard_leg(2.0, 1.5)


class TestPolymarketLeg:

    def test_price_converts_to_odds(self):
        """Buying at 0.60 pays 1/0.60, a 66.7% return."""
        leg = build_polymarket_leg(0.60, 0.75)

        assert leg.win_prob == 0.75
        assert leg.win_return == pytest.approx(1 / 0.6 - 1)
        assert leg.loss_return == -1.0
        assert leg.source is LegSource.POLYMARKET

    def test_price_of_one_has_no_upside(self):
        leg = build_polymarket_leg(1.0, 0.9)

        assert leg.win_return == pytest.approx(0.0)

    def test_rejects_zero_price(self):
        with pytest.raises(ValueError):
            build_polymarket_leg(0.0, 0.5)

        with pytest.raises(ValueError):
            build_polymarket_leg(1.2, 0.5)

    def test_rejects_non_finite_price(self):
        with pytest.raises(ValueError):
            build_polymarket_leg(float("nan"), 0.5)

        with pytest.raises(ValueError):
            build_polymarket_leg(float("inf"), 0.5)


class TestStockLeg:

    def test_returns_relative_to_entry(self):
        leg = build_stock_leg(100, 120, 90, 0.6)

        assert leg.win_return == pytest.approx(0.2)
        assert leg.loss_return == pytest.approx(-0.1)
        assert leg.source is LegSource.STOCK

    def test_rejects_target_below_entry(self):
        with pytest.raises(ValueError):
            build_stock_leg(100, 95, 90, 0.6)

    def test_rejects_stop_above_entry(self):
        with pytest.raises(ValueError):
            build_stock_leg(100, 120, 105, 0.6)

    def test_rejects_non_positive_prices(self):
        with pytest.raises(ValueError):
            build_stock_leg(100, 120, 0, 0.6)

    def test_rejects_infinite_target(self):
        """An unbounded target would be an infinite win return."""
        with pytest.raises(ValueError):
            build_stock_leg(100, float("inf"), 90, 0.6)


class TestArbitrage:

    def test_locked_profit(self):
        """2.1 / 2.1: implied 0.952, locked profit 1/0.952 - 1 = 5%."""
        r = arbitrage_locked_return([2.1, 2.1])

        assert r == pytest.approx(2.1 / 2 - 1)
        assert r > 0

    def test_juice_when_no_arbitrage(self):
        """1.9 / 1.9: implied 1.0526, juice 5.26%."""
        r = arbitrage_locked_return([1.9, 1.9])

        assert r == pytest.approx(-(2 / 1.9 - 1))
        assert r < 0

    def test_requires_two_odds(self):
        with pytest.raises(ValueError):
            arbitrage_locked_return([2.0])

    def test_rejects_bad_odds(self):
        with pytest.raises(ValueError):
            arbitrage_locked_return([2.0, 1.0])

    def test_rejects_infinite_odds(self):
        """Infinite odds must not turn into a risk-free 100% return."""
        with pytest.raises(ValueError):
            arbitrage_locked_return([float("inf"), 2.0])

        with pytest.raises(ValueError):
            build_arbitrage_leg(float("inf"), 2.0)

        with pytest.raises(ValueError):
            build_multi_arbitrage_leg([2.0, 3.0, float("inf")])

    def test_two_way_leg_is_deterministic(self):
        leg = build_arbitrage_leg(2.1, 2.1)

        assert leg.win_prob == 1.0
        assert leg.win_return == leg.loss_return
        assert leg.is_deterministic()
        assert leg.source is LegSource.ARBITRAGE2
        assert "arbitrage" in leg.summary

    def test_multi_way_leg(self):
        odds = [3.2, 3.3, 3.4]
        leg = build_multi_arbitrage_leg(odds)

        implied = sum(1 / o for o in odds)
        assert leg.win_return == pytest.approx(1 / implied - 1)
        assert leg.source is LegSource.ARBITRAGE_N

    def test_multi_way_juice_summary(self):
        leg = build_multi_arbitrage_leg([2.5, 2.5, 2.5])

        assert leg.win_return < 0
        assert "juice" in leg.summary
