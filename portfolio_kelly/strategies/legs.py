"""
Leg builders: turn the calculator's input modes into portfolio legs.

Each builder maps one kind of position onto the binary (win, loss) payoff
the optimizer understands. Arbitrage books are deterministic: whatever the
outcome, the book returns the same locked-in amount, so they become legs
with win_prob = 1 and win_return == loss_return.
"""

import math
from typing import Sequence

from .kelly import Leg, LegSource


def _pct(value: float) -> str:
    return f"{value * 100:.2f}%"


def _check_odds(odds: float, name: str = "odds") -> None:
    if not (math.isfinite(odds) and odds > 1.0):
        raise ValueError(f"{name} must be finite and > 1.0, got {odds}")


def arbitrage_locked_return(odds: Sequence[float]) -> float:
    """
    Deterministic return of a book backing every outcome at the given odds.

    With total implied probability

    .. math::

        P = \\sum_i \\frac{1}{o_i}

    staking 1/(o_i P) on each outcome pays 1/P whatever happens. The
    return is 1/P - 1 when P < 1 (an arbitrage), otherwise minus the
    bookmaker's juice, -(P - 1).

    Raises:
        ValueError: If fewer than two odds are given or any odds are
                    not finite and > 1.0
    """
    if len(odds) < 2:
        raise ValueError(f"Arbitrage needs at least 2 odds, got {len(odds)}")
    for i, o in enumerate(odds):
        _check_odds(o, f"odds{i + 1}")

    total_implied_prob = sum(1.0 / o for o in odds)
    if total_implied_prob < 1.0:
        return 1.0 / total_implied_prob - 1.0
    return -(total_implied_prob - 1.0)


def build_standard_leg(odds: float, win_prob: float) -> Leg:
    """Back a single outcome at decimal odds."""
    _check_odds(odds)
    return Leg(
        win_prob=win_prob,
        win_return=odds - 1.0,
        loss_return=-1.0,
        source=LegSource.STANDARD,
        summary=f"odds {odds:.3f} / win {_pct(win_prob)}"
    )


def build_polymarket_leg(market_price: float, probability: float) -> Leg:
    """
    Buy a prediction-market share at ``market_price`` (0-1].

    A share bought at price c pays 1, so the implied decimal odds are 1/c.
    """
    if not 0.0 < market_price <= 1.0:
        raise ValueError(f"Market price must be in (0, 1], got {market_price}")

    odds = 1.0 / market_price
    return Leg(
        win_prob=probability,
        win_return=odds - 1.0,
        loss_return=-1.0,
        source=LegSource.POLYMARKET,
        summary=f"price {market_price * 100:.3f}% / prob {_pct(probability)}"
    )


def build_stock_leg(
    entry_price: float,
    target_price: float,
    stop_loss: float,
    win_prob: float
) -> Leg:
    """
    Stock trade that exits at either the target or the stop.

    Raises:
        ValueError: If a price is not finite and positive, the target is
                    not above the entry, or the stop is not below it
    """
    for name, price in (
        ("entry_price", entry_price),
        ("target_price", target_price),
        ("stop_loss", stop_loss),
    ):
        if not (math.isfinite(price) and price > 0):
            raise ValueError(f"{name} must be finite and positive, got {price}")
    if target_price <= entry_price or stop_loss >= entry_price:
        raise ValueError(
            f"Target must be above entry and stop below it, got "
            f"entry={entry_price}, target={target_price}, stop={stop_loss}"
        )

    return Leg(
        win_prob=win_prob,
        win_return=(target_price - entry_price) / entry_price,
        loss_return=-(entry_price - stop_loss) / entry_price,
        source=LegSource.STOCK,
        summary=(
            f"entry {entry_price:.2f} / target {target_price:.2f} / "
            f"stop {stop_loss:.2f} / win {_pct(win_prob)}"
        )
    )


def _arbitrage_summary(odds: Sequence[float], locked_return: float) -> str:
    quoted = ",".join(f"{o:.3f}" for o in odds)
    if locked_return > 0:
        return f"odds {quoted} / arbitrage {_pct(locked_return)}"
    return f"odds {quoted} / juice {_pct(-locked_return)}"


def build_arbitrage_leg(odds1: float, odds2: float) -> Leg:
    """Two-way arbitrage book as a deterministic leg."""
    r = arbitrage_locked_return([odds1, odds2])
    return Leg(
        win_prob=1.0,
        win_return=r,
        loss_return=r,
        source=LegSource.ARBITRAGE2,
        summary=_arbitrage_summary([odds1, odds2], r)
    )


def build_multi_arbitrage_leg(odds: Sequence[float]) -> Leg:
    """Multi-way arbitrage book as a deterministic leg."""
    r = arbitrage_locked_return(odds)
    return Leg(
        win_prob=1.0,
        win_return=r,
        loss_return=r,
        source=LegSource.ARBITRAGE_N,
        summary=_arbitrage_summary(odds, r)
    )
