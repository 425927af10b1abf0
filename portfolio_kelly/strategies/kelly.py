"""
Single-Leg Kelly Criterion for Binary Positions.

Every position handed to the portfolio optimizer is reduced to a binary
"leg": with probability p it returns u (a fraction of the capital staked),
otherwise it returns d. A standard bet at decimal odds o is the special
case u = o - 1, d = -1; a stock trade with a target and a stop gives
u = (target - entry) / entry and d = -(entry - stop) / entry.

Mathematical Foundation
=======================

Staking a fraction f of the bankroll on one leg, expected log growth is:

.. math::

    G(f) = p \\log(1 + f u) + q \\log(1 + f d)

Setting G'(f) = 0 gives the closed form:

.. math::

    f^* = -\\frac{p u + q d}{u d}

Which reduces to the familiar (p b - q) / b for u = b, d = -1.

The closed form is only used to seed the joint optimizer, so degenerate
legs get a fixed policy rather than an error:

- u == d: the payoff is deterministic. Stake the whole budget if it is
  positive, nothing otherwise.
- u == 0 or d == 0: the formula divides by zero. Stake nothing and let the
  optimizer find the right size.

References
----------
- Kelly, J.L. (1956). "A New Interpretation of Information Rate"
- Thorp, E.O. (2006). "The Kelly Criterion in Blackjack Sports Betting..."
"""

from dataclasses import dataclass
from enum import Enum
import math


class LegSource(Enum):
    """Where a leg's payoff structure came from."""
    STANDARD = "standard"
    POLYMARKET = "polymarket"
    STOCK = "stock"
    ARBITRAGE2 = "arbitrage2"
    ARBITRAGE_N = "arbitrageN"


@dataclass(frozen=True)
class Leg:
    """
    One binary position in a portfolio.

    Attributes:
        win_prob: Probability of the win outcome, in [0, 1]
        win_return: Return on the staked fraction if the leg wins
        loss_return: Return on the staked fraction if the leg loses
                     (-1.0 means the stake is lost)
        source: Which kind of input produced the leg
        summary: Human-readable description of the inputs
    """
    win_prob: float
    win_return: float
    loss_return: float
    source: LegSource = LegSource.STANDARD
    summary: str = ""

    def __post_init__(self):
        """Validate inputs."""
        if not math.isfinite(self.win_prob) or not 0.0 <= self.win_prob <= 1.0:
            raise ValueError(f"Win probability must be in [0, 1], got {self.win_prob}")
        if not math.isfinite(self.win_return):
            raise ValueError(f"Win return must be finite, got {self.win_return}")
        if not math.isfinite(self.loss_return):
            raise ValueError(f"Loss return must be finite, got {self.loss_return}")

    @property
    def loss_prob(self) -> float:
        return 1.0 - self.win_prob

    @property
    def expected_return(self) -> float:
        """Expected return per unit staked (the leg's edge)."""
        return self.win_prob * self.win_return + self.loss_prob * self.loss_return

    def is_deterministic(self, eps: float = 1e-12) -> bool:
        """True if both outcomes pay the same, within ``eps``."""
        return abs(self.win_return - self.loss_return) < eps


def single_leg_kelly_fraction(
    leg: Leg,
    cap: float,
    degenerate_eps: float = 1e-12
) -> float:
    """
    Closed-form Kelly fraction for a leg held on its own.

    .. math::

        f^* = -\\frac{p u + q d}{u d}

    Args:
        leg: The position to size
        cap: Allocation used for a deterministic positive payoff
        degenerate_eps: Tolerance for treating u == d, u == 0 or d == 0

    Returns:
        Non-negative fraction. Zero when there is no edge or the
        closed form is undefined.

    Example:
        >>> # 60% at even money
        >>> round(single_leg_kelly_fraction(Leg(0.6, 1.0, -1.0), cap=0.999999), 4)
        0.2
    """
    u = leg.win_return
    d = leg.loss_return

    if leg.is_deterministic(degenerate_eps):
        return cap if u > 0 else 0.0
    if abs(u) < degenerate_eps or abs(d) < degenerate_eps:
        return 0.0

    fraction = -leg.expected_return / (u * d)

    # No edge, no allocation
    if not math.isfinite(fraction) or fraction <= 0:
        return 0.0
    return fraction
