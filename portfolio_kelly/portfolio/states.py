"""
Outcome-state enumeration for the portfolio Kelly problem.

Both input modes are flattened into the same representation: a list of
joint outcomes ("states"), each with a probability and the return of every
leg in that outcome. The optimizer never needs to know which mode it is
solving.

Independent legs
----------------

N independent binary legs have 2^N joint outcomes. State ``mask`` has leg
i winning when bit i of ``mask`` is set:

.. math::

    \\Pr(mask) = \\prod_{i} \\begin{cases} p_i & \\text{bit } i \\text{ set} \\\\
                                          1 - p_i & \\text{otherwise} \\end{cases}

The blow-up is inherent to the problem (there is no closed form for the
joint optimum), so callers bound N instead.

Correlated scenarios
--------------------

Scenarios already are joint outcomes and pass through unchanged.
"""

from dataclasses import dataclass
import logging
import math
from typing import List, Sequence, Tuple

import numpy as np

from ..strategies.kelly import Leg

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scenario:
    """
    One joint outcome across all legs.

    Attributes:
        probability: Weight of the scenario (non-negative, not normalised)
        returns: Return of each leg under this scenario
    """
    probability: float
    returns: Tuple[float, ...]

    def __post_init__(self):
        """Validate inputs."""
        if not math.isfinite(self.probability) or self.probability < 0:
            raise ValueError(
                f"Scenario probability must be finite and non-negative, got {self.probability}"
            )
        returns = tuple(float(r) for r in self.returns)
        if not all(math.isfinite(r) for r in returns):
            raise ValueError(f"Scenario returns must be finite, got {returns}")
        object.__setattr__(self, "returns", returns)


@dataclass(frozen=True)
class OutcomeStates:
    """
    Flattened (probability, return-vector) states.

    Attributes:
        probabilities: Shape (S,) state probabilities
        returns: Shape (S, N) per-leg returns, one row per state
    """
    probabilities: np.ndarray
    returns: np.ndarray

    @property
    def leg_count(self) -> int:
        return self.returns.shape[1]

    def __len__(self) -> int:
        return self.probabilities.shape[0]


def enumerate_independent_states(legs: Sequence[Leg]) -> OutcomeStates:
    """
    Enumerate all 2^N win/loss combinations of independent legs.

    Args:
        legs: Independent binary legs

    Returns:
        OutcomeStates ordered by bitmask, bit i set meaning leg i wins
    """
    n = len(legs)
    win_prob = np.array([leg.win_prob for leg in legs], dtype=float)
    win_return = np.array([leg.win_return for leg in legs], dtype=float)
    loss_return = np.array([leg.loss_return for leg in legs], dtype=float)

    masks = np.arange(1 << n)[:, None]
    wins = ((masks >> np.arange(n)) & 1).astype(bool)  # (2^N, N)

    leg_probs = np.where(wins, win_prob, 1.0 - win_prob)
    probabilities = np.prod(leg_probs, axis=1)
    returns = np.where(wins, win_return, loss_return)

    logger.debug(f"Enumerated {len(probabilities)} states for {n} independent legs")

    return OutcomeStates(probabilities=probabilities, returns=returns)


def states_from_scenarios(
    leg_count: int,
    scenarios: Sequence[Scenario]
) -> OutcomeStates:
    """
    Turn correlated scenarios into states, one per scenario.

    Raises:
        ValueError: If a scenario does not have exactly ``leg_count`` returns
    """
    for i, scenario in enumerate(scenarios):
        if len(scenario.returns) != leg_count:
            raise ValueError(
                f"Scenario {i + 1} has {len(scenario.returns)} returns, expected {leg_count}"
            )

    probabilities = np.array([s.probability for s in scenarios], dtype=float)
    returns = np.array([s.returns for s in scenarios], dtype=float).reshape(
        len(scenarios), leg_count
    )

    return OutcomeStates(probabilities=probabilities, returns=returns)


def probability_sum_tolerance(
    scenario_count: int,
    per_scenario: float = 0.00005
) -> float:
    """
    Allowed deviation of the scenario probability sum from 1.

    Covers the accumulated rounding of probabilities entered as
    percentages with two decimals.
    """
    return scenario_count * per_scenario + 1e-9


def check_probability_sum(
    scenarios: List[Scenario],
    per_scenario: float = 0.00005
) -> float:
    """
    Check that scenario probabilities add up to 1 within tolerance.

    Returns:
        The probability sum

    Raises:
        ValueError: If the sum is outside tolerance
    """
    total = sum(s.probability for s in scenarios)
    tolerance = probability_sum_tolerance(len(scenarios), per_scenario)

    if abs(total - 1.0) > tolerance:
        raise ValueError(
            f"Scenario probabilities must sum to 1 (±{tolerance:.6f}), got {total:.6f}"
        )
    return total
