"""
Expected log growth, its gradient, and the budget projection.

For an allocation vector f and states s with probability q_s and leg
returns r_s, end-of-period wealth per unit of starting wealth is:

.. math::

    w_s = 1 + f \\cdot r_s

The Kelly objective and its gradient are:

.. math::

    G(f) = \\sum_s q_s \\log w_s, \\qquad
    \\frac{\\partial G}{\\partial f_i} = \\sum_s \\frac{q_s r_{s,i}}{w_s}

G is concave wherever it is finite, so any projected step that improves
it moves towards the global optimum.
"""

from typing import Tuple

import numpy as np

from .states import OutcomeStates


def state_wealth(allocations: np.ndarray, states: OutcomeStates) -> np.ndarray:
    """Wealth multiplier 1 + f . r_s for every state."""
    return 1.0 + states.returns @ allocations


def objective_and_gradient(
    allocations: np.ndarray,
    states: OutcomeStates
) -> Tuple[float, np.ndarray]:
    """
    Expected log growth and its gradient at ``allocations``.

    States with zero probability carry no weight: they neither contribute
    to the sum nor make an allocation infeasible.

    Returns:
        (objective, gradient). The objective is -inf when any state with
        positive probability has wealth <= 0; the gradient must not be
        used in that case.
    """
    allocations = np.asarray(allocations, dtype=float)
    gradient = np.zeros_like(allocations)

    live = states.probabilities > 0
    if not np.any(live):
        return 0.0, gradient

    probs = states.probabilities[live]
    returns = states.returns[live]
    wealth = 1.0 + returns @ allocations

    if np.any(wealth <= 0):
        return float("-inf"), gradient

    objective = float(np.dot(probs, np.log(wealth)))
    gradient = returns.T @ (probs / wealth)

    return objective, gradient


def expected_arithmetic_return(
    allocations: np.ndarray,
    states: OutcomeStates
) -> float:
    """Probability-weighted portfolio return, sum_s q_s (f . r_s)."""
    return float(np.dot(states.probabilities, states.returns @ allocations))


def project_to_simplex(values: np.ndarray, cap: float) -> np.ndarray:
    """
    Euclidean projection onto {x >= 0, sum(x) <= cap}.

    Negative entries are clamped first. If the remainder already fits the
    budget it is returned as is; otherwise a common shift theta is found
    such that max(x - theta, 0) sums to exactly ``cap``:

    .. math::

        \\theta = \\frac{\\sum_{j \\le k} u_j - cap}{k}

    where u is x sorted descending and k is the first index with
    u_{k+1} <= theta.

    Args:
        values: Arbitrary real vector
        cap: Budget (> 0)

    Returns:
        New array; ``values`` is not modified.
    """
    clamped = np.maximum(np.asarray(values, dtype=float), 0.0)
    if clamped.sum() <= cap:
        return clamped

    ordered = np.sort(clamped)[::-1]
    cumulative = np.cumsum(ordered)
    thresholds = (cumulative - cap) / np.arange(1, len(ordered) + 1)
    following = np.append(ordered[1:], -np.inf)

    # The last index always qualifies since it is compared against -inf
    k = int(np.argmax(following <= thresholds))
    theta = thresholds[k]

    return np.maximum(clamped - theta, 0.0)
