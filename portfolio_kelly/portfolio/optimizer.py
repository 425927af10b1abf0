"""
Multi-Leg Portfolio Kelly Optimization.

This module solves the simultaneous Kelly problem: allocate capital across
several positions held over the same period so as to maximise expected
log growth of wealth.

The Portfolio Kelly Problem
===========================

Individual Kelly fractions cannot simply be added up. With f_i the
fraction of capital on leg i and R_i its random return, we solve:

.. math::

    \\max_{f} \\mathbb{E}\\left[\\log\\left(1 + \\sum_{i=1}^{n} f_i R_i\\right)\\right]
    \\quad \\text{s.t.} \\quad f_i \\ge 0, \\; \\sum_{i=1}^{n} f_i \\le cap

With cap slightly below 1 so that some capital always stays uninvested.

The expectation is taken exactly over a finite list of joint outcomes
(see ``states``), so the answer is deterministic.

Correlation Matters
-------------------

Two input modes share one solver:

- Independent legs: the joint distribution is the product of the legs'
  win/loss distributions (2^N states).
- Correlated scenarios: the caller lists the joint outcomes directly.

Legs that lose together (positive correlation) share drawdowns and get a
smaller total allocation than independent legs; legs that hedge each
other (negative correlation) support a larger one.

Algorithm
---------

Projected gradient ascent with an adaptive step:

1. Evaluate G and its gradient at the current allocation.
2. Step along the gradient and project back onto the budget simplex.
3. Accept if G improves by more than ``IMPROVEMENT_EPS`` and grow the
   step; otherwise halve it and retry (backtracking).
4. Stop when no step improves, the improvement is negligible, or the
   iteration budget runs out.

G is concave, so every accepted step moves towards the global optimum.

References
----------
- Thorp, E.O. (1997). "The Kelly Criterion in Blackjack, Sports Betting..."
- MacLean, Thorp, Ziemba (2011). "The Kelly Capital Growth Investment Criterion"
"""

from dataclasses import dataclass
import logging
from typing import List, Optional, Sequence

import numpy as np

from ..core.config import OptimizerSettings, settings as default_settings
from ..strategies.kelly import Leg, single_leg_kelly_fraction
from .objective import (
    expected_arithmetic_return,
    objective_and_gradient,
    project_to_simplex,
    state_wealth,
)
from .states import (
    OutcomeStates,
    Scenario,
    check_probability_sum,
    enumerate_independent_states,
    states_from_scenarios,
)

logger = logging.getLogger(__name__)


@dataclass
class PortfolioKellyResult:
    """
    Result of a portfolio Kelly optimization.

    Attributes:
        allocations: Fraction of capital per leg, in input order
        total_allocation: Sum of all fractions (<= cap)
        expected_log_growth: E[log(W'/W)] at the allocation
        expected_arithmetic_return: E[(W' - W)/W] at the allocation
        worst_case_multiplier: Smallest W'/W over states with
                               non-negligible probability
        converged: Whether the ascent stopped on its own criteria
        iterations: Number of ascent iterations run
    """
    allocations: List[float]
    total_allocation: float
    expected_log_growth: float
    expected_arithmetic_return: float
    worst_case_multiplier: float
    converged: bool
    iterations: int

    def stake_amounts(self, capital: float) -> List[float]:
        """Calculate actual stake amounts for each leg."""
        return [frac * capital for frac in self.allocations]


def initial_allocations_independent(
    legs: Sequence[Leg],
    config: OptimizerSettings
) -> np.ndarray:
    """Single-leg Kelly fractions, projected onto the budget."""
    cap = config.MAX_TOTAL_ALLOCATION
    fractions = np.array([
        single_leg_kelly_fraction(leg, cap, config.DEGENERATE_RETURN_EPS)
        for leg in legs
    ], dtype=float)
    return project_to_simplex(fractions, cap)


def initial_allocations_correlated(
    states: OutcomeStates,
    config: OptimizerSettings
) -> np.ndarray:
    """
    Probability-weighted mean return per leg, clamped at zero and projected.

    Biases the start towards legs with positive edge without assuming
    independence.
    """
    edges = states.returns.T @ states.probabilities
    return project_to_simplex(np.maximum(edges, 0.0), config.MAX_TOTAL_ALLOCATION)


class PortfolioKellyOptimizer:
    """
    Growth-optimal allocation across simultaneous binary legs or scenarios.

    Example:
        >>> from portfolio_kelly.strategies.legs import build_standard_leg
        >>> optimizer = PortfolioKellyOptimizer()
        >>> legs = [
        ...     build_standard_leg(2.0, 0.6),
        ...     build_standard_leg(2.0, 0.6),
        ... ]
        >>> result = optimizer.optimize_independent(legs)
        >>> [round(f, 3) for f in result.allocations]
        [0.192, 0.192]

    Attributes:
        settings: Budget, step-size and convergence constants
    """

    def __init__(self, settings: Optional[OptimizerSettings] = None):
        """
        Initialize the optimizer.

        Args:
            settings: Solver configuration. Defaults to the process-wide
                      settings loaded from the environment.
        """
        self.settings = settings if settings is not None else default_settings

    def optimize_independent(self, legs: Sequence[Leg]) -> PortfolioKellyResult:
        """
        Optimize allocation across statistically independent legs.

        Cost grows as 2^N, hence the ``MAX_LEGS`` bound.

        Args:
            legs: Binary legs, assumed independent

        Returns:
            PortfolioKellyResult with one allocation per leg

        Raises:
            ValueError: If there are more than ``MAX_LEGS`` legs
        """
        self._check_leg_count(len(legs))

        states = enumerate_independent_states(legs)
        initial = initial_allocations_independent(legs, self.settings)
        return self._solve(len(legs), states, initial)

    def optimize_correlated(
        self,
        leg_count: int,
        scenarios: Sequence[Scenario]
    ) -> PortfolioKellyResult:
        """
        Optimize allocation given explicit joint scenarios.

        Scenario probabilities are used as given. They are only required
        to sum to 1 when ``REQUIRE_NORMALIZED_SCENARIOS`` is set.

        Args:
            leg_count: Number of legs N
            scenarios: Joint outcomes, each with N returns

        Returns:
            PortfolioKellyResult with one allocation per leg

        Raises:
            ValueError: On too many legs, a scenario of the wrong length,
                        or unnormalised probabilities when required
        """
        self._check_leg_count(leg_count)
        if self.settings.REQUIRE_NORMALIZED_SCENARIOS:
            check_probability_sum(
                list(scenarios),
                self.settings.PROBABILITY_SUM_TOLERANCE_PER_SCENARIO
            )

        states = states_from_scenarios(leg_count, scenarios)
        initial = initial_allocations_correlated(states, self.settings)
        return self._solve(leg_count, states, initial)

    def _check_leg_count(self, leg_count: int) -> None:
        if leg_count < 0:
            raise ValueError(f"Leg count must be non-negative, got {leg_count}")
        if leg_count > self.settings.MAX_LEGS:
            raise ValueError(
                f"At most {self.settings.MAX_LEGS} legs are supported, got {leg_count}"
            )

    def _solve(
        self,
        leg_count: int,
        states: OutcomeStates,
        initial: np.ndarray
    ) -> PortfolioKellyResult:
        """Projected gradient ascent from ``initial``."""
        cfg = self.settings

        if leg_count == 0 or len(states) == 0:
            return PortfolioKellyResult(
                allocations=[0.0] * leg_count,
                total_allocation=0.0,
                expected_log_growth=0.0,
                expected_arithmetic_return=0.0,
                worst_case_multiplier=1.0,
                converged=True,
                iterations=0
            )

        allocations = self._feasible_start(initial, states)

        step = cfg.INITIAL_STEP
        iterations = 0
        converged = False

        for _ in range(cfg.MAX_ITERATIONS):
            iterations += 1
            objective, gradient = objective_and_gradient(allocations, states)

            if not np.isfinite(objective):
                logger.warning(
                    f"Non-finite objective at iteration {iterations}, "
                    f"keeping last feasible allocation"
                )
                break

            improved = False
            improvement = 0.0
            local_step = step

            # Backtracking line search
            for _ in range(cfg.MAX_BACKTRACKS):
                candidate = project_to_simplex(
                    allocations + local_step * gradient,
                    cfg.MAX_TOTAL_ALLOCATION
                )
                candidate_objective, _ = objective_and_gradient(candidate, states)

                if candidate_objective > objective + cfg.IMPROVEMENT_EPS:
                    improvement = candidate_objective - objective
                    allocations = candidate
                    step = min(cfg.MAX_STEP, local_step * cfg.STEP_GROWTH)
                    improved = True
                    break

                local_step *= cfg.STEP_SHRINK
                if local_step < cfg.MIN_STEP:
                    break

            if not improved or improvement < cfg.CONVERGENCE_OBJECTIVE_DELTA:
                converged = True
                break

        if converged:
            logger.debug(
                f"Converged after {iterations} iterations over {len(states)} states"
            )
        else:
            logger.warning(
                f"Stopped after {iterations} iterations without converging "
                f"({leg_count} legs, {len(states)} states)"
            )

        return self._assemble_result(allocations, states, converged, iterations)

    def _feasible_start(
        self,
        initial: np.ndarray,
        states: OutcomeStates
    ) -> np.ndarray:
        """
        Fall back to the empty portfolio if ``initial`` is infeasible.

        Only reachable when some leg can lose more than its stake.
        """
        objective, _ = objective_and_gradient(initial, states)
        if np.isfinite(objective):
            return initial

        logger.warning("Initial allocation is infeasible, starting from zero")
        return np.zeros_like(initial)

    def _assemble_result(
        self,
        allocations: np.ndarray,
        states: OutcomeStates,
        converged: bool,
        iterations: int
    ) -> PortfolioKellyResult:
        """Summary statistics at the final allocation."""
        expected_log_growth, _ = objective_and_gradient(allocations, states)

        reachable = states.probabilities > self.settings.STATE_PROB_EPS
        if np.any(reachable):
            worst_case = float(np.min(state_wealth(allocations, states)[reachable]))
        else:
            worst_case = 0.0

        return PortfolioKellyResult(
            allocations=[float(f) for f in allocations],
            total_allocation=float(np.sum(allocations)),
            expected_log_growth=expected_log_growth,
            expected_arithmetic_return=expected_arithmetic_return(allocations, states),
            worst_case_multiplier=worst_case,
            converged=converged,
            iterations=iterations
        )


def optimize_independent(
    legs: Sequence[Leg],
    settings: Optional[OptimizerSettings] = None
) -> PortfolioKellyResult:
    """
    Convenience function for independent-leg portfolio Kelly.

    Example:
        >>> legs = [
        ...     build_standard_leg(2.0, 0.60),
        ...     build_stock_leg(100, 120, 90, 0.60),
        ...     build_arbitrage_leg(2.1, 2.1),
        ... ]
        >>> result = optimize_independent(legs)
        >>> result.stake_amounts(10000)

    Args:
        legs: Independent binary legs
        settings: Solver configuration

    Returns:
        PortfolioKellyResult with allocations
    """
    optimizer = PortfolioKellyOptimizer(settings)
    return optimizer.optimize_independent(legs)


def optimize_correlated(
    leg_count: int,
    scenarios: Sequence[Scenario],
    settings: Optional[OptimizerSettings] = None
) -> PortfolioKellyResult:
    """
    Convenience function for scenario-based portfolio Kelly.

    Example:
        >>> # Two legs that hedge each other
        >>> scenarios = [
        ...     Scenario(0.5, (1.2, -1.0)),
        ...     Scenario(0.5, (-1.0, 1.2)),
        ... ]
        >>> result = optimize_correlated(2, scenarios)

    Args:
        leg_count: Number of legs
        scenarios: Joint outcomes with one return per leg
        settings: Solver configuration

    Returns:
        PortfolioKellyResult with allocations
    """
    optimizer = PortfolioKellyOptimizer(settings)
    return optimizer.optimize_correlated(leg_count, scenarios)
