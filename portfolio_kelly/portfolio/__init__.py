"""Multi-leg portfolio Kelly optimization."""

from .optimizer import (
    PortfolioKellyOptimizer,
    PortfolioKellyResult,
    optimize_independent,
    optimize_correlated
)
from .states import Scenario, OutcomeStates

__all__ = [
    "PortfolioKellyOptimizer",
    "PortfolioKellyResult",
    "optimize_independent",
    "optimize_correlated",
    "Scenario",
    "OutcomeStates",
]
