"""
Pytest configuration and shared fixtures for portfolio Kelly testing.

This file provides:
- Path setup so the package imports without installation
- Leg and scenario factories
- Settings isolated from the caller's environment
"""

import os
import sys
from pathlib import Path
from typing import List

import pytest


# ============================================================================
# Path Setup
# ============================================================================

sys.path.insert(0, str(Path(__file__).parent))

from portfolio_kelly.core.config import OptimizerSettings  # noqa: E402
from portfolio_kelly.portfolio.states import Scenario  # noqa: E402
from portfolio_kelly.strategies.kelly import Leg, LegSource  # noqa: E402


# ============================================================================
# Environment Configuration
# ============================================================================

@pytest.fixture
def optimizer_settings(monkeypatch) -> OptimizerSettings:
    """Default settings, ignoring any PORTFOLIO_KELLY_* variables."""
    for key in list(os.environ):
        if key.startswith("PORTFOLIO_KELLY_"):
            monkeypatch.delenv(key)
    return OptimizerSettings(_env_file=None)


# ============================================================================
# Test Data Factories
# ============================================================================

@pytest.fixture
def make_leg():
    """
    Factory for standard decimal-odds legs.

    Usage:
        def test_something(make_leg):
            leg = make_leg(odds=2.0, win_prob=0.6)
    """
    def _create(odds: float = 2.0, win_prob: float = 0.6) -> Leg:
        return Leg(
            win_prob=win_prob,
            win_return=odds - 1.0,
            loss_return=-1.0,
            source=LegSource.STANDARD,
            summary=f"odds={odds},win={win_prob}"
        )

    return _create


@pytest.fixture
def stock_leg() -> Leg:
    """Entry 100, target 120, stop 90, 60% win rate."""
    return Leg(
        win_prob=0.6,
        win_return=0.2,
        loss_return=-0.1,
        source=LegSource.STOCK,
        summary="entry=100,target=120,stop=90,win=60%"
    )


@pytest.fixture
def anti_correlated_scenarios() -> List[Scenario]:
    """Leg A wins exactly when leg B loses."""
    return [
        Scenario(probability=0.5, returns=(1.2, -1.0)),
        Scenario(probability=0.5, returns=(-1.0, 1.2)),
    ]


@pytest.fixture
def co_moving_scenarios() -> List[Scenario]:
    """Both legs win or lose together, 60% even money."""
    return [
        Scenario(probability=0.6, returns=(1.0, 1.0)),
        Scenario(probability=0.4, returns=(-1.0, -1.0)),
    ]


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "property: mark test as property-based test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
