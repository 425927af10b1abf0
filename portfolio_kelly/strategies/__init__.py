"""Single-leg Kelly sizing and leg builders."""

from .kelly import Leg, LegSource, single_leg_kelly_fraction
from .legs import (
    arbitrage_locked_return,
    build_standard_leg,
    build_polymarket_leg,
    build_stock_leg,
    build_arbitrage_leg,
    build_multi_arbitrage_leg
)

__all__ = [
    "Leg",
    "LegSource",
    "single_leg_kelly_fraction",
    "arbitrage_locked_return",
    "build_standard_leg",
    "build_polymarket_leg",
    "build_stock_leg",
    "build_arbitrage_leg",
    "build_multi_arbitrage_leg",
]
