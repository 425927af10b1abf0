"""
Configuration Management for the portfolio Kelly optimizer.

Uses pydantic-settings for environment variable loading and validation.
Every numerical tunable of the solver lives here so that an optimizer run
is fully described by its inputs plus one ``OptimizerSettings`` instance.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OptimizerSettings(BaseSettings):
    """
    Optimizer Settings.

    Loads overrides from ``PORTFOLIO_KELLY_*`` environment variables and a
    ``.env`` file. Instances are frozen.
    """
    model_config = SettingsConfigDict(
        env_prefix="PORTFOLIO_KELLY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True
    )

    # Budget: strictly below 1 so some capital always stays uninvested
    MAX_TOTAL_ALLOCATION: float = Field(default=0.999999, gt=0.0, lt=1.0)

    # Gradient ascent
    MAX_ITERATIONS: int = Field(default=800, ge=1)
    MAX_BACKTRACKS: int = Field(default=24, ge=1)
    INITIAL_STEP: float = Field(default=0.25, gt=0.0)
    MAX_STEP: float = Field(default=1.0, gt=0.0)
    STEP_GROWTH: float = Field(default=1.15, ge=1.0)
    STEP_SHRINK: float = Field(default=0.5, gt=0.0, lt=1.0)
    MIN_STEP: float = Field(default=1e-10, gt=0.0)

    # Convergence
    IMPROVEMENT_EPS: float = Field(default=1e-12, ge=0.0)
    CONVERGENCE_OBJECTIVE_DELTA: float = Field(default=1e-10, ge=0.0)

    # States with probability at or below this never set the worst case
    STATE_PROB_EPS: float = Field(default=1e-15, ge=0.0)

    # Tolerance for u == d, u == 0 and d == 0 in the single-leg start value
    DEGENERATE_RETURN_EPS: float = Field(default=1e-12, ge=0.0)

    # Independent mode enumerates 2^N states
    MAX_LEGS: int = Field(default=12, ge=1, le=20)

    # Correlated scenarios
    REQUIRE_NORMALIZED_SCENARIOS: bool = False
    PROBABILITY_SUM_TOLERANCE_PER_SCENARIO: float = Field(default=0.00005, ge=0.0)

    @model_validator(mode='after')
    def validate_step_bounds(self):
        """Ensure the first step lies between the minimum and maximum step."""
        if not self.MIN_STEP < self.INITIAL_STEP <= self.MAX_STEP:
            raise ValueError(
                f"Step sizes must satisfy MIN_STEP < INITIAL_STEP <= MAX_STEP, got "
                f"{self.MIN_STEP}, {self.INITIAL_STEP}, {self.MAX_STEP}"
            )
        return self


settings = OptimizerSettings()
