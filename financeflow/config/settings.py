"""
Configuration Management for FinanceFlow

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All tunable constants of the ledger and payoff engines live
here. The engines read them through get_settings() unless a caller injects
its own EngineSettings (tests do this to shrink the payoff horizon).
"""

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Thirty years of monthly steps bounds every payoff simulation.
PAYOFF_HORIZON_MONTHS = 360


class EngineSettings(BaseSettings):
    """
    Ledger and payoff engine settings.

    Loads configuration from FINANCEFLOW_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINANCEFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Payoff simulation
    payoff_horizon_months: int = Field(
        default=PAYOFF_HORIZON_MONTHS,
        ge=1,
        le=1200,
        description="Maximum number of simulated months"
    )
    paid_off_threshold: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
        description="Balance at or below which a debt counts as paid off"
    )

    # Ledger
    revolving_categories: str = Field(
        default="credit-card,credit_card,store-card",
        description="Comma-separated liability categories whose payments carry no interest split"
    )
    yearly_contribution_cap: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Yearly contribution limit used by pre-flight validation"
    )

    # Net worth history
    networth_retention_days: int = Field(
        default=365,
        ge=1,
        description="How many days of net-worth snapshots to keep"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        level = v.strip().upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if level not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {allowed}")
        return level

    @property
    def revolving_categories_set(self) -> frozenset[str]:
        """Get revolving categories as a normalized set."""
        return frozenset(
            cat.strip().lower()
            for cat in self.revolving_categories.split(",")
            if cat.strip()
        )


@lru_cache()
def get_settings() -> EngineSettings:
    """
    Get engine settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return EngineSettings()
