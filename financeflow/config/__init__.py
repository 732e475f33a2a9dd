"""Configuration package."""

from financeflow.config.settings import (
    PAYOFF_HORIZON_MONTHS,
    EngineSettings,
    get_settings,
)

__all__ = [
    "PAYOFF_HORIZON_MONTHS",
    "EngineSettings",
    "get_settings",
]
