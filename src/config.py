from __future__ import annotations

from functools import cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from analytics.lot_ledger import CostBasisMethod, OversellPolicy
from analytics.report import AnalyticsConfig
from analytics.tax import SHORT_TERM_THRESHOLD_DAYS, Jurisdiction


class AppSettings(BaseSettings):
    """Defaults for the command line; the engine itself only sees ``AnalyticsConfig``."""

    cost_basis_method: CostBasisMethod = CostBasisMethod.FIFO
    oversell_policy: OversellPolicy = OversellPolicy.CLAMP
    jurisdiction: Jurisdiction = Jurisdiction.US
    short_term_threshold_days: int = SHORT_TERM_THRESHOLD_DAYS
    prediction_periods: int = 1

    model_config = SettingsConfigDict(
        env_prefix="WALLET_ANALYTICS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def to_analytics_config(self) -> AnalyticsConfig:
        return AnalyticsConfig(
            cost_basis_method=self.cost_basis_method,
            oversell_policy=self.oversell_policy,
            jurisdiction=self.jurisdiction,
            short_term_threshold_days=self.short_term_threshold_days,
            prediction_periods=self.prediction_periods,
        )


@cache
def config() -> AppSettings:
    return AppSettings()
