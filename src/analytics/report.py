from __future__ import annotations

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .activity import (
    ActivityPattern,
    MonthlyBreakdown,
    PeriodBucket,
    QuarterlyBreakdown,
    build_activity_pattern,
    build_monthly_breakdown,
    build_quarterly_breakdown,
    build_yearly_breakdown,
)
from .anomaly import AnomalyRecord, AnomalyThresholds, detect_anomalies
from .behavior import ClusterResult, ClusterThresholds, classify_wallet
from .benchmark import BenchmarkComparison, BenchmarkSeries, compare_to_benchmark
from .errors import InvalidInputError
from .lot_ledger import CostBasisEngine, CostBasisMethod, CostBasisResult, OversellPolicy
from .portfolio_metrics import (
    compute_concentration,
    compute_new_asset_ratio,
    compute_pnl,
    compute_returns,
    compute_volatility,
)
from .risk import RiskProfile, RiskThresholds, assess_risk
from .tax import SHORT_TERM_THRESHOLD_DAYS, Jurisdiction, TaxRates, TaxReport, estimate_tax
from .transactions import Transaction, as_utc
from .trend import PredictionResult, predict_value

logger = logging.getLogger(__name__)

ZERO = Decimal(0)


class AnalyticsConfig(BaseModel):
    """Every tunable of the engine, passed explicitly to ``WalletAnalyzer``."""

    model_config = ConfigDict(frozen=True)

    cost_basis_method: CostBasisMethod = CostBasisMethod.FIFO
    oversell_policy: OversellPolicy = OversellPolicy.CLAMP
    jurisdiction: Jurisdiction = Jurisdiction.US
    short_term_threshold_days: int = Field(default=SHORT_TERM_THRESHOLD_DAYS, gt=0)
    tax_rates: dict[Jurisdiction, TaxRates] | None = None
    anomaly_thresholds: AnomalyThresholds = AnomalyThresholds()
    risk_thresholds: RiskThresholds = RiskThresholds()
    cluster_thresholds: ClusterThresholds = ClusterThresholds()
    prediction_periods: int = Field(default=1, ge=0)
    # Assets first seen within this window before `as_of` count as new.
    new_asset_window: timedelta = timedelta(days=30)

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise InvalidInputError.from_validation_error(exc) from exc

    @field_validator("cost_basis_method", mode="before")
    @classmethod
    def _parse_method(cls, value: object) -> CostBasisMethod:
        return CostBasisMethod.parse(str(value))

    @field_validator("jurisdiction", mode="before")
    @classmethod
    def _parse_jurisdiction(cls, value: object) -> Jurisdiction:
        return Jurisdiction.parse(str(value))


class WalletAnalyticsInput(BaseModel):
    """Everything the upstream collaborators supply for one wallet.

    ``known_assets`` and ``established_assets`` default to the assets whose
    first transaction is older than ``AnalyticsConfig.new_asset_window``.
    """

    wallet_address: str
    transactions: list[Transaction]
    current_prices: dict[str, Decimal]
    value_history: list[Decimal] = Field(default_factory=list)
    known_assets: set[str] | None = None
    established_assets: set[str] | None = None
    defi_interactions: int = Field(default=0, ge=0)
    nft_count: int = Field(default=0, ge=0)
    benchmark: BenchmarkSeries | None = None
    as_of: datetime
    year: int | None = None


class WalletAnalyticsReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    wallet_address: str
    as_of: datetime
    total_value: Decimal
    holdings: dict[str, Decimal]
    unrealized_pnl_percentage: Decimal
    cost_basis: CostBasisResult
    tax: TaxReport
    activity: ActivityPattern
    monthly: MonthlyBreakdown
    quarterly: QuarterlyBreakdown
    yearly: list[PeriodBucket]
    risk: RiskProfile
    anomalies: list[AnomalyRecord]
    cluster: ClusterResult
    prediction: PredictionResult
    benchmark: BenchmarkComparison | None = None


def average_days_between(transactions: list[Transaction]) -> Decimal:
    if len(transactions) < 2:
        return ZERO
    timestamps = sorted(tx.utc_timestamp for tx in transactions)
    span_seconds = Decimal((timestamps[-1] - timestamps[0]).total_seconds())
    return span_seconds / Decimal(86400) / (len(timestamps) - 1)


def established_assets(transactions: list[Transaction], as_of: datetime, window: timedelta) -> set[str]:
    """Assets whose first transaction happened at least ``window`` before ``as_of``."""
    first_seen: dict[str, datetime] = {}
    for tx in transactions:
        ts = tx.utc_timestamp
        if tx.asset_id not in first_seen or ts < first_seen[tx.asset_id]:
            first_seen[tx.asset_id] = ts
    cutoff = as_of - window
    return {asset for asset, ts in first_seen.items() if ts <= cutoff}


def average_transaction_value(transactions: list[Transaction]) -> Decimal:
    if not transactions:
        return ZERO
    return sum((tx.value for tx in transactions), start=ZERO) / len(transactions)


class WalletAnalyzer:
    """Run every analytics component for one wallet and combine the results."""

    def __init__(self, config: AnalyticsConfig | None = None) -> None:
        self._config = config or AnalyticsConfig()
        self._cost_basis_engine = CostBasisEngine(
            method=self._config.cost_basis_method,
            oversell_policy=self._config.oversell_policy,
        )

    @property
    def config(self) -> AnalyticsConfig:
        return self._config

    def analyze(self, data: WalletAnalyticsInput) -> WalletAnalyticsReport:
        cfg = self._config
        as_of = as_utc(data.as_of)
        year = data.year or as_of.year
        transactions = data.transactions
        logger.info(
            "Analyzing wallet %s: %d transactions, method=%s, jurisdiction=%s",
            data.wallet_address,
            len(transactions),
            cfg.cost_basis_method,
            cfg.jurisdiction,
        )

        cost_basis = self._cost_basis_engine.process(transactions, data.current_prices, as_of=as_of)
        tax = estimate_tax(
            cost_basis.realized_events,
            cfg.jurisdiction,
            rates=cfg.tax_rates,
            short_term_threshold_days=cfg.short_term_threshold_days,
        )

        holdings: dict[str, Decimal] = {}
        open_cost = ZERO
        for lot in cost_basis.open_lots:
            holdings[lot.asset_id] = holdings.get(lot.asset_id, ZERO) + lot.amount * data.current_prices[lot.asset_id]
            open_cost += lot.amount * lot.unit_cost
        total_value = sum(holdings.values(), start=ZERO)

        history_assets = established_assets(transactions, as_of, cfg.new_asset_window)
        known = data.known_assets if data.known_assets is not None else history_assets
        established = data.established_assets if data.established_assets is not None else history_assets

        risk = assess_risk(
            compute_volatility(data.value_history),
            compute_concentration(holdings),
            compute_new_asset_ratio(holdings, established),
            thresholds=cfg.risk_thresholds,
        )
        anomalies = detect_anomalies(
            transactions,
            average_transaction_value(transactions),
            known,
            thresholds=cfg.anomaly_thresholds,
        )
        cluster = classify_wallet(
            total_value,
            len(transactions),
            average_days_between(transactions),
            data.defi_interactions,
            data.nft_count,
            thresholds=cfg.cluster_thresholds,
        )
        prediction = predict_value(data.value_history, cfg.prediction_periods)

        benchmark = None
        if data.benchmark is not None:
            benchmark = compare_to_benchmark(compute_returns(data.value_history), data.benchmark)

        logger.info(
            "Wallet %s: value=%s risk=%s cluster=%s anomalies=%d",
            data.wallet_address,
            total_value,
            risk.level,
            cluster.cluster,
            len(anomalies),
        )

        return WalletAnalyticsReport(
            wallet_address=data.wallet_address,
            as_of=as_of,
            total_value=total_value,
            holdings=holdings,
            unrealized_pnl_percentage=compute_pnl(total_value, open_cost).percentage,
            cost_basis=cost_basis,
            tax=tax,
            activity=build_activity_pattern(transactions),
            monthly=build_monthly_breakdown(transactions, year),
            quarterly=build_quarterly_breakdown(transactions, year),
            yearly=build_yearly_breakdown(transactions),
            risk=risk,
            anomalies=anomalies,
            cluster=cluster,
            prediction=prediction,
            benchmark=benchmark,
        )
