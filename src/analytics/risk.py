from __future__ import annotations

from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class RiskLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EXTREME = "extreme"


class FactorImpact(StrEnum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


class RiskFactor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    impact: FactorImpact
    weight: int


class RiskProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: RiskLevel
    score: int
    contributing_factors: list[RiskFactor]


class RiskThresholds(BaseModel):
    """Cut-offs and weights for the additive risk score."""

    model_config = ConfigDict(frozen=True)

    base_score: int = 50
    high_volatility: Decimal = Decimal("0.5")
    high_volatility_weight: int = 20
    low_volatility: Decimal = Decimal("0.2")
    low_volatility_weight: int = 10
    high_concentration: Decimal = Decimal("0.7")
    high_concentration_weight: int = 15
    low_concentration: Decimal = Decimal("0.3")
    low_concentration_weight: int = 10
    high_new_asset_ratio: Decimal = Decimal("0.5")
    high_new_asset_ratio_weight: int = 15
    low_level_below: int = 30
    medium_level_below: int = 55
    high_level_below: int = 75


def risk_level(score: int, thresholds: RiskThresholds) -> RiskLevel:
    if score < thresholds.low_level_below:
        return RiskLevel.LOW
    if score < thresholds.medium_level_below:
        return RiskLevel.MEDIUM
    if score < thresholds.high_level_below:
        return RiskLevel.HIGH
    return RiskLevel.EXTREME


# NaN compares as neither above nor below, so it never contributes a factor.
def _above(value: Decimal, limit: Decimal) -> bool:
    return not value.is_nan() and value > limit


def _below(value: Decimal, limit: Decimal) -> bool:
    return not value.is_nan() and value < limit


def assess_risk(
    volatility: Decimal,
    concentration: Decimal,
    new_asset_ratio: Decimal,
    *,
    thresholds: RiskThresholds | None = None,
) -> RiskProfile:
    """Score a portfolio from 0 (safest) to 100.

    Out-of-range inputs are not rejected; the final score is clamped instead.
    A NaN input is treated as neutral and contributes no factor.
    """
    t = thresholds or RiskThresholds()
    factors: list[RiskFactor] = []

    if _above(volatility, t.high_volatility):
        factors.append(
            RiskFactor(name="High volatility", impact=FactorImpact.NEGATIVE, weight=t.high_volatility_weight)
        )
    elif _below(volatility, t.low_volatility):
        factors.append(RiskFactor(name="Low volatility", impact=FactorImpact.POSITIVE, weight=t.low_volatility_weight))

    if _above(concentration, t.high_concentration):
        factors.append(
            RiskFactor(name="Concentrated holdings", impact=FactorImpact.NEGATIVE, weight=t.high_concentration_weight)
        )
    elif _below(concentration, t.low_concentration):
        factors.append(
            RiskFactor(name="Diversified holdings", impact=FactorImpact.POSITIVE, weight=t.low_concentration_weight)
        )

    if _above(new_asset_ratio, t.high_new_asset_ratio):
        factors.append(
            RiskFactor(
                name="High exposure to new assets",
                impact=FactorImpact.NEGATIVE,
                weight=t.high_new_asset_ratio_weight,
            )
        )

    score = t.base_score
    for factor in factors:
        score += factor.weight if factor.impact == FactorImpact.NEGATIVE else -factor.weight
    score = min(max(score, 0), 100)

    return RiskProfile(level=risk_level(score, t), score=score, contributing_factors=factors)
