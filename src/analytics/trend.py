from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Sequence

from pydantic import BaseModel, ConfigDict

MIN_HISTORY = 7

ZERO = Decimal(0)
ONE = Decimal(1)


class Trend(StrEnum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class PredictionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    predicted_value: Decimal
    confidence: Decimal
    trend: Trend
    slope: Decimal = ZERO
    intercept: Decimal = ZERO


def _fit_line(values: Sequence[Decimal]) -> tuple[Decimal, Decimal, Decimal]:
    """Ordinary least squares over x = 0..n-1; returns (slope, intercept, r_squared)."""
    n = Decimal(len(values))
    mean_x = (n - 1) / 2
    mean_y = sum(values, start=ZERO) / n

    covariance = ZERO
    variance_x = ZERO
    for index, value in enumerate(values):
        dx = Decimal(index) - mean_x
        covariance += dx * (value - mean_y)
        variance_x += dx * dx

    slope = covariance / variance_x
    intercept = mean_y - slope * mean_x

    ss_total = ZERO
    ss_residual = ZERO
    for index, value in enumerate(values):
        fitted = slope * index + intercept
        ss_residual += (value - fitted) ** 2
        ss_total += (value - mean_y) ** 2

    # A flat series is fitted exactly.
    r_squared = ONE if ss_total == 0 else ONE - ss_residual / ss_total
    return slope, intercept, r_squared


def predict_value(
    history: Sequence[Decimal],
    periods_ahead: int,
    *,
    min_history: int = MIN_HISTORY,
) -> PredictionResult:
    """Project a value series forward with a straight line.

    Histories shorter than ``min_history`` are not fitted; the last value is
    returned with zero confidence. Projections are floored at zero.
    """
    if len(history) < max(min_history, 2):
        return PredictionResult(
            predicted_value=history[-1] if history else ZERO,
            confidence=ZERO,
            trend=Trend.STABLE,
        )

    slope, intercept, r_squared = _fit_line(history)
    predicted = slope * (len(history) + periods_ahead) + intercept
    predicted = max(predicted, ZERO)
    confidence = min(max(r_squared, ZERO), ONE)

    last = history[-1]
    if predicted > last:
        trend = Trend.UP
    elif predicted < last:
        trend = Trend.DOWN
    else:
        trend = Trend.STABLE

    return PredictionResult(
        predicted_value=predicted,
        confidence=confidence,
        trend=trend,
        slope=slope,
        intercept=intercept,
    )
