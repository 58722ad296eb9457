from __future__ import annotations

from decimal import Decimal

import pytest

from analytics.trend import Trend, predict_value


def _series(*values: int | str) -> list[Decimal]:
    return [Decimal(value) for value in values]


@pytest.mark.parametrize("history", [[], _series(5), _series(1, 2, 3, 4, 5, 6)])
def test_short_history_is_not_fitted(history: list[Decimal]) -> None:
    result = predict_value(history, 3)

    assert result.confidence == Decimal(0)
    assert result.trend == Trend.STABLE
    assert result.predicted_value == (history[-1] if history else Decimal(0))


def test_perfect_line_projects_with_full_confidence() -> None:
    history = _series(1, 2, 3, 4, 5, 6, 7)

    result = predict_value(history, 1)

    assert result.slope == Decimal(1)
    assert result.intercept == Decimal(1)
    assert result.predicted_value == Decimal(9)
    assert result.confidence == Decimal(1)
    assert result.trend == Trend.UP


def test_declining_series_is_clamped_at_zero() -> None:
    history = _series(70, 60, 50, 40, 30, 20, 10)

    result = predict_value(history, 5)

    assert result.predicted_value == Decimal(0)
    assert result.trend == Trend.DOWN


def test_flat_series_is_stable() -> None:
    history = _series(*([100] * 10))

    result = predict_value(history, 4)

    assert result.predicted_value == Decimal(100)
    assert result.trend == Trend.STABLE
    assert result.confidence == Decimal(1)


def test_noisy_series_has_partial_confidence() -> None:
    history = _series(10, 14, 9, 15, 11, 17, 12, 18)

    result = predict_value(history, 2)

    assert Decimal(0) < result.confidence < Decimal(1)
    assert result.slope > 0
    assert result.trend == Trend.UP


def test_prediction_is_repeatable() -> None:
    history = _series(10, 14, 9, 15, 11, 17, 12, 18)

    assert predict_value(history, 2) == predict_value(history, 2)
