from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from pydantic import BaseModel, ConfigDict

ZERO = Decimal(0)
ONE = Decimal(1)


class BenchmarkSeries(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    returns: list[Decimal]


class BenchmarkComparison(BaseModel):
    model_config = ConfigDict(frozen=True)

    benchmark: str
    portfolio_return: Decimal
    benchmark_return: Decimal
    alpha: Decimal
    beta: Decimal
    correlation: Decimal


def compound_return(returns: Sequence[Decimal]) -> Decimal:
    total = ONE
    for period_return in returns:
        total *= ONE + period_return
    return total - ONE


def _mean(values: Sequence[Decimal]) -> Decimal:
    return sum(values, start=ZERO) / len(values)


def beta(portfolio_returns: Sequence[Decimal], benchmark_returns: Sequence[Decimal]) -> Decimal:
    """Covariance over benchmark variance; 1 when undefined."""
    if len(portfolio_returns) != len(benchmark_returns) or not portfolio_returns:
        return ONE
    portfolio_mean = _mean(portfolio_returns)
    benchmark_mean = _mean(benchmark_returns)
    covariance = ZERO
    benchmark_variance = ZERO
    for p, b in zip(portfolio_returns, benchmark_returns):
        covariance += (p - portfolio_mean) * (b - benchmark_mean)
        benchmark_variance += (b - benchmark_mean) ** 2
    if benchmark_variance == 0:
        return ONE
    return covariance / benchmark_variance


def correlation(first: Sequence[Decimal], second: Sequence[Decimal]) -> Decimal:
    """Pearson correlation; 0 when undefined."""
    if len(first) != len(second) or not first:
        return ZERO
    first_mean = _mean(first)
    second_mean = _mean(second)
    numerator = ZERO
    first_sq = ZERO
    second_sq = ZERO
    for a, b in zip(first, second):
        da = a - first_mean
        db = b - second_mean
        numerator += da * db
        first_sq += da * da
        second_sq += db * db
    denominator = (first_sq * second_sq).sqrt()
    if denominator == 0:
        return ZERO
    return numerator / denominator


def compare_to_benchmark(portfolio_returns: Sequence[Decimal], benchmark: BenchmarkSeries) -> BenchmarkComparison:
    portfolio_return = compound_return(portfolio_returns)
    benchmark_return = compound_return(benchmark.returns)
    return BenchmarkComparison(
        benchmark=benchmark.name,
        portfolio_return=portfolio_return,
        benchmark_return=benchmark_return,
        alpha=portfolio_return - benchmark_return,
        beta=beta(portfolio_returns, benchmark.returns),
        correlation=correlation(portfolio_returns, benchmark.returns),
    )
