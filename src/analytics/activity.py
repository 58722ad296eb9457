from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Sequence

from pydantic import BaseModel, ConfigDict

from .transactions import Transaction

ZERO = Decimal(0)


class ActivityPattern(BaseModel):
    """Transaction-count histograms bucketed in UTC.

    ``day_of_week`` follows ``datetime.weekday()``: Monday is 0, Sunday is 6.
    ``monthly_distribution`` index 0 is January.
    """

    model_config = ConfigDict(frozen=True)

    hour_of_day: list[int]
    day_of_week: list[int]
    monthly_distribution: list[int]
    peak_hour: int
    peak_day: int


class PeriodBucket(BaseModel):
    model_config = ConfigDict(frozen=True)

    period: int
    transaction_count: int
    volume: Decimal


class MonthlyBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    months: list[PeriodBucket]
    best_month: int | None
    total_volume: Decimal
    average_monthly_activity: Decimal


class QuarterlyBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    quarters: list[PeriodBucket]
    best_quarter: int | None
    total_volume: Decimal


def _argmax(values: Sequence[int | Decimal]) -> int:
    # First index wins on ties.
    best_index = 0
    for index, value in enumerate(values):
        if value > values[best_index]:
            best_index = index
    return best_index


def _best_period(buckets: Sequence[PeriodBucket]) -> int | None:
    if not buckets or all(bucket.volume <= 0 for bucket in buckets):
        return None
    return buckets[_argmax([bucket.volume for bucket in buckets])].period


def build_activity_pattern(transactions: Iterable[Transaction]) -> ActivityPattern:
    hours = [0] * 24
    days = [0] * 7
    months = [0] * 12
    for tx in transactions:
        ts = tx.utc_timestamp
        hours[ts.hour] += 1
        days[ts.weekday()] += 1
        months[ts.month - 1] += 1

    return ActivityPattern(
        hour_of_day=hours,
        day_of_week=days,
        monthly_distribution=months,
        peak_hour=_argmax(hours),
        peak_day=_argmax(days),
    )


def _bucketize(
    transactions: Iterable[Transaction],
    *,
    year: int,
    periods: int,
    period_of_month: int,
) -> tuple[list[PeriodBucket], int]:
    counts = [0] * periods
    volumes = [ZERO] * periods
    for tx in transactions:
        ts = tx.utc_timestamp
        if ts.year != year:
            continue
        index = (ts.month - 1) // period_of_month
        counts[index] += 1
        volumes[index] += tx.value

    buckets = [
        PeriodBucket(period=index + 1, transaction_count=counts[index], volume=volumes[index])
        for index in range(periods)
    ]
    return buckets, sum(counts)


def build_monthly_breakdown(transactions: Iterable[Transaction], year: int) -> MonthlyBreakdown:
    """Per-month counts and volume for one calendar year; other years are ignored."""
    months, transaction_count = _bucketize(transactions, year=year, periods=12, period_of_month=1)
    return MonthlyBreakdown(
        year=year,
        months=months,
        best_month=_best_period(months),
        total_volume=sum((bucket.volume for bucket in months), start=ZERO),
        average_monthly_activity=Decimal(transaction_count) / 12,
    )


def build_quarterly_breakdown(transactions: Iterable[Transaction], year: int) -> QuarterlyBreakdown:
    quarters, _ = _bucketize(transactions, year=year, periods=4, period_of_month=3)
    return QuarterlyBreakdown(
        year=year,
        quarters=quarters,
        best_quarter=_best_period(quarters),
        total_volume=sum((bucket.volume for bucket in quarters), start=ZERO),
    )


def build_yearly_breakdown(transactions: Iterable[Transaction]) -> list[PeriodBucket]:
    totals: dict[int, tuple[int, Decimal]] = {}
    for tx in transactions:
        year = tx.utc_timestamp.year
        count, volume = totals.get(year, (0, ZERO))
        totals[year] = (count + 1, volume + tx.value)

    return [
        PeriodBucket(period=year, transaction_count=count, volume=volume)
        for year, (count, volume) in sorted(totals.items())
    ]
