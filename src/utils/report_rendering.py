from __future__ import annotations

import calendar
from typing import Sequence

from analytics.activity import PeriodBucket
from analytics.report import WalletAnalyticsReport

from .formatting import format_currency, format_decimal, format_percent


def _table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> list[str]:
    widths = [max(len(header), max((len(row[idx]) for row in rows), default=0)) for idx, header in enumerate(headers)]
    header = " ".join(
        f"{label:<{widths[idx]}}" if idx == 0 else f"{label:>{widths[idx]}}" for idx, label in enumerate(headers)
    )
    lines = [header, "-" * len(header)]
    for row in rows:
        lines.append(
            " ".join(f"{cell:<{widths[idx]}}" if idx == 0 else f"{cell:>{widths[idx]}}" for idx, cell in enumerate(row))
        )
    return lines


def render_cost_basis(report: WalletAnalyticsReport) -> str:
    result = report.cost_basis
    lines = [f"Cost basis ({result.method}):"]
    lines.extend(
        _table(
            ["Metric", "Value"],
            [
                ("Total cost", format_currency(result.total_cost)),
                ("Total proceeds", format_currency(result.total_proceeds)),
                ("Realized gain", format_currency(result.realized_gain)),
                ("Unrealized gain", format_currency(result.unrealized_gain)),
            ],
        )
    )
    if result.open_lots:
        lines.append("Open lots:")
        lines.extend(
            _table(
                ["Asset", "Amount", "Unit cost", "Held days"],
                [
                    (
                        lot.asset_id,
                        format_decimal(lot.amount),
                        format_currency(lot.unit_cost),
                        str(lot.holding_period_days),
                    )
                    for lot in result.open_lots
                ],
            )
        )
    for unmatched in result.unmatched_disposals:
        lines.append(
            f"  ! unmatched sell of {format_decimal(unmatched.amount)} {unmatched.asset_id} "
            f"@{unmatched.disposed_at.isoformat()}"
        )
    return "\n".join(lines)


def render_tax(report: WalletAnalyticsReport) -> str:
    tax = report.tax
    lines = [f"Estimated tax ({tax.jurisdiction}):"]
    lines.extend(
        _table(
            ["Bucket", "Amount"],
            [
                ("Short-term gains", format_currency(tax.short_term_gains)),
                ("Long-term gains", format_currency(tax.long_term_gains)),
                ("Taxable income", format_currency(tax.taxable_income)),
                ("Estimated tax", format_currency(tax.estimated_tax)),
            ],
        )
    )
    return "\n".join(lines)


def render_periods(title: str, buckets: Sequence[PeriodBucket], *, label: str) -> str:
    def period_name(bucket: PeriodBucket) -> str:
        if label == "Month":
            return calendar.month_abbr[bucket.period]
        if label == "Quarter":
            return f"Q{bucket.period}"
        return str(bucket.period)

    lines = [f"{title}:"]
    if not buckets:
        lines.append("  (no activity)")
        return "\n".join(lines)
    lines.extend(
        _table(
            [label, "Transactions", "Volume"],
            [
                (period_name(bucket), str(bucket.transaction_count), format_currency(bucket.volume))
                for bucket in buckets
            ],
        )
    )
    return "\n".join(lines)


def render_signals(report: WalletAnalyticsReport) -> str:
    activity = report.activity
    lines = [
        f"Risk: {report.risk.level} ({report.risk.score}/100)",
    ]
    for factor in report.risk.contributing_factors:
        sign = "+" if factor.impact == "negative" else "-"
        lines.append(f"  {sign}{factor.weight} {factor.name}")
    confidence = format_percent(report.cluster.confidence, ratio=True)
    lines.append(f"Cluster: {report.cluster.cluster} (confidence {confidence})")
    for characteristic in report.cluster.characteristics:
        lines.append(f"  - {characteristic}")
    lines.append(
        f"Activity peak: {activity.peak_hour:02d}:00 UTC on {calendar.day_name[activity.peak_day]}"
    )
    prediction = report.prediction
    lines.append(
        f"Projection: {format_currency(prediction.predicted_value)} trend={prediction.trend} "
        f"confidence={format_percent(prediction.confidence, ratio=True)}"
    )
    if report.benchmark is not None:
        comparison = report.benchmark
        lines.append(
            f"Versus {comparison.benchmark}: alpha={format_percent(comparison.alpha, ratio=True)} "
            f"beta={comparison.beta:.2f} correlation={comparison.correlation:.2f}"
        )
    lines.append(f"Anomalies: {len(report.anomalies)}")
    for anomaly in report.anomalies:
        lines.append(f"  [{anomaly.severity}] {anomaly.kind} @{anomaly.timestamp.isoformat()}: {anomaly.description}")
    return "\n".join(lines)


def render_report(report: WalletAnalyticsReport) -> None:
    sections = [
        f"Wallet {report.wallet_address} as of {report.as_of.isoformat()}",
        f"Portfolio value: {format_currency(report.total_value)} "
        f"(unrealized {format_percent(report.unrealized_pnl_percentage)})",
        render_cost_basis(report),
        render_tax(report),
        render_periods(f"Monthly activity {report.monthly.year}", report.monthly.months, label="Month"),
        render_periods(f"Quarterly activity {report.quarterly.year}", report.quarterly.quarters, label="Quarter"),
        render_periods("Yearly activity", report.yearly, label="Year"),
        render_signals(report),
    ]
    print("\n\n".join(sections))
