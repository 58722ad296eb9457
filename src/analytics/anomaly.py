from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from enum import StrEnum
from typing import Any, Collection, Iterable

from pydantic import BaseModel, ConfigDict

from .transactions import Transaction


class AnomalyKind(StrEnum):
    VOLUME = "volume"
    TIMING = "timing"
    UNFAMILIAR_ASSET = "unfamiliar-asset"


class Severity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AnomalyRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: AnomalyKind
    severity: Severity
    description: str
    timestamp: datetime
    details: dict[str, Any]


class AnomalyThresholds(BaseModel):
    model_config = ConfigDict(frozen=True)

    volume_multiplier: Decimal = Decimal(10)
    high_volume_multiplier: Decimal = Decimal(50)
    timing_window: timedelta = timedelta(minutes=5)
    timing_value_multiplier: Decimal = Decimal(2)


def _ratio(value: Decimal, average: Decimal) -> str:
    if average <= 0:
        return "n/a"
    return f"{value / average:.1f}"


def detect_anomalies(
    transactions: Iterable[Transaction],
    avg_transaction_value: Decimal,
    known_assets: Collection[str],
    *,
    thresholds: AnomalyThresholds | None = None,
) -> list[AnomalyRecord]:
    """Flag unusual volume, bursts of large transactions and unfamiliar assets.

    Each check runs independently, so one transaction may yield several records.
    The timing check compares each transaction with the one before it in the
    supplied sequence.
    """
    t = thresholds or AnomalyThresholds()
    anomalies: list[AnomalyRecord] = []
    previous: Transaction | None = None

    for tx in transactions:
        value = tx.value
        timestamp = tx.utc_timestamp

        if value > avg_transaction_value * t.volume_multiplier:
            severity = Severity.HIGH if value > avg_transaction_value * t.high_volume_multiplier else Severity.MEDIUM
            anomalies.append(
                AnomalyRecord(
                    kind=AnomalyKind.VOLUME,
                    severity=severity,
                    description=f"Transaction {_ratio(value, avg_transaction_value)}x larger than average",
                    timestamp=timestamp,
                    details={"value": value, "avg_value": avg_transaction_value},
                )
            )

        if previous is not None:
            gap = abs(timestamp - previous.utc_timestamp)
            if gap < t.timing_window and value > avg_transaction_value * t.timing_value_multiplier:
                minutes = Decimal(gap.total_seconds()) / 60
                anomalies.append(
                    AnomalyRecord(
                        kind=AnomalyKind.TIMING,
                        severity=Severity.MEDIUM,
                        description=f"Multiple large transactions within {minutes:.1f} minutes",
                        timestamp=timestamp,
                        details={"minutes_since_previous": minutes, "value": value},
                    )
                )

        if tx.asset_id not in known_assets:
            details: dict[str, Any] = {"asset": tx.asset_id}
            if tx.counterpart_asset is not None:
                details["counterpart_asset"] = tx.counterpart_asset
            anomalies.append(
                AnomalyRecord(
                    kind=AnomalyKind.UNFAMILIAR_ASSET,
                    severity=Severity.LOW,
                    description="Transaction with unfamiliar asset",
                    timestamp=timestamp,
                    details=details,
                )
            )

        previous = tx

    return anomalies
