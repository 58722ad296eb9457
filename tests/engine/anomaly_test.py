from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from analytics.anomaly import AnomalyKind, AnomalyThresholds, Severity, detect_anomalies
from tests.constants import ETH, PEPE
from tests.helpers.time_utils import buy, sell

T0 = datetime(2024, 5, 1, 12, tzinfo=timezone.utc)
AVG = Decimal(100)


def test_two_quick_large_transactions_flag_timing_only() -> None:
    transactions = [
        buy(ETH, 1, 100, timestamp=T0),
        sell(ETH, 1, 300, timestamp=T0 + timedelta(minutes=2)),
    ]

    anomalies = detect_anomalies(transactions, AVG, {ETH})

    assert len(anomalies) == 1
    anomaly = anomalies[0]
    assert anomaly.kind == AnomalyKind.TIMING
    assert anomaly.severity == Severity.MEDIUM
    assert anomaly.timestamp == T0 + timedelta(minutes=2)
    assert anomaly.details["minutes_since_previous"] == Decimal(2)


def test_volume_severity_depends_on_multiple() -> None:
    transactions = [
        buy(ETH, 1, 1500, timestamp=T0),
        buy(ETH, 1, 6000, timestamp=T0 + timedelta(hours=1)),
        buy(ETH, 1, 1000, timestamp=T0 + timedelta(hours=2)),
    ]

    anomalies = detect_anomalies(transactions, AVG, {ETH})

    assert [(a.kind, a.severity) for a in anomalies] == [
        (AnomalyKind.VOLUME, Severity.MEDIUM),
        (AnomalyKind.VOLUME, Severity.HIGH),
    ]
    assert anomalies[0].description == "Transaction 15.0x larger than average"


def test_single_transaction_can_carry_several_anomalies() -> None:
    transactions = [
        buy(ETH, 1, 100, timestamp=T0),
        buy(PEPE, 1, 2000, timestamp=T0 + timedelta(minutes=1)),
    ]

    anomalies = detect_anomalies(transactions, AVG, {ETH})

    assert {a.kind for a in anomalies} == {AnomalyKind.VOLUME, AnomalyKind.TIMING, AnomalyKind.UNFAMILIAR_ASSET}
    assert all(a.timestamp == T0 + timedelta(minutes=1) for a in anomalies)


def test_unfamiliar_asset_traded_against_known_counterpart_is_low_severity() -> None:
    transactions = [buy(PEPE, 1, 1, timestamp=T0, counterpart_asset=ETH)]

    anomalies = detect_anomalies(transactions, AVG, {ETH})

    assert len(anomalies) == 1
    assert anomalies[0].kind == AnomalyKind.UNFAMILIAR_ASSET
    assert anomalies[0].severity == Severity.LOW
    assert anomalies[0].details == {"asset": PEPE, "counterpart_asset": ETH}


def test_unknown_counterpart_of_known_asset_is_not_flagged() -> None:
    transactions = [buy(ETH, 1, 1, timestamp=T0, counterpart_asset="0xdeadbeef")]

    assert detect_anomalies(transactions, AVG, {ETH}) == []


def test_transactions_outside_window_are_not_clustered() -> None:
    transactions = [
        buy(ETH, 1, 500, timestamp=T0),
        buy(ETH, 1, 500, timestamp=T0 + timedelta(minutes=5)),
    ]

    assert detect_anomalies(transactions, AVG, {ETH}) == []


def test_custom_thresholds() -> None:
    thresholds = AnomalyThresholds(volume_multiplier=Decimal(3), timing_window=timedelta(minutes=10))
    transactions = [
        buy(ETH, 1, 100, timestamp=T0),
        buy(ETH, 1, 400, timestamp=T0 + timedelta(minutes=8)),
    ]

    anomalies = detect_anomalies(transactions, AVG, {ETH}, thresholds=thresholds)

    assert [a.kind for a in anomalies] == [AnomalyKind.VOLUME, AnomalyKind.TIMING]


def test_zero_average_flags_any_positive_value() -> None:
    anomalies = detect_anomalies([buy(ETH, 1, 1, timestamp=T0)], Decimal(0), {ETH})

    assert len(anomalies) == 1
    assert anomalies[0].severity == Severity.HIGH
    assert anomalies[0].description == "Transaction n/ax larger than average"
