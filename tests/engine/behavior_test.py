from __future__ import annotations

from decimal import Decimal

import pytest

from analytics.behavior import ClusterThresholds, WalletCluster, classify_wallet


def test_whale_wins_over_every_other_rule() -> None:
    result = classify_wallet(Decimal(2_000_000), 10, Decimal(1), 100, 100)

    assert result.cluster == WalletCluster.WHALE
    assert result.confidence == Decimal("0.9")
    assert result.characteristics


@pytest.mark.parametrize(
    ("total_value", "tx_count", "avg_days", "defi", "nfts", "expected", "confidence"),
    [
        (Decimal(5000), 600, Decimal("1.5"), 80, 30, WalletCluster.TRADER, Decimal("0.85")),
        (Decimal(5000), 600, Decimal(3), 80, 30, WalletCluster.DEFI_USER, Decimal("0.8")),
        (Decimal(5000), 20, Decimal(40), 10, 30, WalletCluster.NFT_COLLECTOR, Decimal("0.75")),
        (Decimal(5000), 20, Decimal(40), 10, 5, WalletCluster.HOLDER, Decimal("0.7")),
        (Decimal(5000), 100, Decimal(10), 10, 5, WalletCluster.CASUAL, Decimal("0.5")),
        (Decimal(1_000_000), 50, Decimal(30), 50, 20, WalletCluster.CASUAL, Decimal("0.5")),
    ],
)
def test_rules_are_evaluated_in_priority_order(
    total_value: Decimal,
    tx_count: int,
    avg_days: Decimal,
    defi: int,
    nfts: int,
    expected: WalletCluster,
    confidence: Decimal,
) -> None:
    result = classify_wallet(total_value, tx_count, avg_days, defi, nfts)

    assert result.cluster == expected
    assert result.confidence == confidence


def test_custom_thresholds() -> None:
    thresholds = ClusterThresholds(whale_min_value=Decimal(10_000))

    result = classify_wallet(Decimal(20_000), 1, Decimal(0), 0, 0, thresholds=thresholds)

    assert result.cluster == WalletCluster.WHALE
