"""Ordered decision list assigning one behavioural cluster to a wallet.

Rules are checked in priority order and the first match wins. This is a
heuristic labeller, not a statistical classifier.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class WalletCluster(StrEnum):
    WHALE = "whale"
    TRADER = "trader"
    HOLDER = "holder"
    DEFI_USER = "defi-user"
    NFT_COLLECTOR = "nft-collector"
    CASUAL = "casual"


class ClusterResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    cluster: WalletCluster
    confidence: Decimal
    characteristics: list[str]


class ClusterThresholds(BaseModel):
    model_config = ConfigDict(frozen=True)

    whale_min_value: Decimal = Decimal(1_000_000)
    trader_min_transactions: int = 500
    trader_max_days_between: Decimal = Decimal(2)
    defi_min_interactions: int = 50
    nft_min_count: int = 20
    holder_max_transactions: int = 50
    holder_min_days_between: Decimal = Decimal(30)


def classify_wallet(
    total_value: Decimal,
    tx_count: int,
    avg_days_between_tx: Decimal,
    defi_interactions: int,
    nft_count: int,
    *,
    thresholds: ClusterThresholds | None = None,
) -> ClusterResult:
    t = thresholds or ClusterThresholds()

    if total_value > t.whale_min_value:
        return ClusterResult(
            cluster=WalletCluster.WHALE,
            confidence=Decimal("0.9"),
            characteristics=[
                f"Portfolio value {total_value} exceeds {t.whale_min_value}",
                "Large holdings can move markets",
            ],
        )

    if tx_count > t.trader_min_transactions and avg_days_between_tx < t.trader_max_days_between:
        return ClusterResult(
            cluster=WalletCluster.TRADER,
            confidence=Decimal("0.85"),
            characteristics=[
                f"{tx_count} transactions",
                f"Trades every {avg_days_between_tx} days on average",
            ],
        )

    if defi_interactions > t.defi_min_interactions:
        return ClusterResult(
            cluster=WalletCluster.DEFI_USER,
            confidence=Decimal("0.8"),
            characteristics=[f"{defi_interactions} DeFi protocol interactions"],
        )

    if nft_count > t.nft_min_count:
        return ClusterResult(
            cluster=WalletCluster.NFT_COLLECTOR,
            confidence=Decimal("0.75"),
            characteristics=[f"Holds {nft_count} NFTs"],
        )

    if tx_count < t.holder_max_transactions and avg_days_between_tx > t.holder_min_days_between:
        return ClusterResult(
            cluster=WalletCluster.HOLDER,
            confidence=Decimal("0.7"),
            characteristics=[
                f"Only {tx_count} transactions",
                f"Transacts every {avg_days_between_tx} days on average",
            ],
        )

    return ClusterResult(
        cluster=WalletCluster.CASUAL,
        confidence=Decimal("0.5"),
        characteristics=["No dominant activity pattern"],
    )
