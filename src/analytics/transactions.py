from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import StrEnum
from typing import Any, Iterable, NewType

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import InvalidInputError

AssetId = NewType("AssetId", str)


class TransactionType(StrEnum):
    BUY = "buy"
    SELL = "sell"
    TRANSFER = "transfer"
    # Airdrops, staking rewards and similar receipts taxed as income.
    INCOME = "income"


class Transaction(BaseModel):
    """A single observed transfer or trade.

    ``amount`` is always non-negative; the direction is carried by ``tx_type``.
    Naive timestamps are interpreted as UTC.
    """

    model_config = ConfigDict(frozen=True)

    tx_type: TransactionType
    asset_id: AssetId
    amount: Decimal = Field(ge=0)
    unit_price: Decimal = Field(ge=0)
    timestamp: datetime
    counterpart_asset: str | None = None

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise InvalidInputError.from_validation_error(exc) from exc

    @model_validator(mode="after")
    def _validate_fields(self) -> Transaction:
        if not self.asset_id:
            raise ValueError("asset_id must be non-empty")
        return self

    @property
    def value(self) -> Decimal:
        return self.amount * self.unit_price

    @property
    def utc_timestamp(self) -> datetime:
        return as_utc(self.timestamp)


def as_utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


def ensure_chronological(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Materialize ``transactions`` and check per-asset timestamps never go backwards.

    Also rejects negative amounts or prices, which ``model_construct`` lets through.
    Transactions of different assets may interleave freely. The input is not
    re-sorted; ordering is the caller's responsibility.
    """
    ordered = list(transactions)
    last_seen: dict[str, datetime] = {}
    for index, tx in enumerate(ordered):
        if tx.amount < 0 or tx.unit_price < 0:
            raise InvalidInputError(
                f"Negative amount or price for asset={tx.asset_id} at index={index}",
                asset_id=tx.asset_id,
                transaction=tx,
                index=index,
            )
        ts = tx.utc_timestamp
        previous = last_seen.get(tx.asset_id)
        if previous is not None and ts < previous:
            raise InvalidInputError(
                f"Transaction out of order for asset={tx.asset_id} at index={index}: "
                f"{ts.isoformat()} precedes {previous.isoformat()}",
                asset_id=tx.asset_id,
                transaction=tx,
                index=index,
            )
        last_seen[tx.asset_id] = ts
    return ordered
