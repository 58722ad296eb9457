from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, localcontext
from enum import StrEnum
from typing import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, model_validator

from .errors import InvalidConfigurationError, InvalidInputError
from .transactions import Transaction, TransactionType, as_utc, ensure_chronological

logger = logging.getLogger(__name__)

ZERO = Decimal(0)
# Enough significant digits for 18-decimal token amounts with large integer parts.
LEDGER_PRECISION = 60


class CostBasisMethod(StrEnum):
    FIFO = "FIFO"
    LIFO = "LIFO"
    HIFO = "HIFO"
    AVERAGE = "AVERAGE"

    @classmethod
    def parse(cls, value: CostBasisMethod | str) -> CostBasisMethod:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise InvalidConfigurationError(
                f"Unknown cost-basis method {value!r}; expected one of {', '.join(cls)}",
                option="method",
                value=value,
            ) from None


class OversellPolicy(StrEnum):
    """What to do when a sell exceeds the open lot amount of its asset."""

    CLAMP = "clamp"
    REJECT = "reject"


class GainKind(StrEnum):
    TRADE = "trade"
    INCOME = "income"


class RealizedGainEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    asset_id: str
    kind: GainKind = GainKind.TRADE
    amount_disposed: Decimal
    cost_basis: Decimal
    proceeds: Decimal
    gain: Decimal
    acquired_at: datetime
    disposed_at: datetime
    holding_period_days: int

    @model_validator(mode="after")
    def _validate(self) -> RealizedGainEvent:
        if self.amount_disposed < 0:
            raise ValueError("amount_disposed must be >= 0")
        if self.gain != self.proceeds - self.cost_basis:
            raise ValueError("gain must equal proceeds - cost_basis")
        if self.holding_period_days < 0:
            raise ValueError("holding_period_days must be >= 0")
        return self


class OpenLotSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    asset_id: str
    amount: Decimal
    unit_cost: Decimal
    acquired_at: datetime
    holding_period_days: int


class UnmatchedDisposal(BaseModel):
    model_config = ConfigDict(frozen=True)

    asset_id: str
    amount: Decimal
    unit_price: Decimal
    disposed_at: datetime


class CostBasisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: CostBasisMethod
    total_cost: Decimal
    total_proceeds: Decimal
    realized_gain: Decimal
    unrealized_gain: Decimal
    realized_events: list[RealizedGainEvent]
    open_lots: list[OpenLotSnapshot]
    unmatched_disposals: list[UnmatchedDisposal]


@dataclass
class _OpenLotState:
    asset_id: str
    amount: Decimal
    unit_cost: Decimal
    acquired_at: datetime


def holding_period_days(acquired_at: datetime, disposed_at: datetime) -> int:
    return max((disposed_at - acquired_at).days, 0)


class CostBasisEngine:
    """Match disposals against acquisition lots under a single cost-basis method.

    Lots live only for the duration of one ``process`` call, so an engine
    instance can be shared between wallets and threads.
    """

    def __init__(
        self,
        *,
        method: CostBasisMethod | str = CostBasisMethod.FIFO,
        oversell_policy: OversellPolicy = OversellPolicy.CLAMP,
    ) -> None:
        self._method = CostBasisMethod.parse(method)
        self._oversell_policy = oversell_policy

    @property
    def method(self) -> CostBasisMethod:
        return self._method

    def process(
        self,
        transactions: Iterable[Transaction],
        current_price: Decimal | Mapping[str, Decimal],
        *,
        as_of: datetime | None = None,
    ) -> CostBasisResult:
        """Caller must provide transactions in chronological order per asset."""
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, LEDGER_PRECISION)
            return self._process(transactions, current_price, as_of)

    def _process(
        self,
        transactions: Iterable[Transaction],
        current_price: Decimal | Mapping[str, Decimal],
        as_of: datetime | None,
    ) -> CostBasisResult:
        ordered = ensure_chronological(transactions)

        inventory: dict[str, list[_OpenLotState]] = {}
        events: list[RealizedGainEvent] = []
        unmatched: list[UnmatchedDisposal] = []
        total_cost = ZERO
        total_proceeds = ZERO

        for tx in ordered:
            timestamp = tx.utc_timestamp

            if tx.tx_type == TransactionType.TRANSFER:
                continue

            if tx.tx_type in (TransactionType.BUY, TransactionType.INCOME):
                if tx.tx_type == TransactionType.BUY:
                    total_cost += tx.value
                else:
                    events.append(
                        RealizedGainEvent(
                            asset_id=tx.asset_id,
                            kind=GainKind.INCOME,
                            amount_disposed=tx.amount,
                            cost_basis=ZERO,
                            proceeds=tx.value,
                            gain=tx.value,
                            acquired_at=timestamp,
                            disposed_at=timestamp,
                            holding_period_days=0,
                        )
                    )
                if tx.amount > 0:
                    self._add_lot(
                        inventory.setdefault(tx.asset_id, []),
                        _OpenLotState(
                            asset_id=tx.asset_id,
                            amount=tx.amount,
                            unit_cost=tx.unit_price,
                            acquired_at=timestamp,
                        ),
                    )
                continue

            total_proceeds += tx.value
            open_lots = inventory.setdefault(tx.asset_id, [])
            remaining = tx.amount
            for lot_state, take_amount in self._match_lots(open_lots, tx.amount):
                cost_basis = take_amount * lot_state.unit_cost
                proceeds = take_amount * tx.unit_price
                events.append(
                    RealizedGainEvent(
                        asset_id=tx.asset_id,
                        amount_disposed=take_amount,
                        cost_basis=cost_basis,
                        proceeds=proceeds,
                        gain=proceeds - cost_basis,
                        acquired_at=lot_state.acquired_at,
                        disposed_at=timestamp,
                        holding_period_days=holding_period_days(lot_state.acquired_at, timestamp),
                    )
                )
                remaining -= take_amount
            # Zero-amount lots never stay in the active set.
            open_lots[:] = [state for state in open_lots if state.amount > 0]

            if remaining > 0:
                unmatched.append(self._oversold(tx, remaining))

        if as_of is None:
            as_of = max((tx.utc_timestamp for tx in ordered), default=None)
        else:
            as_of = as_utc(as_of)

        open_snapshots: list[OpenLotSnapshot] = []
        unrealized_gain = ZERO
        for asset_id, states in inventory.items():
            if not states:
                continue
            price = self._resolve_current_price(current_price, asset_id)
            for state in states:
                unrealized_gain += state.amount * price - state.amount * state.unit_cost
                open_snapshots.append(
                    OpenLotSnapshot(
                        asset_id=asset_id,
                        amount=state.amount,
                        unit_cost=state.unit_cost,
                        acquired_at=state.acquired_at,
                        holding_period_days=holding_period_days(state.acquired_at, as_of) if as_of else 0,
                    )
                )

        open_snapshots.sort(key=lambda snap: (snap.asset_id, snap.acquired_at))
        realized_gain = sum((event.gain for event in events if event.kind == GainKind.TRADE), start=ZERO)

        return CostBasisResult(
            method=self._method,
            total_cost=total_cost,
            total_proceeds=total_proceeds,
            realized_gain=realized_gain,
            unrealized_gain=unrealized_gain,
            realized_events=events,
            open_lots=open_snapshots,
            unmatched_disposals=unmatched,
        )

    def _add_lot(self, open_lots: list[_OpenLotState], state: _OpenLotState) -> None:
        if self._method != CostBasisMethod.AVERAGE or not open_lots:
            open_lots.append(state)
            return

        pool = open_lots[0]
        new_amount = pool.amount + state.amount
        pool.unit_cost = (pool.amount * pool.unit_cost + state.amount * state.unit_cost) / new_amount
        # The pool's acquisition time drifts towards newer buys in proportion to their weight.
        offset_seconds = Decimal((state.acquired_at - pool.acquired_at).total_seconds()) * state.amount / new_amount
        pool.acquired_at += timedelta(seconds=float(offset_seconds))
        pool.amount = new_amount

    def _disposal_order(self, open_lots: list[_OpenLotState]) -> list[_OpenLotState]:
        if self._method == CostBasisMethod.LIFO:
            return list(reversed(open_lots))
        if self._method == CostBasisMethod.HIFO:
            # Stable sort keeps the oldest lot first among equal costs.
            return sorted(open_lots, key=lambda state: state.unit_cost, reverse=True)
        return list(open_lots)

    def _match_lots(
        self,
        open_lots: list[_OpenLotState],
        amount_needed: Decimal,
    ) -> Iterable[tuple[_OpenLotState, Decimal]]:
        remaining = amount_needed
        for lot_state in self._disposal_order(open_lots):
            if remaining <= 0:
                break
            take_amount = min(remaining, lot_state.amount)
            lot_state.amount -= take_amount
            remaining -= take_amount
            yield lot_state, take_amount

    def _oversold(self, tx: Transaction, remaining: Decimal) -> UnmatchedDisposal:
        if self._oversell_policy == OversellPolicy.REJECT:
            raise InvalidInputError(
                f"Not enough open lots for asset={tx.asset_id} sell={tx.amount} "
                f"@{tx.utc_timestamp.isoformat()} unmatched={remaining}",
                asset_id=tx.asset_id,
                transaction=tx,
            )
        logger.warning(
            "Sell of %s %s at %s exceeds open lots; %s left unmatched",
            tx.amount,
            tx.asset_id,
            tx.utc_timestamp.isoformat(),
            remaining,
        )
        return UnmatchedDisposal(
            asset_id=tx.asset_id,
            amount=remaining,
            unit_price=tx.unit_price,
            disposed_at=tx.utc_timestamp,
        )

    @staticmethod
    def _resolve_current_price(current_price: Decimal | Mapping[str, Decimal], asset_id: str) -> Decimal:
        if isinstance(current_price, Mapping):
            price = current_price.get(asset_id)
            if price is None:
                raise InvalidInputError(f"No current price for asset={asset_id}", asset_id=asset_id)
            return price
        return current_price


def compute_cost_basis(
    transactions: Iterable[Transaction],
    current_price: Decimal | Mapping[str, Decimal],
    method: CostBasisMethod | str = CostBasisMethod.FIFO,
    *,
    as_of: datetime | None = None,
    oversell_policy: OversellPolicy = OversellPolicy.CLAMP,
) -> CostBasisResult:
    engine = CostBasisEngine(method=method, oversell_policy=oversell_policy)
    return engine.process(transactions, current_price, as_of=as_of)
