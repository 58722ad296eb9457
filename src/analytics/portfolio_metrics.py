"""Portfolio-level inputs for the risk score and headline figures."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Collection, Iterable, Mapping, Sequence

ZERO = Decimal(0)
HUNDRED = Decimal(100)


@dataclass(frozen=True)
class ProfitAndLoss:
    amount: Decimal
    percentage: Decimal
    is_profit: bool


def compute_allocation(asset_value: Decimal, total_value: Decimal) -> Decimal:
    """Share of ``total_value`` held in one asset, as a percentage."""
    if total_value == 0:
        return ZERO
    return asset_value / total_value * HUNDRED


def compute_concentration(holdings: Mapping[str, Decimal]) -> Decimal:
    """Fraction of the portfolio held in its single largest position (0..1)."""
    positive = [value for value in holdings.values() if value > 0]
    total = sum(positive, start=ZERO)
    if total == 0:
        return ZERO
    return max(positive) / total


def compute_returns(values: Sequence[Decimal]) -> list[Decimal]:
    """Period-over-period returns; periods starting from zero are skipped."""
    return [current / previous - 1 for previous, current in zip(values, values[1:]) if previous != 0]


def compute_volatility(values: Sequence[Decimal]) -> Decimal:
    """Population standard deviation of period returns."""
    returns = compute_returns(values)
    if len(returns) < 2:
        return ZERO
    mean = sum(returns, start=ZERO) / len(returns)
    variance = sum(((r - mean) ** 2 for r in returns), start=ZERO) / len(returns)
    return variance.sqrt()


def compute_new_asset_ratio(held_assets: Iterable[str], established_assets: Collection[str]) -> Decimal:
    """Fraction of held assets that are not in ``established_assets``."""
    held = set(held_assets)
    if not held:
        return ZERO
    new_assets = [asset for asset in held if asset not in established_assets]
    return Decimal(len(new_assets)) / Decimal(len(held))


def compute_pnl(current_value: Decimal, invested_value: Decimal) -> ProfitAndLoss:
    amount = current_value - invested_value
    percentage = ZERO if invested_value == 0 else amount / invested_value * HUNDRED
    return ProfitAndLoss(amount=amount, percentage=percentage, is_profit=amount > 0)
