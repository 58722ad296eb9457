"""Short/long-term bucketing of realized gains and a flat-rate tax estimate.

The result is an estimate, not a filing-grade computation: loss
carryforward, deduction limits and wash-sale rules are not modelled.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from types import MappingProxyType
from typing import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from .errors import InvalidConfigurationError
from .lot_ledger import GainKind, RealizedGainEvent

SHORT_TERM_THRESHOLD_DAYS = 365

ZERO = Decimal(0)


class Jurisdiction(StrEnum):
    US = "US"
    UK = "UK"
    EU = "EU"

    @classmethod
    def parse(cls, value: Jurisdiction | str) -> Jurisdiction:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise InvalidConfigurationError(
                f"Unknown jurisdiction {value!r}; expected one of {', '.join(cls)}",
                option="jurisdiction",
                value=value,
            ) from None


class TaxRates(BaseModel):
    model_config = ConfigDict(frozen=True)

    short_term: Decimal = Field(ge=0, le=1)
    long_term: Decimal = Field(ge=0, le=1)
    income: Decimal = Field(ge=0, le=1)


DEFAULT_TAX_RATES: Mapping[Jurisdiction, TaxRates] = MappingProxyType(
    {
        Jurisdiction.US: TaxRates(short_term=Decimal("0.24"), long_term=Decimal("0.15"), income=Decimal("0.24")),
        Jurisdiction.UK: TaxRates(short_term=Decimal("0.20"), long_term=Decimal("0.20"), income=Decimal("0.20")),
        # Disposals held for a year or more are tax free.
        Jurisdiction.EU: TaxRates(short_term=Decimal("0.26"), long_term=Decimal("0"), income=Decimal("0.26")),
    }
)


class TaxReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    jurisdiction: Jurisdiction
    short_term_gains: Decimal
    long_term_gains: Decimal
    taxable_income: Decimal
    estimated_tax: Decimal


def estimate_tax(
    events: Iterable[RealizedGainEvent],
    jurisdiction: Jurisdiction | str,
    *,
    rates: Mapping[Jurisdiction, TaxRates] | None = None,
    short_term_threshold_days: int = SHORT_TERM_THRESHOLD_DAYS,
) -> TaxReport:
    """Bucket gains by holding period and apply the jurisdiction's flat rates.

    Losses reduce their bucket, but every bucket is floored at zero before the
    rate is applied, so the estimate is never negative.
    """
    resolved = Jurisdiction.parse(jurisdiction)
    rate_table = rates if rates is not None else DEFAULT_TAX_RATES
    jurisdiction_rates = rate_table.get(resolved)
    if jurisdiction_rates is None:
        raise InvalidConfigurationError(
            f"No tax rates configured for jurisdiction {resolved}",
            option="rates",
            value=resolved,
        )

    short_term = ZERO
    long_term = ZERO
    income = ZERO
    for event in events:
        if event.kind == GainKind.INCOME:
            income += event.gain
        elif event.holding_period_days < short_term_threshold_days:
            short_term += event.gain
        else:
            long_term += event.gain

    estimated = (
        max(short_term, ZERO) * jurisdiction_rates.short_term
        + max(long_term, ZERO) * jurisdiction_rates.long_term
        + max(income, ZERO) * jurisdiction_rates.income
    )

    return TaxReport(
        jurisdiction=resolved,
        short_term_gains=short_term,
        long_term_gains=long_term,
        taxable_income=income,
        estimated_tax=estimated,
    )
