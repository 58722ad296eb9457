from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from analytics.errors import InvalidConfigurationError
from analytics.lot_ledger import GainKind, RealizedGainEvent, compute_cost_basis
from analytics.tax import DEFAULT_TAX_RATES, Jurisdiction, TaxRates, estimate_tax
from analytics.transactions import TransactionType
from tests.constants import BTC
from tests.helpers.time_utils import buy, make_tx, sell

T0 = datetime(2023, 1, 1, 12, tzinfo=timezone.utc)


def _event(gain: str, *, days: int, kind: GainKind = GainKind.TRADE) -> RealizedGainEvent:
    gain_value = Decimal(gain)
    proceeds = max(gain_value, Decimal(0)) + Decimal(100)
    return RealizedGainEvent(
        asset_id="ETH",
        kind=kind,
        amount_disposed=Decimal(1),
        cost_basis=proceeds - gain_value,
        proceeds=proceeds,
        gain=gain_value,
        acquired_at=T0,
        disposed_at=T0 + timedelta(days=days),
        holding_period_days=days,
    )


def test_gains_are_bucketed_by_holding_period() -> None:
    events = [
        _event("1000", days=30),
        _event("500", days=364),
        _event("2000", days=365),
        _event("-200", days=800),
    ]

    report = estimate_tax(events, Jurisdiction.US)

    assert report.jurisdiction == Jurisdiction.US
    assert report.short_term_gains == Decimal(1500)
    assert report.long_term_gains == Decimal(1800)
    assert report.taxable_income == Decimal(0)
    assert report.estimated_tax == Decimal(1500) * Decimal("0.24") + Decimal(1800) * Decimal("0.15")


def test_income_events_are_taxed_as_income() -> None:
    events = [_event("250", days=0, kind=GainKind.INCOME)]

    report = estimate_tax(events, "uk")

    assert report.jurisdiction == Jurisdiction.UK
    assert report.taxable_income == Decimal(250)
    assert report.short_term_gains == Decimal(0)
    assert report.estimated_tax == Decimal(50)


def test_losses_never_drive_tax_negative() -> None:
    events = [
        _event("-1000", days=10),
        _event("-500", days=400),
        _event("300", days=20),
    ]

    report = estimate_tax(events, Jurisdiction.EU)

    assert report.short_term_gains == Decimal(-700)
    assert report.long_term_gains == Decimal(-500)
    assert report.estimated_tax == Decimal(0)


def test_loss_in_one_bucket_does_not_offset_another() -> None:
    events = [
        _event("-1000", days=10),
        _event("1000", days=400),
    ]

    report = estimate_tax(events, Jurisdiction.UK)

    assert report.estimated_tax == Decimal(200)


def test_eu_long_term_disposals_are_tax_free() -> None:
    transactions = [
        buy(BTC, "0.6", 10000, timestamp=T0),
        buy(BTC, "0.4", 30000, timestamp=datetime(2024, 12, 1, tzinfo=timezone.utc)),
        sell(BTC, "0.7", 40000, timestamp=datetime(2025, 1, 10, tzinfo=timezone.utc)),
    ]
    cost_basis = compute_cost_basis(transactions, Decimal(40000), "FIFO")

    report = estimate_tax(cost_basis.realized_events, Jurisdiction.EU)

    assert report.long_term_gains == Decimal("0.6") * Decimal(30000)
    assert report.short_term_gains == Decimal("0.1") * Decimal(10000)
    assert report.estimated_tax == Decimal(1000) * Decimal("0.26")


def test_income_from_ledger_flows_into_taxable_income() -> None:
    transactions = [make_tx(TransactionType.INCOME, "ATOM", "2.5", 8, timestamp=T0)]
    cost_basis = compute_cost_basis(transactions, Decimal(8), "FIFO")

    report = estimate_tax(cost_basis.realized_events, Jurisdiction.US)

    assert report.taxable_income == Decimal(20)
    assert report.estimated_tax == Decimal(20) * Decimal("0.24")


def test_custom_threshold_and_rates() -> None:
    events = [_event("1000", days=200)]
    rates = {Jurisdiction.US: TaxRates(short_term=Decimal("0.5"), long_term=Decimal("0.1"), income=Decimal(0))}

    report = estimate_tax(events, Jurisdiction.US, rates=rates, short_term_threshold_days=180)

    assert report.long_term_gains == Decimal(1000)
    assert report.estimated_tax == Decimal(100)


def test_unknown_jurisdiction_is_rejected() -> None:
    with pytest.raises(InvalidConfigurationError) as exc_info:
        estimate_tax([], "JP")

    assert exc_info.value.option == "jurisdiction"


def test_missing_rate_table_entry_is_rejected() -> None:
    rates = {Jurisdiction.US: DEFAULT_TAX_RATES[Jurisdiction.US]}

    with pytest.raises(InvalidConfigurationError):
        estimate_tax([], Jurisdiction.EU, rates=rates)
