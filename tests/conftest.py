from datetime import datetime, timezone

import pytest

from analytics.lot_ledger import CostBasisEngine
from analytics.report import AnalyticsConfig, WalletAnalyzer
from tests.helpers.time_utils import DEFAULT_TIME_GEN


@pytest.fixture(autouse=True)
def _reset_default_time_gen() -> None:
    DEFAULT_TIME_GEN.reset()


@pytest.fixture(scope="function")
def fifo_engine() -> CostBasisEngine:
    return CostBasisEngine(method="FIFO")


@pytest.fixture(scope="function")
def analyzer() -> WalletAnalyzer:
    return WalletAnalyzer(AnalyticsConfig())


@pytest.fixture(scope="function")
def as_of() -> datetime:
    return datetime(2025, 6, 30, tzinfo=timezone.utc)
