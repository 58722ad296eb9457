"""Wallet portfolio analytics engine.

Every module in this package is a pure computation over caller-supplied,
in-memory inputs. Models are Pydantic value objects so results can be handed
to presentation or export layers without further conversion.
"""

__all__ = [
    "activity",
    "anomaly",
    "behavior",
    "benchmark",
    "lot_ledger",
    "portfolio_metrics",
    "report",
    "risk",
    "tax",
    "transactions",
    "trend",
]
