# flake8: noqa E402
# Run via uv for access to dev deps, e.g.:
# uv run scripts/compare_cost_basis_methods.py wallet.json
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure the src directory is importable when the script is invoked via uv/python directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from analytics.lot_ledger import CostBasisMethod, compute_cost_basis
from analytics.report import WalletAnalyticsInput
from analytics.tax import Jurisdiction, estimate_tax
from utils.formatting import format_currency


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compare gains and tax across cost-basis methods.")
    parser.add_argument("input", type=Path, help="Wallet JSON in the format accepted by main.py.")
    parser.add_argument(
        "--jurisdiction",
        default=Jurisdiction.US.value,
        choices=[j.value for j in Jurisdiction],
        help="Rate table used for the tax column (default: US).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    data = WalletAnalyticsInput.model_validate_json(args.input.read_text(encoding="utf-8"))

    rows: list[tuple[str, str, str, str]] = []
    for method in CostBasisMethod:
        result = compute_cost_basis(data.transactions, data.current_prices, method, as_of=data.as_of)
        tax = estimate_tax(result.realized_events, args.jurisdiction)
        rows.append(
            (
                method.value,
                format_currency(result.realized_gain),
                format_currency(result.unrealized_gain),
                format_currency(tax.estimated_tax),
            )
        )

    headers = ("Method", "Realized", "Unrealized", f"Tax {args.jurisdiction}")
    widths = [max(len(headers[idx]), max(len(row[idx]) for row in rows)) for idx in range(len(headers))]
    print(" ".join(f"{header:>{widths[idx]}}" for idx, header in enumerate(headers)))
    for row in rows:
        print(" ".join(f"{cell:>{widths[idx]}}" for idx, cell in enumerate(row)))


if __name__ == "__main__":
    main()
