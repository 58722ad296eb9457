from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from pydantic import ValidationError

from analytics.errors import InvalidInputError
from analytics.lot_ledger import CostBasisMethod
from analytics.report import WalletAnalyticsInput, WalletAnalyticsReport, WalletAnalyzer
from analytics.tax import Jurisdiction
from config import config
from utils.report_rendering import render_report

logger = logging.getLogger(__name__)


def load_input(path: Path) -> WalletAnalyticsInput:
    try:
        return WalletAnalyticsInput.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as exc:
        raise InvalidInputError.from_validation_error(exc) from exc


def run(input_path: Path, *, method: str | None, jurisdiction: str | None, as_json: bool) -> WalletAnalyticsReport:
    settings = config()
    analytics_config = settings.to_analytics_config()
    overrides: dict[str, object] = {}
    if method is not None:
        overrides["cost_basis_method"] = CostBasisMethod.parse(method)
    if jurisdiction is not None:
        overrides["jurisdiction"] = Jurisdiction.parse(jurisdiction)
    if overrides:
        analytics_config = analytics_config.model_copy(update=overrides)

    logger.info("Loading wallet data from %s", input_path)
    data = load_input(input_path)
    report = WalletAnalyzer(analytics_config).analyze(data)

    if as_json:
        print(report.model_dump_json(indent=2))
    else:
        render_report(report)
    return report


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Compute portfolio analytics for one wallet.")
    parser.add_argument("input", type=Path, help="JSON file with transactions, prices and value history")
    parser.add_argument("--method", choices=[m.value for m in CostBasisMethod], default=None)
    parser.add_argument("--jurisdiction", choices=[j.value for j in Jurisdiction], default=None)
    parser.add_argument("--json", action="store_true", help="Dump the report as JSON instead of tables")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    run(args.input, method=args.method, jurisdiction=args.jurisdiction, as_json=args.json)


if __name__ == "__main__":
    main()
