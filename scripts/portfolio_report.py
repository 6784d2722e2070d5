#!/usr/bin/env python3
"""
Portfolio Report Script

Prints the month-by-month true portfolio ledger and aggregate trade
statistics for a journal stored as JSON collections.
Optionally imports a JSON array of trade records before reporting.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

import pandas as pd
from loguru import logger

from tradejournal.core.constants import DEFAULT_STORAGE_DIRECTORY
from tradejournal.core.enums import AccountingBasis
from tradejournal.core.models.config import JournalConfig
from tradejournal.infrastructure.storage import JsonFileJournalStore
from tradejournal.services.analytics import (
    accounting_basis_display,
    compute_performance_metrics,
    monthly_portfolio_frame,
    round_portfolio_frame,
)
from tradejournal.services.journal_service import JournalService


async def import_trades(service: JournalService, import_file: Path) -> int:
    """Stage an import and wait for the settled recalculation."""
    records = json.loads(import_file.read_text(encoding="utf-8"))
    if not isinstance(records, list):
        raise ValueError(f"{import_file} must contain a JSON array of trade records")

    provisional = await service.bulk_import(records)
    logger.info(f"Provisional trade set published with {len(provisional)} trades")
    settled = await service.wait_until_settled()
    return len(settled)


def build_report(service: JournalService) -> tuple[pd.DataFrame, pd.Series]:
    """Monthly ledger frame and performance metrics for the active basis."""
    ledger_df = monthly_portfolio_frame(service.get_all_monthly_true_portfolios())
    metrics = compute_performance_metrics(service.trades, service.basis).to_dict()
    return ledger_df, pd.Series(metrics, name="value")


def setup_logging(debug: bool = False):
    """Configure logging with loguru."""
    logger.remove()

    level = "DEBUG" if debug else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
    )


def main():
    parser = argparse.ArgumentParser(
        description="Report the true portfolio ledger of a trading journal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python portfolio_report.py
  python portfolio_report.py --basis cash --output reports/ledger.csv
  python portfolio_report.py --import-file exports/trades.json --data-dir data/journal
        """,
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        default=DEFAULT_STORAGE_DIRECTORY,
        help=f"Directory holding the journal collections (default: {DEFAULT_STORAGE_DIRECTORY})",
    )

    parser.add_argument(
        "--basis",
        choices=[basis.value for basis in AccountingBasis],
        default=AccountingBasis.ACCRUAL.value,
        help="Accounting basis for P/L attribution (default: accrual)",
    )

    parser.add_argument(
        "--import-file", type=str, help="JSON array of trade records to import before reporting"
    )

    parser.add_argument("--output", type=str, help="Write the monthly ledger to this CSV file")

    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    setup_logging(args.debug)

    config = JournalConfig(
        default_basis=AccountingBasis(args.basis), storage_directory=Path(args.data_dir)
    )
    store = JsonFileJournalStore(config.storage_directory)
    service: JournalService | None = None

    try:
        service = JournalService.from_store(store, config)

        if args.import_file:
            import_file = Path(args.import_file)
            if not import_file.exists():
                logger.error(f"File not found: {import_file}")
                return 1
            total = asyncio.run(import_trades(service, import_file))
            logger.success(f"Journal now holds {total} settled trades")

        ledger_df, metrics = build_report(service)
        ledger_df = round_portfolio_frame(ledger_df)
        display = accounting_basis_display(service.basis)

        print(f"\n{display['name']} ({display['description']})\n")
        print(ledger_df.to_string(float_format=lambda value: f"{value:,.2f}"))
        print()
        print(metrics.to_string())

        if args.output:
            output_path = Path(args.output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            ledger_df.to_csv(output_path)
            logger.success(f"Wrote {len(ledger_df)} months to {output_path}")

        return 0

    except Exception as e:
        logger.exception(f"Report failed: {e}")
        return 1

    finally:
        if service is not None:
            service.close()


if __name__ == "__main__":
    sys.exit(main())
