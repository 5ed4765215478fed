"""CLI entry point for printing a resident's ledger.

Usage:
    python -m src.cli.ledger TENANT_ID
    python -m src.cli.ledger TENANT_ID --rent-only --as-of 2024-03-31
    python -m src.cli.ledger TENANT_ID --refresh

Exit Codes:
    0 - Success: Ledger printed (and balances refreshed when requested)
    1 - Failure: Unknown tenant, bad configuration or database error

Logging:
    Log lines go to stderr and the configured log file; the statement itself
    is printed on stdout.
"""

import argparse
import logging
import sys
from datetime import date

from src.services.config import load_config
from src.services.errors import ConfigError, ResidentNotFoundError
from src.services.ledger_engine import LedgerOptions, LedgerResult
from src.services.locale_service import format_amount, format_balance, format_statement_date
from src.services.logging import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Print a resident's ledger")
    parser.add_argument("tenant_id", type=int, help="Tenant ID")

    scope = parser.add_mutually_exclusive_group()
    scope.add_argument("--rent-only", action="store_true", help="Rent charges and rent payments only")
    scope.add_argument("--water-only", action="store_true", help="Water bills and water payments only")

    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Evaluation date YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Store the resulting due/credit balances on the tenant",
    )
    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> LedgerOptions:
    """Category filter selected on the command line."""
    if args.rent_only:
        return LedgerOptions(include_rent=True, include_service_charge=False, include_water=False)
    if args.water_only:
        return LedgerOptions(include_rent=False, include_service_charge=False, include_water=True)
    return LedgerOptions()


def render_ledger(result: LedgerResult, as_of: date | None = None) -> str:
    """Format a ledger as a plain-text table, newest entry first."""
    lines = [f"Statement as of {format_statement_date(as_of or date.today())}", ""]
    lines.append(f"{'Date':<12}{'Description':<45}{'Charge':>18}{'Payment':>18}{'Balance':>22}")
    for entry in result.newest_first():
        lines.append(
            f"{entry.date.isoformat():<12}"
            f"{entry.description[:44]:<45}"
            f"{format_amount(entry.charge) if entry.charge else '':>18}"
            f"{format_amount(entry.payment) if entry.payment else '':>18}"
            f"{format_balance(entry.balance):>22}"
        )
    lines.append("")
    lines.append(f"Amount due:     {format_amount(result.final_due_balance)}")
    lines.append(f"Account credit: {format_amount(result.final_account_balance)}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the ledger CLI.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    args = parse_args(argv)
    logger = logging.getLogger("estate_ledger")

    try:
        config = load_config()
        logger = setup_logging(config.log_file)
        logger.info("Computing ledger for tenant %d", args.tenant_id)

        from src.services import SessionLocal
        from src.services.ledger_service import LedgerService

        db = SessionLocal()
        try:
            service = LedgerService(db)
            result = service.get_tenant_ledger(args.tenant_id, build_options(args), args.as_of)
            print(render_ledger(result, args.as_of))

            if args.refresh:
                update = service.refresh_cached_balances(args.tenant_id, args.as_of)
                print(f"Payment status: {update.payment_status.value}")
            return 0
        finally:
            db.close()

    except ResidentNotFoundError as e:
        logger.error("%s", e)
        return 1
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 1
    except Exception as e:
        logger.error("Ledger run failed: %s", e, exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
