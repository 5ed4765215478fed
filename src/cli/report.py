"""CLI entry point for landlord statements, service-charge reports and arrears.

Usage:
    python -m src.cli.report statement OWNER_ID [--month 2024-03]
    python -m src.cli.report summary
    python -m src.cli.report service-charges [--month 2024-03]
    python -m src.cli.report arrears [--owner OWNER_ID] [--as-of 2024-03-31]

Exit Codes:
    0 - Success: Report printed
    1 - Failure: Unknown owner, bad configuration or database error

Management fees use MANAGEMENT_FEE_RATE from the configuration.
"""

import argparse
import logging
import sys
from datetime import date

from src.services.config import load_config
from src.services.errors import ConfigError, OwnerNotFoundError
from src.services.locale_service import format_amount
from src.services.logging import setup_logging
from src.services.period_utils import month_label, parse_month


def month_arg(value: str) -> date:
    """argparse type for YYYY-MM months."""
    month = parse_month(value)
    if month is None:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM, got {value!r}")
    return month


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Print landlord and portfolio reports")
    commands = parser.add_subparsers(dest="command", required=True)

    statement = commands.add_parser("statement", help="Landlord statement")
    statement.add_argument("owner_id", type=int, help="Owner ID")
    statement.add_argument("--month", type=month_arg, default=None, help="Only lines for YYYY-MM")

    commands.add_parser("summary", help="Portfolio totals over paid rent")

    service_charges = commands.add_parser("service-charges", help="Service-charge accounts for a month")
    service_charges.add_argument("--month", type=month_arg, default=None, help="Month YYYY-MM (default: this month)")

    arrears = commands.add_parser("arrears", help="Residents in arrears, or one landlord's breakdown")
    arrears.add_argument("--owner", type=int, default=None, help="Owner ID for a landlord breakdown")
    arrears.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Evaluation date YYYY-MM-DD (default: today)",
    )
    return parser.parse_args(argv)


def render_statement(statement) -> str:
    """Landlord statement as a plain-text table."""
    lines = [f"Statement for {statement.owner.name}", ""]
    lines.append(
        f"{'Unit':<8}{'Month':<22}{'Gross':>16}{'S.Charge':>14}{'Mgmt fee':>14}"
        f"{'Other':>12}{'Special':>14}{'Net':>16}"
    )
    for line in statement.lines:
        lines.append(
            f"{(line.unit_name or '')[:7]:<8}"
            f"{line.for_month_display[:21]:<22}"
            f"{format_amount(line.gross, include_symbol=False):>16}"
            f"{format_amount(line.service_charge_deduction, include_symbol=False):>14}"
            f"{format_amount(line.management_fee, include_symbol=False):>14}"
            f"{format_amount(line.other_costs, include_symbol=False):>12}"
            f"{format_amount(line.special_deductions, include_symbol=False):>14}"
            f"{format_amount(line.net_to_landlord, include_symbol=False):>16}"
        )
    lines.append("")
    lines.append(f"Total gross:      {format_amount(statement.total_gross)}")
    lines.append(f"Total deductions: {format_amount(statement.total_deductions)}")
    lines.append(f"Net to landlord:  {format_amount(statement.total_net)}")
    return "\n".join(lines)


def render_summary(summary) -> str:
    return "\n".join(
        [
            f"Rent payments:           {summary.transaction_count}",
            f"Total revenue:           {format_amount(summary.total_revenue)}",
            f"Management fees:         {format_amount(summary.total_management_fees)}",
            f"Service charges:         {format_amount(summary.total_service_charges)}",
            f"Vacant unit S.Charge:    {format_amount(summary.vacant_unit_service_charge_deduction)}",
            f"Net remittance:          {format_amount(summary.total_net_remittance)}",
        ]
    )


def render_service_charges(report, selected_month: date) -> str:
    """Service-charge accounts followed by vacant-unit arrears per owner."""
    lines = [f"Service charges for {month_label(selected_month)}", ""]
    for title, accounts in (
        ("Client occupied", report.client_occupied_accounts),
        ("Managed vacant", report.managed_vacant_accounts),
    ):
        lines.append(f"{title}:")
        for account in accounts:
            lines.append(
                f"  {account.property_name} {account.unit_name:<8}{account.owner_name:<30}"
                f"{format_amount(account.unit_service_charge):>16}  {account.payment_status}"
            )
        lines.append("")

    lines.append("Vacant units in arrears:")
    for owner in report.vacant_arrears:
        lines.append(f"  {owner.owner_name}: {format_amount(owner.total_due)}")
        for unit in owner.units:
            lines.append(f"    {unit.unit_name}: {unit.months_in_arrears} months, {format_amount(unit.total_due)}")
    return "\n".join(lines)


def render_tenant_arrears(in_arrears) -> str:
    if not in_arrears:
        return "No residents in arrears"
    lines = [f"{'Tenant':<8}{'Name':<30}{'Unit':<10}{'Arrears':>18}"]
    for item in in_arrears:
        lines.append(
            f"{item.tenant.id:<8}{item.tenant.name[:29]:<30}{(item.tenant.unit_name or '')[:9]:<10}"
            f"{format_amount(item.arrears):>18}"
        )
    return "\n".join(lines)


def render_landlord_arrears(summary) -> str:
    lines = [f"Arrears for {summary.owner_name}", ""]
    for line in summary.breakdown:
        occupant = line.tenant.name if line.tenant is not None else "Vacant"
        amount = line.tenant_arrears if line.tenant is not None else line.vacant_service_charge
        lines.append(f"  {line.property_name} {line.unit.name:<8}{occupant:<30}{format_amount(amount):>16}")
    lines.append("")
    lines.append(f"Tenant arrears:        {format_amount(summary.total_tenant_arrears)}")
    lines.append(f"Vacant unit S.Charge:  {format_amount(summary.vacant_unit_service_charge)}")
    lines.append(f"Total deductions:      {format_amount(summary.total_deductions)}")
    return "\n".join(lines)


def run_command(service, args: argparse.Namespace) -> str:
    """Build the requested report and return it as text."""
    if args.command == "statement":
        return render_statement(service.landlord_statement(args.owner_id, args.month))
    if args.command == "summary":
        return render_summary(service.portfolio_summary())
    if args.command == "service-charges":
        selected_month = args.month or date.today()
        return render_service_charges(service.service_charge_report(selected_month), selected_month)
    if args.owner is not None:
        return render_landlord_arrears(service.landlord_arrears(args.owner, args.as_of))
    return render_tenant_arrears(service.tenants_in_arrears(args.as_of))


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the report CLI.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    args = parse_args(argv)
    logger = logging.getLogger("estate_ledger")

    try:
        config = load_config()
        logger = setup_logging(config.log_file)
        logger.info("Running %s report", args.command)

        from src.services import SessionLocal
        from src.services.report_service import ReportService

        db = SessionLocal()
        try:
            service = ReportService(db, config.management_fee_rate)
            print(run_command(service, args))
            return 0
        finally:
            db.close()

    except OwnerNotFoundError as e:
        logger.error("%s", e)
        return 1
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 1
    except Exception as e:
        logger.error("Report failed: %s", e, exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
