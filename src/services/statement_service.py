"""Landlord statement breakdowns for rent payments.

Display path only: nothing here changes a resident's balance. A rent payment is
broken into per-month lines (splitting lump sums and multi-month payments), and
each line is divided into management fee, service-charge deduction and the net
amount remitted to the landlord.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, NamedTuple

from src.models.payment import PaymentType
from src.models.unit import ManagementStatus, UnitStatus
from src.services.config import DEFAULT_MANAGEMENT_FEE_RATE
from src.services.ledger_engine import (
    apportionable_amount,
    find_unit,
    first_settled_payment,
    is_initial_lump_sum,
    is_settled,
    payment_type_of,
    resolve_monthly_rent,
)
from src.services.period_utils import (
    ZERO,
    add_months,
    as_date,
    month_key,
    month_label,
    month_start,
    parse_month,
    to_decimal,
)

logger = logging.getLogger(__name__)

# Fee retained on the first month of a unit let on a client's behalf
INITIAL_LETTING_FEE_RATE = Decimal("0.5")

# Payments above this multiple of monthly rent are spread across months
SPLIT_THRESHOLD = Decimal("1.1")

# Split remainders at or below this amount are rounding noise, not a partial month
REMAINDER_TOLERANCE = Decimal("1")

# Flat monthly running cost charged to a landlord's statement, once per month
OTHER_COSTS_PER_MONTH = Decimal("1000")

# Month in which the monthly running cost is waived
OTHER_COSTS_WAIVED_MONTH = 1

# Fit-out costs recovered once per unit on its first statement month
STAGE_TWO_COST = Decimal("10000")
STAGE_THREE_COSTS = {
    "Studio": Decimal("8000"),
    "One Bedroom": Decimal("12000"),
}


class TransactionBreakdown(NamedTuple):
    """How one statement line divides between fees and the landlord."""

    gross: Decimal
    service_charge_deduction: Decimal
    management_fee: Decimal
    net_to_landlord: Decimal
    other_costs: Decimal = ZERO
    special_deductions: Decimal = ZERO


class StatementChunk(NamedTuple):
    """One month's share of a (possibly split) payment."""

    id: str
    amount: Decimal
    for_month: date | None
    for_month_display: str
    is_partial: bool = False


class DisplayTransaction(NamedTuple):
    """A landlord statement line."""

    id: str
    payment_id: int
    date: date
    tenant_id: int
    unit_name: str | None
    unit_type: str
    rent_for_month: str | None
    for_month_display: str
    gross: Decimal
    service_charge_deduction: Decimal
    management_fee: Decimal
    net_to_landlord: Decimal
    other_costs: Decimal
    special_deductions: Decimal


class FinancialSummary(NamedTuple):
    """Portfolio totals over paid rent."""

    total_revenue: Decimal
    total_management_fees: Decimal
    total_service_charges: Decimal
    total_net_remittance: Decimal
    transaction_count: int
    vacant_unit_service_charge_deduction: Decimal


def owner_id_of(unit) -> int | None:
    """Owner id of ``unit``, read from the relationship when the key is not yet set."""
    if unit.owner_id is not None:
        return unit.owner_id
    return unit.owner.id if unit.owner is not None else None


def stage_costs(landlord, unit) -> Decimal:
    """Fit-out costs recovered from ``landlord`` for ``unit`` (zero when not flagged)."""
    total = ZERO
    if landlord.deduct_stage_two_cost:
        total += STAGE_TWO_COST
    if landlord.deduct_stage_three_cost and unit is not None:
        total += STAGE_THREE_COSTS.get(unit.unit_type, ZERO)
    return total


class StatementService:
    """Break rent payments down into landlord statement lines."""

    def __init__(self, management_fee_rate: Decimal = DEFAULT_MANAGEMENT_FEE_RATE):
        """Initialize with the standard management fee rate (e.g. 0.05 for 5%)."""
        self.management_fee_rate = Decimal(str(management_fee_rate))

    def calculate_transaction_breakdown(
        self,
        amount: Decimal,
        unit,
        tenant,
        for_month: date | None = None,
        other_costs: Decimal = ZERO,
        special_deductions: Decimal = ZERO,
    ) -> TransactionBreakdown:
        """Split a rent amount into fee, service-charge deduction and net to landlord.

        The fee is charged on the unit's standard rent, not on the amount paid, so a
        partial or discounted payment still carries the full monthly fee.

        For a unit let on a client's behalf, the first month of the lease is an initial
        letting: the fee rises to 50% and the service charge is waived.

        Args:
            amount: Amount paid for this line
            unit: Unit the rent is for (None falls back to lease terms)
            tenant: Paying tenant
            for_month: Month the amount settles
            other_costs: Monthly running cost carried by this line
            special_deductions: Fit-out costs recovered on this line

        Returns:
            TransactionBreakdown for the line
        """
        gross = to_decimal(amount)
        standard_rent = resolve_monthly_rent(tenant, unit)
        service_charge = to_decimal(unit.service_charge) if unit is not None else ZERO
        fee_rate = self.management_fee_rate

        lease_start = as_date(tenant.lease_start_date)
        is_initial_letting = (
            unit is not None
            and unit.management_status == ManagementStatus.RENTED_FOR_CLIENTS
            and for_month is not None
            and lease_start is not None
            and month_start(for_month) == month_start(lease_start)
        )
        if is_initial_letting:
            fee_rate = INITIAL_LETTING_FEE_RATE
            service_charge = ZERO

        management_fee = standard_rent * fee_rate
        other_costs = to_decimal(other_costs)
        special_deductions = to_decimal(special_deductions)
        return TransactionBreakdown(
            gross=gross,
            service_charge_deduction=service_charge,
            management_fee=management_fee,
            net_to_landlord=gross - service_charge - management_fee - other_costs - special_deductions,
            other_costs=other_costs,
            special_deductions=special_deductions,
        )

    def split_payment(
        self,
        payment_id,
        amount: Decimal,
        monthly_amount: Decimal,
        anchor_month: date | None,
    ) -> list[StatementChunk]:
        """Spread a payment over consecutive months starting at ``anchor_month``.

        Amounts up to 1.1x the monthly amount stay as a single line. Larger amounts
        become full-month chunks plus one partial chunk for any remainder above 1.

        Example:
            55,000 against 25,000 rent anchored at Jan 2024 gives
            25,000 (Jan 2024), 25,000 (Feb 2024), 5,000 (Partial - Mar 2024).
        """
        amount = to_decimal(amount)
        monthly_amount = to_decimal(monthly_amount)

        if anchor_month is None or monthly_amount <= 0 or amount <= monthly_amount * SPLIT_THRESHOLD:
            return [
                StatementChunk(
                    id=str(payment_id),
                    amount=amount,
                    for_month=anchor_month,
                    for_month_display=month_label(anchor_month) if anchor_month else "N/A",
                )
            ]

        chunks = []
        remaining = amount
        index = 0
        while remaining >= monthly_amount:
            month = add_months(anchor_month, index)
            chunks.append(
                StatementChunk(
                    id=f"{payment_id}-{index}",
                    amount=monthly_amount,
                    for_month=month,
                    for_month_display=month_label(month),
                )
            )
            remaining -= monthly_amount
            index += 1

        if remaining > REMAINDER_TOLERANCE:
            month = add_months(anchor_month, index)
            chunks.append(
                StatementChunk(
                    id=f"{payment_id}-rem",
                    amount=remaining,
                    for_month=month,
                    for_month_display=f"Partial - {month_label(month)}",
                    is_partial=True,
                )
            )
        return chunks

    def generate_landlord_display_transactions(
        self,
        payments: Iterable,
        tenants: Iterable,
        properties: Iterable,
        landlord=None,
    ) -> list[DisplayTransaction]:
        """Statement lines for every paid rent payment, oldest first.

        A tenant's first payment that qualifies as an initial lump sum has the
        deposits removed before it is spread across months.

        Each statement month carries the monthly running cost once per landlord,
        on that landlord's first line for the month, except in January. With a
        ``landlord``, only lines for units that landlord holds are produced, and the
        stage costs the landlord is flagged for are recovered on each unit's first line.

        Args:
            payments: Payments of all residents
            tenants: Residents the payments belong to
            properties: Properties with their units
            landlord: Owner to build the statement for (None: every unit)

        Returns:
            DisplayTransaction lines in payment order
        """
        tenants_by_id = {t.id: t for t in tenants}
        properties = list(properties)
        payments = sorted(
            (p for p in payments if is_settled(p) and as_date(p.payment_date)),
            key=lambda p: as_date(p.payment_date),
        )

        first_payment_ids = {}
        for tenant_id in tenants_by_id:
            first = first_settled_payment(p for p in payments if p.tenant_id == tenant_id)
            if first is not None:
                first_payment_ids[tenant_id] = first.id

        costed_months: set[tuple] = set()
        deducted_units: set[tuple] = set()
        transactions = []
        for payment in payments:
            tenant = tenants_by_id.get(payment.tenant_id)
            if tenant is None or payment_type_of(payment) != PaymentType.RENT:
                continue

            unit = find_unit(properties, tenant)
            if landlord is not None and (unit is None or owner_id_of(unit) != landlord.id):
                continue
            unit_rent = resolve_monthly_rent(tenant, unit)
            amount = to_decimal(payment.amount)

            is_first = first_payment_ids.get(tenant.id) == payment.id
            if is_initial_lump_sum(payment, unit_rent, is_first):
                amount = apportionable_amount(amount, tenant)
            if amount <= 0:
                continue

            lease_start = as_date(tenant.lease_start_date)
            anchor = (
                parse_month(payment.rent_for_month)
                or (month_start(lease_start) if lease_start else None)
                or month_start(as_date(payment.payment_date))
            )

            for chunk in self.split_payment(payment.id, amount, unit_rent, anchor):
                statement_month = chunk.for_month or month_start(as_date(payment.payment_date))
                cost_key = (owner_id_of(unit) if unit is not None else None, statement_month)
                other_costs = ZERO
                if cost_key not in costed_months:
                    costed_months.add(cost_key)
                    if statement_month.month != OTHER_COSTS_WAIVED_MONTH:
                        other_costs = OTHER_COSTS_PER_MONTH

                special_deductions = ZERO
                unit_key = (tenant.property_id, tenant.unit_name)
                if landlord is not None and unit_key not in deducted_units:
                    deducted_units.add(unit_key)
                    special_deductions = stage_costs(landlord, unit)

                breakdown = self.calculate_transaction_breakdown(
                    chunk.amount, unit, tenant, chunk.for_month, other_costs, special_deductions
                )
                transactions.append(
                    DisplayTransaction(
                        id=chunk.id,
                        payment_id=payment.id,
                        date=as_date(payment.payment_date),
                        tenant_id=tenant.id,
                        unit_name=tenant.unit_name,
                        unit_type=(unit.unit_type if unit is not None else None) or "N/A",
                        rent_for_month=month_key(chunk.for_month) if chunk.for_month else None,
                        for_month_display=chunk.for_month_display,
                        **breakdown._asdict(),
                    )
                )

        logger.debug("Built %d landlord statement lines from %d payments", len(transactions), len(payments))
        return transactions

    def aggregate_financials(
        self,
        payments: Iterable,
        tenants: Iterable,
        properties: Iterable,
    ) -> FinancialSummary:
        """Totals over paid rent payments, less service charge owed on vacant handed-over units."""
        tenants_by_id = {t.id: t for t in tenants}
        properties = list(properties)

        revenue = fees = service_charges = net = ZERO
        count = 0
        for payment in payments:
            if not is_settled(payment) or payment_type_of(payment) != PaymentType.RENT:
                continue
            count += 1
            tenant = tenants_by_id.get(payment.tenant_id)
            if tenant is None:
                continue

            unit = find_unit(properties, tenant)
            breakdown = self.calculate_transaction_breakdown(
                payment.amount, unit, tenant, parse_month(payment.rent_for_month)
            )
            revenue += breakdown.gross
            fees += breakdown.management_fee
            service_charges += breakdown.service_charge_deduction
            net += breakdown.net_to_landlord

        vacant_deduction = sum(
            (
                to_decimal(unit.service_charge)
                for prop in properties
                for unit in prop.units or []
                if unit.status == UnitStatus.VACANT and unit.is_handed_over()
            ),
            ZERO,
        )

        return FinancialSummary(
            total_revenue=revenue,
            total_management_fees=fees,
            total_service_charges=service_charges,
            total_net_remittance=net - vacant_deduction,
            transaction_count=count,
            vacant_unit_service_charge_deduction=vacant_deduction,
        )


__all__ = [
    "INITIAL_LETTING_FEE_RATE",
    "OTHER_COSTS_PER_MONTH",
    "SPLIT_THRESHOLD",
    "STAGE_THREE_COSTS",
    "STAGE_TWO_COST",
    "StatementService",
    "StatementChunk",
    "TransactionBreakdown",
    "DisplayTransaction",
    "FinancialSummary",
    "owner_id_of",
    "stage_costs",
]
