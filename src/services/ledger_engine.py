"""Ledger computation for resident accounts.

Derives a continuous monthly billing schedule from the lease (or handover) start
through the evaluation month, merges it with recorded payments and water-meter
readings, and walks the result in date order to produce running balances.

Balance convention: positive = owed by the resident, negative = credit.

The computation is pure: it reads only its arguments, never touches the database,
and returns fresh objects, so it is safe to run concurrently for different residents.
Missing optional inputs are treated permissively (absent lists are empty, absent
amounts are zero).
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, NamedTuple

from src.models.payment import PaymentStatus, PaymentType
from src.models.tenant import ResidentType
from src.services.period_utils import (
    ZERO,
    as_date,
    first_billable_month,
    iter_months,
    month_key,
    month_label,
    month_start,
    parse_month,
    to_decimal,
)

logger = logging.getLogger(__name__)

# A resident's first rent payment above this multiple of monthly rent is treated as
# an initial lump sum that also covers the security and water deposits.
LUMP_SUM_THRESHOLD = Decimal("1.5")

PAYMENT_DESCRIPTIONS = {
    PaymentType.RENT: "Payment Received - Rent",
    PaymentType.SERVICE_CHARGE: "Payment Received - Service Charge",
    PaymentType.WATER: "Payment Received - Water",
    PaymentType.OTHER: "Payment Received",
}


@dataclass(frozen=True)
class LedgerOptions:
    """Which charge categories take part in a ledger run (all by default)."""

    include_rent: bool = True
    include_service_charge: bool = True
    include_water: bool = True

    def includes(self, payment_type: PaymentType) -> bool:
        """Whether payments of ``payment_type`` belong to this ledger."""
        if payment_type == PaymentType.ADJUSTMENT:
            return True
        if payment_type == PaymentType.DEPOSIT:
            return False
        if payment_type == PaymentType.SERVICE_CHARGE:
            return self.include_service_charge
        if payment_type == PaymentType.WATER:
            return self.include_water
        # Rent and Other payments settle the rent account
        return self.include_rent


class LedgerEntry(NamedTuple):
    """One charge, payment or adjustment row with the balance after applying it."""

    id: str
    date: date
    description: str
    charge: Decimal
    payment: Decimal
    balance: Decimal
    for_month: str | None = None
    prior_reading: Decimal | None = None
    current_reading: Decimal | None = None
    consumption: Decimal | None = None
    rate: Decimal | None = None


class LedgerResult(NamedTuple):
    """Ledger entries in date order plus the due/credit split of the final balance."""

    ledger: list[LedgerEntry]
    final_due_balance: Decimal
    final_account_balance: Decimal

    def newest_first(self) -> list[LedgerEntry]:
        """Entries in reverse date order, for display."""
        return list(reversed(self.ledger))


def find_unit(properties: Iterable | None, tenant):
    """Locate the tenant's unit among ``properties`` (None when not found)."""
    for prop in properties or []:
        if prop.id != tenant.property_id:
            continue
        unit = prop.get_unit(tenant.unit_name)
        if unit is not None:
            return unit
    return None


def billing_owner(tenant, unit):
    """Owner whose units a homeowner is billed service charge for (None for tenants)."""
    if tenant.resident_type != ResidentType.HOMEOWNER or unit is None:
        return None
    return unit.owner


def resolve_monthly_rent(tenant, unit=None) -> Decimal:
    """Monthly rent: unit override, else lease rent, else zero."""
    if unit is not None and unit.rent_amount:
        return to_decimal(unit.rent_amount)
    return to_decimal(tenant.rent)


def resolve_monthly_service_charge(tenant, unit=None) -> Decimal:
    """Monthly service charge: unit override, else lease service charge, else zero."""
    if unit is not None and unit.service_charge:
        return to_decimal(unit.service_charge)
    return to_decimal(tenant.service_charge)


def total_deposits(tenant) -> Decimal:
    """Security deposit plus water deposit recorded for the tenant."""
    return to_decimal(tenant.security_deposit) + to_decimal(tenant.water_deposit)


def payment_type_of(payment) -> PaymentType:
    """Payment category, defaulting to Rent when unset and Other when unknown."""
    value = payment.payment_type
    if value is None:
        return PaymentType.RENT
    try:
        return PaymentType(value)
    except ValueError:
        return PaymentType.OTHER


def is_settled(payment) -> bool:
    """Failed and pending payments never reach the ledger."""
    status = payment.status
    if status is None:
        return True
    try:
        return PaymentStatus(status) == PaymentStatus.PAID
    except ValueError:
        return False


def first_settled_payment(payments: Iterable | None):
    """Chronologically first settled payment (any category), or None."""
    dated = [p for p in payments or [] if is_settled(p) and as_date(p.payment_date)]
    if not dated:
        return None
    return min(dated, key=lambda p: as_date(p.payment_date))


def is_initial_lump_sum(payment, monthly_rent: Decimal, is_first_payment: bool) -> bool:
    """Whether ``payment`` is an initial lump sum that includes the deposits."""
    return (
        is_first_payment
        and payment_type_of(payment) == PaymentType.RENT
        and monthly_rent > 0
        and to_decimal(payment.amount) > monthly_rent * LUMP_SUM_THRESHOLD
    )


def apportionable_amount(amount: Decimal, tenant) -> Decimal:
    """Part of a lump sum left for rent once deposits are taken out (never negative)."""
    deposits = total_deposits(tenant)
    if amount >= deposits:
        return amount - deposits
    return ZERO


class LedgerEngine:
    """Compute resident ledgers from lease terms, payments and meter readings."""

    def generate_ledger(
        self,
        tenant,
        payments: Iterable | None = None,
        properties: Iterable | None = None,
        water_readings: Iterable | None = None,
        owner=None,
        as_of: date | None = None,
        options: LedgerOptions | None = None,
    ) -> LedgerResult:
        """Build the ledger for one resident.

        Args:
            tenant: Resident with lease terms (Tenant model or equivalent)
            payments: Resident's payments in any order
            properties: Properties with units, used for unit-level amount overrides
            water_readings: Resident's water-meter readings
            owner: Owner whose units are billed service charge together (homeowners)
            as_of: Evaluation date; recurring charges run through its month (default: today)
            options: Category filter (default: all categories)

        Returns:
            LedgerResult with entries in date order and the final due/credit split
        """
        options = options or LedgerOptions()
        as_of = as_of or date.today()
        properties = list(properties or [])
        unit = find_unit(properties, tenant)

        # (entry, kind): 0 for charges and debit adjustments, 1 for payments and credit notes
        ranked: list[tuple[LedgerEntry, int]] = []
        if options.include_rent:
            ranked.extend((entry, 0) for entry in self._rent_charges(tenant, unit, as_of))
        if options.include_service_charge:
            ranked.extend((entry, 0) for entry in self._service_charges(tenant, unit, owner, as_of))
        ranked.extend(
            (entry, 0 if entry.charge > 0 else 1) for entry in self._payment_entries(tenant, unit, payments, options)
        )
        if options.include_water:
            ranked.extend((entry, 0) for entry in self._water_entries(water_readings, tenant.water_rate))

        # Stable sort on kind, not amount: a zero payment still sorts after same-date charges
        ranked.sort(key=lambda item: (item[0].date, item[1]))

        balance = ZERO
        ledger = []
        for entry, _ in ranked:
            balance += entry.charge - entry.payment
            ledger.append(entry._replace(balance=balance))

        result = LedgerResult(
            ledger=ledger,
            final_due_balance=max(balance, ZERO),
            final_account_balance=max(-balance, ZERO),
        )
        logger.debug(
            "Generated ledger for tenant %s: entries=%d, due=%s, credit=%s",
            tenant.id,
            len(ledger),
            result.final_due_balance,
            result.final_account_balance,
        )
        return result

    def _rent_charges(self, tenant, unit, as_of: date) -> list[LedgerEntry]:
        monthly_rent = resolve_monthly_rent(tenant, unit)
        start = as_date(tenant.lease_start_date)
        if monthly_rent <= 0 or start is None:
            return []

        unit_name = unit.name if unit is not None else tenant.unit_name
        description = f"Rent for Units {unit_name}" if unit_name else "Rent"
        return [
            LedgerEntry(
                id=f"rent-{month_key(month)}",
                date=month,
                description=description,
                charge=monthly_rent,
                payment=ZERO,
                balance=ZERO,
                for_month=month_label(month),
            )
            for month in iter_months(start, as_of)
        ]

    def _service_charges(self, tenant, unit, owner, as_of: date) -> list[LedgerEntry]:
        lease_start = as_date(tenant.lease_start_date)
        is_homeowner = tenant.resident_type == ResidentType.HOMEOWNER

        # (unit name, monthly amount, first billed month) per billable unit
        schedule = []
        owner_units = list(owner.units or []) if owner is not None else []
        if owner_units:
            for owned in owner_units:
                if unit is not None and owned is unit:
                    amount = resolve_monthly_service_charge(tenant, owned)
                else:
                    amount = to_decimal(owned.service_charge)
                schedule.append((owned.name, amount, self._billing_start(lease_start, owned, is_homeowner)))
        else:
            amount = resolve_monthly_service_charge(tenant, unit)
            name = unit.name if unit is not None else tenant.unit_name
            schedule.append((name, amount, self._billing_start(lease_start, unit, is_homeowner)))

        schedule = [item for item in schedule if item[1] > 0 and item[2] is not None]
        if not schedule:
            return []

        entries = []
        for month in iter_months(min(start for _, _, start in schedule), as_of):
            billed = [(name, amount) for name, amount, start in schedule if start <= month]
            total = sum((amount for _, amount in billed), ZERO)
            if total <= 0:
                continue
            names = ", ".join(name for name, _ in billed if name)
            entries.append(
                LedgerEntry(
                    id=f"sc-{month_key(month)}",
                    date=month,
                    description=f"S.Charge for Units {names}" if names else "Service Charge",
                    charge=total,
                    payment=ZERO,
                    balance=ZERO,
                    for_month=month_label(month),
                )
            )
        return entries

    @staticmethod
    def _billing_start(lease_start: date | None, unit, is_homeowner: bool) -> date | None:
        """First month service charge is billed for ``unit``.

        Homeowners are billed from the later of the lease start and the first
        billable month after handover.
        """
        start = month_start(lease_start) if lease_start else None
        handover = as_date(unit.handover_date) if unit is not None else None
        if is_homeowner and handover is not None:
            billable = first_billable_month(handover)
            if start is None or billable > start:
                start = billable
        return start

    def _payment_entries(self, tenant, unit, payments, options: LedgerOptions) -> list[LedgerEntry]:
        payments = list(payments or [])
        first_payment = first_settled_payment(payments)
        monthly_rent = resolve_monthly_rent(tenant, unit)

        entries = []
        for payment in payments:
            paid_on = as_date(payment.payment_date)
            if not is_settled(payment):
                continue
            if paid_on is None:
                logger.warning("Skipping payment %s without a date", payment.id)
                continue

            payment_type = payment_type_of(payment)
            if not options.includes(payment_type):
                continue

            amount = to_decimal(payment.amount)
            for_month = parse_month(payment.rent_for_month)
            label = month_label(for_month) if for_month else None

            if payment_type == PaymentType.ADJUSTMENT:
                entries.append(
                    LedgerEntry(
                        id=str(payment.id),
                        date=paid_on,
                        description=self._adjustment_description(payment, amount),
                        charge=amount if amount > 0 else ZERO,
                        payment=-amount if amount < 0 else ZERO,
                        balance=ZERO,
                        for_month=label,
                    )
                )
                continue

            description = PAYMENT_DESCRIPTIONS[payment_type]
            if is_initial_lump_sum(payment, monthly_rent, payment is first_payment):
                apportioned = apportionable_amount(amount, tenant)
                logger.info(
                    "Initial lump sum %s for tenant %s: %s applied to rent after deposits",
                    amount,
                    tenant.id,
                    apportioned,
                )
                amount = apportioned
                description = f"{description} (deposits deducted)"

            entries.append(
                LedgerEntry(
                    id=str(payment.id),
                    date=paid_on,
                    description=description,
                    charge=ZERO,
                    payment=amount,
                    balance=ZERO,
                    for_month=label,
                )
            )
        return entries

    @staticmethod
    def _adjustment_description(payment, amount: Decimal) -> str:
        kind = "Debit Adjustment" if amount > 0 else "Credit Note"
        if payment.notes:
            return f"{kind}: {payment.notes}"
        return kind

    def _water_entries(self, water_readings, default_rate=None) -> list[LedgerEntry]:
        entries = []
        for reading in water_readings or []:
            read_on = as_date(reading.reading_date)
            if read_on is None:
                logger.warning("Skipping water reading %s without a date", reading.id)
                continue
            billed_month = parse_month(reading.for_month) or month_start(read_on)
            entries.append(
                LedgerEntry(
                    id=f"water-{reading.id}",
                    date=read_on,
                    description="Water Bill",
                    charge=reading.billed_amount(default_rate),
                    payment=ZERO,
                    balance=ZERO,
                    for_month=month_label(billed_month),
                    prior_reading=to_decimal(reading.prior_reading),
                    current_reading=to_decimal(reading.current_reading),
                    consumption=reading.billed_consumption(),
                    rate=reading.billed_rate(default_rate),
                )
            )
        return entries


__all__ = [
    "LUMP_SUM_THRESHOLD",
    "LedgerEngine",
    "LedgerEntry",
    "LedgerOptions",
    "LedgerResult",
    "apportionable_amount",
    "billing_owner",
    "find_unit",
    "first_settled_payment",
    "is_initial_lump_sum",
    "is_settled",
    "payment_type_of",
    "resolve_monthly_rent",
    "resolve_monthly_service_charge",
    "total_deposits",
]
