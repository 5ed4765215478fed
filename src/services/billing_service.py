"""Billing-cycle helpers operating on a tenant's cached balances.

These functions update the ``due_balance`` / ``account_balance`` cache between
ledger refreshes (e.g. right after a payment is captured). They return the new
values instead of mutating the tenant; the caller decides whether to persist them.
The ledger (LedgerEngine) stays the authority: LedgerService.refresh_cached_balances
overwrites whatever these helpers produced.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import NamedTuple

from src.models.tenant import LeasePaymentStatus
from src.services.period_utils import ZERO, as_date, month_start, to_decimal

logger = logging.getLogger(__name__)

# Rent falls due on this day of the month; unpaid balances become overdue after it
RENT_DUE_DAY = 5


class BalanceUpdate(NamedTuple):
    """New cached balance values for a tenant."""

    due_balance: Decimal
    account_balance: Decimal
    payment_status: LeasePaymentStatus
    last_payment_date: date | None = None


def has_lease_terms(tenant) -> bool:
    """Whether the tenant has any lease terms to bill against."""
    return tenant.lease_start_date is not None or tenant.rent is not None


class BillingService:
    """Cycle billing and payment application on cached balances."""

    def calculate_target_due(self, tenant, on: date | None = None) -> Decimal:
        """Amount due for the billing cycle containing ``on``.

        First month of the lease: rent + deposit (one month of rent) + service charge.
        Other months: rent + service charge.

        Args:
            tenant: Tenant with lease terms
            on: Date within the cycle (default: today)

        Returns:
            Target amount due (zero when the tenant has no lease terms)
        """
        if not has_lease_terms(tenant):
            return ZERO

        on = on or date.today()
        rent = to_decimal(tenant.rent)
        service_charge = to_decimal(tenant.service_charge)

        start = as_date(tenant.lease_start_date)
        if start is not None and month_start(start) == month_start(on):
            return rent * 2 + service_charge
        return rent + service_charge

    def recommended_payment_status(self, tenant, on: date | None = None) -> LeasePaymentStatus:
        """Payment status implied by the cached balances.

        Paid when nothing is due; otherwise Pending up to the due day and Overdue after.
        """
        on = on or date.today()
        due = to_decimal(tenant.due_balance)
        credit = to_decimal(tenant.account_balance)

        if due <= 0 and credit >= 0:
            return LeasePaymentStatus.PAID
        if on.day > RENT_DUE_DAY:
            return LeasePaymentStatus.OVERDUE
        return LeasePaymentStatus.PENDING

    def process_payment(self, tenant, amount: Decimal, on: date | None = None) -> BalanceUpdate:
        """Apply a payment plus any existing credit to the due balance.

        Args:
            tenant: Paying tenant
            amount: Amount received (must be positive)
            on: Payment date (default: today)

        Returns:
            BalanceUpdate with the remaining due, the new credit and the status

        Raises:
            ValueError: If amount is not positive
        """
        amount = to_decimal(amount)
        if amount <= 0:
            raise ValueError("Payment amount must be positive")

        on = on or date.today()
        due = to_decimal(tenant.due_balance)
        available = amount + to_decimal(tenant.account_balance)

        if available >= due:
            credit = available - due
            due = ZERO
        else:
            due -= available
            credit = ZERO

        logger.info(
            "Applied payment %s for tenant %s: due=%s, credit=%s",
            amount,
            tenant.id,
            due,
            credit,
        )
        return BalanceUpdate(
            due_balance=due,
            account_balance=credit,
            payment_status=LeasePaymentStatus.PAID if due <= 0 else LeasePaymentStatus.PENDING,
            last_payment_date=on,
        )

    def reconcile_monthly_billing(self, tenant, on: date | None = None) -> BalanceUpdate:
        """Add the cycle's target due to the cached balance and net off any credit.

        Must be called once per cycle. A tenant without lease terms is left unchanged.
        """
        due = to_decimal(tenant.due_balance)
        credit = to_decimal(tenant.account_balance)

        if not has_lease_terms(tenant):
            logger.warning(
                "Skipping billing for tenant %s (%s) due to missing lease information",
                tenant.name,
                tenant.id,
            )
            return BalanceUpdate(
                due_balance=due,
                account_balance=credit,
                payment_status=self.recommended_payment_status(tenant, on),
                last_payment_date=as_date(tenant.last_payment_date),
            )

        due += self.calculate_target_due(tenant, on)
        if credit > 0:
            if credit >= due:
                credit -= due
                due = ZERO
            else:
                due -= credit
                credit = ZERO

        return BalanceUpdate(
            due_balance=due,
            account_balance=credit,
            payment_status=LeasePaymentStatus.PAID if due <= 0 else LeasePaymentStatus.PENDING,
            last_payment_date=as_date(tenant.last_payment_date),
        )


__all__ = ["BillingService", "BalanceUpdate", "RENT_DUE_DAY", "has_lease_terms"]
