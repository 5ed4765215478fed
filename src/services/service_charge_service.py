"""Service-charge accounts for owner-held units.

Builds the monthly service-charge view used by the accounts team:
- client-occupied units (owner lives in / manages the unit)
- managed vacant units (let on the owner's behalf, currently empty)
- vacant units in arrears, grouped by owner

Billing for a unit starts at its first billable month after handover.
"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, NamedTuple

from src.models.payment import PaymentType
from src.models.unit import ManagementStatus, OwnershipType, UnitStatus
from src.services.ledger_engine import is_settled, payment_type_of
from src.services.period_utils import (
    ZERO,
    as_date,
    first_billable_month,
    iter_months,
    month_key,
    month_start,
    to_decimal,
)

logger = logging.getLogger(__name__)

STATUS_PAID = "Paid"
STATUS_PENDING = "Pending"
STATUS_NOT_BILLABLE = "N/A"


class ServiceChargeAccount(NamedTuple):
    """Service-charge status of one unit for the selected month."""

    property_id: int
    property_name: str
    unit_name: str
    unit_service_charge: Decimal
    owner_id: int | None
    owner_name: str
    tenant_id: int | None
    tenant_name: str | None
    payment_status: str
    payment_amount: Decimal | None = None
    payment_for_month: str | None = None


class GroupedServiceChargeAccount(NamedTuple):
    """Accounts of one owner rolled up into a single status."""

    group_id: str
    owner_id: int | None
    owner_name: str
    units: list[ServiceChargeAccount]
    total_service_charge: Decimal
    payment_status: str


class ArrearsMonth(NamedTuple):
    month: date
    label: str
    amount: Decimal
    status: str


class UnitArrears(NamedTuple):
    """Outstanding service charge on one vacant unit."""

    property_id: int
    property_name: str
    unit_name: str
    handover_date: date
    months_in_arrears: int
    total_due: Decimal
    arrears_detail: list[ArrearsMonth]


class VacantArrearsAccount(NamedTuple):
    """Outstanding service charge across all of an owner's vacant units."""

    owner_id: int
    owner_name: str
    total_due: Decimal
    units: list[UnitArrears]


class ServiceChargeReport(NamedTuple):
    client_occupied_accounts: list[ServiceChargeAccount]
    managed_vacant_accounts: list[ServiceChargeAccount]
    vacant_arrears: list[VacantArrearsAccount]


def is_billable(unit, selected_month: date) -> bool:
    """Whether service charge is due on ``unit`` for ``selected_month``.

    A unit with a handover date is billable from its first billable month. A unit
    marked handed over without a date is always billable.
    """
    handover = as_date(unit.handover_date)
    if handover is not None:
        return month_start(selected_month) >= first_billable_month(handover)
    return unit.is_handed_over()


class ServiceChargeService:
    """Compute service-charge accounts and arrears from already-loaded records."""

    def process_service_charge_data(
        self,
        properties: Iterable,
        tenants: Iterable,
        payments: Iterable,
        selected_month: date,
    ) -> ServiceChargeReport:
        """Build the service-charge report for ``selected_month``.

        Args:
            properties: Properties with their units (units carry their owner)
            tenants: Residents; a unit's account holder is matched by property and unit name
            payments: Payments of all residents
            selected_month: Any date within the month being reported

        Returns:
            ServiceChargeReport with the three account lists
        """
        properties = list(properties)
        tenant_by_unit = {(t.property_id, t.unit_name): t for t in tenants}
        payments_by_tenant = defaultdict(list)
        for payment in payments:
            if is_settled(payment):
                payments_by_tenant[payment.tenant_id].append(payment)

        month_tag = month_key(selected_month)
        client_occupied = []
        managed_vacant = []
        arrears_by_owner: dict[int, VacantArrearsAccount] = {}

        for prop in properties:
            for unit in prop.units or []:
                if not unit.is_handed_over():
                    continue
                tenant = tenant_by_unit.get((prop.id, unit.name))
                tenant_payments = payments_by_tenant.get(tenant.id, []) if tenant else []

                if (
                    unit.status == UnitStatus.CLIENT_OCCUPIED
                    and unit.management_status == ManagementStatus.CLIENT_MANAGED
                ):
                    paid = next(
                        (
                            p
                            for p in tenant_payments
                            if payment_type_of(p) in (PaymentType.SERVICE_CHARGE, PaymentType.RENT)
                            and p.rent_for_month == month_tag
                        ),
                        None,
                    )
                    client_occupied.append(
                        self._account(
                            prop,
                            unit,
                            tenant,
                            tenant.name if tenant else None,
                            self._status(unit, selected_month, paid is not None),
                            paid,
                        )
                    )

                if unit.status == UnitStatus.VACANT and unit.management_status == ManagementStatus.RENTED_FOR_CLIENTS:
                    paid = any(
                        payment_type_of(p) == PaymentType.SERVICE_CHARGE and p.rent_for_month == month_tag
                        for p in tenant_payments
                    )
                    owner_name = unit.owner.name if unit.owner is not None else None
                    managed_vacant.append(
                        self._account(prop, unit, tenant, owner_name, self._status(unit, selected_month, paid))
                    )

                    if unit.ownership == OwnershipType.LANDLORD and unit.owner is not None:
                        unit_arrears = self._unit_arrears(prop, unit, tenant_payments, selected_month)
                        if unit_arrears is not None:
                            self._add_arrears(arrears_by_owner, unit.owner, unit_arrears)

        logger.info(
            "Service charge report for %s: client_occupied=%d, managed_vacant=%d, owners_in_arrears=%d",
            month_tag,
            len(client_occupied),
            len(managed_vacant),
            len(arrears_by_owner),
        )
        return ServiceChargeReport(
            client_occupied_accounts=client_occupied,
            managed_vacant_accounts=managed_vacant,
            vacant_arrears=list(arrears_by_owner.values()),
        )

    def group_accounts(self, accounts: Iterable[ServiceChargeAccount]) -> list[GroupedServiceChargeAccount]:
        """Group accounts by owner; unowned units each form their own group.

        Group status is Pending if any unit is pending, N/A if every unit is N/A,
        otherwise Paid.
        """
        groups: dict[str, list[ServiceChargeAccount]] = {}
        for account in accounts:
            key = (
                str(account.owner_id)
                if account.owner_id is not None
                else f"unassigned-{account.property_name}-{account.unit_name}"
            )
            groups.setdefault(key, []).append(account)

        grouped = []
        for key, units in groups.items():
            statuses = [u.payment_status for u in units]
            if STATUS_PENDING in statuses:
                status = STATUS_PENDING
            elif all(s == STATUS_NOT_BILLABLE for s in statuses):
                status = STATUS_NOT_BILLABLE
            else:
                status = STATUS_PAID
            grouped.append(
                GroupedServiceChargeAccount(
                    group_id=key,
                    owner_id=units[0].owner_id,
                    owner_name=units[0].owner_name,
                    units=units,
                    total_service_charge=sum((u.unit_service_charge for u in units), ZERO),
                    payment_status=status,
                )
            )
        return grouped

    @staticmethod
    def _status(unit, selected_month: date, paid: bool) -> str:
        if not is_billable(unit, selected_month):
            return STATUS_NOT_BILLABLE
        return STATUS_PAID if paid else STATUS_PENDING

    @staticmethod
    def _account(prop, unit, tenant, tenant_name, status: str, paid=None) -> ServiceChargeAccount:
        owner = unit.owner
        return ServiceChargeAccount(
            property_id=prop.id,
            property_name=prop.name,
            unit_name=unit.name,
            unit_service_charge=to_decimal(unit.service_charge),
            owner_id=owner.id if owner is not None else None,
            owner_name=owner.name if owner is not None else "Unassigned",
            tenant_id=tenant.id if tenant is not None else None,
            tenant_name=tenant_name,
            payment_status=status,
            payment_amount=to_decimal(paid.amount) if paid is not None else None,
            payment_for_month=paid.rent_for_month if paid is not None else None,
        )

    @staticmethod
    def _unit_arrears(prop, unit, tenant_payments, selected_month: date) -> UnitArrears | None:
        """Charge every billable month through ``selected_month`` and settle oldest first."""
        handover = as_date(unit.handover_date)
        if handover is None:
            return None
        first_month = first_billable_month(handover)
        if first_month > month_start(selected_month):
            return None

        charge = to_decimal(unit.service_charge)
        if charge <= 0:
            return None

        paid_tracker = sum(
            (
                to_decimal(p.amount)
                for p in tenant_payments
                if payment_type_of(p) == PaymentType.SERVICE_CHARGE
            ),
            ZERO,
        )
        detail = []
        for month in iter_months(first_month, selected_month):
            status = STATUS_PENDING
            # Settlement stops at the first month the remaining payments cannot cover
            if paid_tracker >= charge and all(d.status == STATUS_PAID for d in detail):
                status = STATUS_PAID
                paid_tracker -= charge
            detail.append(ArrearsMonth(month=month, label=month.strftime("%B %Y"), amount=charge, status=status))

        pending = [d for d in detail if d.status == STATUS_PENDING]
        total_due = sum((d.amount for d in pending), ZERO)
        if total_due <= 0:
            return None
        return UnitArrears(
            property_id=prop.id,
            property_name=prop.name,
            unit_name=unit.name,
            handover_date=handover,
            months_in_arrears=len(pending),
            total_due=total_due,
            arrears_detail=detail,
        )

    @staticmethod
    def _add_arrears(arrears_by_owner: dict, owner, unit_arrears: UnitArrears) -> None:
        account = arrears_by_owner.get(owner.id)
        if account is None:
            account = VacantArrearsAccount(owner_id=owner.id, owner_name=owner.name, total_due=ZERO, units=[])
        account.units.append(unit_arrears)
        arrears_by_owner[owner.id] = account._replace(total_due=account.total_due + unit_arrears.total_due)


__all__ = [
    "STATUS_PAID",
    "STATUS_PENDING",
    "STATUS_NOT_BILLABLE",
    "ServiceChargeService",
    "ServiceChargeAccount",
    "GroupedServiceChargeAccount",
    "ArrearsMonth",
    "UnitArrears",
    "VacantArrearsAccount",
    "ServiceChargeReport",
    "is_billable",
]
