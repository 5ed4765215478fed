"""Rent arrears for residents and landlords.

Rent arrears are what a resident owes on rent and service charge alone. They come
from a ledger run with water excluded, so unpaid water bills never count as rent
arrears. A landlord's arrears breakdown adds the service charge the landlord owes
on each of their handed-over units that has no resident.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, NamedTuple

from src.services.ledger_engine import LedgerEngine, LedgerOptions, billing_owner, find_unit
from src.services.period_utils import ZERO, to_decimal
from src.services.statement_service import owner_id_of

logger = logging.getLogger(__name__)

RENT_AND_SERVICE_CHARGE = LedgerOptions(include_rent=True, include_service_charge=True, include_water=False)


class TenantArrears(NamedTuple):
    tenant: object
    arrears: Decimal


class LandlordUnitArrears(NamedTuple):
    """Arrears on one of a landlord's units."""

    property_id: int
    property_name: str
    unit: object
    tenant: object | None
    tenant_arrears: Decimal
    vacant_service_charge: Decimal


class LandlordArrearsSummary(NamedTuple):
    """Deductions from a landlord's remittance for arrears and vacant units."""

    owner_id: int
    owner_name: str
    total_tenant_arrears: Decimal
    vacant_unit_service_charge: Decimal
    total_deductions: Decimal
    breakdown: list[LandlordUnitArrears]


class ArrearsService:
    """Compute rent arrears from already-loaded records."""

    def __init__(self, engine: LedgerEngine | None = None):
        self.engine = engine or LedgerEngine()

    def rent_arrears(self, tenant, payments: Iterable, properties: list, as_of: date | None = None) -> Decimal:
        """Amount due on rent and service charge for one resident."""
        unit = find_unit(properties, tenant)
        result = self.engine.generate_ledger(
            tenant,
            payments=payments,
            properties=properties,
            owner=billing_owner(tenant, unit),
            as_of=as_of,
            options=RENT_AND_SERVICE_CHARGE,
        )
        return result.final_due_balance

    def tenants_in_arrears(
        self,
        tenants: Iterable,
        payments: Iterable,
        properties: Iterable,
        as_of: date | None = None,
    ) -> list[TenantArrears]:
        """Residents owing rent or service charge, largest arrears first."""
        properties = list(properties)
        payments_by_tenant = _group_payments(payments)

        in_arrears = []
        for tenant in tenants:
            arrears = self.rent_arrears(tenant, payments_by_tenant.get(tenant.id, []), properties, as_of)
            if arrears > 0:
                in_arrears.append(TenantArrears(tenant=tenant, arrears=arrears))

        in_arrears.sort(key=lambda item: item.arrears, reverse=True)
        logger.info("Found %d residents in arrears", len(in_arrears))
        return in_arrears

    def landlord_arrears_breakdown(
        self,
        landlord,
        properties: Iterable,
        tenants: Iterable,
        payments: Iterable,
        as_of: date | None = None,
    ) -> LandlordArrearsSummary:
        """Per-unit arrears across every unit ``landlord`` holds.

        Occupied units report their resident's rent arrears. Units with no resident
        report the unit's service charge once it has been handed over.
        """
        properties = list(properties)
        tenant_by_unit = {(t.property_id, t.unit_name): t for t in tenants}
        payments_by_tenant = _group_payments(payments)

        breakdown = []
        for prop in properties:
            for unit in prop.units or []:
                if owner_id_of(unit) != landlord.id:
                    continue

                tenant = tenant_by_unit.get((prop.id, unit.name))
                tenant_arrears = ZERO
                vacant_service_charge = ZERO
                if tenant is not None:
                    tenant_arrears = self.rent_arrears(
                        tenant, payments_by_tenant.get(tenant.id, []), properties, as_of
                    )
                elif unit.is_handed_over():
                    vacant_service_charge = to_decimal(unit.service_charge)

                breakdown.append(
                    LandlordUnitArrears(
                        property_id=prop.id,
                        property_name=prop.name,
                        unit=unit,
                        tenant=tenant,
                        tenant_arrears=tenant_arrears,
                        vacant_service_charge=vacant_service_charge,
                    )
                )

        total_tenant_arrears = sum((line.tenant_arrears for line in breakdown), ZERO)
        vacant_unit_service_charge = sum((line.vacant_service_charge for line in breakdown), ZERO)
        return LandlordArrearsSummary(
            owner_id=landlord.id,
            owner_name=landlord.name,
            total_tenant_arrears=total_tenant_arrears,
            vacant_unit_service_charge=vacant_unit_service_charge,
            total_deductions=total_tenant_arrears + vacant_unit_service_charge,
            breakdown=breakdown,
        )


def _group_payments(payments: Iterable) -> dict[int, list]:
    grouped: dict[int, list] = {}
    for payment in payments:
        grouped.setdefault(payment.tenant_id, []).append(payment)
    return grouped


__all__ = [
    "ArrearsService",
    "LandlordArrearsSummary",
    "LandlordUnitArrears",
    "TenantArrears",
]
