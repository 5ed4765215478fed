"""Fixtures shared by the integration tests."""

from datetime import date
from decimal import Decimal

import pytest

from src.models import (
    HandoverStatus,
    ManagementStatus,
    OwnershipType,
    Payment,
    PaymentStatus,
    PaymentType,
    Property,
    PropertyOwner,
    ResidentType,
    Tenant,
    Unit,
    UnitStatus,
)


def build_report_estate() -> list:
    """Two landlords in one property, with a let unit each and one managed vacant unit.

    Grace (owner 1) holds A1, let to Jane at 20,000 with 2,500 service charge, and
    the vacant A2 handed over on 2023-12-05. She is flagged for the stage two cost.
    Peter (owner 2) holds B1, let to Tom at 30,000. Jane paid February and March,
    Tom paid February only.
    """
    grace = PropertyOwner(id=1, name="Grace Akinyi", deduct_stage_two_cost=True)
    peter = PropertyOwner(id=2, name="Peter Otieno")
    prop = Property(id=1, name="Greenview Apartments", property_type="Residential")

    units = [
        Unit(
            id=1,
            property_id=1,
            owner_id=1,
            name="A1",
            unit_type="One Bedroom",
            status=UnitStatus.RENTED,
            ownership=OwnershipType.LANDLORD,
            rent_amount=Decimal("20000"),
            service_charge=Decimal("2500"),
        ),
        Unit(
            id=2,
            property_id=1,
            owner_id=1,
            name="A2",
            unit_type="Studio",
            status=UnitStatus.VACANT,
            ownership=OwnershipType.LANDLORD,
            management_status=ManagementStatus.RENTED_FOR_CLIENTS,
            service_charge=Decimal("3000"),
            handover_status=HandoverStatus.HANDED_OVER,
            handover_date=date(2023, 12, 5),
        ),
        Unit(
            id=3,
            property_id=1,
            owner_id=2,
            name="B1",
            unit_type="Two Bedroom",
            status=UnitStatus.RENTED,
            ownership=OwnershipType.LANDLORD,
            rent_amount=Decimal("30000"),
            service_charge=Decimal("2000"),
        ),
    ]
    tenants = [
        Tenant(
            id=1,
            name="Jane Wanjiru",
            property_id=1,
            unit_name="A1",
            resident_type=ResidentType.TENANT,
            lease_start_date=date(2024, 2, 1),
            rent=Decimal("20000"),
        ),
        Tenant(
            id=2,
            name="Tom Mwangi",
            property_id=1,
            unit_name="B1",
            resident_type=ResidentType.TENANT,
            lease_start_date=date(2024, 2, 1),
            rent=Decimal("30000"),
        ),
    ]
    payments = [
        Payment(
            id=1,
            tenant_id=1,
            amount=Decimal("20000"),
            payment_date=date(2024, 2, 3),
            payment_type=PaymentType.RENT,
            status=PaymentStatus.PAID,
            rent_for_month="2024-02",
        ),
        Payment(
            id=2,
            tenant_id=1,
            amount=Decimal("20000"),
            payment_date=date(2024, 3, 4),
            payment_type=PaymentType.RENT,
            status=PaymentStatus.PAID,
            rent_for_month="2024-03",
        ),
        Payment(
            id=3,
            tenant_id=2,
            amount=Decimal("30000"),
            payment_date=date(2024, 2, 5),
            payment_type=PaymentType.RENT,
            status=PaymentStatus.PAID,
            rent_for_month="2024-02",
        ),
    ]
    return [grace, peter, prop, *units, *tenants, *payments]


@pytest.fixture
def report_estate():
    """Factory returning fresh, unsaved records for the reporting estate."""
    return build_report_estate
