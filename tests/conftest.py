"""Pytest configuration shared by unit and integration tests."""

import os

# Point the session factory at a throwaway database before anything imports src.services
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ["LOCALE"] = "en_KE"

import itertools
from datetime import date
from decimal import Decimal

import pytest

from src.models import (
    LeasePaymentStatus,
    Payment,
    PaymentStatus,
    PaymentType,
    Property,
    PropertyOwner,
    ResidentType,
    Tenant,
    Unit,
    UnitStatus,
    OwnershipType,
    WaterMeterReading,
)


def _amount(value):
    return None if value is None else Decimal(str(value))


@pytest.fixture
def make_tenant():
    """Factory for tenants with a 25,000 lease starting 2024-01-01."""

    def factory(**overrides) -> Tenant:
        fields = {
            "id": 1,
            "name": "Jane Wanjiru",
            "property_id": 1,
            "unit_name": "A1",
            "resident_type": ResidentType.TENANT,
            "status": "active",
            "security_deposit": None,
            "water_deposit": None,
            "lease_start_date": date(2024, 1, 1),
            "lease_end_date": None,
            "rent": 25000,
            "service_charge": None,
            "water_rate": None,
            "payment_status": LeasePaymentStatus.PENDING,
            "last_payment_date": None,
            "due_balance": 0,
            "account_balance": 0,
        }
        fields.update(overrides)
        amount_fields = (
            "security_deposit",
            "water_deposit",
            "rent",
            "service_charge",
            "water_rate",
            "due_balance",
            "account_balance",
        )
        for key in amount_fields:
            fields[key] = _amount(fields[key])
        return Tenant(**fields)

    return factory


@pytest.fixture
def make_unit():
    """Factory for units without rent or service-charge overrides."""

    def factory(**overrides) -> Unit:
        fields = {
            "id": 1,
            "property_id": 1,
            "name": "A1",
            "unit_type": "One Bedroom",
            "status": UnitStatus.RENTED,
            "ownership": OwnershipType.SM,
            "management_status": None,
            "rent_amount": None,
            "service_charge": None,
            "handover_status": None,
            "handover_date": None,
        }
        fields.update(overrides)
        for key in ("rent_amount", "service_charge"):
            fields[key] = _amount(fields[key])
        return Unit(**fields)

    return factory


@pytest.fixture
def make_property():
    def factory(units=(), **overrides) -> Property:
        fields = {"id": 1, "name": "Greenview Apartments", "property_type": "Residential"}
        fields.update(overrides)
        return Property(units=list(units), **fields)

    return factory


@pytest.fixture
def make_owner():
    def factory(units=(), **overrides) -> PropertyOwner:
        fields = {"id": 1, "name": "Peter Otieno", "deduct_stage_two_cost": False, "deduct_stage_three_cost": False}
        fields.update(overrides)
        return PropertyOwner(units=list(units), **fields)

    return factory


@pytest.fixture
def make_payment():
    """Factory for paid rent payments with sequential ids."""
    ids = itertools.count(1)

    def factory(amount, payment_date, **overrides) -> Payment:
        fields = {
            "id": next(ids),
            "tenant_id": 1,
            "amount": _amount(amount),
            "payment_date": payment_date,
            "payment_type": PaymentType.RENT,
            "status": PaymentStatus.PAID,
            "rent_for_month": None,
            "notes": None,
        }
        fields.update(overrides)
        return Payment(**fields)

    return factory


@pytest.fixture
def make_reading():
    """Factory for water-meter readings with sequential ids."""
    ids = itertools.count(1)

    def factory(reading_date, prior, current, rate=150, **overrides) -> WaterMeterReading:
        fields = {
            "id": next(ids),
            "tenant_id": 1,
            "unit_name": "A1",
            "reading_date": reading_date,
            "prior_reading": _amount(prior),
            "current_reading": _amount(current),
            "consumption": None,
            "rate": _amount(rate),
            "amount": None,
            "for_month": None,
        }
        fields.update(overrides)
        for key in ("consumption", "amount"):
            fields[key] = _amount(fields[key])
        return WaterMeterReading(**fields)

    return factory
