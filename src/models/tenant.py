"""Tenant ORM model: a resident with embedded lease terms and cached balances."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Index, Numeric, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class ResidentType(str, Enum):
    """Kind of resident holding the account."""

    TENANT = "Tenant"
    HOMEOWNER = "Homeowner"


class LeasePaymentStatus(str, Enum):
    """Payment status recorded against the lease."""

    PAID = "Paid"
    PENDING = "Pending"
    OVERDUE = "Overdue"


class Tenant(Base, BaseModel):
    """
    Resident account for a unit.

    Lease terms are stored inline (rent, service charge, start/end dates, water rate).
    ``due_balance`` and ``account_balance`` are a cache of the ledger's final due and
    credit figures; the ledger computed from payments and readings is authoritative.
    """

    __tablename__ = "tenants"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Unit association
    property_id: Mapped[int | None] = mapped_column(
        ForeignKey("properties.id"),
        nullable=True,
        index=True,
    )
    unit_name: Mapped[str | None] = mapped_column(String(50), nullable=True)

    resident_type: Mapped[ResidentType] = mapped_column(
        SQLEnum(ResidentType),
        default=ResidentType.TENANT,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default="active",
        nullable=False,
        comment="active or archived",
    )

    # Deposits collected at move-in
    security_deposit: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    water_deposit: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    # Lease terms
    lease_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    lease_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    rent: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2),
        nullable=True,
        comment="Monthly rent agreed on the lease",
    )
    service_charge: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2),
        nullable=True,
        comment="Monthly service charge agreed on the lease",
    )
    water_rate: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2),
        nullable=True,
        comment="Price per cubic metre of metered water",
    )
    payment_status: Mapped[LeasePaymentStatus] = mapped_column(
        SQLEnum(LeasePaymentStatus),
        default=LeasePaymentStatus.PENDING,
        nullable=False,
    )
    last_payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Derived balance cache
    due_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
        comment="Cached amount owed (refreshed from the ledger)",
    )
    account_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
        comment="Cached overpayment credit (refreshed from the ledger)",
    )

    # Relationships
    property: Mapped["Property | None"] = relationship(  # noqa: F821
        "Property",
        foreign_keys=[property_id],
    )
    payments: Mapped[list["Payment"]] = relationship(  # noqa: F821
        "Payment",
        back_populates="tenant",
        order_by="Payment.payment_date",
    )
    water_readings: Mapped[list["WaterMeterReading"]] = relationship(  # noqa: F821
        "WaterMeterReading",
        back_populates="tenant",
        order_by="WaterMeterReading.reading_date",
    )

    __table_args__ = (Index("idx_tenant_unit", "property_id", "unit_name"),)

    def __repr__(self) -> str:
        return (
            f"<Tenant(id={self.id}, name={self.name!r}, property_id={self.property_id}, "
            f"unit_name={self.unit_name!r}, resident_type={self.resident_type}, "
            f"rent={self.rent}, lease_start_date={self.lease_start_date})>"
        )


__all__ = ["Tenant", "ResidentType", "LeasePaymentStatus"]
