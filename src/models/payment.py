"""Payment ORM model for recorded resident payments and manual adjustments."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Index, Numeric, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class PaymentType(str, Enum):
    """Category a payment is applied to."""

    RENT = "Rent"
    SERVICE_CHARGE = "ServiceCharge"
    WATER = "Water"
    DEPOSIT = "Deposit"
    ADJUSTMENT = "Adjustment"
    """Manual debit (positive amount) or credit note (negative amount)"""

    OTHER = "Other"


class PaymentStatus(str, Enum):
    """Settlement status of a payment."""

    PAID = "Paid"
    PENDING = "Pending"
    FAILED = "Failed"


class Payment(Base, BaseModel):
    """Model representing a payment received from a resident.

    Amounts are positive for money received. Adjustments carry their sign as given:
    positive increases what the resident owes, negative reduces it.
    """

    __tablename__ = "payments"

    tenant_id: Mapped[int] = mapped_column(
        ForeignKey("tenants.id"),
        nullable=False,
        index=True,
        comment="Resident who made the payment",
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        comment="Payment amount (signed for adjustments)",
    )
    payment_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True,
        comment="Date of payment",
    )
    payment_type: Mapped[PaymentType] = mapped_column(
        SQLEnum(PaymentType),
        default=PaymentType.RENT,
        nullable=False,
    )
    status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus),
        default=PaymentStatus.PAID,
        nullable=False,
    )
    rent_for_month: Mapped[str | None] = mapped_column(
        String(7),
        nullable=True,
        comment="Billing month this payment settles (YYYY-MM)",
    )
    payment_method: Mapped[str | None] = mapped_column(
        String(30),
        nullable=True,
        comment="Cash, M-Pesa, Bank Transfer, Card",
    )
    transaction_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    tenant: Mapped["Tenant"] = relationship(  # noqa: F821
        "Tenant",
        back_populates="payments",
        foreign_keys=[tenant_id],
    )

    __table_args__ = (Index("idx_payment_tenant_date", "tenant_id", "payment_date"),)

    def __repr__(self) -> str:
        return (
            f"<Payment(id={self.id}, tenant_id={self.tenant_id}, amount={self.amount}, "
            f"payment_type={self.payment_type}, payment_date={self.payment_date})>"
        )


__all__ = ["Payment", "PaymentType", "PaymentStatus"]
