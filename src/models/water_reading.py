"""Water meter reading model - metered consumption billed to a resident."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class WaterMeterReading(Base, BaseModel):
    """Meter reading for a unit's water consumption.

    Attributes:
        tenant_id: Resident billed for the consumption
        unit_name: Unit the meter belongs to
        reading_date: Date the meter was read
        prior_reading: Meter value at the previous reading
        current_reading: Meter value at this reading
        consumption: current - prior (recorded at capture time)
        rate: Price per unit of consumption
        amount: Billed amount (consumption * rate)
        for_month: Billing month this reading covers (YYYY-MM)
    """

    __tablename__ = "water_meter_readings"

    tenant_id: Mapped[int] = mapped_column(ForeignKey("tenants.id"), nullable=False, index=True)
    property_id: Mapped[int | None] = mapped_column(ForeignKey("properties.id"), nullable=True)
    unit_name: Mapped[str | None] = mapped_column(String(50), nullable=True)

    reading_date: Mapped[date] = mapped_column(Date, nullable=False)
    prior_reading: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=3), nullable=False)
    current_reading: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=3), nullable=False)
    consumption: Mapped[Decimal | None] = mapped_column(Numeric(precision=12, scale=3), nullable=True)
    rate: Mapped[Decimal | None] = mapped_column(Numeric(precision=10, scale=2), nullable=True)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(precision=10, scale=2), nullable=True)
    for_month: Mapped[str | None] = mapped_column(String(7), nullable=True)

    # Relationships
    tenant: Mapped["Tenant"] = relationship("Tenant", back_populates="water_readings")  # noqa: F821

    __table_args__ = (Index("idx_water_tenant_date", "tenant_id", "reading_date"),)

    def billed_consumption(self) -> Decimal:
        """Recorded consumption, or current - prior when not recorded."""
        if self.consumption is not None:
            return Decimal(str(self.consumption))
        return Decimal(str(self.current_reading or 0)) - Decimal(str(self.prior_reading or 0))

    def billed_rate(self, default_rate: Decimal | None = None) -> Decimal:
        """Rate recorded on the reading, else ``default_rate`` (the lease water rate)."""
        rate = self.rate if self.rate is not None else default_rate
        return Decimal(str(rate or 0))

    def billed_amount(self, default_rate: Decimal | None = None) -> Decimal:
        """Recorded amount, or consumption * rate when not recorded."""
        if self.amount is not None:
            return Decimal(str(self.amount))
        return (self.billed_consumption() * self.billed_rate(default_rate)).quantize(Decimal("0.01"))

    def __repr__(self) -> str:
        return (
            f"<WaterMeterReading(id={self.id}, tenant_id={self.tenant_id}, "
            f"reading_date={self.reading_date}, consumption={self.consumption}, amount={self.amount})>"
        )


__all__ = ["WaterMeterReading"]
