"""Property ORM model for managed buildings and their units."""

from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class Property(Base, BaseModel):
    """Model representing a managed building.

    Units hold the rent and service-charge overrides that take precedence over
    the amounts recorded on a resident's lease.
    """

    __tablename__ = "properties"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    property_type: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="Residential, Commercial, Mixed",
    )
    late_fee: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2),
        nullable=True,
        comment="Flat late fee applied to overdue rent",
    )

    # Relationships
    units: Mapped[list["Unit"]] = relationship(  # noqa: F821
        "Unit",
        back_populates="property",
        order_by="Unit.name",
    )

    def get_unit(self, unit_name: str | None) -> "Unit | None":  # noqa: F821
        """Find a unit of this property by name."""
        if not unit_name:
            return None
        for unit in self.units or []:
            if unit.name == unit_name:
                return unit
        return None

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, name={self.name!r}, property_type={self.property_type!r})>"


__all__ = ["Property"]
