"""Unit ORM model with letting, ownership and handover state."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Index, Numeric, String, UniqueConstraint
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class UnitStatus(str, Enum):
    """Occupancy status of a unit."""

    VACANT = "vacant"
    RENTED = "rented"
    AIRBNB = "airbnb"
    CLIENT_OCCUPIED = "client occupied"


class OwnershipType(str, Enum):
    """Who holds title to the unit."""

    SM = "SM"
    """Unit retained by the management company"""

    LANDLORD = "Landlord"
    """Unit sold to a landlord or homeowner"""


class ManagementStatus(str, Enum):
    """How the unit is managed on the owner's behalf."""

    RENTED_FOR_SM = "Rented for Soil Merchants"
    RENTED_FOR_CLIENTS = "Rented for Clients"
    CLIENT_MANAGED = "Client Managed"
    AIRBNB = "Airbnb"


class HandoverStatus(str, Enum):
    """Whether the developer has handed the unit to its owner."""

    PENDING = "Pending Hand Over"
    HANDED_OVER = "Handed Over"


class Unit(Base, BaseModel):
    """Model representing a lettable unit inside a property.

    ``rent_amount`` and ``service_charge`` override the lease-level amounts when set.
    ``handover_date`` controls the first month a homeowner is billed service charge.
    """

    __tablename__ = "units"

    property_id: Mapped[int] = mapped_column(
        ForeignKey("properties.id"),
        nullable=False,
        index=True,
    )
    owner_id: Mapped[int | None] = mapped_column(
        ForeignKey("property_owners.id"),
        nullable=True,
        index=True,
        comment="Landlord or homeowner holding this unit",
    )

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    unit_type: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="Studio, One Bedroom, Two Bedroom, Shop, ...",
    )
    status: Mapped[UnitStatus] = mapped_column(
        SQLEnum(UnitStatus),
        default=UnitStatus.VACANT,
        nullable=False,
    )
    ownership: Mapped[OwnershipType] = mapped_column(
        SQLEnum(OwnershipType),
        default=OwnershipType.SM,
        nullable=False,
    )
    management_status: Mapped[ManagementStatus | None] = mapped_column(
        SQLEnum(ManagementStatus),
        nullable=True,
    )

    rent_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2),
        nullable=True,
        comment="Standard monthly rent for the unit",
    )
    service_charge: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2),
        nullable=True,
        comment="Monthly service charge for the unit",
    )

    handover_status: Mapped[HandoverStatus | None] = mapped_column(
        SQLEnum(HandoverStatus),
        nullable=True,
    )
    handover_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Relationships
    property: Mapped["Property"] = relationship(  # noqa: F821
        "Property",
        back_populates="units",
        foreign_keys=[property_id],
    )
    owner: Mapped["PropertyOwner | None"] = relationship(  # noqa: F821
        "PropertyOwner",
        back_populates="units",
        foreign_keys=[owner_id],
    )

    __table_args__ = (
        UniqueConstraint("property_id", "name", name="uq_unit_property_name"),
        Index("idx_unit_status", "status"),
    )

    def is_handed_over(self) -> bool:
        """True once the developer has handed the unit to its owner."""
        return self.handover_status == HandoverStatus.HANDED_OVER

    def __repr__(self) -> str:
        return (
            f"<Unit(id={self.id}, property_id={self.property_id}, name={self.name!r}, "
            f"status={self.status}, rent_amount={self.rent_amount}, "
            f"service_charge={self.service_charge}, handover_date={self.handover_date})>"
        )


__all__ = ["Unit", "UnitStatus", "OwnershipType", "ManagementStatus", "HandoverStatus"]
