"""Property owner ORM model (landlords and homeowners holding units)."""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class PropertyOwner(Base, BaseModel):
    """Owner of one or more units.

    Covers both landlords (units let through management) and homeowners (units
    handed over for their own occupation). Service charge for a homeowner is
    billed across every unit in ``units``.

    The ``deduct_stage_*`` flags mark landlords whose outstanding stage-two and
    stage-three fit-out costs are recovered from their first rent statement per unit.
    """

    __tablename__ = "property_owners"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    bank_account: Mapped[str | None] = mapped_column(String(100), nullable=True)

    deduct_stage_two_cost: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    deduct_stage_three_cost: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    units: Mapped[list["Unit"]] = relationship(  # noqa: F821
        "Unit",
        back_populates="owner",
    )

    def __repr__(self) -> str:
        return f"<PropertyOwner(id={self.id}, name={self.name!r})>"


__all__ = ["PropertyOwner"]
