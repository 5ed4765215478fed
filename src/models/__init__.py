"""SQLAlchemy base model with common fields and model exports."""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# Base class for all models
Base = declarative_base()


class BaseModel:
    """Base model with common timestamp fields."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


# Import models to register them with Base (after Base is defined)
# This must be after Base declaration to avoid circular imports
from src.models.balance_audit import BalanceAudit  # noqa: E402
from src.models.owner import PropertyOwner  # noqa: E402
from src.models.payment import Payment, PaymentStatus, PaymentType  # noqa: E402
from src.models.property import Property  # noqa: E402
from src.models.tenant import LeasePaymentStatus, ResidentType, Tenant  # noqa: E402
from src.models.unit import (  # noqa: E402
    HandoverStatus,
    ManagementStatus,
    OwnershipType,
    Unit,
    UnitStatus,
)
from src.models.water_reading import WaterMeterReading  # noqa: E402

__all__ = [
    "Base",
    "BaseModel",
    "BalanceAudit",
    "PropertyOwner",
    "Payment",
    "PaymentStatus",
    "PaymentType",
    "Property",
    "Tenant",
    "ResidentType",
    "LeasePaymentStatus",
    "Unit",
    "UnitStatus",
    "OwnershipType",
    "ManagementStatus",
    "HandoverStatus",
    "WaterMeterReading",
]
