"""Balance audit model - one row per refresh of a resident's cached balances."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Numeric, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel
from src.models.tenant import LeasePaymentStatus


class BalanceAudit(Base, BaseModel):
    """Cached due/credit figures before and after a ledger refresh.

    Every cached balance on a tenant can be traced to the row that wrote it:
    the evaluation date of the ledger run, who asked for it and what the cache
    held beforehand.
    """

    __tablename__ = "balance_audits"

    tenant_id: Mapped[int] = mapped_column(ForeignKey("tenants.id"), nullable=False)
    action: Mapped[str] = mapped_column(String(50), default="refresh_balance", nullable=False)
    actor_id: Mapped[int | None] = mapped_column(
        nullable=True,
        comment="Staff user who requested the refresh; None for scheduled runs",
    )
    as_of: Mapped[date] = mapped_column(Date, nullable=False)

    previous_due_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    previous_account_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    due_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    account_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_status: Mapped[LeasePaymentStatus] = mapped_column(SQLEnum(LeasePaymentStatus), nullable=False)

    __table_args__ = (Index("idx_balance_audit_tenant_as_of", "tenant_id", "as_of"),)

    def due_change(self) -> Decimal:
        """Movement of the amount due: positive when the resident owes more."""
        return Decimal(str(self.due_balance)) - Decimal(str(self.previous_due_balance or 0))

    def __repr__(self) -> str:
        return (
            f"<BalanceAudit(id={self.id}, tenant_id={self.tenant_id}, as_of={self.as_of}, "
            f"due={self.previous_due_balance}->{self.due_balance}, "
            f"credit={self.previous_account_balance}->{self.account_balance})>"
        )


__all__ = ["BalanceAudit"]
