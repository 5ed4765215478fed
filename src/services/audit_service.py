"""Audit trail for cached balance refreshes."""

from datetime import date

from sqlalchemy.orm import Session

from src.models.balance_audit import BalanceAudit
from src.models.tenant import Tenant


class AuditService:
    """Records and reads balance audits; the caller owns the commit."""

    @staticmethod
    def record_balance_refresh(
        db: Session,
        tenant: Tenant,
        previous_due_balance,
        previous_account_balance,
        as_of: date,
        actor_id: int | None = None,
    ) -> BalanceAudit:
        """Add an audit row for the balances now cached on ``tenant``.

        Args:
            db: Database session
            tenant: Tenant whose cache was just updated
            previous_due_balance: Amount due before the refresh
            previous_account_balance: Credit before the refresh
            as_of: Evaluation date of the ledger run
            actor_id: Staff user who triggered the refresh (None for system runs)

        Returns:
            The pending BalanceAudit object
        """
        audit = BalanceAudit(
            tenant_id=tenant.id,
            action="refresh_balance",
            actor_id=actor_id,
            as_of=as_of,
            previous_due_balance=previous_due_balance or 0,
            previous_account_balance=previous_account_balance or 0,
            due_balance=tenant.due_balance,
            account_balance=tenant.account_balance,
            payment_status=tenant.payment_status,
        )
        db.add(audit)
        return audit

    @staticmethod
    def balance_history(db: Session, tenant_id: int) -> list[BalanceAudit]:
        """Audit rows for a tenant, most recent first."""
        return (
            db.query(BalanceAudit)
            .filter(BalanceAudit.tenant_id == tenant_id)
            .order_by(BalanceAudit.id.desc())
            .all()
        )


__all__ = ["AuditService"]
