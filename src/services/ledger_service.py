"""Ledger service: loads a resident's records and runs the ledger computation.

This is the data-access side of the ledger. Queries run here; the computation in
LedgerEngine stays pure. Cached balances on the tenant are refreshed from the
ledger and every refresh is recorded in the audit log.
"""

import logging
from datetime import date

from sqlalchemy.orm import Session, selectinload

from src.models.balance_audit import BalanceAudit
from src.models.payment import Payment
from src.models.property import Property
from src.models.tenant import Tenant
from src.models.water_reading import WaterMeterReading
from src.services.audit_service import AuditService
from src.services.billing_service import BalanceUpdate, BillingService
from src.services.errors import ResidentNotFoundError
from src.services.ledger_engine import LedgerEngine, LedgerOptions, LedgerResult, billing_owner, find_unit

logger = logging.getLogger(__name__)


class LedgerService:
    """Service for resident ledger reads and balance cache refreshes."""

    def __init__(self, db: Session, engine: LedgerEngine | None = None):
        """Initialize with database session.

        Args:
            db: SQLAlchemy session
            engine: Ledger computation (default: a new LedgerEngine)
        """
        self.db = db
        self.engine = engine or LedgerEngine()

    def get_tenant(self, tenant_id: int) -> Tenant:
        """Get tenant by ID.

        Raises:
            ResidentNotFoundError: If no tenant has this ID
        """
        tenant = self.db.query(Tenant).filter(Tenant.id == tenant_id).first()
        if tenant is None:
            raise ResidentNotFoundError(tenant_id)
        return tenant

    def get_payments(self, tenant_id: int) -> list[Payment]:
        """All payments recorded for a tenant, oldest first."""
        return (
            self.db.query(Payment)
            .filter(Payment.tenant_id == tenant_id)
            .order_by(Payment.payment_date, Payment.id)
            .all()
        )

    def get_water_readings(self, tenant_id: int) -> list[WaterMeterReading]:
        """All water-meter readings for a tenant, oldest first."""
        return (
            self.db.query(WaterMeterReading)
            .filter(WaterMeterReading.tenant_id == tenant_id)
            .order_by(WaterMeterReading.reading_date, WaterMeterReading.id)
            .all()
        )

    def get_properties(self) -> list[Property]:
        """All properties with their units eagerly loaded."""
        return self.db.query(Property).options(selectinload(Property.units)).order_by(Property.id).all()

    def get_tenant_ledger(
        self,
        tenant_id: int,
        options: LedgerOptions | None = None,
        as_of: date | None = None,
    ) -> LedgerResult:
        """Compute the ledger for a tenant from the stored payments and readings.

        Homeowners are billed service charge across every unit their owner holds.

        Args:
            tenant_id: Tenant to compute the ledger for
            options: Category filter (default: all categories)
            as_of: Evaluation date (default: today)

        Returns:
            LedgerResult from the engine

        Raises:
            ResidentNotFoundError: If the tenant does not exist
        """
        tenant = self.get_tenant(tenant_id)
        properties = self.get_properties()

        return self.engine.generate_ledger(
            tenant,
            payments=self.get_payments(tenant_id),
            properties=properties,
            water_readings=self.get_water_readings(tenant_id),
            owner=billing_owner(tenant, find_unit(properties, tenant)),
            as_of=as_of,
            options=options,
        )

    def refresh_cached_balances(
        self,
        tenant_id: int,
        as_of: date | None = None,
        actor_id: int | None = None,
    ) -> BalanceUpdate:
        """Recompute the full ledger and store its result on the tenant.

        Args:
            tenant_id: Tenant to refresh
            as_of: Evaluation date (default: today)
            actor_id: Staff user who requested the refresh (optional)

        Returns:
            BalanceUpdate written to the tenant
        """
        as_of = as_of or date.today()
        result = self.get_tenant_ledger(tenant_id, as_of=as_of)
        tenant = self.get_tenant(tenant_id)
        previous_due, previous_credit = tenant.due_balance, tenant.account_balance

        tenant.due_balance = result.final_due_balance
        tenant.account_balance = result.final_account_balance
        tenant.payment_status = BillingService().recommended_payment_status(tenant, as_of)

        AuditService.record_balance_refresh(self.db, tenant, previous_due, previous_credit, as_of, actor_id)
        self.db.commit()

        logger.info(
            "Refreshed cached balances for tenant %d: due=%s, credit=%s, status=%s",
            tenant.id,
            result.final_due_balance,
            result.final_account_balance,
            tenant.payment_status.value,
        )
        return BalanceUpdate(
            due_balance=result.final_due_balance,
            account_balance=result.final_account_balance,
            payment_status=tenant.payment_status,
            last_payment_date=tenant.last_payment_date,
        )

    def get_balance_history(self, tenant_id: int) -> list[BalanceAudit]:
        """Past cache refreshes for a tenant, most recent first.

        Raises:
            ResidentNotFoundError: If the tenant does not exist
        """
        self.get_tenant(tenant_id)
        return AuditService.balance_history(self.db, tenant_id)


__all__ = ["LedgerService"]
