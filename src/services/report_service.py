"""Report service: loads portfolio records for statements, service charge and arrears.

Queries run here; the statement, service-charge and arrears computations work on
the loaded records and never touch the database.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import NamedTuple

from sqlalchemy.orm import Session, selectinload

from src.models.owner import PropertyOwner
from src.models.payment import Payment
from src.models.property import Property
from src.models.tenant import Tenant
from src.models.unit import Unit
from src.services.arrears_service import ArrearsService, LandlordArrearsSummary, TenantArrears
from src.services.config import DEFAULT_MANAGEMENT_FEE_RATE
from src.services.errors import OwnerNotFoundError
from src.services.period_utils import ZERO, month_key
from src.services.service_charge_service import ServiceChargeReport, ServiceChargeService
from src.services.statement_service import DisplayTransaction, FinancialSummary, StatementService

logger = logging.getLogger(__name__)


class LandlordStatement(NamedTuple):
    """A landlord's statement lines with their totals."""

    owner: PropertyOwner
    lines: list[DisplayTransaction]
    total_gross: Decimal
    total_deductions: Decimal
    total_net: Decimal


class ReportService:
    """Service for landlord statements, service-charge reports and arrears."""

    def __init__(self, db: Session, management_fee_rate: Decimal = DEFAULT_MANAGEMENT_FEE_RATE):
        """Initialize with database session.

        Args:
            db: SQLAlchemy session
            management_fee_rate: Standard management fee rate for statements
        """
        self.db = db
        self.statements = StatementService(management_fee_rate)
        self.service_charges = ServiceChargeService()
        self.arrears = ArrearsService()

    def get_owner(self, owner_id: int) -> PropertyOwner:
        """Get owner by ID.

        Raises:
            OwnerNotFoundError: If no owner has this ID
        """
        owner = self.db.query(PropertyOwner).filter(PropertyOwner.id == owner_id).first()
        if owner is None:
            raise OwnerNotFoundError(owner_id)
        return owner

    def get_properties(self) -> list[Property]:
        """All properties with their units and unit owners eagerly loaded."""
        return (
            self.db.query(Property)
            .options(selectinload(Property.units).selectinload(Unit.owner))
            .order_by(Property.id)
            .all()
        )

    def get_tenants(self) -> list[Tenant]:
        return self.db.query(Tenant).order_by(Tenant.id).all()

    def get_payments(self) -> list[Payment]:
        """Every recorded payment, oldest first."""
        return self.db.query(Payment).order_by(Payment.payment_date, Payment.id).all()

    def landlord_statement(self, owner_id: int, month: date | None = None) -> LandlordStatement:
        """Statement lines for the units ``owner_id`` holds.

        Args:
            owner_id: Landlord to build the statement for
            month: Only lines settling this month (default: every month)

        Raises:
            OwnerNotFoundError: If the owner does not exist
        """
        owner = self.get_owner(owner_id)
        lines = self.statements.generate_landlord_display_transactions(
            self.get_payments(), self.get_tenants(), self.get_properties(), owner
        )
        if month is not None:
            lines = [line for line in lines if line.rent_for_month == month_key(month)]

        total_gross = sum((line.gross for line in lines), ZERO)
        total_net = sum((line.net_to_landlord for line in lines), ZERO)
        logger.info("Landlord statement for owner %d: %d lines, net=%s", owner.id, len(lines), total_net)
        return LandlordStatement(
            owner=owner,
            lines=lines,
            total_gross=total_gross,
            total_deductions=total_gross - total_net,
            total_net=total_net,
        )

    def portfolio_summary(self) -> FinancialSummary:
        """Totals over all paid rent, less service charge on vacant units."""
        return self.statements.aggregate_financials(self.get_payments(), self.get_tenants(), self.get_properties())

    def service_charge_report(self, selected_month: date) -> ServiceChargeReport:
        """Service-charge accounts and vacant-unit arrears for ``selected_month``."""
        return self.service_charges.process_service_charge_data(
            self.get_properties(), self.get_tenants(), self.get_payments(), selected_month
        )

    def tenants_in_arrears(self, as_of: date | None = None) -> list[TenantArrears]:
        """Residents owing rent or service charge, largest first."""
        return self.arrears.tenants_in_arrears(self.get_tenants(), self.get_payments(), self.get_properties(), as_of)

    def landlord_arrears(self, owner_id: int, as_of: date | None = None) -> LandlordArrearsSummary:
        """Arrears and vacant-unit service charge across an owner's units.

        Raises:
            OwnerNotFoundError: If the owner does not exist
        """
        owner = self.get_owner(owner_id)
        return self.arrears.landlord_arrears_breakdown(
            owner, self.get_properties(), self.get_tenants(), self.get_payments(), as_of
        )


__all__ = ["LandlordStatement", "ReportService"]
