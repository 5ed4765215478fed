"""Unit tests for landlord statement breakdowns."""

from datetime import date
from decimal import Decimal

import pytest

from src.models import HandoverStatus, ManagementStatus, PaymentStatus, PaymentType, UnitStatus
from src.services.statement_service import StatementService


@pytest.fixture
def service():
    """Create statement service with the standard 5% fee."""
    return StatementService(management_fee_rate=Decimal("0.05"))


@pytest.fixture
def managed_unit(make_unit):
    return make_unit(
        rent_amount=25000,
        service_charge=2000,
        management_status=ManagementStatus.RENTED_FOR_SM,
    )


class TestSplitPayment:
    """Spreading payments across months."""

    def test_multi_month_payment_with_partial_remainder(self, service):
        chunks = service.split_payment(7, Decimal("55000"), Decimal("25000"), date(2024, 1, 1))

        assert [c.id for c in chunks] == ["7-0", "7-1", "7-rem"]
        assert [c.amount for c in chunks] == [Decimal("25000"), Decimal("25000"), Decimal("5000")]
        assert [c.for_month_display for c in chunks] == ["Jan 2024", "Feb 2024", "Partial - Mar 2024"]
        assert [c.is_partial for c in chunks] == [False, False, True]
        assert sum(c.amount for c in chunks) == Decimal("55000")

    def test_payment_within_threshold_stays_whole(self, service):
        chunks = service.split_payment(7, Decimal("27500"), Decimal("25000"), date(2024, 1, 1))

        assert len(chunks) == 1
        assert chunks[0].id == "7"
        assert chunks[0].amount == Decimal("27500")
        assert chunks[0].for_month_display == "Jan 2024"

    def test_rounding_remainder_is_dropped(self, service):
        chunks = service.split_payment(7, Decimal("50000.50"), Decimal("25000"), date(2024, 11, 1))

        assert [c.for_month_display for c in chunks] == ["Nov 2024", "Dec 2024"]

    def test_split_crosses_year_end(self, service):
        chunks = service.split_payment(7, Decimal("75000"), Decimal("25000"), date(2023, 12, 1))

        assert [c.for_month for c in chunks] == [date(2023, 12, 1), date(2024, 1, 1), date(2024, 2, 1)]

    def test_no_anchor_month(self, service):
        chunks = service.split_payment(7, Decimal("60000"), Decimal("25000"), None)

        assert len(chunks) == 1
        assert chunks[0].for_month_display == "N/A"

    def test_zero_monthly_amount(self, service):
        chunks = service.split_payment(7, Decimal("60000"), Decimal("0"), date(2024, 1, 1))

        assert len(chunks) == 1


class TestTransactionBreakdown:
    """Fee and service-charge deductions."""

    def test_standard_breakdown(self, service, make_tenant, managed_unit):
        tenant = make_tenant()

        breakdown = service.calculate_transaction_breakdown(Decimal("25000"), managed_unit, tenant, date(2024, 2, 1))

        assert breakdown.gross == Decimal("25000")
        assert breakdown.management_fee == Decimal("1250")
        assert breakdown.service_charge_deduction == Decimal("2000")
        assert breakdown.net_to_landlord == Decimal("21750")

    def test_fee_charged_on_standard_rent_for_partial_payment(self, service, make_tenant, managed_unit):
        tenant = make_tenant()

        breakdown = service.calculate_transaction_breakdown(Decimal("5000"), managed_unit, tenant, date(2024, 3, 1))

        assert breakdown.management_fee == Decimal("1250")
        assert breakdown.net_to_landlord == Decimal("1750")

    def test_initial_letting_for_client_unit(self, service, make_tenant, make_unit):
        tenant = make_tenant(lease_start_date=date(2024, 1, 15))
        unit = make_unit(rent_amount=25000, service_charge=2000, management_status=ManagementStatus.RENTED_FOR_CLIENTS)

        first_month = service.calculate_transaction_breakdown(Decimal("25000"), unit, tenant, date(2024, 1, 1))
        second_month = service.calculate_transaction_breakdown(Decimal("25000"), unit, tenant, date(2024, 2, 1))

        assert first_month.management_fee == Decimal("12500")
        assert first_month.service_charge_deduction == Decimal("0")
        assert first_month.net_to_landlord == Decimal("12500")
        assert second_month.management_fee == Decimal("1250")
        assert second_month.service_charge_deduction == Decimal("2000")

    def test_without_unit_uses_lease_rent(self, service, make_tenant):
        tenant = make_tenant(rent=20000)

        breakdown = service.calculate_transaction_breakdown(Decimal("20000"), None, tenant)

        assert breakdown.management_fee == Decimal("1000")
        assert breakdown.service_charge_deduction == Decimal("0")
        assert breakdown.net_to_landlord == Decimal("19000")

    def test_custom_fee_rate(self, make_tenant, managed_unit):
        service = StatementService(management_fee_rate=Decimal("0.1"))

        breakdown = service.calculate_transaction_breakdown(
            Decimal("25000"), managed_unit, make_tenant(), date(2024, 2, 1)
        )

        assert breakdown.management_fee == Decimal("2500")


class TestLandlordDisplayTransactions:
    """Statement lines built from payments."""

    def test_initial_lump_sum_split_after_deposits(
        self, service, make_tenant, make_payment, make_property, managed_unit
    ):
        """130,000 less 30,000 in deposits covers four months from the lease start."""
        tenant = make_tenant(lease_start_date=date(2023, 10, 1), security_deposit=25000, water_deposit=5000)
        payment = make_payment(130000, date(2023, 10, 2))
        properties = [make_property(units=[managed_unit])]

        lines = service.generate_landlord_display_transactions([payment], [tenant], properties)

        assert [line.for_month_display for line in lines] == ["Oct 2023", "Nov 2023", "Dec 2023", "Jan 2024"]
        assert [line.id for line in lines] == [f"{payment.id}-{i}" for i in range(4)]
        assert all(line.gross == Decimal("25000") for line in lines)
        # 1,250 fee, 2,000 service charge and 1,000 running cost; January carries no running cost
        assert [line.net_to_landlord for line in lines] == [
            Decimal("20750"),
            Decimal("20750"),
            Decimal("20750"),
            Decimal("21750"),
        ]
        assert lines[0].rent_for_month == "2023-10"
        assert lines[0].unit_type == "One Bedroom"

    def test_later_payment_split_without_deposit_deduction(
        self, service, make_tenant, make_payment, make_property, managed_unit
    ):
        tenant = make_tenant(security_deposit=10000, water_deposit=5000)
        first = make_payment(25000, date(2024, 1, 3), rent_for_month="2024-01")
        second = make_payment(55000, date(2024, 2, 3), rent_for_month="2024-02")

        lines = service.generate_landlord_display_transactions(
            [second, first], [tenant], [make_property(units=[managed_unit])]
        )

        assert [(line.id, line.gross) for line in lines] == [
            (str(first.id), Decimal("25000")),
            (f"{second.id}-0", Decimal("25000")),
            (f"{second.id}-1", Decimal("25000")),
            (f"{second.id}-rem", Decimal("5000")),
        ]
        assert lines[-1].for_month_display == "Partial - Apr 2024"

    def test_first_lump_sum_of_70000(self, service, make_tenant, make_payment, make_property, managed_unit):
        tenant = make_tenant(security_deposit=10000, water_deposit=5000)
        payment = make_payment(70000, date(2024, 1, 1))
        properties = [make_property(units=[managed_unit])]

        lines = service.generate_landlord_display_transactions([payment], [tenant], properties)

        assert [line.gross for line in lines] == [Decimal("25000"), Decimal("25000"), Decimal("5000")]

    def test_only_paid_rent_payments_are_listed(self, service, make_tenant, make_payment, make_property, managed_unit):
        tenant = make_tenant()
        payments = [
            make_payment(25000, date(2024, 1, 3)),
            make_payment(25000, date(2024, 2, 3), status=PaymentStatus.FAILED),
            make_payment(2000, date(2024, 2, 4), payment_type=PaymentType.SERVICE_CHARGE),
            make_payment(1000, date(2024, 2, 5), payment_type=PaymentType.WATER),
        ]
        properties = [make_property(units=[managed_unit])]

        lines = service.generate_landlord_display_transactions(payments, [tenant], properties)

        assert [line.payment_id for line in lines] == [payments[0].id]

    def test_payments_of_unknown_tenants_are_ignored(self, service, make_tenant, make_payment):
        payment = make_payment(25000, date(2024, 1, 3), tenant_id=99)

        assert service.generate_landlord_display_transactions([payment], [make_tenant()], []) == []


class TestLandlordStatementCosts:
    """Monthly running costs, stage deductions and the landlord filter."""

    def test_lump_sum_carries_running_cost_except_in_january(
        self, service, make_tenant, make_payment, make_unit, make_property
    ):
        unit = make_unit(rent_amount=25000, service_charge=0)
        tenant = make_tenant(lease_start_date=date(2023, 10, 1), security_deposit=25000, water_deposit=5000)
        payment = make_payment(130000, date(2023, 10, 2))

        lines = service.generate_landlord_display_transactions([payment], [tenant], [make_property(units=[unit])])

        assert len(lines) == 4
        assert lines[0].for_month_display == "Oct 2023"
        assert lines[0].management_fee == Decimal("1250")
        assert lines[0].other_costs == Decimal("1000")
        assert lines[0].net_to_landlord == Decimal("22750")
        assert lines[3].for_month_display == "Jan 2024"
        assert lines[3].other_costs == Decimal("0")
        assert sum(line.gross for line in lines) == Decimal("100000")

    def test_breakdown_anchored_to_lease_start(self, service, make_tenant, make_payment, make_unit, make_property):
        unit = make_unit(rent_amount=25000)
        tenant = make_tenant(lease_start_date=date(2023, 7, 15))
        payment = make_payment(50000, date(2023, 7, 16))

        lines = service.generate_landlord_display_transactions([payment], [tenant], [make_property(units=[unit])])

        assert [line.for_month_display for line in lines] == ["Jul 2023", "Aug 2023"]

    def test_running_cost_once_per_month_for_multi_unit_landlord(
        self, service, make_tenant, make_payment, make_unit, make_property, make_owner
    ):
        a1 = make_unit(id=1, name="A1", rent_amount=20000)
        a2 = make_unit(id=2, name="A2", rent_amount=30000)
        landlord = make_owner(id=5, name="Multi Unit Lord", units=[a1, a2])
        tenants = [
            make_tenant(id=1, unit_name="A1", rent=20000, lease_start_date=date(2024, 2, 1)),
            make_tenant(id=2, unit_name="A2", rent=30000, lease_start_date=date(2024, 2, 1)),
        ]
        payments = [
            make_payment(20000, date(2024, 2, 5), tenant_id=1, rent_for_month="2024-02"),
            make_payment(30000, date(2024, 2, 6), tenant_id=2, rent_for_month="2024-02"),
        ]

        lines = service.generate_landlord_display_transactions(
            payments, tenants, [make_property(units=[a1, a2])], landlord
        )

        assert len(lines) == 2
        assert [line.other_costs for line in lines] == [Decimal("1000"), Decimal("0")]

    def test_running_cost_every_month_for_single_unit_landlord(
        self, service, make_tenant, make_payment, make_unit, make_property, make_owner
    ):
        b1 = make_unit(name="B1", rent_amount=40000)
        landlord = make_owner(id=6, name="Single Unit Lord", units=[b1])
        tenant = make_tenant(unit_name="B1", rent=40000, lease_start_date=date(2024, 2, 1))
        payments = [
            make_payment(40000, date(2024, 2, 5), rent_for_month="2024-02"),
            make_payment(40000, date(2024, 3, 5), rent_for_month="2024-03"),
        ]

        properties = [make_property(units=[b1])]

        lines = service.generate_landlord_display_transactions(payments, [tenant], properties, landlord)

        assert [line.other_costs for line in lines] == [Decimal("1000"), Decimal("1000")]

    def test_stage_costs_recovered_once_per_unit(
        self, service, make_tenant, make_payment, make_unit, make_property, make_owner
    ):
        s1 = make_unit(id=1, name="S1", unit_type="Studio", rent_amount=20000)
        s2 = make_unit(id=2, name="S2", unit_type="One Bedroom", rent_amount=30000)
        landlord = make_owner(
            id=7, name="Special Lord", units=[s1, s2], deduct_stage_two_cost=True, deduct_stage_three_cost=True
        )
        tenants = [
            make_tenant(id=1, unit_name="S1", rent=20000),
            make_tenant(id=2, unit_name="S2", rent=30000),
        ]
        payments = [
            make_payment(20000, date(2024, 1, 5), tenant_id=1, rent_for_month="2024-01"),
            make_payment(30000, date(2024, 1, 6), tenant_id=2, rent_for_month="2024-01"),
            make_payment(20000, date(2024, 2, 5), tenant_id=1, rent_for_month="2024-02"),
        ]

        lines = service.generate_landlord_display_transactions(
            payments, tenants, [make_property(units=[s1, s2])], landlord
        )

        by_key = {(line.unit_name, line.rent_for_month): line for line in lines}
        s1_january = by_key[("S1", "2024-01")]
        s2_january = by_key[("S2", "2024-01")]
        s1_february = by_key[("S1", "2024-02")]
        # Stage two 10,000 plus stage three 8,000 (studio) or 12,000 (one bedroom)
        assert s1_january.special_deductions == Decimal("18000")
        assert s2_january.special_deductions == Decimal("22000")
        assert s1_february.special_deductions == Decimal("0")
        # January running cost is waived
        assert s1_january.net_to_landlord == Decimal("20000") - Decimal("1000") - Decimal("18000")
        assert s2_january.net_to_landlord == Decimal("30000") - Decimal("1500") - Decimal("22000")

    def test_landlord_filter_skips_other_owners_units(
        self, service, make_tenant, make_payment, make_unit, make_property, make_owner
    ):
        own = make_unit(id=1, name="A1", rent_amount=25000)
        other = make_unit(id=2, name="A2", rent_amount=25000)
        landlord = make_owner(id=5, units=[own])
        make_owner(id=6, name="Someone Else", units=[other])
        tenants = [make_tenant(id=1, unit_name="A1"), make_tenant(id=2, unit_name="A2")]
        payments = [
            make_payment(25000, date(2024, 2, 5), tenant_id=1, rent_for_month="2024-02"),
            make_payment(25000, date(2024, 2, 6), tenant_id=2, rent_for_month="2024-02"),
        ]

        lines = service.generate_landlord_display_transactions(
            payments, tenants, [make_property(units=[own, other])], landlord
        )

        assert [line.unit_name for line in lines] == ["A1"]
        assert lines[0].special_deductions == Decimal("0")


class TestAggregateFinancials:
    """Portfolio totals."""

    def test_totals_less_vacant_unit_service_charge(
        self, service, make_tenant, make_payment, make_unit, make_property
    ):
        occupied = make_unit(id=1, name="A1", rent_amount=25000, service_charge=1000)
        vacant = make_unit(
            id=2,
            name="A2",
            rent_amount=25000,
            service_charge=1000,
            status=UnitStatus.VACANT,
            handover_status=HandoverStatus.HANDED_OVER,
        )
        pending_handover = make_unit(
            id=3,
            name="A3",
            service_charge=1000,
            status=UnitStatus.VACANT,
            handover_status=HandoverStatus.PENDING,
        )
        tenant = make_tenant()
        payments = [
            make_payment(25000, date(2024, 1, 3), rent_for_month="2024-01"),
            make_payment(25000, date(2024, 2, 3), rent_for_month="2024-02"),
            make_payment(3000, date(2024, 2, 3), payment_type=PaymentType.SERVICE_CHARGE),
        ]

        summary = service.aggregate_financials(
            payments, [tenant], [make_property(units=[occupied, vacant, pending_handover])]
        )

        assert summary.total_revenue == Decimal("50000")
        assert summary.total_management_fees == Decimal("2500")
        assert summary.total_service_charges == Decimal("2000")
        assert summary.vacant_unit_service_charge_deduction == Decimal("1000")
        assert summary.total_net_remittance == Decimal("44500")
        assert summary.transaction_count == 2

    def test_no_payments(self, service):
        summary = service.aggregate_financials([], [], [])

        assert summary.total_revenue == Decimal("0")
        assert summary.transaction_count == 0
