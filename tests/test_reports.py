"""Tests for weekly/monthly profit reports and the raw audit window."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import select

from stallpilot.core.cache import (
    get_cache,
    invalidate_reports,
    invalidate_reports_on_commit,
    make_cache_key,
    set_cache,
)
from stallpilot.core.credit import register_payment, register_purchase
from stallpilot.core.reports import (
    audit_window,
    build_period_report,
    get_period_report,
    period_bounds,
)
from stallpilot.models.enums import ExpenseStatus, PaymentType, ReportPeriod
from stallpilot.models.sale import Sale
from stallpilot.utils.datetime import enumerate_days
from tests.factories import (
    CreditCustomerFactory,
    ExpenseFactory,
    FinancialConfigFactory,
    ProductionFactory,
    SaleFactory,
    ShiftFactory,
)


@pytest.fixture
async def shift(db_session, staff_user):
    return await ShiftFactory.create(db_session, staff_user, opened_at=datetime(2024, 1, 1, 8))


def _row(report, day: date):
    return next(r for r in report.days if r.day == day)


class TestPeriodBounds:
    def test_week_runs_monday_to_monday(self):
        assert period_bounds(ReportPeriod.WEEK, date(2024, 1, 3)) == (date(2024, 1, 1), date(2024, 1, 8))

    def test_month(self):
        assert period_bounds(ReportPeriod.MONTH, date(2024, 2, 15)) == (date(2024, 2, 1), date(2024, 3, 1))

    def test_december(self):
        assert period_bounds(ReportPeriod.MONTH, date(2024, 12, 31)) == (date(2024, 12, 1), date(2025, 1, 1))


class TestPeriodReport:
    async def test_sales_are_bucketed_by_utc_day(self, db_session, shift):
        await SaleFactory.create(db_session, shift, amount=Decimal("10.00"), date=datetime(2024, 1, 1, 10))
        await SaleFactory.create(db_session, shift, amount=Decimal("5.50"), date=datetime(2024, 1, 1, 22))
        await SaleFactory.create(db_session, shift, amount=Decimal("1.00"), date=datetime(2024, 1, 2, 0, 0))

        report = await build_period_report(db_session, date(2024, 1, 1), date(2024, 1, 3))

        assert _row(report, date(2024, 1, 1)).sales == Decimal("15.50")
        assert _row(report, date(2024, 1, 2)).sales == Decimal("1.00")

    async def test_credit_sales_excluded_but_payments_counted(self, db_session, shift, staff_user):
        await SaleFactory.create(db_session, shift, amount=Decimal("10.00"))
        customer = await CreditCustomerFactory.create(db_session)
        await register_purchase(db_session, customer.id, Decimal("8.00"), staff_user.id, shift.id)
        await register_payment(db_session, customer.id, Decimal("3.00"), staff_user.id)
        await SaleFactory.create(db_session, shift, amount=Decimal("4.00"), payment_type=PaymentType.CREDIT)

        report = await get_period_report(db_session, ReportPeriod.MONTH, use_cache=False)

        assert report.totals.sales == Decimal("10.00")
        assert report.totals.credit_payments == Decimal("3.00")
        assert report.totals.inflow == Decimal("13.00")

    async def test_only_approved_expenses_count(self, db_session, staff_user):
        day = datetime(2024, 1, 2, 12)
        await ExpenseFactory.create(db_session, staff_user, amount=Decimal("7.00"), date=day, status=ExpenseStatus.APPROVED)
        await ExpenseFactory.create(db_session, staff_user, amount=Decimal("9.00"), date=day)
        await ExpenseFactory.create(db_session, staff_user, amount=Decimal("11.00"), date=day, status=ExpenseStatus.REJECTED)

        report = await build_period_report(db_session, date(2024, 1, 1), date(2024, 1, 8))

        assert report.totals.expenses == Decimal("7.00")

    async def test_costs_follow_config_changes(self, db_session, shift):
        await FinancialConfigFactory.create(
            db_session,
            effective_from=date(2024, 1, 1),
            cost_per_basket=Decimal("80"),
            monthly_rent=Decimal("3000"),
            monthly_electricity=Decimal("600"),
        )
        await FinancialConfigFactory.create(
            db_session, effective_from=date(2024, 1, 2), cost_per_basket=Decimal("100")
        )
        await ProductionFactory.create(db_session, shift, date=datetime(2024, 1, 1), baskets_count=6)
        await ProductionFactory.create(db_session, shift, date=datetime(2024, 1, 2), baskets_count=2)

        report = await build_period_report(db_session, date(2024, 1, 1), date(2024, 1, 3))

        assert _row(report, date(2024, 1, 1)).input_cost == Decimal("480.00")
        assert _row(report, date(2024, 1, 2)).input_cost == Decimal("200.00")
        assert _row(report, date(2024, 1, 1)).fixed_cost == Decimal("120.00")
        assert _row(report, date(2024, 1, 2)).fixed_cost == 0
        assert report.missing_config_days == []

    async def test_days_before_first_config_are_flagged(self, db_session, shift):
        await FinancialConfigFactory.create(
            db_session, effective_from=date(2024, 1, 3), monthly_rent=Decimal("300")
        )
        await ProductionFactory.create(db_session, shift, date=datetime(2024, 1, 1), baskets_count=5)

        report = await build_period_report(db_session, date(2024, 1, 1), date(2024, 1, 5))

        assert report.missing_config_days == [date(2024, 1, 1), date(2024, 1, 2)]
        assert _row(report, date(2024, 1, 1)).input_cost == 0
        assert _row(report, date(2024, 1, 1)).fixed_cost == 0
        assert _row(report, date(2024, 1, 3)).fixed_cost == Decimal("10")

    async def test_profit_identity(self, db_session, shift, staff_user):
        await FinancialConfigFactory.create(
            db_session,
            effective_from=date(2024, 1, 1),
            cost_per_basket=Decimal("33.33"),
            monthly_rent=Decimal("900"),
        )
        await SaleFactory.create(db_session, shift, amount=Decimal("250.75"), date=datetime(2024, 1, 2, 9))
        await ProductionFactory.create(db_session, shift, date=datetime(2024, 1, 2), baskets_count=3)
        await ExpenseFactory.create(
            db_session, staff_user, amount=Decimal("19.99"), date=datetime(2024, 1, 3), status=ExpenseStatus.APPROVED
        )

        report = await build_period_report(db_session, date(2024, 1, 1), date(2024, 1, 8))
        totals = report.totals

        assert totals.profit == totals.inflow - totals.expenses - totals.input_cost - totals.fixed_cost
        assert totals.profit == sum((r.profit for r in report.days), Decimal("0"))
        assert len(report.days) == 7

    async def test_report_is_cached_until_invalidated(self, db_session, shift):
        base = date(2024, 1, 3)
        await SaleFactory.create(db_session, shift, amount=Decimal("10.00"), date=datetime(2024, 1, 2, 9))
        first = await get_period_report(db_session, ReportPeriod.WEEK, base)

        await SaleFactory.create(db_session, shift, amount=Decimal("5.00"), date=datetime(2024, 1, 2, 10))
        cached = await get_period_report(db_session, ReportPeriod.WEEK, base)
        assert cached.totals.sales == first.totals.sales == Decimal("10.00")

        invalidate_reports()
        fresh = await get_period_report(db_session, ReportPeriod.WEEK, base)
        assert fresh.totals.sales == Decimal("15.00")


class TestInvalidationOnCommit:
    async def test_report_cached_before_commit_is_dropped(self, db_session, shift):
        await SaleFactory.create(db_session, shift, amount=Decimal("10.00"), date=datetime(2024, 1, 2, 9))
        base = date(2024, 1, 3)
        committed_snapshot = await build_period_report(
            db_session, date(2024, 1, 1), date(2024, 1, 8), ReportPeriod.WEEK
        )

        db_session.add(
            Sale(
                date=datetime(2024, 1, 2, 10),
                amount=Decimal("5.00"),
                payment_type=PaymentType.CASH,
                user_id=shift.user_id,
                shift_id=shift.id,
            )
        )
        await db_session.flush()
        invalidate_reports_on_commit(db_session)

        # A concurrent request caches what it read before this commit
        set_cache(make_cache_key("report", period="week", start="2024-01-01"), committed_snapshot)
        cached = await get_period_report(db_session, ReportPeriod.WEEK, base)
        assert cached.totals.sales == Decimal("10.00")

        await db_session.commit()

        fresh = await get_period_report(db_session, ReportPeriod.WEEK, base)
        assert fresh.totals.sales == Decimal("15.00")

    async def test_rollback_keeps_the_cache(self, db_session):
        await db_session.execute(select(1))
        invalidate_reports_on_commit(db_session)
        await db_session.rollback()
        set_cache("report|x", "cached")

        await db_session.commit()

        assert get_cache("report|x") == "cached"


class TestAuditWindow:
    async def test_raw_daily_rows(self, db_session, shift):
        await FinancialConfigFactory.create(
            db_session, effective_from=date(2024, 1, 2), cost_per_basket=Decimal("10"), monthly_rent=Decimal("30")
        )
        await SaleFactory.create(db_session, shift, amount=Decimal("10.00"), date=datetime(2024, 1, 2, 9))
        await SaleFactory.create(
            db_session, shift, amount=Decimal("4.00"), date=datetime(2024, 1, 2, 9), payment_type=PaymentType.CREDIT
        )
        await ProductionFactory.create(
            db_session, shift, date=datetime(2024, 1, 2), baskets_count=2, liters_produced=Decimal("12.5")
        )

        rows = await audit_window(db_session, enumerate_days(date(2024, 1, 1), date(2024, 1, 3)))

        assert [r["day"] for r in rows] == ["2024-01-01", "2024-01-02"]
        first, second = rows
        assert first["config_effective_from"] is None
        assert first["fixed_cost"] == "0.00"
        assert second["sales"] == "14.00"
        assert second["baskets"] == 2
        assert second["liters_produced"] == "12.500"
        assert second["input_cost"] == "20.00"
        assert second["fixed_cost"] == "1.00"
        assert second["closings"] == 0
        assert second["config_effective_from"] == "2024-01-02"

    async def test_empty_window(self, db_session):
        assert await audit_window(db_session, []) == []


class TestReportsOverHttp:
    async def test_week_report(self, admin_client, db_session, shift):
        await SaleFactory.create(db_session, shift, amount=Decimal("10.00"), date=datetime(2024, 1, 2, 9))

        response = await admin_client.get("/reports/week", params={"base": "2024-01-03"})

        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "week"
        assert data["start"] == "2024-01-01"
        assert data["end"] == "2024-01-08"
        assert len(data["days"]) == 7
        assert Decimal(data["totals"]["sales"]) == Decimal("10.00")
        assert len(data["missing_config_days"]) == 7

    async def test_new_sale_invalidates_cached_report(self, admin_client, staff_client):
        before = (await admin_client.get("/reports/month")).json()
        await staff_client.post("/staff/sales", data={"amount": "8.00", "payment_type": "CASH"})
        after = (await admin_client.get("/reports/month")).json()

        assert Decimal(after["totals"]["sales"]) - Decimal(before["totals"]["sales"]) == Decimal("8.00")

    async def test_unknown_period(self, admin_client):
        response = await admin_client.get("/reports/year")
        assert response.status_code == 422

    async def test_bad_base(self, admin_client):
        response = await admin_client.get("/reports/month", params={"base": "soon"})
        assert response.status_code == 422
