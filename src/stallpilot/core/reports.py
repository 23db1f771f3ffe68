# File: src/stallpilot/core/reports.py
"""Period profit reports, admin dashboard and daily audit."""

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stallpilot.core.cache import REPORT_PREFIX, get_cache, make_cache_key, set_cache
from stallpilot.core.finance import (
    ZERO,
    DayFigures,
    PeriodFigures,
    build_period_figures,
    daily_fixed_cost,
    daily_input_cost,
    resolve_config_at,
    sum_by_day,
    sum_counts_by_day,
)
from stallpilot.core.logging import get_logger
from stallpilot.models.credit import CreditLedgerEntry
from stallpilot.models.daily_closing import DailyClosing
from stallpilot.models.enums import ExpenseStatus, LedgerEntryKind, PaymentType, ReportPeriod
from stallpilot.models.expense import Expense
from stallpilot.models.financial_config import FinancialConfig
from stallpilot.models.production import ProductionEntry
from stallpilot.models.report_schemas import (
    DailyAuditResponse,
    DashboardResponse,
    DayReportRow,
    PeriodReport,
    PeriodTotals,
)
from stallpilot.models.sale import Sale
from stallpilot.models.shift import Shift
from stallpilot.models.shift_schemas import (
    DailyClosingRead,
    ExpenseRead,
    ProductionRead,
    SaleRead,
    ShiftRead,
)
from stallpilot.utils.datetime import (
    add_days,
    add_months,
    day_range_utc,
    enumerate_days,
    start_of_day,
    start_of_month,
    start_of_week,
    today_utc,
)

logger = get_logger(__name__)

DASHBOARD_LIST_SIZE = 20


def period_bounds(period: ReportPeriod, base: date) -> tuple[date, date]:
    """Half-open [start, end) for the week (Monday start) or month containing ``base``."""
    if period == ReportPeriod.WEEK:
        start = start_of_week(base)
        return start, add_days(start, 7)
    start = start_of_month(base)
    return start, add_months(start, 1)


async def load_configs(db: AsyncSession, until: date | None = None) -> list[FinancialConfig]:
    """Configs ordered by ``effective_from``, optionally only those starting before ``until``."""
    stmt = select(FinancialConfig).order_by(FinancialConfig.effective_from.asc())
    if until is not None:
        stmt = stmt.where(FinancialConfig.effective_from < until)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def _rows(db: AsyncSession, stmt) -> list[tuple[Any, Any]]:
    result = await db.execute(stmt)
    return [tuple(row) for row in result.all()]


async def collect_period_figures(db: AsyncSession, start: date, end: date) -> PeriodFigures:
    """Query every report input for [start, end) and combine them per day."""
    start_dt, end_dt = start_of_day(start), start_of_day(end)
    days = enumerate_days(start, end)

    configs = await load_configs(db, until=end)
    sales = await _rows(
        db,
        select(Sale.date, Sale.amount).where(
            Sale.date >= start_dt,
            Sale.date < end_dt,
            Sale.payment_type != PaymentType.CREDIT,
        ),
    )
    payments = await _rows(
        db,
        select(CreditLedgerEntry.date, CreditLedgerEntry.amount).where(
            CreditLedgerEntry.date >= start_dt,
            CreditLedgerEntry.date < end_dt,
            CreditLedgerEntry.kind == LedgerEntryKind.PAYMENT,
        ),
    )
    expenses = await _rows(
        db,
        select(Expense.date, Expense.amount).where(
            Expense.date >= start_dt,
            Expense.date < end_dt,
            Expense.status == ExpenseStatus.APPROVED,
        ),
    )
    baskets = await _rows(
        db,
        select(ProductionEntry.date, ProductionEntry.baskets_count).where(
            ProductionEntry.date >= start_dt,
            ProductionEntry.date < end_dt,
        ),
    )

    return build_period_figures(
        start=start,
        end=end,
        days=days,
        configs=configs,
        sales_by_day=sum_by_day(sales),
        credit_payments_by_day=sum_by_day(payments),
        expenses_by_day=sum_by_day(expenses),
        baskets_by_day=sum_counts_by_day(baskets),
    )


def _day_row(figures: DayFigures) -> DayReportRow:
    return DayReportRow(
        day=figures.day,
        sales=figures.sales,
        credit_payments=figures.credit_payments,
        inflow=figures.inflow,
        expenses=figures.expenses,
        baskets=figures.baskets,
        input_cost=figures.input_cost,
        fixed_cost=figures.fixed_cost,
        profit=figures.profit,
    )


def to_period_report(figures: PeriodFigures, period: ReportPeriod | None = None) -> PeriodReport:
    return PeriodReport(
        period=period,
        start=figures.start,
        end=figures.end,
        days=[_day_row(d) for d in figures.days],
        totals=PeriodTotals(
            sales=figures.total_sales,
            credit_payments=figures.total_credit_payments,
            inflow=figures.total_inflow,
            expenses=figures.total_expenses,
            input_cost=figures.total_input_cost,
            fixed_cost=figures.total_fixed_cost,
            profit=figures.profit,
        ),
        missing_config_days=figures.missing_config_days,
    )


async def build_period_report(
    db: AsyncSession,
    start: date,
    end: date,
    period: ReportPeriod | None = None,
) -> PeriodReport:
    figures = await collect_period_figures(db, start, end)
    return to_period_report(figures, period)


async def get_period_report(
    db: AsyncSession,
    period: ReportPeriod,
    base: date | None = None,
    use_cache: bool = True,
) -> PeriodReport:
    """Week or month report around ``base`` (default today), cached for a few minutes."""
    base = base or today_utc()
    start, end = period_bounds(period, base)
    cache_key = make_cache_key(REPORT_PREFIX, period=period.value, start=start.isoformat())

    if use_cache:
        cached = get_cache(cache_key)
        if cached is not None:
            logger.debug("reports.cache_hit", key=cache_key)
            return cached

    report = await build_period_report(db, start, end, period)
    set_cache(cache_key, report)
    logger.info(
        "reports.built",
        period=period.value,
        start=start.isoformat(),
        end=end.isoformat(),
        missing_config_days=len(report.missing_config_days),
    )
    return report


async def build_dashboard(db: AsyncSession, today: date | None = None) -> DashboardResponse:
    """Today's figures, month-to-date report, pending expenses and latest closings."""
    today = today or today_utc()

    today_figures = await collect_period_figures(db, today, add_days(today, 1))
    month_start = start_of_month(today)
    month_report = await build_period_report(db, month_start, add_days(today, 1), ReportPeriod.MONTH)

    pending = await db.execute(
        select(Expense)
        .where(Expense.status == ExpenseStatus.PENDING)
        .order_by(Expense.date.desc())
        .limit(DASHBOARD_LIST_SIZE)
    )
    closings = await db.execute(
        select(DailyClosing)
        .order_by(DailyClosing.date.desc(), DailyClosing.created_at.desc())
        .limit(DASHBOARD_LIST_SIZE)
    )

    return DashboardResponse(
        today=_day_row(today_figures.days[0]),
        month=month_report,
        pending_expenses=[ExpenseRead.model_validate(e) for e in pending.scalars().all()],
        latest_closings=[DailyClosingRead.model_validate(c) for c in closings.scalars().all()],
    )


async def build_daily_audit(
    db: AsyncSession,
    day: date,
    user_id: UUID | None = None,
) -> DailyAuditResponse:
    """Everything recorded on ``day``; ``user_id`` narrows it to one person."""
    start_dt, end_dt = day_range_utc(day)

    def _by_user(stmt, column):
        return stmt.where(column == user_id) if user_id else stmt

    production = await db.execute(
        _by_user(
            select(ProductionEntry).where(
                ProductionEntry.date >= start_dt, ProductionEntry.date < end_dt
            ),
            ProductionEntry.user_id,
        ).order_by(ProductionEntry.created_at.desc())
    )
    sales = await db.execute(
        _by_user(
            select(Sale).where(Sale.date >= start_dt, Sale.date < end_dt),
            Sale.user_id,
        ).order_by(Sale.date.desc())
    )
    expenses = await db.execute(
        _by_user(
            select(Expense).where(Expense.date >= start_dt, Expense.date < end_dt),
            Expense.user_id,
        ).order_by(Expense.date.desc())
    )
    closings = await db.execute(
        _by_user(select(DailyClosing).where(DailyClosing.date == day), DailyClosing.user_id).order_by(
            DailyClosing.created_at.desc()
        )
    )
    shifts = await db.execute(
        _by_user(
            select(Shift).where(Shift.opened_at >= start_dt, Shift.opened_at < end_dt),
            Shift.user_id,
        ).order_by(Shift.opened_at.desc())
    )

    expense_rows = [ExpenseRead.model_validate(e) for e in expenses.scalars().all()]
    approved_total = sum(
        (e.amount for e in expense_rows if e.status == ExpenseStatus.APPROVED), ZERO
    )
    configs = await load_configs(db, until=add_days(day, 1))

    return DailyAuditResponse(
        date=day,
        user_id=user_id,
        production=[ProductionRead.model_validate(p) for p in production.scalars().all()],
        sales=[SaleRead.model_validate(s) for s in sales.scalars().all()],
        expenses=expense_rows,
        closings=[DailyClosingRead.model_validate(c) for c in closings.scalars().all()],
        shifts=[ShiftRead.model_validate(s) for s in shifts.scalars().all()],
        approved_expenses_total=approved_total,
        fixed_cost=daily_fixed_cost(resolve_config_at(configs, day)),
    )


def _money(value: Decimal, places: str = "0.01") -> str:
    return str(Decimal(value).quantize(Decimal(places)))


async def audit_window(db: AsyncSession, days: list[date]) -> list[dict[str, Any]]:
    """Per-day raw figures used to cross-check reports against the database.

    Unlike the period report, ``sales`` here includes credit sales.
    """
    if not days:
        return []
    start_dt, end_dt = start_of_day(days[0]), start_of_day(add_days(days[-1], 1))
    configs = await load_configs(db, until=add_days(days[-1], 1))

    sales = sum_by_day(
        await _rows(db, select(Sale.date, Sale.amount).where(Sale.date >= start_dt, Sale.date < end_dt))
    )
    expenses = sum_by_day(
        await _rows(
            db,
            select(Expense.date, Expense.amount).where(
                Expense.date >= start_dt,
                Expense.date < end_dt,
                Expense.status == ExpenseStatus.APPROVED,
            ),
        )
    )
    production = await _rows(
        db,
        select(
            ProductionEntry.date, ProductionEntry.baskets_count, ProductionEntry.liters_produced
        ).where(ProductionEntry.date >= start_dt, ProductionEntry.date < end_dt),
    )
    baskets = sum_counts_by_day((d, b) for d, b, _ in production)
    liters = sum_by_day((d, lt) for d, _, lt in production)
    payments = sum_by_day(
        await _rows(
            db,
            select(CreditLedgerEntry.date, CreditLedgerEntry.amount).where(
                CreditLedgerEntry.date >= start_dt,
                CreditLedgerEntry.date < end_dt,
                CreditLedgerEntry.kind == LedgerEntryKind.PAYMENT,
            ),
        )
    )
    closing_rows = await db.execute(
        select(
            DailyClosing.date,
            func.count(DailyClosing.id),
            func.sum(DailyClosing.actual_amount),
            func.sum(DailyClosing.expected_amount),
            func.sum(DailyClosing.difference),
        )
        .where(DailyClosing.date >= days[0], DailyClosing.date <= days[-1])
        .group_by(DailyClosing.date)
    )
    closings = {row[0].isoformat(): row[1:] for row in closing_rows.all()}

    out = []
    for day in days:
        key = day.isoformat()
        config = resolve_config_at(configs, day)
        count, actual, expected, difference = closings.get(key, (0, ZERO, ZERO, ZERO))
        out.append(
            {
                "day": key,
                "sales": _money(sales.get(key, ZERO)),
                "approved_expenses": _money(expenses.get(key, ZERO)),
                "baskets": baskets.get(key, 0),
                "liters_produced": _money(liters.get(key, ZERO), "0.001"),
                "fixed_cost": _money(daily_fixed_cost(config)),
                "input_cost": _money(daily_input_cost(config, baskets.get(key, 0))),
                "closings": count,
                "closing_actual": _money(actual or ZERO),
                "closing_expected": _money(expected or ZERO),
                "closing_difference": _money(difference or ZERO),
                "credit_payments": _money(payments.get(key, ZERO)),
                "config_effective_from": config.effective_from.isoformat() if config else None,
            }
        )
    return out
