"""Pydantic schemas for reports, shift summaries, dashboard and audit."""

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from stallpilot.models.enums import ReportPeriod
from stallpilot.models.shift_schemas import (
    DailyClosingRead,
    ExpenseRead,
    ProductionRead,
    SaleRead,
    ShiftRead,
)


class DayReportRow(BaseModel):
    """Figures for one UTC day."""

    day: date_type
    sales: Decimal
    credit_payments: Decimal
    inflow: Decimal
    expenses: Decimal
    baskets: int
    input_cost: Decimal
    fixed_cost: Decimal
    profit: Decimal


class PeriodTotals(BaseModel):
    sales: Decimal
    credit_payments: Decimal
    inflow: Decimal
    expenses: Decimal
    input_cost: Decimal
    fixed_cost: Decimal
    profit: Decimal


class PeriodReport(BaseModel):
    """Profit report for the half-open range [start, end)."""

    period: ReportPeriod | None = None
    start: date_type
    end: date_type
    days: list[DayReportRow] = Field(default_factory=list)
    totals: PeriodTotals
    missing_config_days: list[date_type] = Field(
        default_factory=list,
        description="Days before the first financial config; their costs count as zero",
    )


class ClosingResult(BaseModel):
    """Outcome of a shift closing attempt.

    A blocked result means the cash did not match and no justification was
    given; nothing was saved and the shift is still open.
    """

    ok: bool
    blocked: bool = False
    message: str
    expected_amount: Decimal
    actual_amount: Decimal
    difference: Decimal
    received: Decimal = Field(..., description="Sales paid on the spot")
    credit: Decimal = Field(..., description="Sales on credit")
    closing_id: UUID | None = None
    redirect_to: str | None = None


class ShiftSummary(BaseModel):
    """Running totals of an open shift, shown to staff before closing."""

    shift_id: UUID
    opened_at: datetime
    liters_produced: Decimal
    sales_by_payment_type: dict[str, Decimal]
    credit_total: Decimal
    received_total: Decimal
    price_per_liter: Decimal | None
    production_value: Decimal
    missing_to_close: Decimal


class DashboardResponse(BaseModel):
    """Admin landing page figures."""

    today: DayReportRow
    month: PeriodReport
    pending_expenses: list[ExpenseRead]
    latest_closings: list[DailyClosingRead]


class DailyAuditResponse(BaseModel):
    """Everything recorded on one UTC day, optionally for one user."""

    date: date_type
    user_id: UUID | None = None
    production: list[ProductionRead]
    sales: list[SaleRead]
    expenses: list[ExpenseRead]
    closings: list[DailyClosingRead]
    shifts: list[ShiftRead]
    approved_expenses_total: Decimal
    fixed_cost: Decimal
