# File: src/stallpilot/api/staff.py
"""Staff routes: shift summary, production, sales, expenses and cash closing."""

from fastapi import APIRouter, Depends, Form, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from stallpilot.api.auth import StaffContext, require_staff
from stallpilot.api.utils import parse_form
from stallpilot.core.cache import invalidate_reports_on_commit
from stallpilot.core.closing import close_shift, shift_summary
from stallpilot.core.db import get_db
from stallpilot.core.logging import get_logger
from stallpilot.models.enums import ExpenseStatus
from stallpilot.models.expense import Expense
from stallpilot.models.production import ProductionEntry
from stallpilot.models.report_schemas import ClosingResult, ShiftSummary
from stallpilot.models.sale import Sale
from stallpilot.models.schemas import ActionResult
from stallpilot.models.shift_schemas import ClosingSubmit, ExpenseCreate, ProductionCreate, SaleCreate
from stallpilot.utils.datetime import now_utc, start_of_day

logger = get_logger(__name__)

router = APIRouter(prefix="/staff", tags=["staff"])


@router.get("", response_model=ShiftSummary)
async def staff_home(
    staff: StaffContext = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> ShiftSummary:
    """Running totals of the current shift."""
    return await shift_summary(db, staff.shift)


@router.post("/production", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
async def add_production(
    date: str | None = Form(None),
    baskets_count: str | None = Form(None),
    liters_produced: str | None = Form(None),
    staff: StaffContext = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> ActionResult:
    form = parse_form(
        ProductionCreate, date=date, baskets_count=baskets_count, liters_produced=liters_produced
    )
    entry = ProductionEntry(
        date=start_of_day(form.date),
        baskets_count=form.baskets_count,
        liters_produced=form.liters_produced,
        user_id=staff.user.id,
        shift_id=staff.shift_id,
    )
    db.add(entry)
    await db.flush()
    invalidate_reports_on_commit(db)

    logger.info(
        "production.created",
        production_id=str(entry.id),
        shift_id=str(staff.shift_id),
        baskets=form.baskets_count,
    )
    return ActionResult(ok=True, message="Production registered.")


@router.post("/sales", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
async def add_sale(
    amount: str | None = Form(None),
    payment_type: str | None = Form(None),
    liters: str | None = Form(None),
    date: str | None = Form(None),
    staff: StaffContext = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> ActionResult:
    form = parse_form(SaleCreate, amount=amount, payment_type=payment_type, liters=liters, date=date)
    sale = Sale(
        date=start_of_day(form.date) if form.date else now_utc(),
        amount=form.amount,
        liters=form.liters,
        payment_type=form.payment_type,
        user_id=staff.user.id,
        shift_id=staff.shift_id,
    )
    db.add(sale)
    await db.flush()
    invalidate_reports_on_commit(db)

    logger.info(
        "sale.created",
        sale_id=str(sale.id),
        shift_id=str(staff.shift_id),
        payment_type=form.payment_type.value,
        amount=str(form.amount),
    )
    return ActionResult(ok=True, message="Sale registered.")


@router.post("/expenses", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
async def add_expense(
    description: str | None = Form(None),
    category: str | None = Form(None),
    amount: str | None = Form(None),
    date: str | None = Form(None),
    staff: StaffContext = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> ActionResult:
    """Expenses wait for an admin before they count in reports."""
    form = parse_form(
        ExpenseCreate, description=description, category=category, amount=amount, date=date
    )
    expense = Expense(
        date=start_of_day(form.date) if form.date else now_utc(),
        description=form.description,
        category=form.category,
        amount=form.amount,
        status=ExpenseStatus.PENDING,
        user_id=staff.user.id,
        shift_id=staff.shift_id,
    )
    db.add(expense)
    await db.flush()

    logger.info("expense.created", expense_id=str(expense.id), shift_id=str(staff.shift_id))
    return ActionResult(ok=True, message="Expense registered (pending approval).")


@router.post("/closing", response_model=ClosingResult)
async def submit_closing(
    request: Request,
    date: str | None = Form(None),
    leftover_liters: str | None = Form(None),
    justification: str | None = Form(None),
    staff: StaffContext = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> ClosingResult:
    """Close the shift's cash. A successful closing also ends the session."""
    form = parse_form(
        ClosingSubmit, date=date, leftover_liters=leftover_liters, justification=justification
    )
    result = await close_shift(
        db,
        shift_id=staff.shift_id,
        user_id=staff.user.id,
        closing_date=form.date,
        leftover_liters=form.leftover_liters,
        justification=form.justification,
    )
    if result.ok:
        request.session.clear()
    return result
