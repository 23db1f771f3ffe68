# File: src/stallpilot/api/admin.py
"""Admin routes: dashboard, financial config, wages, users, expense review, audit."""

from uuid import UUID

from fastapi import APIRouter, Depends, Form, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stallpilot.api.auth import require_admin
from stallpilot.api.utils import parse_form
from stallpilot.core.cache import invalidate_reports_on_commit
from stallpilot.core.db import get_db
from stallpilot.core.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from stallpilot.core.logging import get_logger
from stallpilot.core.reports import build_daily_audit, build_dashboard
from stallpilot.core.security import hash_pin
from stallpilot.models.config_schemas import (
    DailyWageCreate,
    ExpenseReview,
    FinancialConfigRead,
    FinancialConfigUpsert,
)
from stallpilot.models.enums import ExpenseStatus, UserRole
from stallpilot.models.expense import DAILY_WAGE_CATEGORY, Expense
from stallpilot.models.financial_config import FinancialConfig
from stallpilot.models.report_schemas import DailyAuditResponse, DashboardResponse
from stallpilot.models.schemas import ActionResult
from stallpilot.models.shift_schemas import ExpenseRead
from stallpilot.models.user import User
from stallpilot.models.user_schemas import UserCreate, UserResponse
from stallpilot.utils.datetime import now_utc, parse_date_only, start_of_day, today_utc

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("", response_model=DashboardResponse)
async def dashboard(
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> DashboardResponse:
    return await build_dashboard(db)


@router.get("/config", response_model=list[FinancialConfigRead])
async def list_configs(
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(FinancialConfig).order_by(FinancialConfig.effective_from.desc()))
    return result.scalars().all()


@router.post("/config", response_model=FinancialConfigRead)
async def upsert_config(
    effective_from: str | None = Form(None),
    sell_price_per_liter: str | None = Form(None),
    cost_per_basket: str | None = Form(None),
    monthly_rent: str | None = Form(None),
    monthly_electricity: str | None = Form(None),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create the config starting on ``effective_from`` or replace the one already there."""
    form = parse_form(
        FinancialConfigUpsert,
        effective_from=effective_from,
        sell_price_per_liter=sell_price_per_liter,
        cost_per_basket=cost_per_basket,
        monthly_rent=monthly_rent,
        monthly_electricity=monthly_electricity,
    )
    stmt = select(FinancialConfig).where(FinancialConfig.effective_from == form.effective_from)
    config = (await db.execute(stmt)).scalar_one_or_none()

    created = config is None
    if created:
        config = FinancialConfig(effective_from=form.effective_from, created_by_id=admin.id)
        db.add(config)

    config.sell_price_per_liter = form.sell_price_per_liter
    config.cost_per_basket = form.cost_per_basket
    config.monthly_rent = form.monthly_rent
    config.monthly_electricity = form.monthly_electricity
    await db.flush()
    await db.refresh(config)
    invalidate_reports_on_commit(db)

    logger.info(
        "config.saved",
        config_id=str(config.id),
        effective_from=form.effective_from.isoformat(),
        created=created,
        admin_id=str(admin.id),
    )
    return config


@router.post("/wages", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
async def post_daily_wage(
    user_id: str | None = Form(None),
    amount: str | None = Form(None),
    date: str | None = Form(None),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ActionResult:
    """Pay a staff member's daily wage: an expense that is approved right away."""
    form = parse_form(DailyWageCreate, user_id=user_id, amount=amount, date=date)

    staff = (await db.execute(select(User).where(User.id == form.user_id))).scalar_one_or_none()
    if staff is None or staff.role != UserRole.STAFF or not staff.is_active:
        raise ValidationError("Invalid staff member", details={"field": "user_id"})

    now = now_utc()
    expense = Expense(
        date=start_of_day(form.date or today_utc()),
        description=f"Daily wage - {staff.name}",
        category=DAILY_WAGE_CATEGORY,
        amount=form.amount,
        status=ExpenseStatus.APPROVED,
        user_id=admin.id,
        approved_by_id=admin.id,
        approved_at=now,
    )
    db.add(expense)
    await db.flush()
    invalidate_reports_on_commit(db)

    logger.info("wage.posted", expense_id=str(expense.id), staff_id=str(staff.id), amount=str(form.amount))
    return ActionResult(ok=True, message="Daily wage posted and approved.")


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(User).order_by(User.name.asc()))
    return result.scalars().all()


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    name: str | None = Form(None),
    pin: str | None = Form(None),
    role: str | None = Form(None),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    form = parse_form(UserCreate, name=name, pin=pin, role=role)

    existing = (await db.execute(select(User.id).where(User.name == form.name))).scalar_one_or_none()
    if existing is not None:
        raise ConflictError("User name is already in use", details={"name": form.name})

    user = User(name=form.name, pin_hash=hash_pin(form.pin), role=form.role)
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("user.created", user_id=str(user.id), role=form.role.value, admin_id=str(admin.id))
    return user


@router.post("/expenses/{expense_id}/review", response_model=ExpenseRead)
async def review_expense(
    expense_id: UUID,
    decision: str | None = Form(None),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Approve or reject a pending expense."""
    form = parse_form(ExpenseReview, decision=decision)

    expense = (await db.execute(select(Expense).where(Expense.id == expense_id))).scalar_one_or_none()
    if expense is None:
        raise NotFoundError("Expense", str(expense_id))
    if expense.status != ExpenseStatus.PENDING:
        raise InvalidStateError(
            "Expense was already reviewed", details={"status": str(expense.status)}
        )

    expense.status = ExpenseStatus.APPROVED if form.decision == "approve" else ExpenseStatus.REJECTED
    expense.approved_by_id = admin.id
    expense.approved_at = now_utc()
    await db.flush()
    invalidate_reports_on_commit(db)

    logger.info("expense.reviewed", expense_id=str(expense.id), status=expense.status, admin_id=str(admin.id))
    return expense


@router.get("/audit", response_model=DailyAuditResponse)
async def daily_audit(
    date: str | None = Query(None, description="YYYY-MM-DD, defaults to today"),
    user_id: UUID | None = Query(None),
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> DailyAuditResponse:
    try:
        day = parse_date_only(date) if date else today_utc()
    except ValueError as exc:
        raise ValidationError(str(exc), details={"field": "date"}) from exc
    return await build_daily_audit(db, day, user_id)
