# File: src/stallpilot/api/credit.py
"""Credit ("fiado") routes: customers, purchases on credit and payments."""

from uuid import UUID

from fastapi import APIRouter, Depends, Form, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from stallpilot.api.auth import StaffContext, get_current_user, require_staff
from stallpilot.api.utils import parse_form
from stallpilot.core import credit as credit_service
from stallpilot.core.cache import invalidate_reports_on_commit
from stallpilot.core.db import get_db
from stallpilot.models.credit_schemas import (
    CustomerCreate,
    CustomerDetail,
    CustomerRead,
    LedgerEntryRead,
    PaymentCreate,
    PurchaseCreate,
)
from stallpilot.models.schemas import ActionResult
from stallpilot.models.user import User

router = APIRouter(prefix="/credit", tags=["credit"])


@router.get("/customers", response_model=list[CustomerRead])
async def list_customers(
    q: str | None = Query(None, description="Filter by name"),
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await credit_service.list_customers(db, q)


@router.get("/customers/{customer_id}", response_model=CustomerDetail)
async def customer_detail(
    customer_id: UUID,
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CustomerDetail:
    customer, entries = await credit_service.customer_ledger(db, customer_id)
    return CustomerDetail(
        customer=CustomerRead.model_validate(customer),
        entries=[LedgerEntryRead.model_validate(e) for e in entries],
    )


@router.post("/customers", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
async def create_customer(
    name: str | None = Form(None),
    phone: str | None = Form(None),
    _: StaffContext = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    form = parse_form(CustomerCreate, name=name, phone=phone)
    return await credit_service.create_customer(db, form.name, form.phone)


@router.post("/purchases", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
async def register_purchase(
    customer_id: str | None = Form(None),
    amount: str | None = Form(None),
    liters: str | None = Form(None),
    staff: StaffContext = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> ActionResult:
    form = parse_form(PurchaseCreate, customer_id=customer_id, amount=amount, liters=liters)
    await credit_service.register_purchase(
        db,
        customer_id=form.customer_id,
        amount=form.amount,
        user_id=staff.user.id,
        shift_id=staff.shift_id,
        liters=form.liters,
    )
    return ActionResult(ok=True, message="Purchase recorded on credit.")


@router.post("/payments", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
async def register_payment(
    customer_id: str | None = Form(None),
    amount: str | None = Form(None),
    staff: StaffContext = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> ActionResult:
    """Payments count as inflow on the day they are received."""
    form = parse_form(PaymentCreate, customer_id=customer_id, amount=amount)
    await credit_service.register_payment(
        db, customer_id=form.customer_id, amount=form.amount, user_id=staff.user.id
    )
    invalidate_reports_on_commit(db)
    return ActionResult(ok=True, message="Payment recorded.")
