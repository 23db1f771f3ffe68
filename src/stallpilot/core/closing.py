# File: src/stallpilot/core/closing.py
"""Shift cash closing and the running shift summary.

Expected cash is what the liters that left the stand are worth:
``(liters produced - leftover liters) * price per liter``. Actual cash is
what the shift sold: sales paid on the spot plus sales on credit.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stallpilot.core.errors import (
    BusinessRuleError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from stallpilot.core.finance import ZERO
from stallpilot.core.logging import get_logger
from stallpilot.core.validators import MAX_AMOUNT, MAX_CLOSING_AMOUNT
from stallpilot.models.credit import CreditLedgerEntry
from stallpilot.models.daily_closing import DailyClosing
from stallpilot.models.enums import ClosingStatus, LedgerEntryKind, PaymentType
from stallpilot.models.financial_config import FinancialConfig
from stallpilot.models.production import ProductionEntry
from stallpilot.models.report_schemas import ClosingResult, ShiftSummary
from stallpilot.models.sale import Sale
from stallpilot.models.shift import Shift
from stallpilot.utils.datetime import now_utc, today_utc

logger = get_logger(__name__)

CLOSING_DONE_REDIRECT = "/login?ok=closing"


@dataclass
class ShiftTotals:
    """Aggregates of one shift's production and sales."""

    liters_produced: Decimal
    received: Decimal
    credit_purchases: Decimal
    credit_without_customer: Decimal

    @property
    def credit(self) -> Decimal:
        return self.credit_purchases + self.credit_without_customer

    @property
    def actual(self) -> Decimal:
        return self.received + self.credit


async def get_price_per_liter(db: AsyncSession, day: date) -> Decimal | None:
    """Sell price from the config in effect on ``day``."""
    stmt = (
        select(FinancialConfig.sell_price_per_liter)
        .where(FinancialConfig.effective_from <= day)
        .order_by(FinancialConfig.effective_from.desc())
        .limit(1)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def _sum(db: AsyncSession, stmt) -> Decimal:
    value = (await db.execute(stmt)).scalar_one_or_none()
    return Decimal(value) if value is not None else ZERO


async def get_shift_totals(db: AsyncSession, shift_id: UUID) -> ShiftTotals:
    liters = await _sum(
        db,
        select(func.sum(ProductionEntry.liters_produced)).where(
            ProductionEntry.shift_id == shift_id
        ),
    )
    received = await _sum(
        db,
        select(func.sum(Sale.amount)).where(
            Sale.shift_id == shift_id,
            Sale.payment_type != PaymentType.CREDIT,
        ),
    )
    credit_purchases = await _sum(
        db,
        select(func.sum(CreditLedgerEntry.amount))
        .join(Sale, CreditLedgerEntry.sale_id == Sale.id)
        .where(
            CreditLedgerEntry.kind == LedgerEntryKind.PURCHASE,
            Sale.shift_id == shift_id,
        ),
    )
    # Credit sales typed without picking a customer
    credit_without_customer = await _sum(
        db,
        select(func.sum(Sale.amount)).where(
            Sale.shift_id == shift_id,
            Sale.payment_type == PaymentType.CREDIT,
            Sale.credit_customer_id.is_(None),
        ),
    )
    return ShiftTotals(
        liters_produced=liters,
        received=received,
        credit_purchases=credit_purchases,
        credit_without_customer=credit_without_customer,
    )


async def close_shift(
    db: AsyncSession,
    shift_id: UUID,
    user_id: UUID,
    closing_date: date,
    leftover_liters: Decimal,
    justification: str | None = None,
) -> ClosingResult:
    """
    Reconcile a shift's cash and close it.

    A nonzero difference without a justification returns a blocked result
    and writes nothing. Otherwise a SUBMITTED DailyClosing is added and the
    shift is closed; the caller's transaction commits both together.

    Raises:
        NotFoundError: Unknown shift
        ForbiddenError: Shift belongs to another user
        InvalidStateError: Shift already closed
        ValidationError: Expected, actual or difference too large to store
        BusinessRuleError: PRICE_NOT_CONFIGURED when no config covers the date
    """
    stmt = select(Shift).where(Shift.id == shift_id).with_for_update()
    shift = (await db.execute(stmt)).scalar_one_or_none()
    if shift is None:
        raise NotFoundError("Shift", str(shift_id))
    if shift.user_id != user_id:
        raise ForbiddenError("Shift belongs to another user")
    if not shift.is_open:
        raise InvalidStateError("Shift is already closed", details={"shift_id": str(shift_id)})

    price = await get_price_per_liter(db, closing_date)
    if price is None:
        logger.warning("closing.price_missing", shift_id=str(shift_id), date=closing_date.isoformat())
        raise BusinessRuleError(
            "PRICE_NOT_CONFIGURED",
            "Price per liter is not configured for this date",
            details={"date": closing_date.isoformat()},
        )

    totals = await get_shift_totals(db, shift_id)
    expected = (totals.liters_produced - leftover_liters) * price
    actual = totals.actual
    difference = actual - expected
    justification = (justification or "").strip() or None

    if abs(expected) > MAX_CLOSING_AMOUNT or abs(difference) > MAX_CLOSING_AMOUNT or actual > MAX_AMOUNT:
        logger.warning("closing.out_of_range", shift_id=str(shift_id), expected=str(expected))
        raise ValidationError(
            "Closing figures are too large to record",
            details={"expected_amount": str(expected), "actual_amount": str(actual)},
        )

    if difference != 0 and justification is None:
        logger.info(
            "closing.blocked",
            shift_id=str(shift_id),
            expected=str(expected),
            actual=str(actual),
            difference=str(difference),
        )
        return ClosingResult(
            ok=False,
            blocked=True,
            message="Cash difference detected. Add a justification to submit.",
            expected_amount=expected,
            actual_amount=actual,
            difference=difference,
            received=totals.received,
            credit=totals.credit,
        )

    closing = DailyClosing(
        date=closing_date,
        expected_amount=expected,
        actual_amount=actual,
        difference=difference,
        leftover_liters=leftover_liters,
        justification=justification,
        status=ClosingStatus.SUBMITTED,
        user_id=user_id,
        shift_id=shift_id,
    )
    db.add(closing)
    shift.closed_at = now_utc()
    await db.flush()

    logger.info(
        "closing.submitted",
        closing_id=str(closing.id),
        shift_id=str(shift_id),
        difference=str(difference),
        justified=justification is not None,
    )
    return ClosingResult(
        ok=True,
        message="Closing submitted.",
        expected_amount=expected,
        actual_amount=actual,
        difference=difference,
        received=totals.received,
        credit=totals.credit,
        closing_id=closing.id,
        redirect_to=CLOSING_DONE_REDIRECT,
    )


async def shift_summary(db: AsyncSession, shift: Shift, day: date | None = None) -> ShiftSummary:
    """Totals of an open shift and how much is still missing to close.

    ``missing_to_close`` is production value minus all sales; negative means
    the shift sold more than the produced liters are worth.
    """
    day = day or today_utc()
    price = await get_price_per_liter(db, day)
    totals = await get_shift_totals(db, shift.id)

    rows = await db.execute(
        select(Sale.payment_type, func.sum(Sale.amount))
        .where(Sale.shift_id == shift.id, Sale.payment_type != PaymentType.CREDIT)
        .group_by(Sale.payment_type)
    )
    by_type = {t.value: ZERO for t in PaymentType if t is not PaymentType.CREDIT}
    for payment_type, amount in rows.all():
        by_type[PaymentType(payment_type).value] = Decimal(amount or 0)
    by_type[PaymentType.CREDIT.value] = totals.credit

    production_value = totals.liters_produced * price if price is not None else ZERO
    missing = production_value - totals.actual if price is not None else ZERO

    return ShiftSummary(
        shift_id=shift.id,
        opened_at=shift.opened_at,
        liters_produced=totals.liters_produced,
        sales_by_payment_type=by_type,
        credit_total=totals.credit,
        received_total=totals.received,
        price_per_liter=price,
        production_value=production_value,
        missing_to_close=missing,
    )
