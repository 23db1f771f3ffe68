# File: src/stallpilot/core/credit.py
"""Store-credit ("fiado") accounts: purchases, payments and settlement."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stallpilot.core.errors import BusinessRuleError, NotFoundError, ValidationError
from stallpilot.core.logging import get_logger
from stallpilot.models.credit import CreditCustomer, CreditLedgerEntry
from stallpilot.models.enums import LedgerEntryKind, PaymentType
from stallpilot.models.sale import Sale
from stallpilot.utils.datetime import now_utc

logger = get_logger(__name__)

LEDGER_PAGE_SIZE = 100


async def create_customer(db: AsyncSession, name: str, phone: str | None = None) -> CreditCustomer:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Customer name is required", details={"field": "name"})

    customer = CreditCustomer(name=name, phone=phone or None)
    db.add(customer)
    await db.flush()
    logger.info("credit.customer_created", customer_id=str(customer.id))
    return customer


async def _get_customer(db: AsyncSession, customer_id: UUID, lock: bool = False) -> CreditCustomer:
    stmt = select(CreditCustomer).where(CreditCustomer.id == customer_id)
    if lock:
        stmt = stmt.with_for_update()
    customer = (await db.execute(stmt)).scalar_one_or_none()
    if customer is None or not customer.is_active:
        raise NotFoundError("CreditCustomer", str(customer_id))
    return customer


async def register_purchase(
    db: AsyncSession,
    customer_id: UUID,
    amount: Decimal,
    user_id: UUID,
    shift_id: UUID,
    liters: Decimal | None = None,
) -> CreditLedgerEntry:
    """
    Record a purchase on credit.

    Creates a CREDIT sale in the current shift, a PURCHASE ledger entry
    pointing at it, and raises the customer's balance. A settled customer
    who buys again is no longer settled.
    """
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero", details={"field": "amount"})

    customer = await _get_customer(db, customer_id, lock=True)
    now = now_utc()

    sale = Sale(
        date=now,
        amount=amount,
        liters=liters,
        payment_type=PaymentType.CREDIT,
        user_id=user_id,
        shift_id=shift_id,
        credit_customer_id=customer.id,
    )
    db.add(sale)
    await db.flush()

    entry = CreditLedgerEntry(
        customer_id=customer.id,
        kind=LedgerEntryKind.PURCHASE,
        amount=amount,
        date=now,
        sale_id=sale.id,
        user_id=user_id,
    )
    db.add(entry)

    customer.balance_owed = customer.balance_owed + amount
    customer.settled_at = None
    await db.flush()

    logger.info(
        "credit.purchase",
        customer_id=str(customer.id),
        sale_id=str(sale.id),
        amount=str(amount),
        balance=str(customer.balance_owed),
    )
    return entry


async def register_payment(
    db: AsyncSession,
    customer_id: UUID,
    amount: Decimal,
    user_id: UUID,
) -> CreditLedgerEntry:
    """
    Record a payment against a customer's balance.

    The customer row is locked so two payments can't both pass the balance
    check. Paying off the whole balance settles the account and marks every
    open purchase as paid.

    Raises:
        ValidationError: Non-positive amount
        NotFoundError: Unknown or inactive customer
        BusinessRuleError: PAYMENT_EXCEEDS_BALANCE
    """
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero", details={"field": "amount"})

    customer = await _get_customer(db, customer_id, lock=True)
    if amount > customer.balance_owed:
        logger.info(
            "credit.payment_rejected",
            customer_id=str(customer.id),
            amount=str(amount),
            balance=str(customer.balance_owed),
        )
        raise BusinessRuleError(
            "PAYMENT_EXCEEDS_BALANCE",
            "Payment is greater than the amount owed",
            details={"balance_owed": str(customer.balance_owed), "amount": str(amount)},
        )

    now = now_utc()
    entry = CreditLedgerEntry(
        customer_id=customer.id,
        kind=LedgerEntryKind.PAYMENT,
        amount=amount,
        date=now,
        user_id=user_id,
        marked_paid=True,
        paid_at=now,
    )
    db.add(entry)

    customer.balance_owed = customer.balance_owed - amount
    if customer.balance_owed == 0:
        customer.settled_at = now
        await db.execute(
            update(CreditLedgerEntry)
            .where(
                CreditLedgerEntry.customer_id == customer.id,
                CreditLedgerEntry.kind == LedgerEntryKind.PURCHASE,
                CreditLedgerEntry.marked_paid.is_(False),
            )
            .values(marked_paid=True, paid_at=now)
            .execution_options(synchronize_session="fetch")
        )
        logger.info("credit.settled", customer_id=str(customer.id))
    else:
        customer.settled_at = None
    await db.flush()

    logger.info(
        "credit.payment",
        customer_id=str(customer.id),
        amount=str(amount),
        balance=str(customer.balance_owed),
    )
    return entry


async def list_customers(db: AsyncSession, name_filter: str | None = None) -> list[CreditCustomer]:
    """Active customers, biggest debt first."""
    stmt = select(CreditCustomer).where(CreditCustomer.is_active.is_(True))
    if name_filter and name_filter.strip():
        stmt = stmt.where(CreditCustomer.name.ilike(f"%{name_filter.strip()}%"))
    stmt = stmt.order_by(CreditCustomer.balance_owed.desc(), CreditCustomer.name.asc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def customer_ledger(
    db: AsyncSession, customer_id: UUID, limit: int = LEDGER_PAGE_SIZE
) -> tuple[CreditCustomer, list[CreditLedgerEntry]]:
    """A customer and their latest ledger entries, newest first."""
    customer = await _get_customer(db, customer_id)
    stmt = (
        select(CreditLedgerEntry)
        .where(CreditLedgerEntry.customer_id == customer.id)
        .order_by(CreditLedgerEntry.date.desc())
        .limit(limit)
    )
    result = await db.execute(stmt)
    return customer, list(result.scalars().all())
