# File: src/stallpilot/models/credit.py
"""Store-credit (fiado) customers and their ledger."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stallpilot.core.db import Base
from stallpilot.models.enums import LedgerEntryKind
from stallpilot.utils.datetime import now_utc

if TYPE_CHECKING:
    from stallpilot.models.sale import Sale
    from stallpilot.models.user import User


class CreditCustomer(Base):
    """Customer buying on store credit, with a running balance owed."""

    __tablename__ = "credit_customers"
    __table_args__ = (
        CheckConstraint("balance_owed >= 0", name="credit_customer_balance_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)

    balance_owed: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    # Set when a payment brings the balance to exactly zero
    settled_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=now_utc)

    entries: Mapped[list["CreditLedgerEntry"]] = relationship(
        "CreditLedgerEntry",
        back_populates="customer",
        order_by="CreditLedgerEntry.date.desc()",
    )

    def __repr__(self) -> str:
        return f"<CreditCustomer(name={self.name}, balance_owed={self.balance_owed})>"


class CreditLedgerEntry(Base):
    """One PURCHASE or PAYMENT on a customer's credit account."""

    __tablename__ = "credit_ledger_entries"
    __table_args__ = (CheckConstraint("amount > 0", name="credit_entry_amount_positive"),)

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("credit_customers.id"),
        nullable=False,
        index=True,
    )

    customer: Mapped["CreditCustomer"] = relationship(
        "CreditCustomer",
        back_populates="entries",
    )

    kind: Mapped[LedgerEntryKind] = mapped_column(String(20), nullable=False, index=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    date: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=now_utc,
        index=True,
    )

    # PURCHASE entries point at the CREDIT sale they record
    sale_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("sales.id"),
        nullable=True,
        unique=True,
    )

    sale: Mapped["Sale | None"] = relationship("Sale", lazy="selectin")

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
    )

    user: Mapped["User"] = relationship("User", lazy="selectin")

    marked_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    paid_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<CreditLedgerEntry(kind={self.kind}, amount={self.amount}, paid={self.marked_paid})>"
