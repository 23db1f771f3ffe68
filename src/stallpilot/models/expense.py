# File: src/stallpilot/models/expense.py
"""Expense model."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from stallpilot.core.db import Base
from stallpilot.models.enums import ExpenseStatus
from stallpilot.utils.datetime import now_utc

if TYPE_CHECKING:
    from stallpilot.models.user import User

# Category used for staff daily wages posted by the admin
DAILY_WAGE_CATEGORY = "STAFF_DAILY_WAGE"


class Expense(Base):
    """Expense registered by staff (PENDING) or posted by the admin."""

    __tablename__ = "expenses"
    __table_args__ = (CheckConstraint("amount >= 0", name="expense_amount_non_negative"),)

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    date: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=now_utc,
        index=True,
    )

    description: Mapped[str] = mapped_column(String(200), nullable=False)

    category: Mapped[str] = mapped_column(String(100), nullable=False)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    status: Mapped[ExpenseStatus] = mapped_column(
        String(20),
        nullable=False,
        default=ExpenseStatus.PENDING.value,
        index=True,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    user: Mapped["User"] = relationship("User", foreign_keys=[user_id], lazy="selectin")

    shift_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("shifts.id"),
        nullable=True,
        index=True,
    )

    approved_by_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=True,
    )

    approved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    @validates("amount")
    def validate_amount(self, key: str, value: Decimal) -> Decimal:
        """Validate that amount is non-negative."""
        if value < 0:
            raise ValueError("Expense amount cannot be negative")
        return value

    def __repr__(self) -> str:
        desc = self.description[:20] if self.description else ""
        return f"<Expense(id={self.id}, amount={self.amount}, status={self.status}, description={desc})>"
