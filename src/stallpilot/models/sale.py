# File: src/stallpilot/models/sale.py
"""Sale model."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stallpilot.core.db import Base
from stallpilot.models.enums import PaymentType
from stallpilot.utils.datetime import now_utc

if TYPE_CHECKING:
    from stallpilot.models.credit import CreditCustomer
    from stallpilot.models.user import User


class Sale(Base):
    """A sale registered by staff during a shift.

    CREDIT sales are receivables: they are not cash inflow until the
    customer pays.
    """

    __tablename__ = "sales"
    __table_args__ = (CheckConstraint("amount >= 0", name="sale_amount_non_negative"),)

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

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    liters: Mapped[Decimal | None] = mapped_column(Numeric(12, 3), nullable=True)

    payment_type: Mapped[PaymentType] = mapped_column(
        String(20),
        nullable=False,
        index=True,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    user: Mapped["User"] = relationship("User", lazy="selectin")

    shift_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("shifts.id"),
        nullable=False,
        index=True,
    )

    credit_customer_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("credit_customers.id"),
        nullable=True,
        index=True,
    )

    credit_customer: Mapped["CreditCustomer | None"] = relationship(
        "CreditCustomer",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Sale(date={self.date}, amount={self.amount}, type={self.payment_type})>"
