# File: src/stallpilot/models/daily_closing.py
"""DailyClosing model: the cash reconciliation submitted when a shift ends."""

import uuid
from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stallpilot.core.db import Base
from stallpilot.models.enums import ClosingStatus
from stallpilot.utils.datetime import now_utc

if TYPE_CHECKING:
    from stallpilot.models.shift import Shift
    from stallpilot.models.user import User


class DailyClosing(Base):
    """Expected vs. actual cash for one shift. Written once, never updated."""

    __tablename__ = "daily_closings"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    date: Mapped[date_type] = mapped_column(nullable=False, index=True)

    # liters (3 places) x price (2 places) is kept exact
    expected_amount: Mapped[Decimal] = mapped_column(Numeric(15, 5), nullable=False)

    actual_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    difference: Mapped[Decimal] = mapped_column(Numeric(15, 5), nullable=False)

    leftover_liters: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)

    justification: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[ClosingStatus] = mapped_column(
        String(20),
        nullable=False,
        default=ClosingStatus.SUBMITTED.value,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    user: Mapped["User"] = relationship("User", lazy="selectin")

    # One closing per shift
    shift_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("shifts.id"),
        nullable=False,
        unique=True,
    )

    shift: Mapped["Shift"] = relationship("Shift", lazy="selectin")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=now_utc)

    @property
    def has_difference(self) -> bool:
        return self.difference != 0

    def __repr__(self) -> str:
        return (
            f"<DailyClosing(date={self.date}, expected={self.expected_amount}, "
            f"actual={self.actual_amount}, difference={self.difference})>"
        )
