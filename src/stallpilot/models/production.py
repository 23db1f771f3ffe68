# File: src/stallpilot/models/production.py
"""Production entries (append-only)."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stallpilot.core.db import Base
from stallpilot.utils.datetime import now_utc

if TYPE_CHECKING:
    from stallpilot.models.user import User


class ProductionEntry(Base):
    """Baskets of raw input processed and liters produced during a shift."""

    __tablename__ = "production_entries"
    __table_args__ = (
        CheckConstraint("baskets_count >= 0", name="production_baskets_non_negative"),
        CheckConstraint("liters_produced >= 0", name="production_liters_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    baskets_count: Mapped[int] = mapped_column(Integer, nullable=False)

    liters_produced: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)

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

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=now_utc,
    )

    def __repr__(self) -> str:
        return (
            f"<ProductionEntry(date={self.date}, baskets={self.baskets_count}, "
            f"liters={self.liters_produced})>"
        )
