# File: src/stallpilot/models/shift.py
"""Shift model: one staff work session, from login to cash closing."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stallpilot.core.db import Base
from stallpilot.models.enums import ShiftStatus
from stallpilot.utils.datetime import now_utc

if TYPE_CHECKING:
    from stallpilot.models.user import User


class Shift(Base):
    """Work session for one user. OPEN while ``closed_at`` is NULL."""

    __tablename__ = "shifts"
    __table_args__ = (
        # A user has at most one open shift
        Index(
            "uq_shifts_one_open_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("closed_at IS NULL"),
            sqlite_where=text("closed_at IS NULL"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="shifts",
        lazy="selectin",
    )

    opened_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=now_utc,
        index=True,
    )

    closed_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
    )

    @property
    def status(self) -> ShiftStatus:
        return ShiftStatus.OPEN if self.closed_at is None else ShiftStatus.CLOSED

    @property
    def is_open(self) -> bool:
        return self.closed_at is None

    def __repr__(self) -> str:
        return f"<Shift(id={self.id}, user_id={self.user_id}, status={self.status.value})>"
