# File: src/stallpilot/core/shifts.py
"""Shift lifecycle at login time."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stallpilot.core.logging import get_logger
from stallpilot.models.shift import Shift
from stallpilot.models.user import User
from stallpilot.utils.datetime import now_utc

logger = get_logger(__name__)


async def get_open_shift(db: AsyncSession, user_id: UUID) -> Shift | None:
    """Most recent open shift of a user."""
    stmt = (
        select(Shift)
        .where(Shift.user_id == user_id, Shift.closed_at.is_(None))
        .order_by(Shift.opened_at.desc())
        .limit(1)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def open_or_reuse_shift(
    db: AsyncSession,
    user: User,
    now: datetime | None = None,
) -> Shift:
    """
    Return the shift a user works in after logging in.

    An open shift from today (UTC) is reused. An open shift left over from an
    earlier day is closed first, then a new one is opened.
    """
    now = now or now_utc()
    shift = await get_open_shift(db, user.id)

    if shift is not None:
        if shift.opened_at.date() == now.date():
            logger.info("shift.reused", shift_id=str(shift.id), user_id=str(user.id))
            return shift

        shift.closed_at = now
        await db.flush()
        logger.warning(
            "shift.stale_closed",
            shift_id=str(shift.id),
            user_id=str(user.id),
            opened_at=shift.opened_at.isoformat(),
        )

    shift = Shift(user_id=user.id, opened_at=now)
    db.add(shift)
    await db.flush()
    logger.info("shift.opened", shift_id=str(shift.id), user_id=str(user.id))
    return shift
