# File: src/stallpilot/scripts/seed.py
"""Create the initial admin user from ADMIN_NAME / ADMIN_PIN."""

import asyncio
import os
import sys

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stallpilot.core.db import AsyncSessionLocal
from stallpilot.core.logging import configure_logging, get_logger
from stallpilot.core.security import hash_pin
from stallpilot.models.enums import UserRole
from stallpilot.models.user import User

logger = get_logger(__name__)

DEFAULT_ADMIN_NAME = "Admin"
DEFAULT_ADMIN_PIN = "1234"


async def ensure_admin(db: AsyncSession, name: str, pin: str) -> tuple[User, bool]:
    """Return the user called ``name``, creating it as ADMIN if missing.

    An existing user is left untouched, whatever its role or PIN.
    """
    existing = (await db.execute(select(User).where(User.name == name))).scalar_one_or_none()
    if existing is not None:
        return existing, False

    admin = User(name=name, pin_hash=hash_pin(pin), role=UserRole.ADMIN, is_active=True)
    db.add(admin)
    await db.flush()
    return admin, True


async def main() -> None:
    name = os.getenv("ADMIN_NAME", DEFAULT_ADMIN_NAME).strip() or DEFAULT_ADMIN_NAME
    pin = os.getenv("ADMIN_PIN", DEFAULT_ADMIN_PIN).strip() or DEFAULT_ADMIN_PIN

    async with AsyncSessionLocal() as db:
        user, created = await ensure_admin(db, name, pin)
        await db.commit()

    if created:
        logger.info("seed.admin_created", user_id=str(user.id), name=name)
        print(f"✅ Admin '{name}' created")
    else:
        logger.info("seed.admin_exists", user_id=str(user.id), name=name)
        print(f"ℹ️  User '{name}' already exists, skipping")


def run() -> None:
    configure_logging()
    try:
        asyncio.run(main())
    except SQLAlchemyError as e:
        logger.error("seed.failed", error=str(e))
        print(f"\n❌ Error: {e}\n")
        sys.exit(1)


if __name__ == "__main__":
    run()
