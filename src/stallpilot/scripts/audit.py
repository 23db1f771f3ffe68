# File: src/stallpilot/scripts/audit.py
"""Print a JSON per-day audit of the last AUDIT_DAYS days.

Used to cross-check the admin reports against raw database totals.
"""

import asyncio
import json
import os
import sys

from sqlalchemy.exc import SQLAlchemyError

from stallpilot.core.db import AsyncSessionLocal
from stallpilot.core.logging import configure_logging, get_logger
from stallpilot.core.reports import audit_window
from stallpilot.utils.datetime import add_days, enumerate_days, today_utc

logger = get_logger(__name__)

DEFAULT_AUDIT_DAYS = 15


def audit_days_from_env() -> int:
    raw = os.getenv("AUDIT_DAYS", str(DEFAULT_AUDIT_DAYS))
    try:
        days = int(raw)
    except ValueError:
        return DEFAULT_AUDIT_DAYS
    return days if days > 0 else DEFAULT_AUDIT_DAYS


async def main() -> None:
    window = audit_days_from_env()
    today = today_utc()
    days = enumerate_days(add_days(today, -(window - 1)), add_days(today, 1))

    async with AsyncSessionLocal() as db:
        rows = await audit_window(db, days)

    print(json.dumps({"window_days": window, "daily": rows}, indent=2))


def run() -> None:
    configure_logging()
    try:
        asyncio.run(main())
    except SQLAlchemyError as e:
        logger.error("audit.failed", error=str(e))
        print(f"\n❌ Error: {e}\n", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
