"""In-memory TTL cache for period reports.

Every write that changes report inputs (sales, expenses, production,
configs, credit payments) calls ``invalidate_reports_on_commit`` with its
session. The cache is cleared once that transaction commits, so a report
rebuilt from the pre-commit snapshot in the meantime is not kept.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

REPORT_PREFIX = "report"
REPORT_TTL_SECONDS = 300

_PENDING_KEY = "invalidate_reports"

_cache: dict[str, tuple[Any, datetime]] = {}


def get_cache(key: str) -> Optional[Any]:
    """Get value from cache if it exists and hasn't expired."""
    entry = _cache.get(key)
    if entry is None:
        return None

    value, expires_at = entry
    if datetime.now(timezone.utc) > expires_at:
        _cache.pop(key, None)
        return None
    return value


def set_cache(key: str, value: Any, ttl_seconds: int = REPORT_TTL_SECONDS) -> None:
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)
    _cache[key] = (value, expires_at)


def clear_cache(prefix: Optional[str] = None) -> None:
    """Drop every key starting with ``prefix``, or everything."""
    if prefix is None:
        _cache.clear()
        return

    for key in [k for k in _cache if k.startswith(prefix)]:
        del _cache[key]


def make_cache_key(prefix: str, **kwargs) -> str:
    """Generate cache key from prefix and parameters."""
    parts = [prefix]
    for key, value in sorted(kwargs.items()):
        parts.append(f"{key}:{value}")
    return "|".join(parts)


def invalidate_reports() -> None:
    clear_cache(REPORT_PREFIX)


def invalidate_reports_on_commit(db: AsyncSession) -> None:
    """Clear cached reports after ``db``'s current transaction commits."""
    db.info[_PENDING_KEY] = True


@event.listens_for(Session, "after_commit")
def _invalidate_after_commit(session: Session) -> None:
    if session.info.pop(_PENDING_KEY, False):
        invalidate_reports()


@event.listens_for(Session, "after_rollback")
def _discard_on_rollback(session: Session) -> None:
    session.info.pop(_PENDING_KEY, None)
