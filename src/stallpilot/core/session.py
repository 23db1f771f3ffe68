# File: src/stallpilot/core/session.py
"""Signed-cookie session payload, idle timeout and sliding refresh.

The cookie itself is signed by Starlette's ``SessionMiddleware``; this
module only decides what goes into it and whether it is still alive.
"""

import os
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, MutableMapping
from uuid import UUID

from stallpilot.utils.datetime import now_utc

DEFAULT_IDLE_MINUTES = 120
DEFAULT_REFRESH_SECONDS = 300
DEFAULT_MAX_AGE_DAYS = 30

SESSION_KEYS = ("user_id", "name", "role", "shift_id", "last_active_at")


def _positive_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    try:
        value = float(raw) if raw is not None else default
    except ValueError:
        return default
    return value if value > 0 else default


def idle_timeout() -> timedelta:
    """Idle window from SESSION_IDLE_MINUTES (default 2 hours)."""
    return timedelta(minutes=_positive_env("SESSION_IDLE_MINUTES", DEFAULT_IDLE_MINUTES))


def refresh_after() -> timedelta:
    return timedelta(seconds=_positive_env("SESSION_REFRESH_SECONDS", DEFAULT_REFRESH_SECONDS))


def cookie_max_age() -> int:
    """Cookie lifetime in seconds; the idle timeout usually ends a session first."""
    return int(_positive_env("SESSION_MAX_AGE_DAYS", DEFAULT_MAX_AGE_DAYS) * 24 * 60 * 60)


class SessionState(str, Enum):
    ACTIVE = "ACTIVE"
    REFRESH = "REFRESH"
    EXPIRED = "EXPIRED"


def evaluate_activity(
    last_active_at: datetime,
    now: datetime,
    idle: timedelta,
    refresh: timedelta,
) -> SessionState:
    """Classify a session by the time since its last recorded activity.

    Idle longer than ``idle`` -> EXPIRED. Otherwise, once ``refresh`` has
    passed the activity timestamp should be rewritten (REFRESH); before that
    the cookie is left untouched so most requests don't re-sign it.
    """
    elapsed = now - last_active_at
    if elapsed > idle:
        return SessionState.EXPIRED
    if elapsed >= refresh:
        return SessionState.REFRESH
    return SessionState.ACTIVE


def parse_last_active(raw: Any, default: datetime) -> datetime:
    """Read ``last_active_at`` from the cookie; a missing value counts as now."""
    if not raw:
        return default
    try:
        return datetime.fromisoformat(raw)
    except (TypeError, ValueError):
        return default


def start_session(
    session: MutableMapping[str, Any],
    user_id: UUID,
    name: str,
    role: str,
    shift_id: UUID | None,
    now: datetime | None = None,
) -> None:
    """Replace the cookie contents with a fresh authenticated payload."""
    session.clear()
    session["user_id"] = str(user_id)
    session["name"] = name
    session["role"] = str(role)
    session["shift_id"] = str(shift_id) if shift_id else None
    session["last_active_at"] = (now or now_utc()).isoformat()


def touch_session(session: MutableMapping[str, Any], now: datetime | None = None) -> SessionState:
    """Apply the idle timeout to ``session`` in place.

    EXPIRED clears the session. REFRESH stores ``now`` as the new activity
    time. ACTIVE leaves the session as it was.
    """
    now = now or now_utc()
    last_active = parse_last_active(session.get("last_active_at"), now)
    state = evaluate_activity(last_active, now, idle_timeout(), refresh_after())

    if state is SessionState.EXPIRED:
        session.clear()
    elif state is SessionState.REFRESH:
        session["last_active_at"] = now.isoformat()
    return state
