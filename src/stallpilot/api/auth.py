"""Authentication endpoints and dependencies."""

from dataclasses import dataclass
from uuid import UUID

from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from stallpilot.api.utils import parse_form, redirect_exception
from stallpilot.core.db import get_db
from stallpilot.core.logging import get_logger
from stallpilot.core.security import verify_pin
from stallpilot.core.session import SessionState, start_session, touch_session
from stallpilot.core.shifts import open_or_reuse_shift
from stallpilot.models.enums import UserRole
from stallpilot.models.schemas import ActionResult
from stallpilot.models.shift import Shift
from stallpilot.models.user import User
from stallpilot.models.user_schemas import LoginForm

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])

LOGIN_PATH = "/login"
EXPIRED_PATH = "/login?expired=1"
HOME_BY_ROLE = {
    UserRole.ADMIN: "/admin",
    UserRole.STAFF: "/staff",
}


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Dependency to get current authenticated user from session.

    Applies the idle timeout on every call; an expired or missing session
    redirects to the login page.
    """
    user_id = request.session.get("user_id")
    if not user_id:
        raise redirect_exception(request, EXPIRED_PATH, "Not authenticated")

    state = touch_session(request.session)
    if state is SessionState.EXPIRED:
        logger.info("auth.session_expired", user_id=user_id, role=request.session.get("role"))
        raise redirect_exception(request, EXPIRED_PATH, "Session expired")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        request.session.clear()
        raise redirect_exception(request, LOGIN_PATH, "Invalid user session")

    stmt = select(User).where(User.id == user_uuid, User.is_active.is_(True))
    user = (await db.execute(stmt)).scalar_one_or_none()
    if user is None:
        request.session.clear()
        logger.warning("auth.user_inactive", user_id=user_id)
        raise redirect_exception(request, LOGIN_PATH, "User not found or inactive")

    return user


async def require_admin(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> User:
    """Dependency to require ADMIN role; staff are sent to their own page."""
    if current_user.role != UserRole.ADMIN:
        logger.warning(
            "auth.permission_denied",
            user_id=str(current_user.id),
            required_role=UserRole.ADMIN.value,
            user_role=current_user.role,
        )
        raise redirect_exception(request, HOME_BY_ROLE[UserRole.STAFF], "Admin only")
    return current_user


@dataclass
class StaffContext:
    """Authenticated staff member and the open shift their session works in."""

    user: User
    shift: Shift

    @property
    def shift_id(self) -> UUID:
        return self.shift.id


async def require_staff(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> StaffContext:
    """Dependency to require STAFF role with a still-open shift of their own.

    A session whose shift was closed (by a closing, or as stale at a later
    login elsewhere) is cleared and sent back to the login page.
    """
    if current_user.role != UserRole.STAFF:
        raise redirect_exception(request, HOME_BY_ROLE[UserRole.ADMIN], "Staff only")

    shift_id = request.session.get("shift_id")
    try:
        shift_uuid = UUID(shift_id) if shift_id else None
    except ValueError:
        shift_uuid = None
    if shift_uuid is None:
        logger.warning("auth.shift_missing", user_id=str(current_user.id))
        raise redirect_exception(request, LOGIN_PATH, "No open shift")

    shift = (await db.execute(select(Shift).where(Shift.id == shift_uuid))).scalar_one_or_none()
    if shift is None or shift.user_id != current_user.id or not shift.is_open:
        request.session.clear()
        logger.info("auth.shift_not_open", user_id=str(current_user.id), shift_id=shift_id)
        raise redirect_exception(request, LOGIN_PATH, "Shift no longer open")

    return StaffContext(user=current_user, shift=shift)


@router.get("/login", response_model=ActionResult)
async def login_page(expired: int = 0, ok: str | None = None) -> ActionResult:
    """Login landing; the query string tells why the user ended up here."""
    if expired:
        return ActionResult(ok=False, message="Session expired. Log in again.")
    if ok == "closing":
        return ActionResult(ok=True, message="Closing submitted. Shift finished.")
    return ActionResult(ok=True, message="Log in with your name and PIN.")


@router.post("/login")
async def login(
    request: Request,
    name: str | None = Form(None),
    pin: str | None = Form(None),
    db: AsyncSession = Depends(get_db),
):
    """Validate name + PIN, open or reuse the shift and start the session."""
    form = parse_form(LoginForm, name=name, pin=pin)

    user = (await db.execute(select(User).where(User.name == form.name))).scalar_one_or_none()
    if user is None or not user.is_active:
        logger.warning("auth.login_failed", reason="invalid_user", name=form.name)
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=ActionResult(ok=False, message="Invalid user.").model_dump(),
        )

    if not verify_pin(form.pin, user.pin_hash):
        logger.warning("auth.login_failed", reason="invalid_pin", user_id=str(user.id))
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=ActionResult(ok=False, message="Invalid PIN.").model_dump(),
        )

    shift_id = None
    if user.role == UserRole.STAFF:
        shift = await open_or_reuse_shift(db, user)
        shift_id = shift.id

    start_session(request.session, user.id, user.name, user.role, shift_id)
    logger.info(
        "auth.login_success",
        user_id=str(user.id),
        role=user.role,
        shift_id=str(shift_id) if shift_id else None,
    )
    return RedirectResponse(url=HOME_BY_ROLE[UserRole(user.role)], status_code=status.HTTP_303_SEE_OTHER)


@router.post("/logout")
async def logout(request: Request):
    """Logout endpoint - clears session."""
    user_id = request.session.get("user_id")
    if user_id:
        logger.info("auth.logout", user_id=user_id)

    request.session.clear()
    return RedirectResponse(url=LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/logout")
async def logout_get(request: Request):
    """Logout GET endpoint for browser compatibility."""
    return await logout(request)
