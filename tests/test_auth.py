"""Tests for PIN login, shifts opened at login and role-based redirects."""

from datetime import timedelta

from sqlalchemy import select

from stallpilot.models.enums import UserRole
from stallpilot.models.shift import Shift
from stallpilot.utils.datetime import now_utc
from tests.conftest import TEST_PIN, login
from tests.factories import ShiftFactory, UserFactory


class TestLoginPage:
    async def test_plain(self, client):
        response = await client.get("/login")
        assert response.status_code == 200
        assert response.json()["ok"] is True

    async def test_expired_message(self, client):
        data = (await client.get("/login?expired=1")).json()
        assert data["ok"] is False
        assert "expired" in data["message"].lower()

    async def test_after_closing(self, client):
        data = (await client.get("/login?ok=closing")).json()
        assert data["ok"] is True
        assert "closing" in data["message"].lower()


class TestLogin:
    async def test_admin_lands_on_admin_page(self, client, admin_user):
        response = await login(client, admin_user.name)
        assert response.headers["location"] == "/admin"
        assert "session" in response.cookies

    async def test_staff_lands_on_staff_page(self, client, staff_user):
        response = await login(client, staff_user.name)
        assert response.headers["location"] == "/staff"

    async def test_unknown_user(self, client):
        response = await client.post("/login", data={"name": "Nobody", "pin": TEST_PIN})
        assert response.status_code == 401
        assert response.json() == {
            "ok": False,
            "message": "Invalid user.",
            "blocked": False,
            "details": None,
            "redirect_to": None,
        }

    async def test_wrong_pin(self, client, staff_user):
        response = await client.post("/login", data={"name": staff_user.name, "pin": "9999"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid PIN."

    async def test_inactive_user(self, client, db_session):
        user = await UserFactory.create(db_session, name="Gone", is_active=False)
        response = await client.post("/login", data={"name": user.name, "pin": TEST_PIN})
        assert response.status_code == 401

    async def test_missing_fields(self, client):
        response = await client.post("/login", data={"name": "Ana"})
        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert "pin" in response.json()["details"]["fields"]


class TestShiftAtLogin:
    async def _open_shifts(self, db_session, user):
        result = await db_session.execute(
            select(Shift).where(Shift.user_id == user.id, Shift.closed_at.is_(None))
        )
        return list(result.scalars().all())

    async def test_staff_login_opens_shift(self, client, db_session, staff_user):
        await login(client, staff_user.name)

        shifts = await self._open_shifts(db_session, staff_user)
        assert len(shifts) == 1

        summary = (await client.get("/staff")).json()
        assert summary["shift_id"] == str(shifts[0].id)

    async def test_admin_login_opens_no_shift(self, client, db_session, admin_user):
        await login(client, admin_user.name)
        assert await self._open_shifts(db_session, admin_user) == []

    async def test_todays_open_shift_is_reused(self, client, db_session, staff_user):
        existing = await ShiftFactory.create(db_session, staff_user)

        await login(client, staff_user.name)

        shifts = await self._open_shifts(db_session, staff_user)
        assert [s.id for s in shifts] == [existing.id]

    async def test_second_login_reuses_shift(self, client, db_session, staff_user):
        await login(client, staff_user.name)
        first = (await client.get("/staff")).json()["shift_id"]

        await login(client, staff_user.name)
        second = (await client.get("/staff")).json()["shift_id"]

        assert first == second

    async def test_stale_shift_from_previous_day_is_closed(self, client, db_session, staff_user):
        stale = await ShiftFactory.create(
            db_session, staff_user, opened_at=now_utc() - timedelta(days=1, hours=1)
        )

        await login(client, staff_user.name)

        await db_session.refresh(stale)
        assert stale.closed_at is not None
        shifts = await self._open_shifts(db_session, staff_user)
        assert len(shifts) == 1
        assert shifts[0].id != stale.id


class TestRoleRedirects:
    async def test_anonymous_is_sent_to_login(self, client):
        response = await client.get("/admin")
        assert response.status_code == 303
        assert response.headers["location"] == "/login?expired=1"

    async def test_anonymous_htmx_gets_hx_redirect(self, client):
        response = await client.get("/staff", headers={"HX-Request": "true"})
        assert response.status_code == 200
        assert response.headers["HX-Redirect"] == "/login?expired=1"

    async def test_staff_on_admin_route(self, staff_client):
        response = await staff_client.get("/admin")
        assert response.status_code == 303
        assert response.headers["location"] == "/staff"

    async def test_staff_on_reports(self, staff_client):
        response = await staff_client.get("/reports/week")
        assert response.status_code == 303
        assert response.headers["location"] == "/staff"

    async def test_admin_on_staff_route(self, admin_client):
        response = await admin_client.get("/staff")
        assert response.status_code == 303
        assert response.headers["location"] == "/admin"

    async def test_admin_cannot_register_sales(self, admin_client):
        response = await admin_client.post("/staff/sales", data={"amount": "5", "payment_type": "CASH"})
        assert response.status_code == 303
        assert response.headers["location"] == "/admin"

    async def test_deactivated_user_is_logged_out(self, staff_client, db_session):
        user = staff_client.test_user
        user.is_active = False
        await db_session.commit()

        response = await staff_client.get("/staff")

        assert response.status_code == 303
        assert response.headers["location"] == "/login"

    async def test_tampered_cookie_is_ignored(self, client, staff_user):
        client.cookies.set("session", "not-a-signed-cookie")
        response = await client.get("/staff")
        assert response.status_code == 303
        assert response.headers["location"] == "/login?expired=1"


class TestLogout:
    async def test_logout_clears_session(self, staff_client):
        response = await staff_client.post("/logout")
        assert response.status_code == 303
        assert response.headers["location"] == "/login"

        response = await staff_client.get("/staff")
        assert response.status_code == 303

    async def test_logout_get(self, admin_client):
        response = await admin_client.get("/logout")
        assert response.status_code == 303
        assert (await admin_client.get("/admin")).status_code == 303


async def test_role_is_stored_as_plain_string(db_session):
    user = await UserFactory.create(db_session, name="Plain", role=UserRole.ADMIN)
    await db_session.refresh(user)
    assert user.role == "ADMIN"
    assert user.is_admin
