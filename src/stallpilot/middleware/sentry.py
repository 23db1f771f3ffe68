"""Attach request and user context to Sentry error reports."""

import sentry_sdk
from starlette.types import ASGIApp, Receive, Scope, Send

from stallpilot.core.logging import get_request_id


class SentryContextMiddleware:
    """
    Tag the current Sentry scope with the request ID and the logged-in user.

    Must run inside SessionMiddleware so ``scope["session"]`` is populated,
    and inside RequestIDMiddleware so the request ID is set.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = get_request_id()
        sentry_sdk.set_tag("request_id", request_id)

        session = scope.get("session") or {}
        user_id = session.get("user_id")
        if user_id:
            sentry_sdk.set_user({"id": user_id})
            sentry_sdk.set_tag("role", session.get("role"))

        sentry_sdk.set_context(
            "request",
            {"method": scope.get("method"), "path": scope.get("path"), "request_id": request_id},
        )
        await self.app(scope, receive, send)
