# File: src/stallpilot/main.py
"""FastAPI application factory."""

import os
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from stallpilot.core.logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for startup and shutdown events."""
    start_time = datetime.now()
    logger.info("app.startup", timestamp=start_time.isoformat())

    from stallpilot.api.health import set_app_start_time

    set_app_start_time(start_time)

    yield

    logger.info("app.shutdown")


def _setup_middleware(app: FastAPI, environment: str, session_secret_key: str) -> None:
    """Configure middleware. Last added runs first."""
    from stallpilot.core.session import cookie_max_age
    from stallpilot.middleware.logging import RequestIDMiddleware
    from stallpilot.middleware.sentry import SentryContextMiddleware

    app.add_middleware(SentryContextMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret_key,
        session_cookie="session",
        max_age=cookie_max_age(),
        https_only=environment == "production",
        same_site="lax",
    )
    app.add_middleware(RequestIDMiddleware)


def _register_routers(app: FastAPI) -> None:
    from stallpilot.api.admin import router as admin_router
    from stallpilot.api.auth import router as auth_router
    from stallpilot.api.credit import router as credit_router
    from stallpilot.api.health import router as health_router
    from stallpilot.api.reports import router as reports_router
    from stallpilot.api.staff import router as staff_router

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(staff_router)
    app.include_router(credit_router)
    app.include_router(admin_router)
    app.include_router(reports_router)


def create_app() -> FastAPI:
    """Application factory for StallPilot."""
    from stallpilot.core.exception_handlers import register_exception_handlers
    from stallpilot.core.sentry import init_sentry

    init_sentry()

    app = FastAPI(
        title="StallPilot API",
        description="Sales, credit accounts and cash closing for a beverage stand",
        version="0.1.0",
        lifespan=lifespan,
    )
    register_exception_handlers(app)

    session_secret_key = os.getenv("SESSION_SECRET_KEY", "dev-secret-key-change-in-production")
    environment = os.getenv("ENVIRONMENT", "development")
    if environment == "production" and session_secret_key.startswith("dev-"):
        logger.warning("app.insecure_session_secret")

    _setup_middleware(app, environment, session_secret_key)
    _register_routers(app)

    logger.info("app.configured", environment=environment)
    return app


def run() -> None:
    """Development server entrypoint."""
    uvicorn.run(
        "stallpilot.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("ENVIRONMENT", "development") == "development",
    )
