# File: src/stallpilot/core/exception_handlers.py
"""Global exception handlers for FastAPI."""

from fastapi import Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from stallpilot.core.errors import AppError, ErrorDetail
from stallpilot.core.logging import get_logger

logger = get_logger(__name__)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """
    Handle all AppError exceptions and convert to JSON response.

    Returns standardized error format:
    {
        "code": "PAYMENT_EXCEEDS_BALANCE",
        "message": "Payment is greater than the amount owed",
        "details": {"balance_owed": "10.00", "amount": "12.00"}
    }
    """
    logger.info(
        "app_error",
        code=exc.code,
        status_code=exc.status_code,
        path=request.url.path,
    )
    error_response = exc.to_response()
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(mode="json", exclude_none=True),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with redirect support for auth failures."""

    # Handle 303 redirects (missing/expired session, wrong role)
    if (
        exc.status_code == status.HTTP_303_SEE_OTHER
        and exc.headers
        and "Location" in exc.headers
    ):
        return RedirectResponse(url=exc.headers["Location"], status_code=303)

    # Handle HTMX redirects
    if exc.status_code == status.HTTP_200_OK and exc.headers and "HX-Redirect" in exc.headers:
        return Response(status_code=200, headers={"HX-Redirect": exc.headers["HX-Redirect"]})

    logger.error(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log infrastructure failures and hide their details from the client."""
    logger.error(
        "app.unhandled_error",
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    error = ErrorDetail(code="INTERNAL_ERROR", message="The operation failed. Try again later.")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error.model_dump(exclude_none=True),
    )


def register_exception_handlers(app) -> None:
    """Register all custom exception handlers with FastAPI app."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
