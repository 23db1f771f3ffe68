# File: src/stallpilot/api/utils.py
"""Helpers shared by the form-handling routers."""

from typing import Any, TypeVar

import pydantic
from fastapi import HTTPException, Request, status

from stallpilot.core.errors import ValidationError

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def _clean_message(message: str) -> str:
    return message.removeprefix("Value error, ")


def parse_form(model: type[ModelT], **fields: Any) -> ModelT:
    """
    Build a schema from raw form fields.

    Missing form fields arrive as None and are dropped so schema defaults
    apply. Pydantic errors become a 422 ValidationError naming every bad field.
    """
    data = {k: v for k, v in fields.items() if v is not None}
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        errors = {
            ".".join(str(p) for p in err["loc"]) or "form": _clean_message(err["msg"])
            for err in exc.errors()
        }
        first_field, first_message = next(iter(errors.items()))
        raise ValidationError(f"{first_field}: {first_message}", details={"fields": errors}) from exc


def is_htmx(request: Request) -> bool:
    return request.headers.get("HX-Request") == "true"


def redirect_exception(request: Request, location: str, detail: str) -> HTTPException:
    """303 redirect, or HX-Redirect for HTMX requests that can't follow one."""
    if is_htmx(request):
        return HTTPException(
            status_code=status.HTTP_200_OK,
            detail=detail,
            headers={"HX-Redirect": location},
        )
    return HTTPException(
        status_code=status.HTTP_303_SEE_OTHER,
        detail=detail,
        headers={"Location": location},
    )
