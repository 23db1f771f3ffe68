"""Shared Pydantic schemas and form-field helpers."""

from typing import Any, Optional

from pydantic import BaseModel, Field


def blank_to_none(value: Any) -> Any:
    """HTML forms send empty strings for untouched optional fields."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ActionResult(BaseModel):
    """Outcome of a form action.

    ``blocked`` marks a rejected submission that can be retried with more
    input (e.g. a closing that needs a justification); ``details`` carries
    the figures the user needs to see.
    """

    ok: bool
    message: str
    blocked: bool = False
    details: Optional[dict[str, str]] = Field(None, description="Figures formatted with 2 decimals")
    redirect_to: Optional[str] = None
