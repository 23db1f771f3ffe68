# File: src/stallpilot/models/user_schemas.py
"""Pydantic schemas for User API."""

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stallpilot.core.validators import validate_required_text
from stallpilot.models.enums import UserRole


class LoginForm(BaseModel):
    """Name + PIN login."""

    name: str
    pin: str

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        return validate_required_text(v, "Name")

    @field_validator("pin", mode="before")
    @classmethod
    def validate_pin_present(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("PIN is required")
        return str(v).strip()


class UserCreate(BaseModel):
    """Schema for creating a new user."""

    name: str = Field(..., min_length=1, max_length=100)
    pin: str
    role: UserRole = Field(UserRole.STAFF, description="User role (ADMIN or STAFF)")

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        return validate_required_text(v, "Name")

    @field_validator("pin", mode="before")
    @classmethod
    def validate_pin(cls, v):
        """PINs are 4 to 8 digits."""
        pin = "" if v is None else str(v).strip()
        if not re.fullmatch(r"\d{4,8}", pin):
            raise ValueError("PIN must be 4 to 8 digits")
        return pin

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v):
        if isinstance(v, str):
            return v.strip().upper() or UserRole.STAFF
        return v


class UserResponse(BaseModel):
    """Schema for reading a user from the database."""

    id: UUID
    name: str
    role: UserRole
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
