# File: src/stallpilot/models/shift_schemas.py
"""Pydantic schemas for staff shift actions: production, sales, expenses, closing."""

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stallpilot.core.validators import (
    validate_count,
    validate_currency,
    validate_liters,
    validate_positive_currency,
    validate_required_text,
)
from stallpilot.models.enums import ExpenseStatus, PaymentType
from stallpilot.models.schemas import blank_to_none


class ProductionCreate(BaseModel):
    """Production registered by staff. All fields are required."""

    date: date_type
    baskets_count: int
    liters_produced: Decimal

    @field_validator("baskets_count", mode="before")
    @classmethod
    def validate_baskets(cls, v):
        return validate_count(v, "Baskets")

    @field_validator("liters_produced", mode="before")
    @classmethod
    def validate_liters_produced(cls, v):
        return validate_liters(v, "Liters produced")


class SaleCreate(BaseModel):
    """Sale registered by staff. ``date`` defaults to now."""

    amount: Decimal
    payment_type: PaymentType
    liters: Decimal | None = None
    date: date_type | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v):
        return validate_currency(v, "Amount")

    @field_validator("liters", mode="before")
    @classmethod
    def validate_optional_liters(cls, v):
        v = blank_to_none(v)
        return None if v is None else validate_liters(v)

    @field_validator("date", "payment_type", mode="before")
    @classmethod
    def empty_as_missing(cls, v):
        return blank_to_none(v)


class ExpenseCreate(BaseModel):
    """Expense registered by staff; it waits for admin approval."""

    description: str
    category: str
    amount: Decimal
    date: date_type | None = None

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v):
        return validate_required_text(v, "Description", max_length=200)

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v):
        return validate_required_text(v, "Category")

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v):
        return validate_positive_currency(v, "Amount")

    @field_validator("date", mode="before")
    @classmethod
    def empty_date(cls, v):
        return blank_to_none(v)


class ClosingSubmit(BaseModel):
    """Cash closing submitted at the end of a shift."""

    date: date_type
    leftover_liters: Decimal
    justification: str | None = Field(None, max_length=2000)

    @field_validator("leftover_liters", mode="before")
    @classmethod
    def validate_leftover(cls, v):
        return validate_liters(v, "Leftover liters")

    @field_validator("justification", mode="before")
    @classmethod
    def strip_justification(cls, v):
        v = blank_to_none(v)
        return v.strip() if isinstance(v, str) else v


class ProductionRead(BaseModel):
    id: UUID
    date: datetime
    baskets_count: int
    liters_produced: Decimal
    user_id: UUID
    shift_id: UUID

    model_config = ConfigDict(from_attributes=True)


class SaleRead(BaseModel):
    id: UUID
    date: datetime
    amount: Decimal
    liters: Decimal | None
    payment_type: PaymentType
    user_id: UUID
    shift_id: UUID
    credit_customer_id: UUID | None

    model_config = ConfigDict(from_attributes=True)


class ExpenseRead(BaseModel):
    id: UUID
    date: datetime
    description: str
    category: str
    amount: Decimal
    status: ExpenseStatus
    user_id: UUID
    shift_id: UUID | None
    approved_by_id: UUID | None
    approved_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class ShiftRead(BaseModel):
    id: UUID
    user_id: UUID
    opened_at: datetime
    closed_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class DailyClosingRead(BaseModel):
    id: UUID
    date: date_type
    expected_amount: Decimal
    actual_amount: Decimal
    difference: Decimal
    leftover_liters: Decimal
    justification: str | None
    status: str
    user_id: UUID
    shift_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
