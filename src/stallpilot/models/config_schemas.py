"""Pydantic schemas for admin actions: financial config, wages, expense review."""

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from stallpilot.core.validators import validate_currency, validate_positive_currency
from stallpilot.models.schemas import blank_to_none


class FinancialConfigUpsert(BaseModel):
    """Config effective from a date; an existing row for that date is replaced."""

    effective_from: date_type
    sell_price_per_liter: Decimal
    cost_per_basket: Decimal
    monthly_rent: Decimal = Decimal("0")
    monthly_electricity: Decimal = Decimal("0")

    @field_validator("sell_price_per_liter", mode="before")
    @classmethod
    def validate_price(cls, v):
        return validate_currency(v, "Price per liter")

    @field_validator("cost_per_basket", mode="before")
    @classmethod
    def validate_cost(cls, v):
        return validate_currency(v, "Cost per basket")

    @field_validator("monthly_rent", "monthly_electricity", mode="before")
    @classmethod
    def validate_monthly(cls, v, info):
        v = blank_to_none(v)
        if v is None:
            return Decimal("0")
        return validate_currency(v, info.field_name.replace("_", " ").capitalize())


class FinancialConfigRead(BaseModel):
    id: UUID
    effective_from: date_type
    sell_price_per_liter: Decimal
    cost_per_basket: Decimal
    monthly_rent: Decimal
    monthly_electricity: Decimal
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DailyWageCreate(BaseModel):
    user_id: UUID
    amount: Decimal
    date: date_type | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v):
        return validate_positive_currency(v, "Amount")

    @field_validator("date", mode="before")
    @classmethod
    def empty_date(cls, v):
        return blank_to_none(v)


class ExpenseReview(BaseModel):
    decision: Literal["approve", "reject"]

    @field_validator("decision", mode="before")
    @classmethod
    def normalize_decision(cls, v):
        return v.strip().lower() if isinstance(v, str) else v
