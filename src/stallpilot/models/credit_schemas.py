"""Pydantic schemas for credit ("fiado") customers and their ledger."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from stallpilot.core.validators import (
    validate_liters,
    validate_phone,
    validate_positive_currency,
    validate_required_text,
)
from stallpilot.models.enums import LedgerEntryKind
from stallpilot.models.schemas import blank_to_none


class CustomerCreate(BaseModel):
    name: str
    phone: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        return validate_required_text(v, "Name")

    @field_validator("phone", mode="before")
    @classmethod
    def validate_phone_format(cls, v):
        return validate_phone(v)


class PurchaseCreate(BaseModel):
    """Purchase on credit: becomes a CREDIT sale plus a ledger entry."""

    customer_id: UUID
    amount: Decimal
    liters: Decimal | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v):
        return validate_positive_currency(v, "Amount")

    @field_validator("liters", mode="before")
    @classmethod
    def validate_optional_liters(cls, v):
        v = blank_to_none(v)
        return None if v is None else validate_liters(v)


class PaymentCreate(BaseModel):
    customer_id: UUID
    amount: Decimal

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v):
        return validate_positive_currency(v, "Amount")


class CustomerRead(BaseModel):
    id: UUID
    name: str
    phone: str | None
    balance_owed: Decimal
    settled_at: datetime | None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class LedgerEntryRead(BaseModel):
    id: UUID
    customer_id: UUID
    kind: LedgerEntryKind
    amount: Decimal
    date: datetime
    sale_id: UUID | None
    user_id: UUID
    marked_paid: bool
    paid_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class CustomerDetail(BaseModel):
    """A customer with the latest entries of their ledger."""

    customer: CustomerRead
    entries: list[LedgerEntryRead]
