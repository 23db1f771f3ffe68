"""
Enums for domain models.
Enums provide type safety and clarity. Validation for categorical fields.
"""

import enum


class UserRole(str, enum.Enum):
    """Who is logged in: the owner (ADMIN) or stand staff (STAFF)."""

    ADMIN = "ADMIN"
    STAFF = "STAFF"


class PaymentType(str, enum.Enum):
    """How a sale was paid. CREDIT is a store-credit (fiado) sale."""

    PIX = "PIX"
    CARD = "CARD"
    CASH = "CASH"
    DELIVERY = "DELIVERY"
    CREDIT = "CREDIT"


class ExpenseStatus(str, enum.Enum):
    """Expense review states. Only APPROVED expenses count toward totals."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LedgerEntryKind(str, enum.Enum):
    """Credit ledger movements."""

    PURCHASE = "PURCHASE"
    PAYMENT = "PAYMENT"


class ClosingStatus(str, enum.Enum):
    """Daily closing lifecycle."""

    SUBMITTED = "SUBMITTED"


class ShiftStatus(str, enum.Enum):
    """Shift lifecycle states (derived from closed_at)."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"


class ReportPeriod(str, enum.Enum):
    """Report windows."""

    WEEK = "week"
    MONTH = "month"
