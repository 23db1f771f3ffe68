"""Domain models package."""

from stallpilot.models.credit import CreditCustomer, CreditLedgerEntry
from stallpilot.models.daily_closing import DailyClosing
from stallpilot.models.enums import (
    ClosingStatus,
    ExpenseStatus,
    LedgerEntryKind,
    PaymentType,
    ReportPeriod,
    ShiftStatus,
    UserRole,
)
from stallpilot.models.expense import DAILY_WAGE_CATEGORY, Expense
from stallpilot.models.financial_config import FinancialConfig
from stallpilot.models.production import ProductionEntry
from stallpilot.models.sale import Sale
from stallpilot.models.shift import Shift
from stallpilot.models.user import User

__all__ = [
    "ClosingStatus",
    "CreditCustomer",
    "CreditLedgerEntry",
    "DAILY_WAGE_CATEGORY",
    "DailyClosing",
    "Expense",
    "ExpenseStatus",
    "FinancialConfig",
    "LedgerEntryKind",
    "PaymentType",
    "ProductionEntry",
    "ReportPeriod",
    "Sale",
    "Shift",
    "ShiftStatus",
    "User",
    "UserRole",
]
