# File: src/stallpilot/core/validators.py
"""Reusable validation utilities for form input."""

import re
from decimal import Decimal, InvalidOperation

# Matches NUMERIC(12, 2)
MAX_AMOUNT = Decimal("9999999999.99")
# Matches NUMERIC(12, 3)
MAX_LITERS = Decimal("999999999.999")
# Matches NUMERIC(15, 5), used for closing expected amount and difference
MAX_CLOSING_AMOUNT = Decimal("9999999999.99999")
# Matches INTEGER
MAX_COUNT = 2_147_483_647


def parse_decimal(value: Decimal | int | str, field_name: str = "Value") -> Decimal:
    """
    Parse a decimal typed by staff.

    A comma is accepted as the decimal separator ("12,50" -> 12.50).

    Raises:
        ValueError: If the value is blank or not a finite number
    """
    if isinstance(value, Decimal):
        decimal_value = value
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            raise ValueError(f"{field_name} is required")
        try:
            decimal_value = Decimal(text)
        except InvalidOperation as e:
            raise ValueError(f"{field_name} must be a number: {value}") from e

    if not decimal_value.is_finite():
        raise ValueError(f"{field_name} must be a finite number")
    return decimal_value


def validate_currency(
    value: Decimal | int | str,
    field_name: str = "Amount",
    max_value: Decimal = MAX_AMOUNT,
) -> Decimal:
    """
    Validate a money amount.

    Args:
        value: Amount to validate
        field_name: Name for error messages
        max_value: Maximum allowed value (default matches NUMERIC(12, 2))

    Returns:
        Validated Decimal

    Raises:
        ValueError: If value is malformed, negative, too large or has >2 decimals
    """
    decimal_value = parse_decimal(value, field_name)

    if decimal_value < 0:
        raise ValueError(f"{field_name} cannot be negative")

    if decimal_value > max_value:
        raise ValueError(f"{field_name} exceeds maximum allowed: {max_value}")

    if decimal_value.as_tuple().exponent < -2:
        raise ValueError(f"{field_name} cannot have more than 2 decimal places")

    return decimal_value


def validate_positive_currency(value: Decimal | int | str, field_name: str = "Amount") -> Decimal:
    """Money amount that must be strictly greater than zero."""
    decimal_value = validate_currency(value, field_name)
    if decimal_value == 0:
        raise ValueError(f"{field_name} must be greater than zero")
    return decimal_value


def validate_liters(value: Decimal | int | str, field_name: str = "Liters") -> Decimal:
    """Non-negative liter quantity with up to 3 decimal places."""
    decimal_value = parse_decimal(value, field_name)
    if decimal_value < 0:
        raise ValueError(f"{field_name} cannot be negative")
    if decimal_value > MAX_LITERS:
        raise ValueError(f"{field_name} exceeds maximum allowed: {MAX_LITERS}")
    if decimal_value.as_tuple().exponent < -3:
        raise ValueError(f"{field_name} cannot have more than 3 decimal places")
    return decimal_value


def validate_count(value: int | str, field_name: str = "Count") -> int:
    """Non-negative whole number (e.g. baskets)."""
    text = str(value).strip()
    if not re.fullmatch(r"\d+", text):
        raise ValueError(f"{field_name} must be a non-negative whole number")
    count = int(text)
    if count > MAX_COUNT:
        raise ValueError(f"{field_name} exceeds maximum allowed: {MAX_COUNT}")
    return count


def validate_required_text(value: str | None, field_name: str = "Field", max_length: int = 100) -> str:
    """Stripped, non-empty text no longer than ``max_length``."""
    if value is None or not value.strip():
        raise ValueError(f"{field_name} cannot be empty")

    cleaned = value.strip()
    if len(cleaned) > max_length:
        raise ValueError(f"{field_name} cannot exceed {max_length} characters")
    return cleaned


def validate_phone(value: str | None) -> str | None:
    """
    Validate phone number format.

    Args:
        value: Phone number to validate

    Returns:
        Validated phone or None if empty

    Raises:
        ValueError: If format is invalid
    """
    if not value or not value.strip():
        return None

    cleaned = value.strip()

    # Allow: digits, spaces, +, -, (, )
    if not re.match(r"^[0-9\s+\-()]+$", cleaned):
        raise ValueError("Phone can only contain digits, spaces, +, -, (, )")

    digits_only = re.sub(r"[^0-9]", "", cleaned)
    if len(digits_only) < 5:
        raise ValueError("Phone must contain at least 5 digits")

    return cleaned
