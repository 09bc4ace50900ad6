"""Input validation utilities."""

import re
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from .constants import EXPENSE_CATEGORY_TAGS, EXPENSE_TITLE_MAX_LENGTH, PIN_LENGTH, RECORD_DOMAINS
from .exceptions import InvalidFormatError, ValidationError

PIN_PATTERN = re.compile(rf"[0-9]{{{PIN_LENGTH}}}")
ISO_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def is_valid_pin(pin: Any) -> bool:
    """Return True if pin is exactly four ASCII digits."""
    return isinstance(pin, str) and PIN_PATTERN.fullmatch(pin) is not None


def validate_pin(pin: Any) -> None:
    """
    Validate PIN format.

    Length and character errors collapse into one message so callers
    cannot tell them apart.

    Args:
        pin: PIN to validate

    Raises:
        InvalidFormatError: If PIN is not exactly 4 digits
    """
    if not is_valid_pin(pin):
        raise InvalidFormatError(f"PIN must be exactly {PIN_LENGTH} digits")


def validate_record_domain(domain: str) -> None:
    """
    Validate remote record domain.

    Raises:
        ValidationError: If domain is not one of RECORD_DOMAINS
    """
    if domain not in RECORD_DOMAINS:
        raise ValidationError(f"Domain must be one of {RECORD_DOMAINS}")


def validate_user_id(user_id: Optional[str]) -> None:
    if not user_id or not str(user_id).strip():
        raise ValidationError("User ID is required")


def parse_iso_date(value: str) -> date:
    """
    Parse YYYY-MM-DD date string.

    Raises:
        ValidationError: If value is not an ISO date
    """
    if not isinstance(value, str) or not ISO_DATE_PATTERN.fullmatch(value):
        raise ValidationError("Date must be in YYYY-MM-DD format")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError("Date must be in YYYY-MM-DD format")


def validate_expense(payload: dict[str, Any], today: Optional[date] = None) -> None:
    """
    Validate an expense before it is sent to the remote service.

    Args:
        payload: Expense fields (title, amount, expenseDate, category, tag)
        today: Reference date for the future-date check (default: date.today())

    Raises:
        ValidationError: On the first failing field
    """
    title = (payload.get("title") or "").strip()
    if not title:
        raise ValidationError("Please enter a title")
    if len(title) > EXPENSE_TITLE_MAX_LENGTH:
        raise ValidationError(f"Title cannot be longer than {EXPENSE_TITLE_MAX_LENGTH} characters")

    amount = payload.get("amount")
    if amount is None or isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        raise ValidationError("Please enter an amount")
    if amount == 0:
        raise ValidationError("Amount cannot be zero")

    category = payload.get("category")
    if not category:
        raise ValidationError("Please select a category")
    if category not in EXPENSE_CATEGORY_TAGS:
        raise ValidationError(f"Unknown category: {category}")

    tag = payload.get("tag")
    if not tag:
        raise ValidationError("Please select a tag")
    if tag not in EXPENSE_CATEGORY_TAGS[category]:
        raise ValidationError(f"Tag '{tag}' is not allowed for category {category}")

    expense_date = parse_iso_date(payload.get("expenseDate"))
    if expense_date > (today or date.today()):
        raise ValidationError("Cannot add future date transactions")
