"""Field validators shared by schemas and the sale coordinator."""
import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from dealerops.core.exceptions import ValidationError

VIN_LENGTH = 17
VIN_RE = re.compile(r"^[A-HJ-NPR-Z0-9]{17}$", re.IGNORECASE)
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?[\d\s\-\(\)]+$")
MIN_PASSWORD_LENGTH = 6


def validate_vin(vin: Optional[str]) -> str:
    if not vin or len(vin) != VIN_LENGTH:
        raise ValidationError("VIN must be exactly 17 characters")
    if not VIN_RE.match(vin):
        raise ValidationError("VIN contains invalid characters")
    return vin.upper()


def is_valid_vin(vin: Optional[str]) -> bool:
    try:
        validate_vin(vin)
    except ValidationError:
        return False
    return True


def validate_email(email: Optional[str]) -> bool:
    return bool(email) and EMAIL_RE.match(email) is not None


def validate_phone(phone: Optional[str]) -> bool:
    return bool(phone) and PHONE_RE.match(phone) is not None


def validate_password(password: Optional[str]) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def to_decimal(value: Any) -> Optional[Decimal]:
    """Parse a money-like value, returning None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def validate_positive_number(value: Any) -> bool:
    number = to_decimal(value)
    return number is not None and number > 0


def require_positive_amount(value: Any, field_name: str) -> Decimal:
    number = to_decimal(value)
    if number is None or number <= 0:
        raise ValidationError(f"{field_name} must be a positive number")
    return number


def require_non_negative_amount(value: Any, field_name: str) -> Decimal:
    number = to_decimal(value)
    if number is None or number < 0:
        raise ValidationError(f"{field_name} must be zero or a positive number")
    return number


def validate_future_date(value: Any) -> bool:
    """True when the date falls on or after today (UTC)."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return False
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date):
        return False
    return value >= datetime.now(timezone.utc).date()
