"""Annotated field types that run the domain validators during parsing."""
from decimal import Decimal
from typing import Annotated, Callable, Optional

from pydantic import AfterValidator, BeforeValidator

from dealerops.core import validation
from dealerops.core.enums import (
    LeadStatus,
    VehicleStatus,
    parse_lead_status,
    parse_vehicle_status,
)
from dealerops.core.exceptions import ValidationError


def _vocabulary(parser: Callable, label: str) -> Callable:
    def check(value):
        if value is None:
            return None
        parsed = parser(value)
        if parsed is None:
            raise ValueError(f"Invalid {label} status '{value}'")
        return parsed
    return check


def _vin(value: str) -> str:
    try:
        return validation.validate_vin(value)
    except ValidationError as e:
        raise ValueError(e.message)


def _email(value: str) -> str:
    if not validation.validate_email(value):
        raise ValueError("Invalid email address")
    return value


def _phone(value: str) -> str:
    if not validation.validate_phone(value):
        raise ValueError("Invalid phone number")
    return value


def _password(value: str) -> str:
    try:
        validation.validate_password(value)
    except ValidationError as e:
        raise ValueError(e.message)
    return value


def _positive(value: Decimal) -> Decimal:
    if not validation.validate_positive_number(value):
        raise ValueError("Must be a positive number")
    return value


def _non_negative(value: Decimal) -> Decimal:
    if value < 0:
        raise ValueError("Must be zero or a positive number")
    return value


LeadStatusField = Annotated[Optional[LeadStatus], BeforeValidator(_vocabulary(parse_lead_status, "lead"))]
VehicleStatusField = Annotated[Optional[VehicleStatus], BeforeValidator(_vocabulary(parse_vehicle_status, "vehicle"))]
VIN = Annotated[str, AfterValidator(_vin)]
Email = Annotated[str, AfterValidator(_email)]
Phone = Annotated[str, AfterValidator(_phone)]
Password = Annotated[str, AfterValidator(_password)]
PositiveAmount = Annotated[Decimal, AfterValidator(_positive)]
NonNegativeAmount = Annotated[Decimal, AfterValidator(_non_negative)]
