from enum import Enum
from typing import Any, Type


class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    SALESPERSON = "salesperson"
    FINANCE = "finance"
    SERVICE = "service"

    def __str__(self):
        return self.value


class LeadStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    NEGOTIATING = "negotiating"
    WON = "won"
    LOST = "lost"

    def __str__(self):
        return self.value


class SaleStatus(str, Enum):
    PENDING = "pending"
    FINANCING = "financing"
    APPROVED = "approved"
    DELIVERED = "delivered"
    COMPLETED = "completed"

    def __str__(self):
        return self.value


class VehicleStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"

    def __str__(self):
        return self.value


class FinancingType(str, Enum):
    CASH = "cash"
    FINANCE = "finance"
    LEASE = "lease"

    def __str__(self):
        return self.value


class AuditAction(str, Enum):
    CREATE_LEAD = "create_lead"
    UPDATE_LEAD = "update_lead"
    DELETE_LEAD = "delete_lead"
    CONVERT_LEAD = "convert_lead"
    CREATE_SALE = "create_sale"
    UPDATE_SALE = "update_sale"
    DELETE_SALE = "delete_sale"
    LOGIN = "login"

    def __str__(self):
        return self.value


def _coerce(enum_cls: Type[Enum], value: Any):
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return None
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        return None


def parse_lead_status(value: Any) -> LeadStatus | None:
    return _coerce(LeadStatus, value)


def parse_sale_status(value: Any) -> SaleStatus | None:
    return _coerce(SaleStatus, value)


def parse_vehicle_status(value: Any) -> VehicleStatus | None:
    return _coerce(VehicleStatus, value)


def parse_role(value: Any) -> UserRole | None:
    return _coerce(UserRole, value)


def is_valid_lead_status(value: Any) -> bool:
    return parse_lead_status(value) is not None


def is_valid_sale_status(value: Any) -> bool:
    return parse_sale_status(value) is not None


def is_valid_vehicle_status(value: Any) -> bool:
    return parse_vehicle_status(value) is not None
