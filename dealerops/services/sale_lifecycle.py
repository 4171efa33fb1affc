"""Sale status progression rules. No database access."""
from dealerops.core.enums import SaleStatus, parse_sale_status
from dealerops.core.exceptions import ConflictError, ValidationError

STATUS_ORDER = (
    SaleStatus.PENDING,
    SaleStatus.FINANCING,
    SaleStatus.APPROVED,
    SaleStatus.DELIVERED,
    SaleStatus.COMPLETED,
)

TERMINAL_STATES = {SaleStatus.COMPLETED}

# reaching one of these with a linked vehicle marks the vehicle sold
VEHICLE_SOLD_STATES = {SaleStatus.DELIVERED, SaleStatus.COMPLETED}


def can_transition(from_status, to_status) -> bool:
    current = parse_sale_status(from_status)
    target = parse_sale_status(to_status)
    if current is None or target is None:
        return False
    if current == target:
        return True
    if current in TERMINAL_STATES:
        return False
    return STATUS_ORDER.index(target) > STATUS_ORDER.index(current)


def parse_target(value) -> SaleStatus:
    target = parse_sale_status(value)
    if target is None:
        allowed = ", ".join(s.value for s in STATUS_ORDER)
        raise ValidationError(f"Invalid sale status '{value}'. Must be one of: {allowed}")
    return target


def validate_transition(from_status, to_status) -> SaleStatus:
    target = parse_target(to_status)
    if not can_transition(from_status, target):
        raise ConflictError(
            f"Sale cannot transition from '{from_status}' to '{target}'"
        )
    return target
