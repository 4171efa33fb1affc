"""Role-based access policy.

Capabilities are static role sets; each predicate is total over ``UserRole``
and treats an unknown role string as having no capability.
"""
import logging
from typing import Any, Callable, FrozenSet

from fastapi import Depends

from dealerops.core.enums import UserRole, parse_role
from dealerops.core.exceptions import PermissionDeniedError
from dealerops.core.security import get_current_user

logger = logging.getLogger(__name__)

LEAD_ROLES: FrozenSet[UserRole] = frozenset({UserRole.ADMIN, UserRole.MANAGER, UserRole.SALESPERSON})
SALE_ROLES: FrozenSet[UserRole] = frozenset(
    {UserRole.ADMIN, UserRole.MANAGER, UserRole.SALESPERSON, UserRole.FINANCE}
)
CUSTOMER_ROLES: FrozenSet[UserRole] = frozenset(
    {UserRole.ADMIN, UserRole.MANAGER, UserRole.SALESPERSON, UserRole.FINANCE}
)
VEHICLE_ROLES: FrozenSet[UserRole] = frozenset({UserRole.ADMIN, UserRole.MANAGER, UserRole.SALESPERSON})
ANALYTICS_ROLES: FrozenSet[UserRole] = frozenset({UserRole.ADMIN, UserRole.MANAGER})
USER_ADMIN_ROLES: FrozenSet[UserRole] = frozenset({UserRole.ADMIN, UserRole.MANAGER})
DELETE_LEAD_ROLES: FrozenSet[UserRole] = frozenset({UserRole.ADMIN, UserRole.MANAGER})
DELETE_SALE_ROLES: FrozenSet[UserRole] = frozenset({UserRole.ADMIN, UserRole.MANAGER})
ASSIGN_LEAD_ROLES: FrozenSet[UserRole] = frozenset({UserRole.ADMIN, UserRole.MANAGER})


def _has_role(role: Any, allowed: FrozenSet[UserRole]) -> bool:
    parsed = parse_role(role)
    return parsed is not None and parsed in allowed


def can_access_leads(role: Any) -> bool:
    return _has_role(role, LEAD_ROLES)


def can_access_sales(role: Any) -> bool:
    return _has_role(role, SALE_ROLES)


def can_access_customers(role: Any) -> bool:
    return _has_role(role, CUSTOMER_ROLES)


def can_access_vehicles(role: Any) -> bool:
    return _has_role(role, VEHICLE_ROLES)


def can_access_analytics(role: Any) -> bool:
    return _has_role(role, ANALYTICS_ROLES)


def can_access_users(role: Any) -> bool:
    return _has_role(role, USER_ADMIN_ROLES)


def can_delete_lead(role: Any) -> bool:
    return _has_role(role, DELETE_LEAD_ROLES)


def can_delete_sale(role: Any) -> bool:
    return _has_role(role, DELETE_SALE_ROLES)


def can_assign_leads(role: Any) -> bool:
    return _has_role(role, ASSIGN_LEAD_ROLES)


def can_modify_user(actor, target_id: int) -> bool:
    """Users may modify their own profile; admins may modify anyone."""
    return parse_role(actor.role) == UserRole.ADMIN or int(actor.id) == int(target_id)


def is_salesperson(user) -> bool:
    return parse_role(user.role) == UserRole.SALESPERSON


def require_capability(predicate: Callable[[Any], bool], action: str) -> Callable:
    """Build a FastAPI dependency that rejects users whose role fails ``predicate``."""

    async def dependency(current_user=Depends(get_current_user)):
        if not predicate(current_user.role):
            logger.warning(f"User {current_user.id} ({current_user.role}) denied: {action}")
            raise PermissionDeniedError(f"Forbidden: your role cannot {action}")
        return current_user

    return dependency
