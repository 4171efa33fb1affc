"""Ownership and existence checks shared by the routers"""
from typing import Optional
from dealerops.core.exceptions import NotFoundError, PermissionDeniedError
from dealerops.core.permissions import is_salesperson


def filter_by_owner(query, owner_column, current_user):
    # salespersons only see records assigned to them
    if is_salesperson(current_user):
        return query.where(owner_column == int(current_user.id))
    return query


def check_ownership(owner_id: Optional[int], current_user, resource_name: str = "Resource") -> None:

    if is_salesperson(current_user) and owner_id != int(current_user.id):
        raise PermissionDeniedError(f"Forbidden: You can only access your own {resource_name}s")


def check_not_found(item, resource_name: str = "Resource", resource_id: Optional[int] = None) -> None:

    if not item:
        raise NotFoundError(resource_name, resource_id)
