from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List, Optional

from dealerops.db.session import get_db
from dealerops.models.user import User
from dealerops.schemas.user import UserUpdate, UserOut
from dealerops.core.enums import parse_role
from dealerops.core.exceptions import PermissionDeniedError, ValidationError
from dealerops.core.permissions import can_modify_user, require_capability, can_access_users
from dealerops.core.security import get_current_user
from dealerops.core.auth_utils import check_not_found
from dealerops.core.response_builders import build_user_response

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=List[UserOut])
async def list_users(
    role: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_capability(can_access_users, "manage users"))
):
    q = select(User)
    if role:
        parsed = parse_role(role)
        if parsed is None:
            raise ValidationError(f"Invalid role '{role}'")
        q = q.where(User.role == parsed)

    res = await db.execute(q.order_by(User.username))
    return [build_user_response(user) for user in res.scalars().all()]


@router.get("/me", response_model=UserOut)
async def get_me(current_user=Depends(get_current_user)):
    return build_user_response(current_user)


@router.put("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    if not can_modify_user(current_user, user_id):
        raise PermissionDeniedError("Forbidden: you can only update your own profile")

    res = await db.execute(select(User).where(User.id == user_id))
    user = res.scalars().first()
    check_not_found(user, "User", user_id)

    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(user, field, value)

    db.add(user)
    await db.commit()
    await db.refresh(user)

    return build_user_response(user)
