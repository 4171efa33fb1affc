from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from dealerops.schemas.auth import RegisterIn, TokenOut
from dealerops.models.user import User
from dealerops.db.session import get_db
from dealerops.core.security import create_access_token, hash_password, verify_password
from dealerops.core.enums import UserRole
from dealerops.core.audit_log import log_login
from dealerops.core.exceptions import ConflictError

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenOut)
async def register(payload: RegisterIn, db: AsyncSession = Depends(get_db)):
    res = await db.execute(select(User).where(User.username == payload.username))
    existing_user = res.scalars().first()
    if existing_user:
        raise ConflictError("Username already taken")
    
    new_user = User(
        username=payload.username,
        password_hash=hash_password(payload.password),
        name=payload.name,
        email=payload.email,
        role=UserRole.SALESPERSON,
    )
    db.add(new_user)
    await db.flush()
    await log_login(db, int(new_user.id), payload.username)
    await db.commit()
    
    token = create_access_token(str(new_user.id), new_user.role)
    return {"access_token": token}


@router.post("/login", response_model=TokenOut)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)):
    res = await db.execute(select(User).where(User.username == form_data.username))
    user = res.scalars().first()
    if not user or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(status_code=400, detail="Invalid credentials")
    
    await log_login(db, int(user.id), form_data.username)
    await db.commit()
    
    token = create_access_token(str(user.id), user.role)
    return {"access_token": token}
