"""Bearer-token identity: argon2 password hashes and HS256 JWTs.

Tokens carry the user id in ``sub`` and the role the user held at login. A
token whose role no longer matches the stored user is rejected, so a role
change takes effect at the next login.
"""
import logging
from datetime import datetime, timezone, timedelta
from typing import Any, Dict
from jose import jwt, JWTError
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from passlib.context import CryptContext
from sqlalchemy.future import select
from dealerops.db.session import get_db
from dealerops.models.user import User
from dealerops.core.config import settings
from dealerops.core.enums import parse_role

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def create_access_token(subject: str, role: Any, expires_minutes: int | None = None) -> str:
    expires = settings.ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    expire_dt = datetime.now(timezone.utc) + timedelta(minutes=expires)
    claims = {"sub": str(subject), "role": str(role), "exp": expire_dt}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Return ``{"user_id": int, "role": UserRole | None}`` or raise 401."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[JWT_ALGORITHM])
        user_id = int(payload["sub"])
    except (JWTError, KeyError, TypeError, ValueError) as e:
        logger.info(f"Rejected bearer token: {e}")
        raise _unauthorized("Invalid token")
    return {"user_id": user_id, "role": parse_role(payload.get("role"))}


async def get_current_user(token: str = Depends(oauth2_scheme), db: AsyncSession = Depends(get_db)) -> User:
    claims = decode_access_token(token)
    res = await db.execute(select(User).where(User.id == claims["user_id"]))
    user = res.scalars().first()
    if not user:
        raise _unauthorized("User not found")
    if claims["role"] != parse_role(user.role):
        logger.warning(f"Token for user {user.id} carries stale role {claims['role']}")
        raise _unauthorized("Token role is out of date; log in again")
    return user
