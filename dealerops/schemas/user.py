from pydantic import BaseModel
from typing import Optional
from dealerops.core.enums import UserRole
from dealerops.schemas._validators import Email, Phone


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[Email] = None
    phone: Optional[Phone] = None


class UserOut(BaseModel):
    id: int
    username: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole
