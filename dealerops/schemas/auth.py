from pydantic import BaseModel
from typing import Optional
from dealerops.schemas._validators import Email, Password


class RegisterIn(BaseModel):
    username: str
    password: Password
    name: Optional[str] = None
    email: Optional[Email] = None


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
