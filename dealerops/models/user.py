from sqlalchemy import Column, String
from dealerops.models.base import BaseModel, enum_column
from dealerops.core.enums import UserRole


class User(BaseModel):
    __tablename__ = "users"
    username = Column(String(64), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(120))
    email = Column(String(120))
    phone = Column(String(40))
    role = Column(enum_column(UserRole), nullable=False, default=UserRole.SALESPERSON)
