from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from dealerops.schemas._validators import Email, Phone


class CustomerCreate(BaseModel):
    name: str
    email: Email
    phone: Phone
    address: Optional[str] = None


class CustomerOut(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    address: Optional[str] = None
    lead_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
