from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from dealerops.schemas._validators import VIN, NonNegativeAmount


class TradeInCreate(BaseModel):
    vin: Optional[VIN] = None
    make: str
    model: str
    year: int = Field(ge=1900, le=2100)
    mileage: int = Field(ge=0)
    condition: str
    appraised_value: Optional[NonNegativeAmount] = None


class TradeInOut(BaseModel):
    id: int
    vin: Optional[str] = None
    make: str
    model: str
    year: int
    mileage: int
    condition: str
    appraised_value: Optional[Decimal] = None
    created_at: datetime
