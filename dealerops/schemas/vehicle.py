from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from dealerops.core.enums import VehicleStatus
from dealerops.schemas._validators import VIN, PositiveAmount, VehicleStatusField


class VehicleCreate(BaseModel):
    vin: VIN
    make: str
    model: str
    year: int = Field(ge=1900, le=2100)
    color: Optional[str] = None
    price: PositiveAmount
    mileage: int = Field(default=0, ge=0)


class VehicleUpdate(BaseModel):
    vin: Optional[VIN] = None
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=1900, le=2100)
    color: Optional[str] = None
    price: Optional[PositiveAmount] = None
    mileage: Optional[int] = Field(default=None, ge=0)
    status: VehicleStatusField = None


class VehicleOut(BaseModel):
    id: int
    vin: str
    make: str
    model: str
    year: int
    color: Optional[str] = None
    price: Decimal
    mileage: int
    status: VehicleStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
