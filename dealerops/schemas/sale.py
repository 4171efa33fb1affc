from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal
from dealerops.core.enums import SaleStatus, FinancingType


class SaleCreate(BaseModel):
    # required fields are enforced by the sale coordinator so that API and
    # direct callers get the same validation errors
    customer_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    sale_price: Optional[Decimal] = None
    financing_type: Optional[str] = None
    trade_in_value: Optional[Decimal] = None
    warranty_package: Optional[str] = None
    delivery_date: Optional[datetime] = None


class SaleUpdate(BaseModel):
    sale_status: Optional[str] = None
    vehicle_id: Optional[int] = None
    sale_price: Optional[Decimal] = None
    financing_type: Optional[str] = None
    trade_in_value: Optional[Decimal] = None
    warranty_package: Optional[str] = None
    delivery_date: Optional[datetime] = None


class SaleOut(BaseModel):
    id: int
    customer_id: int
    vehicle_id: Optional[int] = None
    salesperson_id: Optional[int] = None
    sale_date: datetime
    sale_price: Optional[Decimal] = None
    financing_type: FinancingType
    trade_in_value: Optional[Decimal] = None
    warranty_package: Optional[str] = None
    delivery_date: Optional[datetime] = None
    sale_status: SaleStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
