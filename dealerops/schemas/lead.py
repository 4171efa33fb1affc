from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal
from dealerops.core.enums import LeadStatus
from dealerops.schemas._validators import Email, LeadStatusField, NonNegativeAmount, Phone


class LeadCreate(BaseModel):
    lead_source: str
    lead_status: LeadStatusField = None
    contact_name: str
    contact_phone: Phone
    contact_email: Email
    vehicle_interested: Optional[str] = None
    inquiry_date: Optional[datetime] = None
    follow_up_date: Optional[datetime] = None
    estimated_value: Optional[NonNegativeAmount] = None
    notes: Optional[str] = None


class LeadUpdate(BaseModel):
    lead_source: Optional[str] = None
    lead_status: LeadStatusField = None
    contact_name: Optional[str] = None
    contact_phone: Optional[Phone] = None
    contact_email: Optional[Email] = None
    vehicle_interested: Optional[str] = None
    follow_up_date: Optional[datetime] = None
    estimated_value: Optional[NonNegativeAmount] = None
    notes: Optional[str] = None
    assigned_to: Optional[int] = None


class LeadOut(BaseModel):
    id: int
    lead_source: str
    lead_status: LeadStatus
    contact_name: str
    contact_phone: str
    contact_email: str
    vehicle_interested: Optional[str] = None
    inquiry_date: datetime
    follow_up_date: Optional[datetime] = None
    estimated_value: Optional[Decimal] = None
    notes: Optional[str] = None
    assigned_to: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class ConversionOut(BaseModel):
    customer_id: int
    sale_id: int
