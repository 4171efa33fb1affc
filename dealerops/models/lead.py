from sqlalchemy import Column, String, Text, Numeric, DateTime, ForeignKey
from dealerops.models.base import BaseModel, enum_column, utcnow
from dealerops.core.enums import LeadStatus

class Lead(BaseModel):
    __tablename__ = "leads"
    lead_source = Column(String(60), nullable=False)
    lead_status = Column(enum_column(LeadStatus), default=LeadStatus.NEW, nullable=False)
    contact_name = Column(String(120), nullable=False)
    contact_phone = Column(String(40), nullable=False)
    contact_email = Column(String(120), nullable=False)
    vehicle_interested = Column(String(255))
    inquiry_date = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    follow_up_date = Column(DateTime(timezone=True))
    estimated_value = Column(Numeric(12, 2))
    notes = Column(Text)
    assigned_to = Column(ForeignKey("users.id"), nullable=False, index=True)
