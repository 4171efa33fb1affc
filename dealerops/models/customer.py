from sqlalchemy import Column, String, ForeignKey
from dealerops.models.base import BaseModel

class Customer(BaseModel):
    __tablename__ = "customers"
    name = Column(String(120), nullable=False)
    email = Column(String(120), nullable=False)
    phone = Column(String(40), nullable=False)
    address = Column(String(255))
    lead_id = Column(ForeignKey("leads.id", ondelete="SET NULL"), nullable=True, index=True)
