from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey
from dealerops.models.base import BaseModel, enum_column, utcnow
from dealerops.core.enums import SaleStatus, FinancingType

class Sale(BaseModel):
    __tablename__ = "sales"

    customer_id = Column(ForeignKey("customers.id"), nullable=False, index=True)
    vehicle_id = Column(ForeignKey("vehicles.id"), nullable=True, index=True)
    salesperson_id = Column(ForeignKey("users.id"), nullable=True, index=True)

    sale_date = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    # nullable: a converted lead opens a sale before a price is agreed
    sale_price = Column(Numeric(12, 2), nullable=True)
    financing_type = Column(enum_column(FinancingType), default=FinancingType.CASH, nullable=False)
    trade_in_value = Column(Numeric(12, 2), nullable=True)
    warranty_package = Column(String(120), nullable=True)
    delivery_date = Column(DateTime(timezone=True), nullable=True)
    sale_status = Column(enum_column(SaleStatus), default=SaleStatus.PENDING, nullable=False)
