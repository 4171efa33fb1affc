from sqlalchemy import Column, String, Integer, Numeric
from dealerops.models.base import BaseModel

class TradeIn(BaseModel):
    __tablename__ = "trade_ins"
    vin = Column(String(17), nullable=True)
    make = Column(String(60), nullable=False)
    model = Column(String(60), nullable=False)
    year = Column(Integer, nullable=False)
    mileage = Column(Integer, nullable=False)
    condition = Column(String(40), nullable=False)
    appraised_value = Column(Numeric(12, 2), nullable=True)
