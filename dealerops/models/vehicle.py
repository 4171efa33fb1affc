from sqlalchemy import Column, String, Integer, Numeric
from dealerops.models.base import BaseModel, enum_column
from dealerops.core.enums import VehicleStatus

class Vehicle(BaseModel):
    __tablename__ = "vehicles"
    vin = Column(String(17), unique=True, nullable=False, index=True)
    make = Column(String(60), nullable=False)
    model = Column(String(60), nullable=False)
    year = Column(Integer, nullable=False)
    color = Column(String(40))
    price = Column(Numeric(12, 2), nullable=False)
    mileage = Column(Integer, default=0, nullable=False)
    # written only by the sale coordinator once a sale references the vehicle
    status = Column(enum_column(VehicleStatus), default=VehicleStatus.AVAILABLE, nullable=False)
