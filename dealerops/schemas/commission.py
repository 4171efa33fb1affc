from pydantic import BaseModel
from typing import Optional
from decimal import Decimal


class CommissionTier(BaseModel):
    tier: str
    rate: Decimal
    name: str


class CommissionSummary(BaseModel):
    salesperson_id: Optional[int] = None
    completed_sales: int
    total_sales: Decimal
    total_commission: Decimal
    formatted_commission: str
    tier: CommissionTier
