"""Commission summaries over completed sales"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from dealerops.db.session import get_db
from dealerops.models.sale import Sale
from dealerops.models.user import User
from dealerops.schemas.commission import CommissionSummary
from dealerops.core.enums import SaleStatus
from dealerops.core.permissions import require_capability, can_access_sales, can_access_analytics
from dealerops.core.auth_utils import check_not_found
from dealerops.services.commission import summarize_commission

router = APIRouter(prefix="/commissions", tags=["commissions"])


async def _completed_sales(db: AsyncSession, salesperson_id: int) -> list:
    res = await db.execute(
        select(Sale).where(
            Sale.salesperson_id == salesperson_id,
            Sale.sale_status == SaleStatus.COMPLETED,
        )
    )
    return list(res.scalars().all())


@router.get("/me", response_model=CommissionSummary)
async def my_commission(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_capability(can_access_sales, "view commissions"))
):
    sales = await _completed_sales(db, int(current_user.id))
    return summarize_commission(sales, salesperson_id=int(current_user.id))


@router.get("/{salesperson_id}", response_model=CommissionSummary)
async def salesperson_commission(
    salesperson_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_capability(can_access_analytics, "view other salespeople's commissions"))
):
    res = await db.execute(select(User.id).where(User.id == salesperson_id))
    check_not_found(res.first(), "User", salesperson_id)

    sales = await _completed_sales(db, salesperson_id)
    return summarize_commission(sales, salesperson_id=salesperson_id)
