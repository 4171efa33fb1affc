from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List

from dealerops.db.session import get_db
from dealerops.models.trade_in import TradeIn
from dealerops.schemas.trade_in import TradeInCreate, TradeInOut
from dealerops.core.permissions import require_capability, can_access_sales
from dealerops.core.rate_limit import check_rate_limit
from dealerops.core.auth_utils import check_not_found
from dealerops.core.response_builders import build_trade_in_response, build_trade_in_response_list

router = APIRouter(prefix="/trade-ins", tags=["trade-ins"])

trade_ins_access = require_capability(can_access_sales, "access trade-ins")


@router.post("/", response_model=TradeInOut, status_code=201)
async def create_trade_in(
    payload: TradeInCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(trade_ins_access)
):
    await check_rate_limit(int(current_user.id))

    trade_in = TradeIn(**payload.model_dump())
    db.add(trade_in)
    await db.commit()
    await db.refresh(trade_in)

    return build_trade_in_response(trade_in)


@router.get("/", response_model=List[TradeInOut])
async def list_trade_ins(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(trade_ins_access)
):
    q = select(TradeIn).order_by(TradeIn.created_at.desc(), TradeIn.id.desc()).limit(limit).offset(offset)
    res = await db.execute(q)
    return build_trade_in_response_list(res.scalars().all())


@router.get("/{trade_in_id}", response_model=TradeInOut)
async def get_trade_in(
    trade_in_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(trade_ins_access)
):
    res = await db.execute(select(TradeIn).where(TradeIn.id == trade_in_id))
    trade_in = res.scalars().first()
    check_not_found(trade_in, "Trade-in", trade_in_id)

    return build_trade_in_response(trade_in)
