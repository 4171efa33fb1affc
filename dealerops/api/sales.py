from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Optional, List

from dealerops.db.session import get_db
from dealerops.models.sale import Sale
from dealerops.schemas.sale import SaleCreate, SaleUpdate, SaleOut
from dealerops.core.enums import parse_sale_status
from dealerops.core.exceptions import ValidationError
from dealerops.core.permissions import require_capability, can_access_sales, can_delete_sale
from dealerops.core.rate_limit import check_rate_limit
from dealerops.core.auth_utils import check_ownership, check_not_found, filter_by_owner
from dealerops.core.response_builders import build_sale_response, build_sale_response_list
from dealerops.services.sale_coordinator import SaleCoordinator, get_coordinator
from dealerops.utils.idempotency import get_idempotent, set_idempotent

router = APIRouter(prefix="/sales", tags=["sales"])

sales_access = require_capability(can_access_sales, "access sales")
sales_delete = require_capability(can_delete_sale, "delete sales")


async def _load_owned_sale(db: AsyncSession, sale_id: int, current_user) -> Sale:
    res = await db.execute(select(Sale).where(Sale.id == sale_id))
    sale = res.scalars().first()
    check_not_found(sale, "Sale", sale_id)
    check_ownership(sale.salesperson_id, current_user, "Sale")
    return sale


@router.post("/", response_model=SaleOut, status_code=201)
async def create_sale(
    payload: SaleCreate,
    idempotency_key: Optional[str] = Header(None),
    coordinator: SaleCoordinator = Depends(get_coordinator),
    current_user=Depends(sales_access)
):
    await check_rate_limit(int(current_user.id))

    scope = f"sales:{current_user.id}"
    if idempotency_key:
        prev = await get_idempotent(scope, idempotency_key)
        if prev:
            return prev

    sale = await coordinator.create_sale(acting_user_id=int(current_user.id), **payload.model_dump())

    out = build_sale_response(sale)
    if idempotency_key:
        await set_idempotent(scope, idempotency_key, out.model_dump(mode="json"))
    return out


@router.get("/", response_model=List[SaleOut])
async def list_sales(
    status: Optional[str] = Query(None),
    customer_id: Optional[int] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(sales_access)
):
    q = select(Sale)
    q = filter_by_owner(q, Sale.salesperson_id, current_user)

    if status:
        sale_status = parse_sale_status(status)
        if sale_status is None:
            raise ValidationError(f"Invalid sale status '{status}'")
        q = q.where(Sale.sale_status == sale_status)

    if customer_id:
        q = q.where(Sale.customer_id == customer_id)

    q = q.order_by(Sale.created_at.desc(), Sale.id.desc()).limit(limit).offset(offset)
    res = await db.execute(q)
    sales = res.scalars().all()

    return build_sale_response_list(sales)


@router.get("/{sale_id}", response_model=SaleOut)
async def get_sale(
    sale_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(sales_access)
):
    sale = await _load_owned_sale(db, sale_id, current_user)
    return build_sale_response(sale)


@router.put("/{sale_id}", response_model=SaleOut)
async def update_sale(
    sale_id: int,
    payload: SaleUpdate,
    db: AsyncSession = Depends(get_db),
    coordinator: SaleCoordinator = Depends(get_coordinator),
    current_user=Depends(sales_access)
):
    """Progress a sale's status, assign its vehicle or edit its terms"""
    await check_rate_limit(int(current_user.id))

    await _load_owned_sale(db, sale_id, current_user)

    sale = await coordinator.update_sale(
        sale_id,
        int(current_user.id),
        payload.model_dump(exclude_unset=True),
    )
    return build_sale_response(sale)


@router.delete("/{sale_id}")
async def delete_sale(
    sale_id: int,
    coordinator: SaleCoordinator = Depends(get_coordinator),
    current_user=Depends(sales_delete)
):
    await check_rate_limit(int(current_user.id))

    return await coordinator.delete_sale(sale_id, int(current_user.id))
