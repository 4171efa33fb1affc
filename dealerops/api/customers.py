from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List

from dealerops.db.session import get_db
from dealerops.models.customer import Customer
from dealerops.schemas.customer import CustomerCreate, CustomerOut
from dealerops.core.permissions import require_capability, can_access_customers
from dealerops.core.rate_limit import check_rate_limit
from dealerops.core.auth_utils import check_not_found
from dealerops.core.response_builders import build_customer_response, build_customer_response_list

router = APIRouter(prefix="/customers", tags=["customers"])

customers_access = require_capability(can_access_customers, "access customers")


@router.post("/", response_model=CustomerOut, status_code=201)
async def create_customer(
    payload: CustomerCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(customers_access)
):
    await check_rate_limit(int(current_user.id))

    customer = Customer(
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        address=payload.address,
    )
    db.add(customer)
    await db.commit()
    await db.refresh(customer)

    return build_customer_response(customer)


@router.get("/", response_model=List[CustomerOut])
async def list_customers(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(customers_access)
):
    q = select(Customer).order_by(Customer.created_at.desc(), Customer.id.desc()).limit(limit).offset(offset)
    res = await db.execute(q)
    return build_customer_response_list(res.scalars().all())


@router.get("/{customer_id}", response_model=CustomerOut)
async def get_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(customers_access)
):
    res = await db.execute(select(Customer).where(Customer.id == customer_id))
    customer = res.scalars().first()
    check_not_found(customer, "Customer", customer_id)

    return build_customer_response(customer)
