from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Optional, List
import logging

from dealerops.db.session import get_db
from dealerops.models.sale import Sale
from dealerops.models.vehicle import Vehicle
from dealerops.schemas.vehicle import VehicleCreate, VehicleUpdate, VehicleOut
from dealerops.core.enums import VehicleStatus, parse_vehicle_status
from dealerops.core.exceptions import ConflictError, ValidationError
from dealerops.core.permissions import require_capability, can_access_vehicles
from dealerops.core.rate_limit import check_rate_limit
from dealerops.core.auth_utils import check_not_found
from dealerops.core.response_builders import build_vehicle_response, build_vehicle_response_list

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/vehicles", tags=["vehicles"])

vehicles_access = require_capability(can_access_vehicles, "access vehicles")


async def _has_sale(db: AsyncSession, vehicle_id: int) -> bool:
    res = await db.execute(select(Sale.id).where(Sale.vehicle_id == vehicle_id).limit(1))
    return res.first() is not None


async def _ensure_unique_vin(db: AsyncSession, vin: str, vehicle_id: Optional[int] = None) -> None:
    q = select(Vehicle.id).where(Vehicle.vin == vin)
    if vehicle_id is not None:
        q = q.where(Vehicle.id != vehicle_id)
    res = await db.execute(q)
    if res.first() is not None:
        raise ConflictError(f"A vehicle with VIN {vin} already exists")


@router.post("/", response_model=VehicleOut, status_code=201)
async def create_vehicle(
    payload: VehicleCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(vehicles_access)
):
    await check_rate_limit(int(current_user.id))
    await _ensure_unique_vin(db, payload.vin)

    vehicle = Vehicle(
        vin=payload.vin,
        make=payload.make,
        model=payload.model,
        year=payload.year,
        color=payload.color,
        price=payload.price,
        mileage=payload.mileage,
        status=VehicleStatus.AVAILABLE,
    )
    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)

    return build_vehicle_response(vehicle)


@router.get("/", response_model=List[VehicleOut])
async def list_vehicles(
    status: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(vehicles_access)
):
    q = select(Vehicle)

    if status:
        vehicle_status = parse_vehicle_status(status)
        if vehicle_status is None:
            raise ValidationError(f"Invalid vehicle status '{status}'")
        q = q.where(Vehicle.status == vehicle_status)

    q = q.order_by(Vehicle.created_at.desc(), Vehicle.id.desc()).limit(limit).offset(offset)
    res = await db.execute(q)
    return build_vehicle_response_list(res.scalars().all())


@router.get("/{vehicle_id}", response_model=VehicleOut)
async def get_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(vehicles_access)
):
    res = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    vehicle = res.scalars().first()
    check_not_found(vehicle, "Vehicle", vehicle_id)

    return build_vehicle_response(vehicle)


@router.put("/{vehicle_id}", response_model=VehicleOut)
async def update_vehicle(
    vehicle_id: int,
    payload: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(vehicles_access)
):
    """Update vehicle details; status belongs to the sale once one exists, and
    without a sale it can only be reset to available"""
    await check_rate_limit(int(current_user.id))

    res = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id).with_for_update())
    vehicle = res.scalars().first()
    check_not_found(vehicle, "Vehicle", vehicle_id)

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    if "status" in changes and changes["status"] != vehicle.status:
        if await _has_sale(db, vehicle_id):
            raise ConflictError(
                f"Vehicle {vehicle_id} is linked to a sale; its status changes only through the sale"
            )
        if changes["status"] != VehicleStatus.AVAILABLE:
            # reserved and sold only ever describe a vehicle held by a sale
            raise ConflictError(
                f"Vehicle {vehicle_id} has no sale; its status can only be set back to available"
            )
        logger.info(f"Vehicle {vehicle_id} status set manually: {vehicle.status} -> {changes['status']}")

    if "vin" in changes and changes["vin"] != vehicle.vin:
        await _ensure_unique_vin(db, changes["vin"], vehicle_id)

    for field, value in changes.items():
        setattr(vehicle, field, value)

    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)

    return build_vehicle_response(vehicle)


@router.delete("/{vehicle_id}")
async def delete_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(vehicles_access)
):
    await check_rate_limit(int(current_user.id))

    res = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    vehicle = res.scalars().first()
    check_not_found(vehicle, "Vehicle", vehicle_id)

    if await _has_sale(db, vehicle_id):
        raise ConflictError(f"Vehicle {vehicle_id} is linked to a sale and cannot be deleted")

    await db.delete(vehicle)
    await db.commit()

    return {"deleted": True}
