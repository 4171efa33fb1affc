"""Vehicle availability lifecycle.

The transition table is the only place vehicle status edges are defined:

    available --reserve--> reserved --mark_sold--> sold
    reserved|sold --release--> available

``release`` on an available vehicle and ``mark_sold`` on a sold vehicle are
no-ops. Every other edge is rejected with ``ConflictError``.

The async operations lock the vehicle row (``SELECT ... FOR UPDATE``) inside
the caller's transaction, so two concurrent reservations of one vehicle
serialise and the second one observes ``reserved``.
"""
import logging
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from dealerops.core.enums import VehicleStatus, parse_vehicle_status
from dealerops.core.exceptions import ConflictError, NotFoundError
from dealerops.core.metrics import vehicle_transitions
from dealerops.models.vehicle import Vehicle

logger = logging.getLogger(__name__)


class VehicleEvent(str, Enum):
    RESERVE = "reserve"
    RELEASE = "release"
    MARK_SOLD = "mark_sold"

    def __str__(self):
        return self.value


TRANSITIONS = {
    (VehicleStatus.AVAILABLE, VehicleEvent.RESERVE): VehicleStatus.RESERVED,
    (VehicleStatus.RESERVED, VehicleEvent.RELEASE): VehicleStatus.AVAILABLE,
    (VehicleStatus.SOLD, VehicleEvent.RELEASE): VehicleStatus.AVAILABLE,
    (VehicleStatus.AVAILABLE, VehicleEvent.RELEASE): VehicleStatus.AVAILABLE,
    (VehicleStatus.RESERVED, VehicleEvent.MARK_SOLD): VehicleStatus.SOLD,
    (VehicleStatus.SOLD, VehicleEvent.MARK_SOLD): VehicleStatus.SOLD,
}


def next_status(current, event: VehicleEvent) -> VehicleStatus:
    status = parse_vehicle_status(current)
    target = TRANSITIONS.get((status, event))
    if target is None:
        if event == VehicleEvent.RESERVE:
            raise ConflictError(f"Vehicle is not available (current status: {current})")
        raise ConflictError(f"Cannot {event} a vehicle in status '{current}'")
    return target


def can_apply(current, event: VehicleEvent) -> bool:
    return (parse_vehicle_status(current), event) in TRANSITIONS


async def lock_vehicle(db: AsyncSession, vehicle_id: int) -> Vehicle:
    res = await db.execute(
        select(Vehicle).where(Vehicle.id == vehicle_id).with_for_update()
    )
    vehicle = res.scalars().first()
    if vehicle is None:
        raise NotFoundError("Vehicle", vehicle_id)
    return vehicle


async def apply_event(db: AsyncSession, vehicle_id: int, event: VehicleEvent) -> Vehicle:
    vehicle = await lock_vehicle(db, vehicle_id)
    current = parse_vehicle_status(vehicle.status)
    target = next_status(current, event)
    if target != current:
        vehicle.status = target
        await db.flush()
        vehicle_transitions.labels(event=str(event), to_status=str(target)).inc()
        logger.info(f"Vehicle {vehicle_id}: {current} -> {target} ({event})")
    return vehicle


async def reserve(db: AsyncSession, vehicle_id: int) -> Vehicle:
    return await apply_event(db, vehicle_id, VehicleEvent.RESERVE)


async def release(db: AsyncSession, vehicle_id: int) -> Vehicle:
    return await apply_event(db, vehicle_id, VehicleEvent.RELEASE)


async def mark_sold(db: AsyncSession, vehicle_id: int) -> Vehicle:
    return await apply_event(db, vehicle_id, VehicleEvent.MARK_SOLD)
