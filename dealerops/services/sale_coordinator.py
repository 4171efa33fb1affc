"""
Sale transaction coordinator.

Every operation here changes more than one entity and runs as a single unit
of work through ``run_in_transaction``: either all of its writes commit or
none do. Input validation happens before a transaction is opened.

    create_sale   insert pending sale, reserve vehicle
    delete_sale   delete sale, release its vehicle
    convert_lead  insert customer, insert pending sale (no vehicle), mark lead won
    update_sale   status progression, deferred vehicle assignment, mark sold

Lifecycle events are published only after commit.
"""
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from dealerops.core.audit_log import log_audit
from dealerops.core.enums import AuditAction, FinancingType, LeadStatus, SaleStatus, parse_lead_status
from dealerops.core.exceptions import ConflictError, NotFoundError, ValidationError
from dealerops.core.metrics import track_sale_operation
from dealerops.core.validation import (
    require_non_negative_amount,
    require_positive_amount,
    validate_future_date,
)
from dealerops.db.session import get_session_factory
from dealerops.db.transaction import run_in_transaction
from dealerops.models.customer import Customer
from dealerops.models.lead import Lead
from dealerops.models.sale import Sale
from dealerops.schemas.lead import ConversionOut
from dealerops.services import sale_lifecycle, vehicle_lifecycle
from dealerops.services.events import LifecycleEvent, publish_event

logger = logging.getLogger(__name__)

# an explicit null is rejected for these; trade_in_value, warranty_package
# and delivery_date accept null and are cleared
NON_CLEARABLE_SALE_FIELDS = (
    "sale_status",
    "vehicle_id",
    "sale_price",
    "financing_type",
)


def _parse_financing_type(value: Any) -> FinancingType:
    if value is None or value == "":
        return FinancingType.CASH
    if isinstance(value, FinancingType):
        return value
    try:
        return FinancingType(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(f.value for f in FinancingType)
        raise ValidationError(f"Invalid financing type '{value}'. Must be one of: {allowed}")


def _check_delivery_date(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if not validate_future_date(value):
        raise ValidationError("delivery_date must not be in the past")
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value


def _sale_event_data(sale: Sale) -> Dict[str, Any]:
    return {
        "sale_id": sale.id,
        "customer_id": sale.customer_id,
        "vehicle_id": sale.vehicle_id,
        "salesperson_id": sale.salesperson_id,
        "sale_status": str(sale.sale_status),
        "delivery_date": sale.delivery_date.isoformat() if sale.delivery_date else None,
    }


async def _lock_sale(db: AsyncSession, sale_id: int) -> Sale:
    res = await db.execute(select(Sale).where(Sale.id == sale_id).with_for_update())
    sale = res.scalars().first()
    if sale is None:
        raise NotFoundError("Sale", sale_id)
    return sale


async def _lock_lead(db: AsyncSession, lead_id: int) -> Lead:
    res = await db.execute(select(Lead).where(Lead.id == lead_id).with_for_update())
    lead = res.scalars().first()
    if lead is None:
        raise NotFoundError("Lead", lead_id)
    return lead


async def _require_customer(db: AsyncSession, customer_id: int) -> Customer:
    res = await db.execute(select(Customer).where(Customer.id == customer_id))
    customer = res.scalars().first()
    if customer is None:
        raise NotFoundError("Customer", customer_id)
    return customer


async def _insert_customer_from_lead(db: AsyncSession, lead: Lead) -> Customer:
    customer = Customer(
        name=lead.contact_name,
        email=lead.contact_email,
        phone=lead.contact_phone,
        lead_id=lead.id,
    )
    db.add(customer)
    await db.flush()
    return customer


async def _insert_pending_sale(db: AsyncSession, customer_id: int, salesperson_id: int, **fields) -> Sale:
    sale = Sale(
        customer_id=customer_id,
        salesperson_id=salesperson_id,
        sale_status=SaleStatus.PENDING,
        **fields,
    )
    db.add(sale)
    await db.flush()
    return sale


async def _mark_lead_won(db: AsyncSession, lead: Lead) -> None:
    lead.lead_status = LeadStatus.WON
    await db.flush()


class SaleCoordinator:

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self.session_factory = session_factory

    @track_sale_operation("create_sale")
    async def create_sale(
        self,
        acting_user_id: int,
        customer_id: Optional[int] = None,
        vehicle_id: Optional[int] = None,
        sale_price: Any = None,
        financing_type: Any = None,
        trade_in_value: Any = None,
        warranty_package: Optional[str] = None,
        delivery_date: Any = None,
    ) -> Sale:
        """Create a pending sale and reserve its vehicle in one transaction.

        Raises ``ValidationError`` before touching the database when a
        required field is missing or malformed, ``NotFoundError`` for an
        unknown customer or vehicle and ``ConflictError`` when the vehicle is
        not available. In every failure case no sale row remains.
        """
        if not customer_id or not vehicle_id or sale_price in (None, ""):
            raise ValidationError("Missing required fields: customer_id, vehicle_id and sale_price")
        price = require_positive_amount(sale_price, "sale_price")
        financing = _parse_financing_type(financing_type)
        trade_in = None
        if trade_in_value not in (None, ""):
            trade_in = require_non_negative_amount(trade_in_value, "trade_in_value")
        delivery = _check_delivery_date(delivery_date)

        async def work(db: AsyncSession) -> Sale:
            await _require_customer(db, customer_id)
            # existence check and row lock before the sale row references the vehicle
            await vehicle_lifecycle.lock_vehicle(db, vehicle_id)
            sale = await _insert_pending_sale(
                db,
                customer_id,
                acting_user_id,
                vehicle_id=vehicle_id,
                sale_price=price,
                financing_type=financing,
                trade_in_value=trade_in,
                warranty_package=warranty_package,
                delivery_date=delivery,
            )
            await vehicle_lifecycle.reserve(db, vehicle_id)
            await log_audit(db, acting_user_id, AuditAction.CREATE_SALE, {
                "sale_id": sale.id,
                "customer_id": customer_id,
                "vehicle_id": vehicle_id,
                "sale_price": price,
            })
            return sale

        sale = await run_in_transaction(self.session_factory, work, "create_sale")
        logger.info(f"Sale {sale.id} created by user {acting_user_id}; vehicle {vehicle_id} reserved")
        publish_event(LifecycleEvent.SALE_CREATED, _sale_event_data(sale))
        return sale

    @track_sale_operation("delete_sale")
    async def delete_sale(self, sale_id: int, acting_user_id: int) -> Dict[str, Any]:
        """Delete a sale and return its vehicle to ``available``.

        The vehicle is released whatever status it reached, including
        ``sold``. A second call for the same id raises ``NotFoundError``.
        """

        async def work(db: AsyncSession) -> Dict[str, Any]:
            sale = await _lock_sale(db, sale_id)
            data = _sale_event_data(sale)
            vehicle_id = sale.vehicle_id
            if sale.sale_status in sale_lifecycle.VEHICLE_SOLD_STATES:
                logger.warning(f"Deleting sale {sale_id} in status {sale.sale_status}; vehicle {vehicle_id} returns to stock")
            await db.delete(sale)
            await db.flush()
            if vehicle_id is not None:
                await vehicle_lifecycle.release(db, vehicle_id)
            await log_audit(db, acting_user_id, AuditAction.DELETE_SALE, {"sale_id": sale_id, "vehicle_id": vehicle_id})
            return data

        data = await run_in_transaction(self.session_factory, work, "delete_sale")
        logger.info(f"Sale {sale_id} deleted by user {acting_user_id}")
        publish_event(LifecycleEvent.SALE_DELETED, data)
        return {"deleted": True, "sale_id": sale_id, "released_vehicle_id": data["vehicle_id"]}

    @track_sale_operation("convert_lead")
    async def convert_lead(self, lead_id: int, acting_user_id: int) -> ConversionOut:
        """Turn a lead into a customer plus a pending sale with no vehicle.

        A lead that is already ``won`` is rejected with ``ConflictError``.
        """

        async def work(db: AsyncSession) -> ConversionOut:
            lead = await _lock_lead(db, lead_id)
            if parse_lead_status(lead.lead_status) == LeadStatus.WON:
                raise ConflictError(f"Lead {lead_id} has already been converted")
            customer = await _insert_customer_from_lead(db, lead)
            sale = await _insert_pending_sale(
                db,
                customer.id,
                acting_user_id,
                financing_type=FinancingType.CASH,
            )
            await _mark_lead_won(db, lead)
            await log_audit(db, acting_user_id, AuditAction.CONVERT_LEAD, {
                "lead_id": lead_id,
                "customer_id": customer.id,
                "sale_id": sale.id,
            })
            return ConversionOut(customer_id=customer.id, sale_id=sale.id)

        result = await run_in_transaction(self.session_factory, work, "convert_lead")
        logger.info(
            f"Lead {lead_id} converted by user {acting_user_id}: "
            f"customer {result.customer_id}, sale {result.sale_id}"
        )
        publish_event(LifecycleEvent.LEAD_CONVERTED, {"lead_id": lead_id, **result.model_dump()})
        return result

    @track_sale_operation("update_sale")
    async def update_sale(self, sale_id: int, acting_user_id: int, changes: Dict[str, Any]) -> Sale:
        """Apply a partial update to a sale.

        ``vehicle_id`` may be assigned once, to a sale that has none, and
        reserves that vehicle. Moving to ``delivered`` or ``completed`` marks
        the linked vehicle sold.
        An explicit ``None`` clears ``trade_in_value``, ``warranty_package``
        and ``delivery_date``; for any other field it is a ``ValidationError``.
        """
        changes = dict(changes)

        for field in NON_CLEARABLE_SALE_FIELDS:
            if field in changes and changes[field] is None:
                if field == "vehicle_id":
                    raise ValidationError("vehicle_id cannot be cleared; delete the sale to release its vehicle")
                raise ValidationError(f"{field} cannot be cleared")

        target_status = None
        if changes.get("sale_status") is not None:
            target_status = sale_lifecycle.parse_target(changes["sale_status"])
        new_vehicle_id = changes.get("vehicle_id")

        fields: Dict[str, Any] = {}
        if changes.get("sale_price") is not None:
            fields["sale_price"] = require_positive_amount(changes["sale_price"], "sale_price")
        if "trade_in_value" in changes:
            value = changes["trade_in_value"]
            fields["trade_in_value"] = (
                None if value is None else require_non_negative_amount(value, "trade_in_value")
            )
        if changes.get("financing_type") is not None:
            fields["financing_type"] = _parse_financing_type(changes["financing_type"])
        if "delivery_date" in changes:
            fields["delivery_date"] = _check_delivery_date(changes["delivery_date"])
        if "warranty_package" in changes:
            fields["warranty_package"] = changes["warranty_package"]

        async def work(db: AsyncSession) -> Sale:
            sale = await _lock_sale(db, sale_id)

            if new_vehicle_id is not None and new_vehicle_id != sale.vehicle_id:
                if sale.vehicle_id is not None:
                    raise ConflictError(
                        f"Sale {sale_id} is already linked to vehicle {sale.vehicle_id}"
                    )
                await vehicle_lifecycle.reserve(db, new_vehicle_id)
                sale.vehicle_id = new_vehicle_id

            for field, value in fields.items():
                setattr(sale, field, value)

            if target_status is not None:
                current = sale.sale_status
                sale_lifecycle.validate_transition(current, target_status)
                if target_status != current and target_status in sale_lifecycle.VEHICLE_SOLD_STATES:
                    if sale.vehicle_id is None:
                        raise ConflictError("A sale needs a vehicle before it can be delivered or completed")
                    if sale.sale_price is None:
                        raise ConflictError("A sale needs a price before it can be delivered or completed")
                    await vehicle_lifecycle.mark_sold(db, sale.vehicle_id)
                sale.sale_status = target_status

            await db.flush()
            await log_audit(db, acting_user_id, AuditAction.UPDATE_SALE, {"sale_id": sale_id, **changes})
            return sale

        sale = await run_in_transaction(self.session_factory, work, "update_sale")
        logger.info(f"Sale {sale_id} updated by user {acting_user_id}")
        publish_event(LifecycleEvent.SALE_UPDATED, _sale_event_data(sale))
        return sale


def get_coordinator(session_factory=Depends(get_session_factory)) -> SaleCoordinator:
    return SaleCoordinator(session_factory)
