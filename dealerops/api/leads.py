from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Optional, List
from datetime import datetime, timezone

from dealerops.db.session import get_db
from dealerops.models.lead import Lead
from dealerops.schemas.lead import LeadCreate, LeadUpdate, LeadOut, ConversionOut
from dealerops.core.audit_log import log_audit
from dealerops.core.enums import AuditAction, LeadStatus, parse_lead_status
from dealerops.core.exceptions import ConflictError, PermissionDeniedError, ValidationError
from dealerops.core.permissions import require_capability, can_access_leads, can_assign_leads, can_delete_lead
from dealerops.core.rate_limit import check_rate_limit
from dealerops.core.auth_utils import filter_by_owner, check_ownership, check_not_found
from dealerops.core.response_builders import build_lead_response, build_lead_response_list
from dealerops.services.sale_coordinator import SaleCoordinator, get_coordinator

router = APIRouter(prefix="/leads", tags=["leads"])

leads_access = require_capability(can_access_leads, "access leads")
leads_delete = require_capability(can_delete_lead, "delete leads")


def _reject_manual_win(status: Optional[LeadStatus]) -> None:
    if status == LeadStatus.WON:
        raise ValidationError("A lead becomes 'won' only by converting it")


async def _load_owned_lead(db: AsyncSession, lead_id: int, current_user) -> Lead:
    res = await db.execute(select(Lead).where(Lead.id == lead_id))
    lead = res.scalars().first()
    check_not_found(lead, "Lead", lead_id)
    check_ownership(lead.assigned_to, current_user, "Lead")
    return lead


@router.post("/", response_model=LeadOut, status_code=201)
async def create_lead(
    payload: LeadCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(leads_access)
):
    await check_rate_limit(int(current_user.id))
    _reject_manual_win(payload.lead_status)

    lead = Lead(
        lead_source=payload.lead_source,
        lead_status=payload.lead_status or LeadStatus.NEW,
        contact_name=payload.contact_name,
        contact_phone=payload.contact_phone,
        contact_email=payload.contact_email,
        vehicle_interested=payload.vehicle_interested,
        inquiry_date=payload.inquiry_date or datetime.now(timezone.utc),
        follow_up_date=payload.follow_up_date,
        estimated_value=payload.estimated_value,
        notes=payload.notes,
        assigned_to=int(current_user.id),
    )
    db.add(lead)
    await db.flush()
    await log_audit(db, int(current_user.id), AuditAction.CREATE_LEAD, payload)
    await db.commit()
    await db.refresh(lead)

    return build_lead_response(lead)


@router.get("/", response_model=List[LeadOut])
async def list_leads(
    status: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(leads_access)
):
    q = select(Lead)

    q = filter_by_owner(q, Lead.assigned_to, current_user)

    if status:
        lead_status = parse_lead_status(status)
        if lead_status is None:
            raise ValidationError(f"Invalid lead status '{status}'")
        q = q.where(Lead.lead_status == lead_status)

    q = q.order_by(Lead.created_at.desc(), Lead.id.desc()).limit(limit).offset(offset)
    res = await db.execute(q)
    leads = res.scalars().all()

    return build_lead_response_list(leads)


@router.get("/{lead_id}", response_model=LeadOut)
async def get_lead(
    lead_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(leads_access)
):
    lead = await _load_owned_lead(db, lead_id, current_user)
    return build_lead_response(lead)


@router.put("/{lead_id}", response_model=LeadOut)
async def update_lead(
    lead_id: int,
    payload: LeadUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(leads_access)
):
    """Update a lead's contact details, status or assignment"""
    await check_rate_limit(int(current_user.id))

    lead = await _load_owned_lead(db, lead_id, current_user)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("lead_status") is not None:
        _reject_manual_win(changes["lead_status"])
        if parse_lead_status(lead.lead_status) == LeadStatus.WON:
            raise ConflictError(f"Lead {lead_id} has been converted; its status can no longer change")

    if "assigned_to" in changes and changes["assigned_to"] != lead.assigned_to:
        if not can_assign_leads(current_user.role):
            raise PermissionDeniedError("Forbidden: your role cannot reassign leads")

    for field, value in changes.items():
        if value is None and field in ("lead_source", "lead_status", "contact_name", "contact_phone", "contact_email", "assigned_to"):
            continue
        setattr(lead, field, value)

    db.add(lead)
    await db.flush()
    await log_audit(db, int(current_user.id), AuditAction.UPDATE_LEAD, {"lead_id": lead_id, **changes})
    await db.commit()
    await db.refresh(lead)

    return build_lead_response(lead)


@router.delete("/{lead_id}")
async def delete_lead(
    lead_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(leads_delete)
):
    await check_rate_limit(int(current_user.id))

    res = await db.execute(select(Lead).where(Lead.id == lead_id))
    lead = res.scalars().first()
    check_not_found(lead, "Lead", lead_id)

    await db.delete(lead)
    await log_audit(db, int(current_user.id), AuditAction.DELETE_LEAD, {"lead_id": lead_id})
    await db.commit()

    return {"deleted": True}


@router.post("/{lead_id}/convert", response_model=ConversionOut)
async def convert_lead(
    lead_id: int,
    db: AsyncSession = Depends(get_db),
    coordinator: SaleCoordinator = Depends(get_coordinator),
    current_user=Depends(leads_access)
):
    """Convert a lead into a customer and a pending sale"""
    await check_rate_limit(int(current_user.id))

    await _load_owned_lead(db, lead_id, current_user)

    return await coordinator.convert_lead(lead_id, int(current_user.id))
