"""Audit rows, written inside the caller's transaction.

An audit row commits or rolls back together with the change it records, so a
failed flush here propagates and aborts the surrounding unit of work.
"""
import logging
from typing import Any, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from dealerops.models.audit import Audit
from dealerops.core.enums import AuditAction
from dealerops.core.metrics import audit_logs_created
from dealerops.utils.hashing import payload_hash

logger = logging.getLogger(__name__)


def _as_dict(payload: Any) -> Dict[str, Any]:
    if payload is None:
        return {}
    if hasattr(payload, "model_dump"):
        return payload.model_dump(exclude_unset=True)
    if isinstance(payload, dict):
        return payload
    logger.warning(f"Unsupported audit payload type {type(payload).__name__}; hashing empty payload")
    return {}


async def log_audit(
    db: AsyncSession,
    user_id: int,
    action: AuditAction,
    payload: Optional[Any] = None
) -> Audit:
    record = Audit(
        user_id=int(user_id),
        endpoint=str(action),
        payload_hash=payload_hash(_as_dict(payload)),
    )
    db.add(record)
    await db.flush()
    audit_logs_created.labels(action=str(action)).inc()
    logger.debug(f"Audit {action} by user {user_id}")
    return record


async def log_login(db: AsyncSession, user_id: int, username: str) -> Audit:
    return await log_audit(db, user_id, AuditAction.LOGIN, {"username": username})
