"""Lifecycle events for the notification scheduler.

Events are queued only after the coordinator's transaction has committed; a
broker outage is logged and never undoes the committed operation.
"""
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from dealerops.core.config import settings

logger = logging.getLogger(__name__)


class LifecycleEvent(str, Enum):
    SALE_CREATED = "sale.created"
    SALE_UPDATED = "sale.updated"
    SALE_DELETED = "sale.deleted"
    LEAD_CONVERTED = "lead.converted"

    def __str__(self):
        return self.value


def build_event(event: LifecycleEvent, data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "event": str(event),
        "occurred_at": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }


def publish_event(event: LifecycleEvent, data: Dict[str, Any]) -> bool:
    if not settings.EVENTS_ENABLED:
        return False

    from dealerops.services.tasks import publish_lifecycle_event

    payload = build_event(event, data)
    try:
        publish_lifecycle_event.delay(payload)
        return True
    except Exception as e:
        logger.error(f"Could not queue lifecycle event {event}: {e}")
        return False
