import httpx
import asyncio
import logging
from dealerops.core.config import settings
from dealerops.core.metrics import webhook_deliveries

logger = logging.getLogger(__name__)


async def send_webhook(payload: dict, retries: int | None = None) -> bool:

    if retries is None:
        retries = settings.WEBHOOK_RETRIES
    
    event = payload.get("event", "unknown")
    backoff = 1.0
    
    for attempt in range(1, retries + 1):
        try:
            async with httpx.AsyncClient(timeout=settings.WEBHOOK_TIMEOUT) as client:
                response = await client.post(settings.WEBHOOK_URL, json=payload)
                
                if 200 <= response.status_code < 300:
                    webhook_deliveries.labels(status="success", event=event).inc()
                    logger.info(f"Webhook delivery succeeded for event {event}")
                    return True
                else:
                    webhook_deliveries.labels(status="rejected", event=event).inc()
                    logger.warning(
                        f"Webhook delivery failed (attempt {attempt}/{retries}): "
                        f"Status {response.status_code} for event {event}"
                    )
        except httpx.TimeoutException:
            webhook_deliveries.labels(status="timeout", event=event).inc()
            logger.warning(
                f"Webhook timeout (attempt {attempt}/{retries}) for event {event}"
            )
        except httpx.HTTPError as e:
            webhook_deliveries.labels(status="error", event=event).inc()
            logger.warning(
                f"Webhook delivery error (attempt {attempt}/{retries}): {e} "
                f"for event {event}"
            )
        
        if attempt < retries:
            await asyncio.sleep(backoff)
            backoff *= 2.0
    
    logger.error(f"Webhook delivery failed after {retries} attempts for event {event}")
    return False
