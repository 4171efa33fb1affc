from celery import Celery
from dealerops.core.config import settings

celery_app = Celery(
    "dealerops",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_BACKEND,
)
celery_app.conf.task_routes = {"dealerops.services.tasks.publish_lifecycle_event": {"queue": "events"}}


class WebhookDeliveryFailed(Exception):
    pass


@celery_app.task(bind=True, max_retries=3)
def publish_lifecycle_event(self, payload: dict):
    import asyncio
    from dealerops.services.webhook import send_webhook

    try:
        delivered = asyncio.run(send_webhook(payload))
        if not delivered:
            raise WebhookDeliveryFailed(f"event {payload.get('event')} was not accepted")
    except Exception as e:
        retry_kwargs = {"countdown": 2 ** self.request.retries}
        raise self.retry(exc=e, **retry_kwargs)
