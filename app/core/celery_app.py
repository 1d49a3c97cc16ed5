"""Celery application for periodic storefront maintenance"""

from celery import Celery
from kombu import Exchange, Queue
from app.core.config import settings

CLEANUP_QUEUE = "cleanup"

COUPON_CLEANUP_INTERVAL = 6 * 60 * 60

celery_app = Celery(
    "storefront",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["app.tasks.cleanup_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Maintenance tasks are idempotent
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_time_limit=10 * 60,
    task_soft_time_limit=9 * 60,
    task_default_queue="default",
    task_default_retry_delay=60,
    result_expires=60 * 60,
    task_queues=(
        Queue("default", Exchange("default"), routing_key="default"),
        Queue(CLEANUP_QUEUE, Exchange(CLEANUP_QUEUE), routing_key=CLEANUP_QUEUE),
    ),
    task_routes={
        "cleanup_expired_coupons": {"queue": CLEANUP_QUEUE},
    },
    beat_schedule={
        "cleanup-expired-coupons": {
            "task": "cleanup_expired_coupons",
            "schedule": COUPON_CLEANUP_INTERVAL,
        },
    },
)
