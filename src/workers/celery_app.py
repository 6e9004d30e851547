from __future__ import annotations

from typing import Any

from celery import Celery
from celery.signals import setup_logging

from src.core.config import settings
from src.core.logging_config import configure_logging

celery_app = Celery(
    "inkdesk",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["src.workers.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    # A follow-up job must survive a worker crash and be redelivered.
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_reject_on_worker_lost=True,
    task_default_queue="default",
    task_time_limit=120,
    task_soft_time_limit=90,
    result_expires=3600,
    broker_transport_options={"visibility_timeout": settings.celery_visibility_timeout_seconds},
)


@setup_logging.connect
def _configure_worker_logging(**kwargs: Any) -> None:
    configure_logging(settings.log_level)
