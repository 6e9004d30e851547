from __future__ import annotations

import asyncio
from uuid import UUID

from celery import Task, shared_task
from celery.utils.log import get_task_logger

from src.core.config import settings
from src.core.db import worker_session
from src.core.follow_ups import FOLLOW_UP_TASK_NAME, FollowUpHandler, FollowUpOutcome
from src.core.mail import MailgunMailer

logger = get_task_logger(__name__)

_follow_up_config = settings.follow_up_config()


class FollowUpTask(Task):
    abstract = True

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        # No dead-letter queue: once retries are exhausted the job is gone.
        logger.error(
            "Task %s id=%s failed permanently for %s: %s",
            self.name,
            task_id,
            kwargs,
            exc,
        )


async def run_follow_up(appointment_id: UUID) -> FollowUpOutcome:
    async with worker_session() as session:
        handler = FollowUpHandler(session, MailgunMailer(), _follow_up_config)
        return await handler.handle(appointment_id)


@shared_task(
    bind=True,
    base=FollowUpTask,
    name=FOLLOW_UP_TASK_NAME,
    autoretry_for=(Exception,),
    retry_backoff=_follow_up_config.backoff_seconds,
    retry_backoff_max=_follow_up_config.backoff_seconds * 2 ** max(0, _follow_up_config.max_attempts - 1),
    retry_jitter=False,
    max_retries=max(0, _follow_up_config.max_attempts - 1),
)
def send_follow_up_email(self, appointment_id: str) -> str:
    logger.info("Running follow-up for appointment=%s attempt=%s", appointment_id, self.request.retries + 1)
    outcome = asyncio.run(run_follow_up(UUID(appointment_id)))
    return outcome.value
