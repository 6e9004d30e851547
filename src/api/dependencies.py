from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from src.core.config import settings
from src.core.follow_ups import FollowUpMailer, FollowUpScheduler, TaskBroker
from src.core.mail import MailgunMailer


@lru_cache(maxsize=1)
def _celery_broker() -> TaskBroker:
    from src.workers.broker import CeleryTaskBroker

    return CeleryTaskBroker.from_settings()


def get_task_broker() -> TaskBroker:
    return _celery_broker()


def get_follow_up_scheduler(broker: TaskBroker = Depends(get_task_broker)) -> FollowUpScheduler:
    return FollowUpScheduler(broker, settings.follow_up_config())


def get_mailer() -> FollowUpMailer:
    return MailgunMailer()
