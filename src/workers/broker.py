from __future__ import annotations

import logging
from uuid import uuid4

import redis
from celery import Celery

from src.core.config import settings

logger = logging.getLogger(__name__)


class CeleryTaskBroker:
    """Delayed task submission with one pending job per idempotency key.

    The key is claimed in Redis with ``SET NX`` before the task is sent; its
    value is the Celery task id, so a pending job can be revoked by key.
    """

    def __init__(
        self,
        app: Celery,
        redis_client: redis.Redis,
        *,
        dedup_grace_seconds: int | None = None,
    ) -> None:
        self.app = app
        self.redis = redis_client
        self.dedup_grace_seconds = (
            dedup_grace_seconds if dedup_grace_seconds is not None else settings.follow_up_dedup_grace_seconds
        )

    @classmethod
    def from_settings(cls) -> CeleryTaskBroker:
        from src.workers.celery_app import celery_app

        return cls(celery_app, redis.Redis.from_url(settings.redis_url, decode_responses=True))

    @staticmethod
    def retry_window_seconds(max_attempts: int, backoff_seconds: int) -> int:
        return sum(backoff_seconds * 2**retry for retry in range(max(0, max_attempts - 1)))

    def enqueue(
        self,
        task_name: str,
        payload: dict[str, str],
        *,
        delay_ms: int,
        idempotency_key: str,
        max_attempts: int,
        backoff_seconds: int,
    ) -> bool:
        # The key outlives the due time plus the whole retry window.
        ttl_ms = delay_ms + (self.retry_window_seconds(max_attempts, backoff_seconds) + self.dedup_grace_seconds) * 1000
        task_id = f"{idempotency_key}:{uuid4().hex}"
        if not self.redis.set(idempotency_key, task_id, nx=True, px=max(ttl_ms, 1)):
            return False

        try:
            self.app.send_task(
                task_name,
                kwargs=payload,
                countdown=delay_ms / 1000,
                task_id=task_id,
            )
        except Exception:
            self.redis.delete(idempotency_key)
            raise
        return True

    def cancel(self, idempotency_key: str) -> None:
        task_id = self.redis.get(idempotency_key)
        if task_id:
            self.app.control.revoke(task_id)
            logger.info("Revoked pending task id=%s", task_id)
        self.redis.delete(idempotency_key)
