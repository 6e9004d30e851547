from __future__ import annotations

from contextlib import asynccontextmanager
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

from src.core.follow_ups import FOLLOW_UP_TASK_NAME, FollowUpOutcome
from src.workers.broker import CeleryTaskBroker


class _FakeRedis:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def set(self, key: str, value: str, nx: bool = False, px: int | None = None):  # noqa: ANN201
        if nx and key in self.values:
            return None
        self.values[key] = value
        self.ttls[key] = px
        return True

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def delete(self, key: str) -> int:
        return 1 if self.values.pop(key, None) is not None else 0


class _FakeCelery:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[dict] = []
        self.revoked: list[str] = []
        self.fail = fail
        self.control = SimpleNamespace(revoke=self.revoked.append)

    def send_task(self, name, kwargs=None, countdown=None, task_id=None):  # noqa: ANN001
        if self.fail:
            raise ConnectionError("broker unreachable")
        self.sent.append({"name": name, "kwargs": kwargs, "countdown": countdown, "task_id": task_id})


def _enqueue(broker: CeleryTaskBroker, key: str, delay_ms: int = 300_000) -> bool:
    return broker.enqueue(
        FOLLOW_UP_TASK_NAME,
        {"appointment_id": "abc"},
        delay_ms=delay_ms,
        idempotency_key=key,
        max_attempts=3,
        backoff_seconds=60,
    )


def test_enqueue_claims_key_and_sends_delayed_task() -> None:
    redis_client, app = _FakeRedis(), _FakeCelery()
    broker = CeleryTaskBroker(app, redis_client, dedup_grace_seconds=3600)  # type: ignore[arg-type]

    assert _enqueue(broker, "followup:1") is True

    sent = app.sent[0]
    assert sent["name"] == FOLLOW_UP_TASK_NAME
    assert sent["kwargs"] == {"appointment_id": "abc"}
    assert sent["countdown"] == 300
    assert sent["task_id"].startswith("followup:1:")
    assert redis_client.values["followup:1"] == sent["task_id"]
    # delay + retries at 60s and 120s + grace
    assert redis_client.ttls["followup:1"] == 300_000 + (60 + 120 + 3600) * 1000


def test_enqueue_same_key_twice_sends_once() -> None:
    app = _FakeCelery()
    broker = CeleryTaskBroker(app, _FakeRedis(), dedup_grace_seconds=0)  # type: ignore[arg-type]

    assert _enqueue(broker, "followup:2") is True
    assert _enqueue(broker, "followup:2", delay_ms=0) is False
    assert len(app.sent) == 1


def test_enqueue_releases_key_when_send_fails() -> None:
    redis_client = _FakeRedis()
    broker = CeleryTaskBroker(_FakeCelery(fail=True), redis_client, dedup_grace_seconds=0)  # type: ignore[arg-type]

    with pytest.raises(ConnectionError):
        _enqueue(broker, "followup:3")
    assert "followup:3" not in redis_client.values


def test_cancel_revokes_pending_task_and_frees_key() -> None:
    redis_client, app = _FakeRedis(), _FakeCelery()
    broker = CeleryTaskBroker(app, redis_client, dedup_grace_seconds=0)  # type: ignore[arg-type]
    _enqueue(broker, "followup:4")
    task_id = app.sent[0]["task_id"]

    broker.cancel("followup:4")

    assert app.revoked == [task_id]
    assert "followup:4" not in redis_client.values
    assert _enqueue(broker, "followup:4") is True
    assert app.sent[1]["task_id"] != task_id


def test_cancel_without_pending_task_is_harmless() -> None:
    app = _FakeCelery()
    CeleryTaskBroker(app, _FakeRedis(), dedup_grace_seconds=0).cancel("followup:none")  # type: ignore[arg-type]
    assert app.revoked == []


def test_retry_window() -> None:
    assert CeleryTaskBroker.retry_window_seconds(3, 60) == 180
    assert CeleryTaskBroker.retry_window_seconds(1, 60) == 0


def test_celery_app_configuration() -> None:
    from src.workers.celery_app import celery_app

    assert celery_app.conf.task_acks_late is True
    assert celery_app.conf.worker_prefetch_multiplier == 1
    assert celery_app.conf.task_serializer == "json"


def test_follow_up_task_retry_policy() -> None:
    from src.workers.tasks import send_follow_up_email

    assert send_follow_up_email.name == FOLLOW_UP_TASK_NAME
    assert send_follow_up_email.max_retries == 2
    assert send_follow_up_email.retry_backoff == 60
    assert send_follow_up_email.retry_jitter is False


def test_follow_up_task_runs_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.workers import tasks

    seen: list[UUID] = []

    async def _run(appointment_id: UUID) -> FollowUpOutcome:
        seen.append(appointment_id)
        return FollowUpOutcome.SENT

    monkeypatch.setattr(tasks, "run_follow_up", _run)
    appointment_id = uuid4()

    assert tasks.send_follow_up_email(str(appointment_id)) == "sent"
    assert seen == [appointment_id]


@pytest.mark.asyncio
async def test_run_follow_up_uses_worker_session(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.workers import tasks

    session = object()
    calls: list[tuple] = []

    @asynccontextmanager
    async def _session():
        yield session

    class FakeHandler:
        def __init__(self, session_arg, mailer, config):  # noqa: ANN001
            calls.append((session_arg, mailer, config))

        async def handle(self, appointment_id):  # noqa: ANN001
            return FollowUpOutcome.NOT_CONFIRMED

    monkeypatch.setattr(tasks, "worker_session", _session)
    monkeypatch.setattr(tasks, "FollowUpHandler", FakeHandler)
    monkeypatch.setattr(tasks, "MailgunMailer", lambda: "mailer")

    outcome = await tasks.run_follow_up(uuid4())

    assert outcome is FollowUpOutcome.NOT_CONFIRMED
    assert calls[0][0] is session
    assert calls[0][1] == "mailer"


def test_visibility_timeout_outlasts_follow_up_countdowns() -> None:
    from src.core.config import settings
    from src.workers.celery_app import celery_app

    timeout = celery_app.conf.broker_transport_options["visibility_timeout"]
    assert timeout == settings.celery_visibility_timeout_seconds
    assert timeout >= 30 * 24 * 3600
    assert celery_app.conf.task_acks_late is True
