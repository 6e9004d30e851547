from __future__ import annotations

from types import SimpleNamespace
from uuid import uuid4

import pytest
from fastapi import HTTPException
from jose import JWTError

from src.core.auth import (
    AuthContext,
    JwksCache,
    _decode_clerk_jwt,
    _get_signing_key,
    _is_super_admin,
    require_auth_context,
    require_super_admin,
    subject_to_user_id,
)
from src.core.context import get_current_tenant_id, set_current_tenant_id


def _ctx(*, subject: str = "user_1", claims: dict | None = None) -> AuthContext:
    return AuthContext(
        tenant_id=uuid4(),
        user_id=uuid4(),
        subject=subject,
        org_id="org_salon",
        claims=claims or {},
    )


class _Session:
    def __init__(self, tenant=None) -> None:  # noqa: ANN001
        self.tenant = tenant

    async def scalar(self, _stmt):  # noqa: ANN001
        return self.tenant


def _request() -> SimpleNamespace:
    return SimpleNamespace(state=SimpleNamespace())


def test_subject_to_user_id_is_deterministic() -> None:
    assert subject_to_user_id("abc") == subject_to_user_id("abc")
    assert subject_to_user_id("abc") != subject_to_user_id("xyz")


def test_is_super_admin_by_subject(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.core import auth

    monkeypatch.setattr(auth.settings, "super_admin_subjects_csv", "user_1, user_2")
    assert _is_super_admin(_ctx(subject="user_2")) is True


def test_is_super_admin_by_claim_role(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.core import auth

    monkeypatch.setattr(auth.settings, "super_admin_subjects_csv", "")
    assert _is_super_admin(_ctx(claims={"role": "super_admin"})) is True
    assert _is_super_admin(_ctx(claims={"roles": ["artist", "super_admin"]})) is True
    assert _is_super_admin(_ctx(claims={"roles": ["artist"]})) is False


@pytest.mark.asyncio
async def test_require_super_admin_blocks_salon_owner(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.core import auth

    monkeypatch.setattr(auth.settings, "super_admin_subjects_csv", "boss")
    ctx = _ctx(subject="boss")
    assert await require_super_admin(ctx) is ctx

    with pytest.raises(HTTPException) as exc:
        await require_super_admin(_ctx(subject="owner"))
    assert exc.value.status_code == 403


def test_get_signing_key_missing_kid(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.core import auth

    monkeypatch.setattr(auth.jwt, "get_unverified_header", lambda token: {})
    with pytest.raises(HTTPException) as exc:
        _get_signing_key("token")
    assert exc.value.status_code == 401


def test_get_signing_key_matching_and_unknown_kid(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.core import auth

    keys = {"abc": {"kid": "abc", "kty": "RSA"}}
    monkeypatch.setattr(auth.jwt, "get_unverified_header", lambda token: {"kid": "abc"})
    monkeypatch.setattr(auth.jwks_cache, "find", lambda kid: keys.get(kid))
    assert _get_signing_key("token")["kid"] == "abc"

    monkeypatch.setattr(auth.jwt, "get_unverified_header", lambda token: {"kid": "zzz"})
    with pytest.raises(HTTPException) as exc:
        _get_signing_key("token")
    assert exc.value.status_code == 401
    assert exc.value.detail == "No matching signing key found"


def test_get_signing_key_invalid_header(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.core import auth

    def _bad_header(_token: str) -> dict:
        raise JWTError("invalid header")

    monkeypatch.setattr(auth.jwt, "get_unverified_header", _bad_header)
    with pytest.raises(HTTPException) as exc:
        _get_signing_key("token")
    assert exc.value.status_code == 401


def test_decode_clerk_jwt_invalid(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.core import auth

    monkeypatch.setattr(auth, "_get_signing_key", lambda token: {"kid": "abc"})

    def _boom(*args, **kwargs):  # noqa: ANN002, ANN003
        raise JWTError("expired")

    monkeypatch.setattr(auth.jwt, "decode", _boom)
    with pytest.raises(HTTPException) as exc:
        _decode_clerk_jwt("token")
    assert exc.value.status_code == 401


class _JwksServer:
    def __init__(self, *kids: str) -> None:
        self.kids = list(kids)
        self.calls = 0

    def get(self, url: str, timeout: int):  # noqa: ANN001
        self.calls += 1
        kids = self.kids

        class _Resp:
            def raise_for_status(self) -> None:
                return None

            def json(self) -> dict:
                return {"keys": [{"kid": kid} for kid in kids]}

        return _Resp()


def test_jwks_cache_refetches_after_ttl(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.core import auth

    server = _JwksServer("a")
    clock = {"now": 1000.0}
    monkeypatch.setattr(auth.requests, "get", server.get)
    monkeypatch.setattr(auth.time, "time", lambda: clock["now"])

    cache = JwksCache("https://jwks.example", ttl_seconds=300)
    assert cache.find("a") == {"kid": "a"}
    assert cache.find("a") == {"kid": "a"}
    assert server.calls == 1

    clock["now"] += 301
    cache.keys()
    assert server.calls == 2


def test_jwks_cache_picks_up_rotated_key(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.core import auth

    server = _JwksServer("old")
    clock = {"now": 1000.0}
    monkeypatch.setattr(auth.requests, "get", server.get)
    monkeypatch.setattr(auth.time, "time", lambda: clock["now"])

    cache = JwksCache("https://jwks.example", ttl_seconds=300)
    cache.keys()
    server.kids = ["new"]

    # Too soon after the last fetch: no refetch for an unknown kid.
    assert cache.find("new") is None
    assert server.calls == 1

    clock["now"] += 60
    assert cache.find("new") == {"kid": "new"}
    assert server.calls == 2


@pytest.mark.asyncio
async def test_require_auth_context_resolves_salon(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.core import auth

    tenant = SimpleNamespace(id=uuid4(), is_active=True)
    monkeypatch.setattr(auth, "_decode_clerk_jwt", lambda _token: {"org_id": "org_1", "sub": "user_1"})

    request = _request()
    try:
        context = await require_auth_context(request, SimpleNamespace(credentials="jwt"), _Session(tenant))

        assert context.tenant_id == tenant.id
        assert context.org_id == "org_1"
        assert context.user_id == subject_to_user_id("user_1")
        assert request.state.tenant_id == tenant.id
        assert request.state.user_subject == "user_1"
        assert get_current_tenant_id() == tenant.id
    finally:
        set_current_tenant_id(None)


@pytest.mark.asyncio
async def test_require_auth_context_missing_claims(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.core import auth

    monkeypatch.setattr(auth, "_decode_clerk_jwt", lambda _token: {"sub": "user_1"})
    with pytest.raises(HTTPException) as exc:
        await require_auth_context(_request(), SimpleNamespace(credentials="jwt"), _Session())
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_require_auth_context_salon_not_provisioned(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.core import auth

    monkeypatch.setattr(auth, "_decode_clerk_jwt", lambda _token: {"org_id": "org_missing", "sub": "user_2"})
    with pytest.raises(HTTPException) as exc:
        await require_auth_context(_request(), SimpleNamespace(credentials="jwt"), _Session(None))
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_require_auth_context_inactive_salon(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.core import auth

    tenant = SimpleNamespace(id=uuid4(), is_active=False)
    monkeypatch.setattr(auth, "_decode_clerk_jwt", lambda _token: {"org_id": "org_1", "sub": "user_3"})
    with pytest.raises(HTTPException) as exc:
        await require_auth_context(_request(), SimpleNamespace(credentials="jwt"), _Session(tenant))
    assert exc.value.detail == "Salon account is inactive"
