from __future__ import annotations

import time
from dataclasses import dataclass, field
from uuid import NAMESPACE_URL, UUID, uuid5

import requests
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.context import set_current_tenant_id
from src.core.db import get_db_session
from src.core.repositories.tenants import TenantAccountRepository

bearer_scheme = HTTPBearer(auto_error=True)


@dataclass(slots=True)
class AuthContext:
    tenant_id: UUID
    user_id: UUID
    subject: str
    org_id: str
    claims: dict = field(default_factory=dict)


MIN_REFRESH_SECONDS = 30


class JwksCache:
    """Clerk signing keys, refreshed on TTL expiry or when an unknown ``kid`` shows up."""

    def __init__(self, url: str | None = None, ttl_seconds: int = 300) -> None:
        self.url = url
        self.ttl_seconds = ttl_seconds
        self._keys: dict[str, dict] = {}
        self._fetched_at = 0.0

    def _fetch(self) -> None:
        response = requests.get(self.url or settings.clerk_jwks_url, timeout=5)
        response.raise_for_status()
        self._keys = {key["kid"]: key for key in response.json().get("keys", []) if key.get("kid")}
        self._fetched_at = time.time()

    def keys(self) -> dict[str, dict]:
        if not self._keys or (time.time() - self._fetched_at) > self.ttl_seconds:
            self._fetch()
        return self._keys

    def find(self, kid: str) -> dict | None:
        key = self.keys().get(kid)
        if key is None and (time.time() - self._fetched_at) > MIN_REFRESH_SECONDS:
            # Clerk rotated its keys since the last fetch.
            self._fetch()
            key = self._keys.get(kid)
        return key


jwks_cache = JwksCache()


def subject_to_user_id(subject: str) -> UUID:
    return uuid5(NAMESPACE_URL, f"clerk:{subject}")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _get_signing_key(token: str) -> dict:
    try:
        kid = jwt.get_unverified_header(token).get("kid")
    except JWTError as exc:
        raise _unauthorized("Invalid authentication header") from exc
    if not kid:
        raise _unauthorized("JWT is missing key id")

    key = jwks_cache.find(kid)
    if key is None:
        raise _unauthorized("No matching signing key found")
    return key


def _decode_clerk_jwt(token: str) -> dict:
    key = _get_signing_key(token)
    try:
        return jwt.decode(
            token,
            key,
            algorithms=["RS256"],
            issuer=settings.clerk_issuer,
            audience=settings.clerk_audience or None,
            options={"verify_aud": bool(settings.clerk_audience)},
        )
    except JWTError as exc:
        raise _unauthorized("Invalid or expired token") from exc


async def require_auth_context(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> AuthContext:
    claims = _decode_clerk_jwt(credentials.credentials)

    org_id = claims.get("org_id")
    subject = claims.get("sub")

    if not org_id or not subject:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Token is missing required claims",
        )

    tenant = await TenantAccountRepository(session).get_by_clerk_org_id(org_id)
    if tenant is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Salon is not provisioned",
        )
    if not tenant.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Salon account is inactive",
        )

    request.state.tenant_id = tenant.id
    request.state.user_subject = subject
    set_current_tenant_id(tenant.id)

    return AuthContext(
        tenant_id=tenant.id,
        user_id=subject_to_user_id(subject),
        subject=subject,
        org_id=org_id,
        claims=claims,
    )


def _is_super_admin(context: AuthContext) -> bool:
    if context.subject in settings.super_admin_subjects():
        return True

    role = context.claims.get("role")
    roles = context.claims.get("roles") or []
    return role == "super_admin" or "super_admin" in roles


async def require_super_admin(
    context: AuthContext = Depends(require_auth_context),
) -> AuthContext:
    if not _is_super_admin(context):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super admin privileges required",
        )
    return context
