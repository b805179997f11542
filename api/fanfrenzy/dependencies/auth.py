"""Authentication dependencies.

Two schemes are in play:

- Players authenticate with the hosted auth provider and send its access
  token as ``Authorization: Bearer <token>``. The token is resolved to a user
  by asking the provider, never by decoding it locally.
- Admin endpoints use a shared ``X-API-Key``.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass

import httpx
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from ..config import Settings, get_settings
from ..errors import AuthRequired

logger = logging.getLogger(__name__)

API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)
BEARER = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity resolved from a bearer token."""

    id: str
    email: str | None = None


class AuthProviderClient:
    """Resolves access tokens against the provider's ``/auth/v1/user`` endpoint."""

    def __init__(
        self,
        base_url: str | None,
        anon_key: str | None = None,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else None
        self.anon_key = anon_key
        self.timeout = timeout
        self._transport = transport

    async def resolve(self, token: str) -> AuthenticatedUser:
        """Return the user owning ``token``.

        Raises:
            AuthRequired: The token was rejected, or the provider could not be
                asked. An outage is not treated as anonymous access.
        """
        if not self.base_url:
            logger.warning("auth_provider_not_configured")
            raise AuthRequired("Authentication is not configured")

        headers = {"Authorization": f"Bearer {token}"}
        if self.anon_key:
            headers["apikey"] = self.anon_key

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(f"{self.base_url}/auth/v1/user", headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("auth_provider_unreachable", extra={"error": str(exc)})
            raise AuthRequired("Authentication service unavailable") from exc

        if response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
            raise AuthRequired("Invalid or expired token")
        if response.status_code != status.HTTP_200_OK:
            logger.warning("auth_provider_error", extra={"status_code": response.status_code})
            raise AuthRequired("Authentication service unavailable")

        try:
            body = response.json()
        except ValueError as exc:
            raise AuthRequired("Authentication service unavailable") from exc

        user_id = body.get("id") if isinstance(body, dict) else None
        if not user_id:
            raise AuthRequired("Invalid or expired token")
        return AuthenticatedUser(id=str(user_id), email=body.get("email"))


def get_auth_client(settings: Settings = Depends(get_settings)) -> AuthProviderClient:
    return AuthProviderClient(
        settings.auth_provider_url,
        anon_key=settings.auth_provider_anon_key,
        timeout=settings.auth_timeout_seconds,
    )


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(BEARER),
    auth_client: AuthProviderClient = Depends(get_auth_client),
) -> AuthenticatedUser | None:
    """Resolve the caller, or ``None`` when no bearer token was sent."""
    if credentials is None or not credentials.credentials:
        return None
    return await auth_client.resolve(credentials.credentials)


async def require_user(user: AuthenticatedUser | None = Depends(get_optional_user)) -> AuthenticatedUser:
    if user is None:
        raise AuthRequired("Sign in required")
    return user


async def verify_api_key(
    request: Request,
    api_key: str | None = Depends(API_KEY_HEADER),
    settings: Settings = Depends(get_settings),
) -> str:
    """Validate the admin API key from the request header.

    Uses constant-time comparison. With no key configured (local development
    only; ``validate_env`` requires one in production) every request passes.
    """
    if not settings.api_key:
        logger.warning("API_KEY not configured - allowing unauthenticated request")
        return ""

    client_ip = request.client.host if request.client else "unknown"
    if not api_key:
        logger.warning("Missing API key", extra={"client_ip": client_ip, "path": request.url.path})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if not secrets.compare_digest(api_key, settings.api_key):
        logger.warning("Invalid API key attempt", extra={"client_ip": client_ip, "path": request.url.path})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return api_key
