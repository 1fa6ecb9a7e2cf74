"""Session authentication and access dependencies for the HR portal API.

Authentication is controlled by environment variables:
- ``HR_API_KEYS``: comma-separated list of valid API keys. When empty and
  the provider is ``api_key``, auth is **disabled** (dev mode) and callers
  get the roles in ``HR_DEV_ROLES``.
- ``HR_AUTH_PROVIDER``: ``api_key`` (default), ``jwt`` (HR backend session
  tokens) or ``multi`` (both, in that order).

Clients supply credentials via:
- ``Authorization: Bearer <token>`` header (preferred)
- ``X-API-Key`` header
- ``api_key`` query parameter
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Sequence

from fastapi import HTTPException, Request, status

from hrportal.access.guard import GuardRequirements, RouteGuard, SessionState
from hrportal.auth_providers.base import AuthResult
from hrportal.auth_providers.factory import create_provider
from hrportal.config import settings, split_csv
from hrportal.exceptions import AccessDeniedError, ConfigurationError

# Paths that are always public, even when auth is enabled.
PUBLIC_PATHS: frozenset[str] = frozenset({"/health", "/api/v1/health", "/metrics", "/api/version"})

_audit_logger = logging.getLogger("hrportal.audit")


def _extract_token(request: Request) -> str | None:
    """Extract auth token from request headers or query params.

    Priority: Authorization Bearer > X-API-Key header > api_key query param.
    """
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip()

    api_key = request.headers.get("X-API-Key")
    if api_key is not None:
        return api_key

    return request.query_params.get("api_key")


def _parse_key_roles(raw: str) -> dict[str, list[str]]:
    """Parse HR_API_KEY_ROLES JSON string into a dict."""
    if not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _audit_failure(request: Request, reason: str, **extra: object) -> None:
    _audit_logger.warning(
        "Auth failure (%s): %s %s from %s",
        reason,
        request.method,
        request.url.path,
        request.client.host if request.client else "unknown",
        extra={
            "event_category": "audit",
            "action": "auth_failure",
            "reason": reason,
            "path": request.url.path,
            **extra,
        },
    )


async def require_session(request: Request) -> None:
    """FastAPI dependency that authenticates the caller.

    Behaviour:
    * Requests to paths listed in ``PUBLIC_PATHS`` are always allowed.
    * Dev mode (``api_key`` provider, no keys configured) attaches a dev
      session holding ``HR_DEV_ROLES``.
    * Otherwise the caller must present a valid token.

    The :class:`AuthResult` is attached to ``request.state.auth`` so
    handlers can read the session's roles.

    Raises:
        HTTPException 403: auth is enabled but no token was provided.
        HTTPException 401: a token was provided but it is not valid.
    """
    if request.url.path in PUBLIC_PATHS:
        return

    # Read config via os.environ so monkeypatch works in tests.
    api_keys_raw = os.environ.get("HR_API_KEYS", settings.api_keys)
    valid_keys = set(split_csv(api_keys_raw))
    provider_name = os.environ.get("HR_AUTH_PROVIDER", settings.auth_provider).lower()

    if provider_name == "api_key" and not valid_keys:
        dev_roles_raw = os.environ.get("HR_DEV_ROLES", settings.dev_roles)
        request.state.auth = AuthResult(
            authenticated=True,
            identity="dev",
            provider="dev",
            roles=split_csv(dev_roles_raw),
        )
        return

    key_roles = _parse_key_roles(os.environ.get("HR_API_KEY_ROLES", settings.api_key_roles))

    try:
        provider = create_provider(
            provider_name,
            api_keys=valid_keys or None,
            key_roles=key_roles or None,
            jwt_secret=os.environ.get("HR_JWT_SECRET", settings.jwt_secret),
            jwt_algorithm=os.environ.get("HR_JWT_ALGORITHM", settings.jwt_algorithm),
        )
    except ValueError as e:
        raise ConfigurationError(f"Auth provider misconfigured: {e}") from e

    token = _extract_token(request)
    if token is None:
        _audit_failure(request, "no_token")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Credentials required. Provide a Bearer token or X-API-Key header.",
        )

    result = await provider.authenticate(token)
    if not result.authenticated:
        _audit_failure(request, "invalid_token", provider=result.provider, error=result.error)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials.",
        )

    request.state.auth = result


def session_from_request(request: Request) -> SessionState:
    """Session snapshot for the guard; an unauthenticated request has no roles."""
    auth: AuthResult | None = getattr(request.state, "auth", None)
    if auth is None or not auth.authenticated:
        return SessionState(loading=False, roles=None)
    return SessionState(loading=False, roles=list(auth.roles))


def require_access(
    required_route: str | None = None,
    roles: Sequence[str] = (),
    features: Sequence[str] = (),
):
    """Dependency factory running the route guard against the caller's session.

    The caller passes when ``required_route`` is reachable (if given) and it
    holds any of ``roles`` OR any of ``features`` (if either is given).
    On failure :class:`AccessDeniedError` carries the redirect target.
    """
    requirements = GuardRequirements(
        required_route=required_route,
        required_roles=tuple(roles),
        required_features=tuple(features),
    )

    async def _check(request: Request) -> None:
        guard: RouteGuard = request.app.state.guard
        decision = guard.evaluate(
            session_from_request(request), required_route or "/", requirements
        )
        if not decision.allowed:
            _audit_logger.warning(
                "Access denied: %s %s (%s)",
                request.method,
                request.url.path,
                decision.reason,
                extra={
                    "event_category": "audit",
                    "action": "access_denied",
                    "reason": decision.reason,
                    "path": request.url.path,
                    "redirect_to": decision.redirect_to,
                },
            )
            raise AccessDeniedError(
                "User does not have the required role or feature",
                redirect_to=decision.redirect_to,
            )

    return _check
