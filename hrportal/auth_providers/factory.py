"""Factory for creating auth providers based on configuration."""

from __future__ import annotations

import logging

from hrportal.auth_providers.api_key import ApiKeyProvider
from hrportal.auth_providers.base import AuthProvider, AuthResult

logger = logging.getLogger("hrportal.auth_providers.factory")


def create_provider(
    provider_name: str,
    *,
    api_keys: set[str] | None = None,
    key_roles: dict[str, list[str]] | None = None,
    jwt_secret: str | None = None,
    jwt_algorithm: str = "HS256",
) -> AuthProvider:
    """Create an auth provider by name."""
    if provider_name == "api_key":
        return ApiKeyProvider(api_keys or set(), key_roles)

    if provider_name == "jwt":
        if not jwt_secret:
            msg = "jwt_secret required for jwt auth provider"
            raise ValueError(msg)
        from hrportal.auth_providers.jwt_provider import BackendJWTProvider

        return BackendJWTProvider(jwt_secret, jwt_algorithm)

    if provider_name == "multi":
        providers: list[AuthProvider] = []
        if api_keys:
            providers.append(ApiKeyProvider(api_keys, key_roles))
        if jwt_secret:
            from hrportal.auth_providers.jwt_provider import BackendJWTProvider

            providers.append(BackendJWTProvider(jwt_secret, jwt_algorithm))
        if not providers:
            msg = "multi auth provider needs api_keys or jwt_secret"
            raise ValueError(msg)
        logger.debug("Multi provider with %d backends", len(providers))
        return MultiProvider(providers)

    msg = f"Unknown auth provider: {provider_name}"
    raise ValueError(msg)


class MultiProvider:
    """Try multiple auth providers in order."""

    name = "multi"

    def __init__(self, providers: list[AuthProvider]) -> None:
        self._providers = providers

    async def authenticate(self, token: str) -> AuthResult:
        for provider in self._providers:
            result = await provider.authenticate(token)
            if result.authenticated:
                return result
        return AuthResult(
            authenticated=False,
            provider="multi",
            error="No provider could authenticate the token",
        )
