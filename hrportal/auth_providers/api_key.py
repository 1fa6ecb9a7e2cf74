"""Static API key authentication provider."""

from __future__ import annotations

from hrportal.auth_providers.base import AuthResult, coerce_roles
from hrportal.rbac import FALLBACK_ROLE


class ApiKeyProvider:
    """Authenticate via static API keys from HR_API_KEYS.

    Keys without an entry in the role map get the fallback role only.
    """

    name = "api_key"

    def __init__(self, valid_keys: set[str], key_roles: dict[str, list[str]] | None = None) -> None:
        self._valid_keys = valid_keys
        self._key_roles = key_roles or {}

    async def authenticate(self, token: str) -> AuthResult:
        if token in self._valid_keys:
            roles = coerce_roles(self._key_roles.get(token, [FALLBACK_ROLE.value]))
            return AuthResult(
                authenticated=True,
                identity=f"api_key:{token[:8]}...",
                provider=self.name,
                roles=roles,
            )
        return AuthResult(
            authenticated=False,
            provider=self.name,
            error="Invalid API key",
        )
