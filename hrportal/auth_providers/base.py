"""Base authentication provider protocol and result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass
class AuthResult:
    """Result of an authentication attempt.

    ``roles`` are the HR system role strings of the session, passed as-is
    to the access resolver.
    """

    authenticated: bool
    identity: str = ""
    provider: str = ""
    roles: list[str] = field(default_factory=list)
    claims: dict = field(default_factory=dict)
    error: str | None = None


@runtime_checkable
class AuthProvider(Protocol):
    """Protocol that all auth providers must implement."""

    name: str

    async def authenticate(self, token: str) -> AuthResult:
        """Authenticate a token/key and return an AuthResult."""
        ...


def coerce_roles(value: object) -> list[str]:
    """Session roles as a list of strings: a single string is wrapped, non-strings dropped."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [r for r in value if isinstance(r, str)]
    return []
