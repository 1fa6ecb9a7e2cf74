"""JWT authentication against tokens issued by the HR backend."""

from __future__ import annotations

import logging

import jwt

from hrportal.auth_providers.base import AuthResult, coerce_roles

logger = logging.getLogger("hrportal.auth_providers.jwt")


class BackendJWTProvider:
    """Authenticate via the HR backend's signed session JWTs.

    The identity is taken from ``sub`` (or ``userId`` on older tokens) and
    the session roles from the ``roles`` claim.
    """

    name = "jwt"

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    async def authenticate(self, token: str) -> AuthResult:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            return AuthResult(authenticated=False, provider=self.name, error="Token expired")
        except jwt.InvalidTokenError as e:
            logger.debug("Backend JWT rejected: %s", e)
            return AuthResult(
                authenticated=False,
                provider=self.name,
                error=f"JWT validation failed: {e}",
            )

        sub = payload.get("sub") or payload.get("userId") or ""
        return AuthResult(
            authenticated=True,
            identity=f"user:{sub}",
            provider=self.name,
            roles=coerce_roles(payload.get("roles")),
            claims=payload,
        )
