"""Centralized configuration for the HR Portal access service.

Uses Pydantic BaseSettings with environment variable loading and validation.
All HR_* environment variables are validated at import time.
"""

from __future__ import annotations

import json
import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


def split_csv(raw: str) -> list[str]:
    """Split a comma-separated setting, dropping blank entries."""
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = {"env_prefix": "HR_", "case_sensitive": False, "extra": "ignore"}

    # Auth
    api_keys: str = Field(default="", description="Comma-separated API keys (empty = dev mode)")
    api_key_roles: str = Field(
        default="",
        description='JSON map of api_key -> roles (e.g., \'{"key1": ["HR Manager"]}\')',
    )
    auth_provider: str = Field(default="api_key", description="Auth provider: api_key, jwt, multi")
    jwt_secret: str | None = Field(default=None, description="Secret of the HR backend's JWTs")
    jwt_algorithm: str = Field(default="HS256", description="Signing algorithm of backend JWTs")
    dev_roles: str = Field(
        default="System Admin", description="Comma-separated roles granted in dev mode"
    )

    # Access
    login_route: str = Field(default="/auth/login", description="Where unauthenticated users go")
    access_table_path: str | None = Field(
        default=None, description="Optional JSON file replacing the built-in access table"
    )

    # Backend proxy
    backend_url: str = Field(
        default="http://localhost:3000", description="Base URL of the HR backend REST API"
    )
    backend_timeout: float = Field(default=10.0, gt=0, description="Backend timeout in seconds")

    # Logging
    log_format: str = Field(default="text", description="Log format: text or json")
    log_level: str = Field(default="INFO", description="Python log level")

    # Server
    host: str = Field(default="0.0.0.0", description="Server bind host")  # noqa: S104
    port: int = Field(default=8000, ge=1, le=65535, description="Server bind port")

    # CORS
    cors_origins: str = Field(default="*", description="Comma-separated CORS origins")

    # Rate limiting
    rate_limit: str = Field(
        default="100/minute",
        description="Default rate limit (e.g., 100/minute). Set to 'none' to disable.",
    )

    @field_validator("auth_provider")
    @classmethod
    def validate_auth_provider(cls, v: str) -> str:
        v = v.lower()
        if v not in ("api_key", "jwt", "multi"):
            msg = f"HR_AUTH_PROVIDER must be 'api_key', 'jwt' or 'multi', got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("text", "json"):
            msg = f"HR_LOG_FORMAT must be 'text' or 'json', got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if not isinstance(getattr(logging, v, None), int):
            msg = f"HR_LOG_LEVEL must be a valid Python log level, got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("login_route")
    @classmethod
    def validate_login_route(cls, v: str) -> str:
        if not v.startswith("/"):
            msg = f"HR_LOGIN_ROUTE must start with '/', got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("api_key_roles")
    @classmethod
    def validate_api_key_roles(cls, v: str) -> str:
        if not v.strip():
            return v
        try:
            parsed = json.loads(v)
        except json.JSONDecodeError:
            msg = "HR_API_KEY_ROLES must be valid JSON"
            raise ValueError(msg)  # noqa: B904
        if not isinstance(parsed, dict):
            msg = "HR_API_KEY_ROLES must be a JSON object of api_key -> roles"
            raise ValueError(msg)
        return v

    @property
    def cors_origin_list(self) -> list[str]:
        """Return parsed list of CORS origins."""
        return split_csv(self.cors_origins)


# Singleton, validated at import time.
settings = Settings()
