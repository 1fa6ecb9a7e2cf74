"""Role-based navigation access for the HR portal.

The functions exported here are bound to a resolver over
:func:`default_access_table`.  Services that load a custom table build
their own :class:`AccessResolver` instead.
"""

from __future__ import annotations

from functools import lru_cache

from hrportal.access.guard import (
    GuardDecision,
    GuardRequirements,
    GuardState,
    RouteGuard,
    SessionState,
)
from hrportal.access.resolver import AccessResolver, CombinedAccess
from hrportal.access.table import (
    AccessRecord,
    RoleAccessTable,
    default_access_table,
    load_access_table,
)

__all__ = [
    "AccessRecord",
    "AccessResolver",
    "CombinedAccess",
    "GuardDecision",
    "GuardRequirements",
    "GuardState",
    "RoleAccessTable",
    "RouteGuard",
    "SessionState",
    "can_access_route",
    "default_access_table",
    "default_resolver",
    "get_combined_access",
    "get_default_route",
    "has_feature",
    "load_access_table",
    "resolve_role",
]


@lru_cache(maxsize=1)
def default_resolver() -> AccessResolver:
    return AccessResolver(default_access_table())


def resolve_role(role: str | None) -> AccessRecord:
    return default_resolver().resolve_role(role)


def get_combined_access(roles: list[str] | None) -> CombinedAccess:
    return default_resolver().get_combined_access(roles)


def can_access_route(roles: list[str] | None, route: str) -> bool:
    return default_resolver().can_access_route(roles, route)


def has_feature(roles: list[str] | None, feature: str) -> bool:
    return default_resolver().has_feature(roles, feature)


def get_default_route(roles: list[str] | None) -> str:
    return default_resolver().get_default_route(roles)
