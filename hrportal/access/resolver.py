"""Role-based access resolution.

:class:`AccessResolver` answers every navigation question the portal asks
about a user: which record a single role maps to, what a set of roles
grants in combination, whether a path is reachable, whether a feature is
enabled and where the user should land after login.

Every method is total.  Empty, malformed or unknown roles degrade to the
fallback role's record (department employee); nothing here raises.  This
is navigation UX only, the backend remains the authorization boundary.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from hrportal.access.table import AccessRecord, RoleAccessTable
from hrportal.rbac import ROLE_PRIORITY, has_role, parse_role

logger = logging.getLogger("hrportal.access")


@dataclass(frozen=True)
class CombinedAccess:
    """Union of everything a user's roles grant.  Computed per call, never stored."""

    routes: frozenset[str]
    features: Mapping[str, bool] = field(default_factory=dict)
    default_route: str = "/"

    def __post_init__(self) -> None:
        object.__setattr__(self, "routes", frozenset(self.routes))
        object.__setattr__(self, "features", MappingProxyType(dict(self.features)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CombinedAccess):
            return NotImplemented
        return (
            self.routes == other.routes
            and dict(self.features) == dict(other.features)
            and self.default_route == other.default_route
        )

    def __hash__(self) -> int:
        return hash((self.routes, frozenset(self.features.items()), self.default_route))

    @classmethod
    def from_record(cls, record: AccessRecord) -> CombinedAccess:
        return cls(
            routes=record.routes,
            features=record.features,
            default_route=record.default_route,
        )

    def can_access(self, route: str) -> bool:
        """True when *route* equals an allowed entry or sits beneath one."""
        return any(route == r or route.startswith(r + "/") for r in self.routes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "routes": sorted(self.routes),
            "features": dict(sorted(self.features.items())),
            "default_route": self.default_route,
        }


def _valid_roles(roles: Iterable[Any] | None) -> list[str]:
    """Keep non-empty string roles, trimmed."""
    if not roles or isinstance(roles, str):
        return []
    return [r.strip() for r in roles if isinstance(r, str) and r.strip()]


class AccessResolver:
    """Stateless resolver over an injected, immutable :class:`RoleAccessTable`."""

    def __init__(self, table: RoleAccessTable) -> None:
        self._table = table

    @property
    def table(self) -> RoleAccessTable:
        return self._table

    def resolve_role(self, role: str | None) -> AccessRecord:
        """Return the access record for one role, falling back when unknown."""
        if not role or not isinstance(role, str) or not role.strip():
            logger.warning("resolve_role: no role provided, using fallback access")
            return self._table.fallback

        parsed = parse_role(role)
        if parsed is None:
            logger.debug("resolve_role: unknown role %r, using fallback access", role)
            return self._table.fallback
        return self._table[parsed]

    def get_combined_access(self, roles: Iterable[str] | None) -> CombinedAccess:
        """Merge the records of every role in *roles*.

        Routes are unioned; a feature is granted when any record grants it
        (a record that omits a key counts as ``False``).  The default route
        comes from the highest-priority role present, or ``"/"`` when no
        priority role is held.
        """
        valid = _valid_roles(roles)
        if not valid:
            return CombinedAccess.from_record(self._table.fallback)

        records = [self.resolve_role(role) for role in valid]

        routes: set[str] = set()
        for record in records:
            routes.update(record.routes)

        feature_keys = {key for record in records for key in record.features}
        features = {
            key: any(record.features.get(key) is True for record in records)
            for key in feature_keys
        }

        default_route = "/"
        for priority_role in ROLE_PRIORITY:
            if has_role(valid, priority_role):
                default_route = self._table[priority_role].default_route
                break

        return CombinedAccess(
            routes=frozenset(routes), features=features, default_route=default_route
        )

    def can_access_route(self, roles: Iterable[str] | None, route: str) -> bool:
        return self.get_combined_access(roles).can_access(route)

    def has_feature(self, roles: Iterable[str] | None, feature: str) -> bool:
        """Missing feature keys count as ``False``."""
        return self.get_combined_access(roles).features.get(feature) is True

    def get_default_route(self, roles: Iterable[str] | None) -> str:
        return self.get_combined_access(roles).default_route
