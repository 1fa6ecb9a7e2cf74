"""Route guard: decide whether a page may render for the current session.

Per navigation the guard moves through::

    loading -> unauthenticated            (no user: go to login)
    loading -> checking -> authorized     (render the page)
                        -> redirecting    (go to the user's landing page)

Role and feature requirements combine with OR: holding any required role
*or* any required feature is enough.  A required route must additionally be
reachable from the current path.  Like the resolver, this only shapes
navigation; the backend enforces authorization.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from hrportal.access.resolver import AccessResolver
from hrportal.rbac import has_any_role

logger = logging.getLogger("hrportal.access.guard")

DEFAULT_LOGIN_ROUTE = "/auth/login"


class GuardState(StrEnum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    CHECKING = "checking"
    AUTHORIZED = "authorized"
    REDIRECTING = "redirecting"


@dataclass(frozen=True)
class SessionState:
    """Snapshot of the authentication session.  ``roles is None`` means no user."""

    loading: bool = False
    roles: Sequence[str] | None = None

    @property
    def authenticated(self) -> bool:
        return self.roles is not None


@dataclass(frozen=True)
class GuardRequirements:
    required_route: str | None = None
    required_roles: Sequence[str] = ()
    required_features: Sequence[str] = ()
    redirect_to: str | None = None


@dataclass(frozen=True)
class GuardDecision:
    state: GuardState
    redirect_to: str | None = None
    reason: str | None = None

    @property
    def allowed(self) -> bool:
        return self.state is GuardState.AUTHORIZED


class RouteGuard:
    """Evaluates :class:`GuardRequirements` against a session and current path."""

    def __init__(self, resolver: AccessResolver, login_route: str = DEFAULT_LOGIN_ROUTE) -> None:
        self._resolver = resolver
        self._login_route = login_route

    def evaluate(
        self,
        session: SessionState,
        path: str,
        requirements: GuardRequirements | None = None,
    ) -> GuardDecision:
        if session.loading:
            return GuardDecision(GuardState.LOADING)
        if not session.authenticated:
            return GuardDecision(
                GuardState.UNAUTHENTICATED,
                redirect_to=self._login_route,
                reason="not_authenticated",
            )

        reqs = requirements or GuardRequirements()
        roles = list(session.roles or [])

        if reqs.required_route and not self._resolver.can_access_route(roles, path):
            return self._redirect(
                roles, reqs, "route_not_allowed", f"Access denied to {reqs.required_route}"
            )

        if not self.satisfies(roles, reqs.required_roles, reqs.required_features):
            held = ", ".join(r for r in roles if isinstance(r, str))
            return self._redirect(
                roles,
                reqs,
                "missing_role_or_feature",
                f"User does not have required role or feature. Roles: {held}",
            )

        return GuardDecision(GuardState.AUTHORIZED)

    def satisfies(
        self,
        roles: Sequence[str],
        required_roles: Sequence[str],
        required_features: Sequence[str],
    ) -> bool:
        """Two-term OR: any required role OR any required feature.

        With neither list given there is nothing to satisfy.  This is a
        permissive union on purpose; do not turn it into an AND.
        """
        if not required_roles and not required_features:
            return True
        if required_roles and has_any_role(roles, required_roles):
            return True
        return any(self._resolver.has_feature(roles, f) for f in required_features)

    def _redirect(
        self,
        roles: list[str],
        reqs: GuardRequirements,
        reason: str,
        message: str,
    ) -> GuardDecision:
        target = reqs.redirect_to or self._resolver.get_default_route(roles)
        logger.warning("%s. Redirecting to %s", message, target)
        return GuardDecision(GuardState.REDIRECTING, redirect_to=target, reason=reason)
