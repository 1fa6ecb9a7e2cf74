"""Sidebar navigation filtered by role access.

Job Candidates see the candidate portal items; everyone else sees the main
HR modules.  An item carrying a role list is shown to any signed-in user,
even one with an empty role list, who holds one of those roles or can
reach the item's route anyway.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from hrportal.access.resolver import AccessResolver
from hrportal.rbac import SystemRole, has_any_role, has_role


@dataclass(frozen=True)
class NavItem:
    name: str
    href: str
    roles: tuple[str, ...] = ()


NAV_ITEMS: tuple[NavItem, ...] = (
    NavItem("Employee Profile", "/employee-profile"),
    NavItem("Org Structure", "/organization-structure"),
    NavItem("Performance", "/performance"),
    NavItem("Time Management", "/time-management"),
    NavItem(
        "Recruitment",
        "/recruitment",
        roles=(
            "System Admin",
            "HR Admin",
            "HR Manager",
            "HR Employee",
            "Recruiter",
            "Dept. Employee",
        ),
    ),
    NavItem("Leaves", "/leaves"),
    NavItem("Payroll", "/payroll"),
)

CANDIDATE_NAV_ITEMS: tuple[NavItem, ...] = (
    NavItem("My Profile", "/candidate/profile"),
    NavItem("My Applications", "/candidate/applications"),
    NavItem("My Onboarding", "/candidate/onboarding"),
)


def visible_nav_items(resolver: AccessResolver, roles: Sequence[str] | None) -> list[NavItem]:
    items = CANDIDATE_NAV_ITEMS if has_role(roles, SystemRole.JOB_CANDIDATE) else NAV_ITEMS
    visible = []
    for item in items:
        if not item.roles:
            visible.append(item)
        elif roles is not None and (
            has_any_role(roles, item.roles) or resolver.can_access_route(roles, item.href)
        ):
            visible.append(item)
    return visible


def control_path(resolver: AccessResolver, roles: Sequence[str] | None) -> str:
    """Landing page linked from the sidebar header."""
    if not roles:
        return "/"
    return resolver.get_default_route(roles) or "/"


def is_active(pathname: str, href: str) -> bool:
    return pathname == href or (href != "/" and pathname.startswith(href))
