"""System roles for the HR Management System.

Defines the closed set of canonical roles and the helpers every other
module uses to compare role strings.  Role strings arriving from the
session are free-form: comparison ignores letter case and surrounding
whitespace, and unknown strings are tolerated rather than rejected.

Default-route priority (highest first):
    System Admin, HR Admin, HR Manager, Recruiter, Payroll Manager,
    department head, Job Candidate, New Hire
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum


class SystemRole(StrEnum):
    """Canonical HR system roles, valued as the backend spells them."""

    SYSTEM_ADMIN = "System Admin"
    HR_ADMIN = "HR Admin"
    HR_MANAGER = "HR Manager"
    HR_EMPLOYEE = "HR Employee"
    DEPARTMENT_HEAD = "department head"
    DEPARTMENT_EMPLOYEE = "department employee"
    PAYROLL_MANAGER = "Payroll Manager"
    PAYROLL_SPECIALIST = "Payroll Specialist"
    RECRUITER = "Recruiter"
    LEGAL_POLICY_ADMIN = "Legal & Policy Admin"
    FINANCE_STAFF = "Finance Staff"
    JOB_CANDIDATE = "Job Candidate"
    NEW_HIRE = "New Hire"


#: Minimum-privilege role used for unknown, empty or missing roles.
FALLBACK_ROLE: SystemRole = SystemRole.DEPARTMENT_EMPLOYEE

#: Roles that pick the landing page when a user holds several roles.
#: HR Employee, department employee, Payroll Specialist, Legal & Policy
#: Admin and Finance Staff are deliberately absent.
ROLE_PRIORITY: tuple[SystemRole, ...] = (
    SystemRole.SYSTEM_ADMIN,
    SystemRole.HR_ADMIN,
    SystemRole.HR_MANAGER,
    SystemRole.RECRUITER,
    SystemRole.PAYROLL_MANAGER,
    SystemRole.DEPARTMENT_HEAD,
    SystemRole.JOB_CANDIDATE,
    SystemRole.NEW_HIRE,
)

_DISPLAY_NAMES: dict[SystemRole, str] = {
    SystemRole.DEPARTMENT_HEAD: "Department Head",
    SystemRole.DEPARTMENT_EMPLOYEE: "Department Employee",
}

_BY_NORMALIZED: dict[str, SystemRole] = {role.value.lower(): role for role in SystemRole}

_SYSTEM_ADMIN_ALIASES = frozenset({"system admin", "system_admin", "systemadmin"})


def normalize_role(role: object) -> str:
    """Lower-case and strip *role*; anything that is not a string yields ``""``."""
    if not isinstance(role, str):
        return ""
    return role.lower().strip()


def parse_role(role: object) -> SystemRole | None:
    """Map a raw role string onto :class:`SystemRole`.

    Returns ``None`` for empty or unrecognised input.
    """
    return _BY_NORMALIZED.get(normalize_role(role))


def role_display_name(role: str) -> str:
    """Return the display spelling of *role*, or *role* itself when unknown."""
    parsed = parse_role(role)
    if parsed is None:
        return role
    return _DISPLAY_NAMES.get(parsed, parsed.value)


def has_role(user_roles: Iterable[str] | None, role: str) -> bool:
    """Check whether *user_roles* contains *role*, ignoring case and padding."""
    if not user_roles:
        return False
    target = normalize_role(role)
    return any(normalize_role(r) == target for r in user_roles)


def has_any_role(user_roles: Iterable[str] | None, roles: Iterable[str]) -> bool:
    if not user_roles:
        return False
    held = {normalize_role(r) for r in user_roles}
    return any(normalize_role(r) in held for r in roles)


def has_all_roles(user_roles: Iterable[str] | None, roles: Iterable[str]) -> bool:
    if not user_roles:
        return False
    held = {normalize_role(r) for r in user_roles}
    return all(normalize_role(r) in held for r in roles)


def is_system_admin(user_roles: Iterable[str] | None) -> bool:
    """System Admin check that also accepts the underscore and run-together spellings."""
    if not user_roles:
        return False
    return any(normalize_role(r) in _SYSTEM_ADMIN_ALIASES for r in user_roles)
