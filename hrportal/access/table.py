"""Role access table: routes, feature flags and landing page per role.

The table is authored configuration.  ``default_access_table()`` returns the
navigation surface of the HR Management System frontend; an alternative
table can be loaded from JSON with :func:`load_access_table`, but it must
still cover every :class:`~hrportal.rbac.SystemRole`.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from hrportal.exceptions import ConfigurationError
from hrportal.rbac import FALLBACK_ROLE, SystemRole, parse_role


@dataclass(frozen=True)
class AccessRecord:
    """What a single role may see and do."""

    routes: frozenset[str]
    features: Mapping[str, bool] = field(default_factory=dict)
    default_route: str = "/"

    def __post_init__(self) -> None:
        object.__setattr__(self, "routes", frozenset(self.routes))
        object.__setattr__(self, "features", MappingProxyType(dict(self.features)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AccessRecord):
            return NotImplemented
        return (
            self.routes == other.routes
            and dict(self.features) == dict(other.features)
            and self.default_route == other.default_route
        )

    def __hash__(self) -> int:
        return hash((self.routes, frozenset(self.features.items()), self.default_route))

    def to_dict(self) -> dict[str, Any]:
        return {
            "routes": sorted(self.routes),
            "features": dict(self.features),
            "default_route": self.default_route,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AccessRecord:
        """Build a record from JSON-shaped data (``defaultRoute`` also accepted)."""
        routes = data.get("routes")
        features = data.get("features", {})
        default_route = data.get("default_route", data.get("defaultRoute"))
        if not isinstance(routes, list) or not all(isinstance(r, str) for r in routes):
            raise ConfigurationError("Access record 'routes' must be a list of strings")
        if not isinstance(features, dict) or not all(
            isinstance(k, str) and isinstance(v, bool) for k, v in features.items()
        ):
            raise ConfigurationError("Access record 'features' must map names to booleans")
        if not isinstance(default_route, str) or not default_route.startswith("/"):
            raise ConfigurationError("Access record 'default_route' must be a path")
        return cls(routes=frozenset(routes), features=features, default_route=default_route)


class RoleAccessTable(Mapping[SystemRole, AccessRecord]):
    """Immutable, exhaustive mapping from canonical role to access record."""

    def __init__(self, records: Mapping[SystemRole, AccessRecord]) -> None:
        missing = [role.value for role in SystemRole if role not in records]
        if missing:
            raise ConfigurationError(f"Access table is missing roles: {', '.join(missing)}")
        self._records: Mapping[SystemRole, AccessRecord] = MappingProxyType(
            {role: records[role] for role in SystemRole}
        )

    def __getitem__(self, role: SystemRole) -> AccessRecord:
        return self._records[role]

    def __iter__(self) -> Iterator[SystemRole]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def fallback(self) -> AccessRecord:
        """Record of the minimum-privilege fallback role."""
        return self._records[FALLBACK_ROLE]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping[str, Any]]) -> RoleAccessTable:
        """Build a table from a dict keyed by role strings (any casing)."""
        records: dict[SystemRole, AccessRecord] = {}
        for key, value in data.items():
            role = parse_role(key)
            if role is None:
                raise ConfigurationError(f"Unknown role in access table: {key!r}")
            if role in records:
                raise ConfigurationError(f"Duplicate role in access table: {key!r}")
            if not isinstance(value, Mapping):
                raise ConfigurationError(f"Access record for {key!r} must be an object")
            records[role] = AccessRecord.from_dict(value)
        return cls(records)


def load_access_table(path: str | Path) -> RoleAccessTable:
    """Load a JSON access table from *path*."""
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read access table {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError("Access table JSON must be an object keyed by role")
    return RoleAccessTable.from_mapping(raw)


# Recruitment feature flags shared by the full-access HR roles.
_RECRUITMENT_FEATURES: dict[str, bool] = {
    "manageRecruitment": True,
    "viewCandidates": True,
    "createCandidate": True,
    "editCandidate": True,
    "manageJobPostings": True,
    "scheduleInterviews": True,
    "manageOffers": True,
    "manageOnboarding": True,
    "manageOffboarding": True,
    "viewRecruitmentAnalytics": True,
    "manageHiringStages": True,
    "manageReferrals": True,
}


def default_access_table() -> RoleAccessTable:
    """The HR Management System navigation surface, role by role."""
    return RoleAccessTable(
        {
            SystemRole.SYSTEM_ADMIN: AccessRecord(
                routes=frozenset(
                    {
                        "/",
                        "/admin",
                        "/admin/employee-profile",
                        "/admin/employee-profile/change-requests",
                        "/admin/organization-structure",
                        "/admin/organization-structure/departments",
                        "/admin/organization-structure/positions",
                        "/employee-profile",
                        "/organization-structure",
                        "/performance",
                        "/performance/templates",
                        "/performance/cycles",
                        "/performance/disputes",
                        "/hr-manager",
                        "/hr-manager/onboarding",
                        "/recruitment",
                        "/time-management",
                        "/leaves",
                        "/payroll",
                        "/payroll-tracking",
                    }
                ),
                features={
                    "viewAllEmployees": True,
                    "createEmployee": True,
                    "editEmployee": True,
                    "deleteEmployee": True,
                    "assignRoles": True,
                    "manageChangeRequests": True,
                    "approveChangeRequests": True,
                    "createDepartments": True,
                    "editDepartments": True,
                    "deleteDepartments": True,
                    "createPositions": True,
                    "editPositions": True,
                    "deletePositions": True,
                    "createAppraisalTemplates": True,
                    "manageAppraisalCycles": True,
                    "deleteAssignments": True,
                    "updateAssignmentStatus": True,
                    "evaluateEmployees": True,
                    "viewAllPerformance": True,
                    "resolveDisputes": True,
                    "archiveEmployees": True,
                    "viewPayroll": True,
                    **_RECRUITMENT_FEATURES,
                },
                default_route="/admin",
            ),
            SystemRole.HR_ADMIN: AccessRecord(
                routes=frozenset(
                    {
                        "/",
                        "/admin/employee-profile",
                        "/admin/employee-profile/change-requests",
                        "/employee-profile",
                        "/performance",
                        "/performance/templates",
                        "/performance/cycles",
                        "/performance/disputes",
                        "/hr-manager",
                        "/hr-manager/onboarding",
                        "/recruitment",
                        "/time-management",
                        "/leaves",
                        "/payroll",
                    }
                ),
                features={
                    "viewAllEmployees": True,
                    "createEmployee": True,
                    "editEmployee": True,
                    "deleteEmployee": False,
                    "assignRoles": True,
                    "manageChangeRequests": True,
                    "approveChangeRequests": True,
                    "createAppraisalTemplates": True,
                    "manageAppraisalCycles": True,
                    "deleteAssignments": True,
                    "updateAssignmentStatus": True,
                    "evaluateEmployees": True,
                    "viewAllPerformance": True,
                    "resolveDisputes": True,
                    "viewPayroll": True,
                    **_RECRUITMENT_FEATURES,
                },
                default_route="/",
            ),
            SystemRole.HR_MANAGER: AccessRecord(
                routes=frozenset(
                    {
                        "/",
                        "/hr-manager",
                        "/hr-manager/onboarding",
                        "/admin/employee-profile",
                        "/admin/employee-profile/change-requests",
                        "/employee-profile",
                        "/performance",
                        "/performance/templates",
                        "/performance/cycles",
                        "/performance/disputes",
                        "/recruitment",
                        "/time-management",
                        "/leaves",
                    }
                ),
                features={
                    "viewAllEmployees": True,
                    "createEmployee": False,
                    "editEmployee": False,
                    "manageChangeRequests": True,
                    "approveChangeRequests": True,
                    "createAppraisalTemplates": True,
                    "manageAppraisalCycles": True,
                    "resolveDisputes": True,
                    **_RECRUITMENT_FEATURES,
                },
                default_route="/",
            ),
            SystemRole.HR_EMPLOYEE: AccessRecord(
                routes=frozenset(
                    {
                        "/",
                        "/admin/employee-profile",
                        "/admin/employee-profile/change-requests",
                        "/employee-profile",
                        "/performance",
                        "/performance/templates",
                        "/performance/cycles",
                        "/admin/organization-structure",
                        "/organization-structure",
                        "/recruitment",
                        "/time-management",
                        "/leaves",
                    }
                ),
                features={
                    "viewAllEmployees": True,
                    "manageChangeRequests": True,
                    "viewAppraisalTemplates": True,
                    "assistAppraisalCycles": True,
                    "viewPerformanceStatus": True,
                    "viewOrganizationalCharts": True,
                    "viewEmployeeQualifications": True,
                    "generateBasicReports": True,
                    # assist-level recruitment
                    "assistRecruitment": True,
                    "viewCandidates": True,
                    "scheduleInterviews": True,
                    "viewOnboarding": True,
                    "assistOnboarding": True,
                },
                default_route="/employee-profile",
            ),
            SystemRole.DEPARTMENT_HEAD: AccessRecord(
                routes=frozenset(
                    {
                        "/",
                        "/admin/employee-profile",
                        "/employee-profile",
                        "/performance",
                        "/performance/cycles",
                        "/performance/team-results",
                        "/admin/organization-structure",
                        "/organization-structure",
                        "/time-management",
                        "/leaves",
                    }
                ),
                features={
                    "viewTeamEmployees": True,
                    "viewOwnProfile": True,
                    "viewOrganizationalCharts": True,
                    "evaluateEmployees": True,
                    "viewTeamPerformance": True,
                },
                default_route="/",
            ),
            SystemRole.DEPARTMENT_EMPLOYEE: AccessRecord(
                routes=frozenset(
                    {
                        "/",
                        "/performance",
                        "/performance/my-performance",
                        "/performance/disputes",
                        "/admin/employee-profile",
                        "/employee-profile",
                        "/admin/organization-structure",
                        "/organization-structure",
                        "/recruitment",
                        "/offboarding",
                        "/time-management",
                        "/leaves",
                    }
                ),
                features={
                    "viewOwnProfile": True,
                    "editOwnProfile": True,
                    "submitChangeRequests": True,
                    "viewOrganizationalCharts": True,
                    "viewOwnPerformance": True,
                    "submitDisputes": True,
                    "viewCandidates": False,
                    "viewRecruitment": True,
                    "viewOffboarding": True,
                },
                default_route="/",
            ),
            SystemRole.PAYROLL_MANAGER: AccessRecord(
                routes=frozenset(
                    {
                        "/",
                        "/admin/employee-profile",
                        "/employee-profile",
                        "/admin/organization-structure",
                        "/organization-structure",
                        "/payroll",
                        "/payroll-tracking",
                    }
                ),
                features={
                    "viewAllEmployees": True,
                    "viewOrganizationalCharts": True,
                    "viewPayroll": True,
                    "editPayroll": True,
                },
                default_route="/payroll",
            ),
            SystemRole.PAYROLL_SPECIALIST: AccessRecord(
                routes=frozenset(
                    {
                        "/",
                        "/admin/employee-profile",
                        "/employee-profile",
                        "/admin/organization-structure",
                        "/organization-structure",
                        "/payroll",
                        "/payroll-tracking",
                    }
                ),
                features={
                    "viewAllEmployees": True,
                    "viewOrganizationalCharts": True,
                    "viewPayroll": True,
                },
                default_route="/payroll",
            ),
            SystemRole.RECRUITER: AccessRecord(
                routes=frozenset(
                    {
                        "/",
                        "/admin/employee-profile",
                        "/employee-profile",
                        "/admin/organization-structure",
                        "/organization-structure",
                        "/recruiter",
                        "/recruitment",
                    }
                ),
                features={
                    "viewCandidates": True,
                    "createCandidate": True,
                    "editCandidate": True,
                    "viewOrganizationalCharts": True,
                    "manageRecruitment": True,
                    "manageJobPostings": True,
                    "scheduleInterviews": True,
                    "viewOnboarding": True,
                    "assistOnboarding": True,
                    "viewRecruitmentAnalytics": True,
                    "manageReferrals": True,
                },
                default_route="/recruitment",
            ),
            SystemRole.LEGAL_POLICY_ADMIN: AccessRecord(
                routes=frozenset(
                    {
                        "/",
                        "/admin/employee-profile",
                        "/employee-profile",
                        "/admin/organization-structure",
                        "/organization-structure",
                    }
                ),
                features={
                    "viewAllEmployees": True,
                    "viewOrganizationalCharts": True,
                },
                default_route="/",
            ),
            SystemRole.FINANCE_STAFF: AccessRecord(
                routes=frozenset(
                    {
                        "/",
                        "/admin/employee-profile",
                        "/employee-profile",
                        "/admin/organization-structure",
                        "/organization-structure",
                        "/payroll",
                        "/payroll-tracking",
                    }
                ),
                features={
                    "viewAllEmployees": True,
                    "viewOrganizationalCharts": True,
                    "viewPayroll": True,
                },
                default_route="/payroll",
            ),
            SystemRole.JOB_CANDIDATE: AccessRecord(
                routes=frozenset(
                    {
                        "/candidate",
                        "/candidate/profile",
                        "/candidate/applications",
                        "/candidate/onboarding",
                    }
                ),
                features={
                    "viewOwnCandidateProfile": True,
                    "editOwnCandidateProfile": True,
                    "viewApplicationStatus": True,
                    "applyToJobs": True,
                    "uploadDocuments": True,
                    "viewOnboardingTasks": True,
                    "completeOnboardingTasks": True,
                    "uploadOnboardingDocuments": True,
                    "viewOnboardingProgress": True,
                },
                default_route="/candidate",
            ),
            SystemRole.NEW_HIRE: AccessRecord(
                routes=frozenset({"/", "/recruitment", "/employee-profile"}),
                features={
                    "viewOwnProfile": True,
                    "editOwnProfile": True,
                    "viewOnboardingTasks": True,
                    "completeOnboardingTasks": True,
                    "uploadOnboardingDocuments": True,
                    "viewOnboardingProgress": True,
                },
                default_route="/",
            ),
        }
    )
