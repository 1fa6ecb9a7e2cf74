"""Tests for the role access table and its JSON loader."""

from __future__ import annotations

import json

import pytest

from hrportal.access.table import (
    AccessRecord,
    RoleAccessTable,
    default_access_table,
    load_access_table,
)
from hrportal.exceptions import ConfigurationError
from hrportal.rbac import SystemRole


def _table_as_json(table: RoleAccessTable) -> dict:
    return {role.value: record.to_dict() for role, record in table.items()}


class TestDefaultTable:
    @pytest.fixture
    def table(self):
        return default_access_table()

    def test_covers_every_role(self, table):
        assert set(table) == set(SystemRole)
        assert len(table) == 13

    @pytest.mark.parametrize("role", list(SystemRole))
    def test_default_route_is_a_path(self, table, role):
        assert table[role].default_route.startswith("/")

    def test_fallback_is_department_employee(self, table):
        assert table.fallback == table[SystemRole.DEPARTMENT_EMPLOYEE]
        assert "/performance" in table.fallback.routes
        assert "/offboarding" in table.fallback.routes

    def test_default_routes(self, table):
        assert table[SystemRole.SYSTEM_ADMIN].default_route == "/admin"
        assert table[SystemRole.HR_EMPLOYEE].default_route == "/employee-profile"
        assert table[SystemRole.RECRUITER].default_route == "/recruitment"
        assert table[SystemRole.PAYROLL_MANAGER].default_route == "/payroll"
        assert table[SystemRole.FINANCE_STAFF].default_route == "/payroll"
        assert table[SystemRole.JOB_CANDIDATE].default_route == "/candidate"
        assert table[SystemRole.NEW_HIRE].default_route == "/"

    def test_job_candidate_only_sees_candidate_portal(self, table):
        routes = table[SystemRole.JOB_CANDIDATE].routes
        assert all(r.startswith("/candidate") for r in routes)
        assert "/" not in routes

    def test_explicit_false_flags_preserved(self, table):
        assert table[SystemRole.HR_ADMIN].features["deleteEmployee"] is False
        assert table[SystemRole.HR_MANAGER].features["createEmployee"] is False
        assert table[SystemRole.DEPARTMENT_EMPLOYEE].features["viewCandidates"] is False

    def test_recruiter_has_no_delete_employee_key(self, table):
        assert "deleteEmployee" not in table[SystemRole.RECRUITER].features

    def test_records_are_read_only(self, table):
        record = table[SystemRole.RECRUITER]
        with pytest.raises(TypeError):
            record.features["deleteEmployee"] = True  # type: ignore[index]
        with pytest.raises(AttributeError):
            record.default_route = "/"  # type: ignore[misc]

    def test_built_fresh_each_call(self):
        assert default_access_table() == default_access_table()


class TestAccessRecord:
    def test_equality_ignores_feature_order(self):
        a = AccessRecord(frozenset({"/"}), {"x": True, "y": False}, "/")
        b = AccessRecord(frozenset({"/"}), {"y": False, "x": True}, "/")
        assert a == b
        assert hash(a) == hash(b)

    def test_to_dict_sorts_routes(self):
        record = AccessRecord(frozenset({"/b", "/a"}), {"f": True}, "/a")
        assert record.to_dict() == {
            "routes": ["/a", "/b"],
            "features": {"f": True},
            "default_route": "/a",
        }

    def test_from_dict_accepts_camel_case_default_route(self):
        record = AccessRecord.from_dict({"routes": ["/x"], "features": {}, "defaultRoute": "/x"})
        assert record.default_route == "/x"

    @pytest.mark.parametrize(
        "data",
        [
            {"routes": "/x", "default_route": "/x"},
            {"routes": ["/x"], "features": {"f": "yes"}, "default_route": "/x"},
            {"routes": ["/x"], "default_route": "x"},
            {"routes": ["/x"]},
        ],
    )
    def test_from_dict_rejects_malformed(self, data):
        with pytest.raises(ConfigurationError):
            AccessRecord.from_dict(data)


class TestTableConstruction:
    def test_missing_role_rejected(self):
        records = dict(default_access_table())
        del records[SystemRole.NEW_HIRE]
        with pytest.raises(ConfigurationError, match="New Hire"):
            RoleAccessTable(records)

    def test_from_mapping_round_trips_default(self):
        table = default_access_table()
        assert RoleAccessTable.from_mapping(_table_as_json(table)) == table

    def test_from_mapping_keys_are_case_insensitive(self):
        data = {k.upper(): v for k, v in _table_as_json(default_access_table()).items()}
        table = RoleAccessTable.from_mapping(data)
        assert table[SystemRole.RECRUITER].default_route == "/recruitment"

    def test_from_mapping_unknown_role(self):
        data = _table_as_json(default_access_table())
        data["Intern"] = data["Recruiter"]
        with pytest.raises(ConfigurationError, match="Unknown role"):
            RoleAccessTable.from_mapping(data)

    def test_from_mapping_duplicate_role(self):
        data = _table_as_json(default_access_table())
        data["recruiter"] = data["Recruiter"]
        with pytest.raises(ConfigurationError, match="Duplicate role"):
            RoleAccessTable.from_mapping(data)


class TestLoadAccessTable:
    def test_load_from_file(self, tmp_path):
        data = _table_as_json(default_access_table())
        data["Recruiter"]["default_route"] = "/recruiter"
        path = tmp_path / "table.json"
        path.write_text(json.dumps(data))

        table = load_access_table(path)
        assert table[SystemRole.RECRUITER].default_route == "/recruiter"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_access_table(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            load_access_table(path)

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]")
        with pytest.raises(ConfigurationError, match="object"):
            load_access_table(path)
