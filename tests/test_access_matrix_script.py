"""Tests for scripts/access_matrix.py."""

from __future__ import annotations

import importlib.util
import json
from pathlib import Path

import pytest

from hrportal.access.table import default_access_table

_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "access_matrix.py"


@pytest.fixture(scope="module")
def script():
    spec = importlib.util.spec_from_file_location("access_matrix", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestRender:
    def test_text_lists_every_route_and_role(self, script):
        out = script.render_text(default_access_table(), features=False)
        assert "/candidate/onboarding" in out
        assert "13  New Hire (default /)" in out
        assert " 6  Department Employee (default /)" in out

    def test_json_routes(self, script):
        matrix = json.loads(script.render_json(default_access_table(), features=False))
        assert len(matrix) == 13
        assert "/admin" in matrix["System Admin"]
        assert "/admin" not in matrix["HR Admin"]

    def test_json_features_skip_false_flags(self, script):
        matrix = json.loads(script.render_json(default_access_table(), features=True))
        assert "deleteEmployee" in matrix["System Admin"]
        assert "deleteEmployee" not in matrix["HR Admin"]


class TestMain:
    def test_default_text(self, script, capsys):
        assert script.main([]) == 0
        assert "/payroll-tracking" in capsys.readouterr().out

    def test_custom_table(self, script, tmp_path, capsys):
        data = {r.value: rec.to_dict() for r, rec in default_access_table().items()}
        data["Recruiter"]["routes"].append("/talent-pool")
        path = tmp_path / "table.json"
        path.write_text(json.dumps(data))

        assert script.main(["--table", str(path), "--format", "json"]) == 0
        matrix = json.loads(capsys.readouterr().out)
        assert "/talent-pool" in matrix["Recruiter"]

    def test_bad_table(self, script, tmp_path, capsys):
        path = tmp_path / "table.json"
        path.write_text("{}")
        assert script.main(["--table", str(path)]) == 1
        assert "missing roles" in capsys.readouterr().err
