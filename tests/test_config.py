"""Tests for HR_* settings validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from hrportal.config import Settings, split_csv


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "HR_API_KEYS",
        "HR_API_KEY_ROLES",
        "HR_AUTH_PROVIDER",
        "HR_LOG_FORMAT",
        "HR_LOG_LEVEL",
        "HR_LOGIN_ROUTE",
        "HR_BACKEND_TIMEOUT",
        "HR_DEV_ROLES",
        "HR_CORS_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults(self):
        s = Settings()
        assert s.auth_provider == "api_key"
        assert s.login_route == "/auth/login"
        assert s.backend_url == "http://localhost:3000"
        assert s.backend_timeout == 10.0
        assert s.cors_origin_list == ["*"]


class TestFromEnv:
    def test_prefix_and_parsing(self, monkeypatch):
        monkeypatch.setenv("HR_API_KEYS", " k1 , k2,, ")
        monkeypatch.setenv("HR_DEV_ROLES", "HR Manager, Recruiter")
        monkeypatch.setenv("HR_AUTH_PROVIDER", "MULTI")
        monkeypatch.setenv("HR_LOG_LEVEL", "debug")
        s = Settings()
        assert split_csv(s.api_keys) == ["k1", "k2"]
        assert split_csv(s.dev_roles) == ["HR Manager", "Recruiter"]
        assert s.auth_provider == "multi"
        assert s.log_level == "DEBUG"

    @pytest.mark.parametrize(
        "name,value",
        [
            ("HR_AUTH_PROVIDER", "ldap"),
            ("HR_LOG_FORMAT", "xml"),
            ("HR_LOG_LEVEL", "LOUD"),
            ("HR_LOGIN_ROUTE", "auth/login"),
            ("HR_BACKEND_TIMEOUT", "0"),
            ("HR_API_KEY_ROLES", "{not json"),
            ("HR_API_KEY_ROLES", '["HR Manager"]'),
        ],
    )
    def test_invalid_values_rejected(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValidationError):
            Settings()

    def test_key_roles_object_accepted(self, monkeypatch):
        monkeypatch.setenv("HR_API_KEY_ROLES", '{"k1": ["Recruiter"]}')
        assert Settings().api_key_roles == '{"k1": ["Recruiter"]}'


class TestSplitCsv:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("", []),
            (" , ,", []),
            ("a", ["a"]),
            (" System Admin ,HR Admin ", ["System Admin", "HR Admin"]),
        ],
    )
    def test_split(self, raw, expected):
        assert split_csv(raw) == expected
