"""Tests for the HR backend pass-through."""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from hrportal.api.app import app
from hrportal.api.proxy import BackendProxy
from hrportal.exceptions import BackendTimeoutError, BackendUnavailableError


def _failing(exc_type):
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_type("boom", request=request)

    return handler


@pytest_asyncio.fixture
async def swap_backend():
    """Replace the app's backend with one built on *handler* for one test."""
    original = app.state.backend
    swapped: list[BackendProxy] = []

    def _swap(handler) -> BackendProxy:
        app.state.backend = BackendProxy(
            "http://backend.test", transport=httpx.MockTransport(handler)
        )
        swapped.append(app.state.backend)
        return app.state.backend

    yield _swap
    for proxy in swapped:
        await proxy.close()
    app.state.backend = original


# ---------------------------------------------------------------------------
# Unit tests - BackendProxy
# ---------------------------------------------------------------------------


class TestBackendProxy:
    async def test_forwards_selected_headers_only(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.headers)
            return httpx.Response(204)

        proxy = BackendProxy("http://backend.test/", transport=httpx.MockTransport(handler))
        await proxy.forward(
            "GET",
            "/api/onboarding/checklists",
            headers={"Authorization": "Bearer t", "X-Forwarded-For": "1.2.3.4", "Host": "x"},
        )
        await proxy.close()
        assert seen["authorization"] == "Bearer t"
        assert "x-forwarded-for" not in seen
        assert seen["host"] == "backend.test"

    async def test_base_url_trailing_slash_stripped(self):
        assert BackendProxy("http://backend.test/").base_url == "http://backend.test"

    async def test_connect_error(self):
        proxy = BackendProxy(
            "http://backend.test", transport=httpx.MockTransport(_failing(httpx.ConnectError))
        )
        with pytest.raises(BackendUnavailableError, match="backend.test"):
            await proxy.forward("GET", "api/jobs")
        await proxy.close()

    async def test_timeout(self):
        proxy = BackendProxy(
            "http://backend.test",
            timeout=2.5,
            transport=httpx.MockTransport(_failing(httpx.ReadTimeout)),
        )
        with pytest.raises(BackendTimeoutError, match="2.5s"):
            await proxy.forward("GET", "api/jobs")
        await proxy.close()

    async def test_close_is_idempotent(self):
        proxy = BackendProxy("http://backend.test")
        await proxy.close()
        await proxy.close()


# ---------------------------------------------------------------------------
# Integration - /backend/{path}
# ---------------------------------------------------------------------------


class TestProxyEndpoint:
    async def test_get_with_repeated_query_params(self, client):
        resp = await client.get(
            "/backend/api/applications", params=[("status", "offer"), ("status", "hired")]
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["method"] == "GET"
        assert body["path"] == "/api/applications"
        assert body["query"] == [["status", "offer"], ["status", "hired"]]

    async def test_post_body_and_auth_forwarded(self, client):
        resp = await client.post(
            "/backend/api/offers/7/accept",
            json={"signature": "J. Doe"},
            headers={"Authorization": "Bearer session-token"},
        )
        body = resp.json()
        assert body["method"] == "POST"
        assert body["authorization"] == "Bearer session-token"
        assert '"signature"' in body["body"]

    @pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE"])
    async def test_other_methods(self, client, method):
        resp = await client.request(method, "/backend/api/offboarding/3")
        assert resp.json()["method"] == method

    async def test_versioned_prefix(self, client):
        resp = await client.get("/api/v1/backend/api/jobs")
        assert resp.json()["path"] == "/api/jobs"

    async def test_status_and_cookies_passed_back(self, client, swap_backend):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                401,
                headers=[
                    ("set-cookie", "a=1; Path=/"),
                    ("set-cookie", "b=2; Path=/"),
                    ("x-internal", "secret"),
                ],
                json={"message": "Unauthorized"},
            )

        swap_backend(handler)
        resp = await client.get("/backend/api/auth/me")
        assert resp.status_code == 401
        assert resp.json() == {"message": "Unauthorized"}
        assert resp.headers.get_list("set-cookie") == ["a=1; Path=/", "b=2; Path=/"]
        assert "x-internal" not in resp.headers

    async def test_backend_down_is_502(self, client, swap_backend):
        swap_backend(_failing(httpx.ConnectError))
        resp = await client.get("/backend/api/jobs")
        assert resp.status_code == 502
        body = resp.json()
        assert body["error"] == "backend_unavailable"
        assert "request_id" in body

    async def test_backend_timeout_is_504(self, client, swap_backend):
        swap_backend(_failing(httpx.ReadTimeout))
        resp = await client.get("/backend/api/jobs")
        assert resp.status_code == 504
        assert resp.json()["error"] == "backend_timeout"

    async def test_requires_session_when_auth_enabled(self, client, monkeypatch):
        monkeypatch.setenv("HR_API_KEYS", "key-1")
        resp = await client.get("/backend/api/jobs")
        assert resp.status_code == 403
