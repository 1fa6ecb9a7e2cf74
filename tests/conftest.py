"""Shared fixtures for HR portal tests."""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from hrportal.access import AccessResolver, RouteGuard, default_access_table
from hrportal.api.app import app, limiter
from hrportal.api.proxy import BackendProxy

_AUTH_ENV = (
    "HR_API_KEYS",
    "HR_API_KEY_ROLES",
    "HR_AUTH_PROVIDER",
    "HR_JWT_SECRET",
    "HR_JWT_ALGORITHM",
    "HR_DEV_ROLES",
)


@pytest.fixture
def resolver() -> AccessResolver:
    """Resolver over a freshly built default table."""
    return AccessResolver(default_access_table())


@pytest.fixture
def guard(resolver) -> RouteGuard:
    return RouteGuard(resolver)


def _backend_echo(request: httpx.Request) -> httpx.Response:
    """Fake HR backend: echoes what it received."""
    return httpx.Response(
        200,
        json={
            "method": request.method,
            "path": request.url.path,
            "query": [list(item) for item in request.url.params.multi_items()],
            "authorization": request.headers.get("authorization"),
            "body": request.content.decode() if request.content else None,
        },
    )


@pytest_asyncio.fixture
async def client(monkeypatch):
    """HTTP test client in dev mode, with a fake backend behind the proxy."""
    for name in _AUTH_ENV:
        monkeypatch.delenv(name, raising=False)

    original_backend = app.state.backend
    app.state.backend = BackendProxy(
        "http://backend.test", transport=httpx.MockTransport(_backend_echo)
    )

    # Disable rate limiter for tests
    limiter.enabled = False

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await app.state.backend.close()
    app.state.backend = original_backend
