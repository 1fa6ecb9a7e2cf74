"""Pass-through client for the HR backend REST API.

Page components talk to the backend (applications, offers, interviews,
onboarding checklists, settlement, provisioning) through this service so
the session token stays on one origin.  Requests are forwarded as-is; the
backend's status and body come back unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

import httpx

from hrportal.exceptions import BackendTimeoutError, BackendUnavailableError

logger = logging.getLogger("hrportal.proxy")

#: Request headers copied onto the upstream request.
FORWARDED_HEADERS: tuple[str, ...] = ("authorization", "content-type", "accept", "cookie")

#: Upstream response headers copied back to the caller.
RETURNED_HEADERS: tuple[str, ...] = ("content-type", "set-cookie", "location")


class BackendProxy:
    """Lazily opens one ``httpx.AsyncClient`` and reuses it until :meth:`close`."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def forward(
        self,
        method: str,
        path: str,
        *,
        params: Sequence[tuple[str, str]] | None = None,
        headers: Mapping[str, str] | None = None,
        content: bytes | None = None,
    ) -> httpx.Response:
        """Send one request upstream.

        Raises:
            BackendTimeoutError: the backend did not answer within ``timeout``.
            BackendUnavailableError: the backend could not be reached.
        """
        upstream_headers = {
            k: v for k, v in (headers or {}).items() if k.lower() in FORWARDED_HEADERS
        }
        url = "/" + path.lstrip("/")
        try:
            response = await self._get_client().request(
                method,
                url,
                params=params,
                headers=upstream_headers,
                content=content or None,
            )
        except httpx.TimeoutException as exc:
            logger.error("Backend request timed out: %s %s", method, url)
            raise BackendTimeoutError(
                f"Backend did not respond within {self.timeout:g}s"
            ) from exc
        except httpx.TransportError as exc:
            logger.error("Cannot connect to backend at %s: %s", self.base_url, exc)
            raise BackendUnavailableError(
                f"Cannot connect to backend at {self.base_url}"
            ) from exc

        if response.status_code in (401, 403):
            logger.warning("Backend refused %s %s: %d", method, url, response.status_code)
        elif response.status_code >= 500:
            logger.error("Backend error on %s %s: %d", method, url, response.status_code)
        return response

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
