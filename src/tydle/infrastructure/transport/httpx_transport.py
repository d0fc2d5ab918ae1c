"""httpx transport - GETs documents, attaching session cookies per origin."""

from __future__ import annotations

from typing import Mapping

import httpx
import structlog

from tydle.domain.ports.cookie_store import CookieStorePort
from tydle.domain.ports.transport import TransportError
from tydle.infrastructure.transport.cookie_jar import normalize_domain

log = structlog.get_logger(__name__)


def _cookie_header(cookies: Mapping[str, str]) -> str:
    return "; ".join(f"{name}={value}" for name, value in cookies.items())


class HttpxTransport:
    """Async transport over a shared ``httpx.AsyncClient`` (``TransportPort``).

    - Attaches the cookie store's cookies for the request origin.
    - Feeds ``Set-Cookie`` values back into the cookie store.
    - Raises :class:`TransportError` on network errors and non-2xx status.
      No retries: retry policy belongs to the caller.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        cookie_store: CookieStorePort | None = None,
    ) -> None:
        self._http = http_client
        self._cookies = cookie_store

    async def fetch(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> bytes:
        request_headers = dict(headers or {})
        origin = normalize_domain(url)

        if self._cookies is not None:
            cookies = self._cookies.get_all(origin)
            if cookies:
                request_headers["Cookie"] = _cookie_header(cookies)

        try:
            resp = await self._http.get(url, headers=request_headers)
        except httpx.HTTPError as exc:
            log.warning("transport_request_failed", url=url, error=type(exc).__name__)
            raise TransportError(url, reason=str(exc) or type(exc).__name__) from exc

        if self._cookies is not None:
            for name, value in resp.cookies.items():
                self._cookies.set(origin, name, value)

        if not resp.is_success:
            log.warning("transport_http_error", url=url, status=resp.status_code)
            raise TransportError(url, status=resp.status_code)

        log.debug("transport_fetched", url=url, size_bytes=len(resp.content))
        return resp.content

    async def aclose(self) -> None:
        await self._http.aclose()
