"""Transport port - fetches raw documents (watch pages, player bundles)."""

from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable


class TransportError(Exception):
    """Network or HTTP status failure while fetching *url*."""

    def __init__(self, url: str, *, status: int | None = None, reason: str = "") -> None:
        detail = f"HTTP {status}" if status is not None else (reason or "request failed")
        super().__init__(f"{detail}: {url}")
        self.url = url
        self.status = status
        self.reason = reason


@runtime_checkable
class TransportPort(Protocol):
    async def fetch(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> bytes:
        """GET *url* and return the body.

        Raises:
            TransportError: On connection failure or a non-2xx status.
        """
        ...

    async def aclose(self) -> None: ...
