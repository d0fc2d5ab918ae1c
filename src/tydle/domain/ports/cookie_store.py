"""Cookie store port - session cookies attached to outgoing requests."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

Cookies = dict[str, str]


@runtime_checkable
class CookieStorePort(Protocol):
    """Cookies keyed by normalized domain URL (``scheme://host``)."""

    def get_all(self, domain: str) -> Cookies | None:
        """Return a copy of the cookies for *domain*, or None if unknown."""
        ...

    def set(self, domain: str, name: str, value: str) -> bool:
        """Update a cookie of an already-seeded domain.

        Returns False (and stores nothing) when *domain* has no entry.
        """
        ...
