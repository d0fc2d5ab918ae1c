"""In-memory cookie store keyed by normalized domain URL."""

from __future__ import annotations

from urllib.parse import urlsplit

import structlog

from tydle.domain.ports.cookie_store import Cookies

log = structlog.get_logger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_domain(domain: str) -> str:
    """Normalize a domain URL to ``scheme://host[:port]``.

    Bare hosts are treated as https. Default ports and any path are dropped.

    Raises:
        ValueError: If no host can be parsed.
    """
    raw = domain.strip()
    if "://" not in raw:
        raw = f"https://{raw}"
    parts = urlsplit(raw)
    host = (parts.hostname or "").lower()
    if not host:
        raise ValueError(f"Invalid cookie domain: {domain!r}")
    scheme = parts.scheme.lower()
    port = parts.port
    if port is None or _DEFAULT_PORTS.get(scheme) == port:
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


class CookieJar:
    """Session cookies per domain (implements ``CookieStorePort``).

    Domains must be seeded before ``set`` stores anything for them; cookies
    a response sets for an unseeded domain are ignored.
    """

    def __init__(self, seed: dict[str, Cookies] | None = None) -> None:
        self._cookies: dict[str, Cookies] = {}
        for domain, cookies in (seed or {}).items():
            self.seed(domain, cookies)

    def seed(self, domain: str, cookies: Cookies | None = None) -> None:
        """Create (or extend) the entry for *domain*."""
        key = normalize_domain(domain)
        self._cookies.setdefault(key, {}).update(cookies or {})
        log.debug("cookie_domain_seeded", domain=key, count=len(self._cookies[key]))

    def get_all(self, domain: str) -> Cookies | None:
        cookies = self._cookies.get(normalize_domain(domain))
        return dict(cookies) if cookies is not None else None

    def set(self, domain: str, name: str, value: str) -> bool:
        key = normalize_domain(domain)
        cookies = self._cookies.get(key)
        if cookies is None:
            log.debug("cookie_set_ignored_unseeded_domain", domain=key, name=name)
            return False
        cookies[name] = value
        return True
