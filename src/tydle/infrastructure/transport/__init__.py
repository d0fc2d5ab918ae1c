"""Transport adapters (httpx) and the session cookie store."""

from __future__ import annotations

from .cookie_jar import CookieJar, normalize_domain
from .httpx_transport import HttpxTransport

__all__ = ["CookieJar", "HttpxTransport", "normalize_domain"]
