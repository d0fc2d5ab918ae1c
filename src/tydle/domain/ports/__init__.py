"""Domain ports (interfaces) implemented by infrastructure adapters."""

from .cache import CachePort, CacheStorePort
from .cipher_matcher import CipherMatcherPort
from .cookie_store import CookieStorePort, Cookies
from .extractor import ExtractorPort, SignatureDecipherPort
from .transport import TransportError, TransportPort

__all__ = [
    "CachePort",
    "CacheStorePort",
    "CipherMatcherPort",
    "CookieStorePort",
    "Cookies",
    "ExtractorPort",
    "SignatureDecipherPort",
    "TransportError",
    "TransportPort",
]
