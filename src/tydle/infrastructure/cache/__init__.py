"""Cache Infrastructure - single-flight stores and persistent backend."""

from .cache_factory import CacheBackend, CacheStores, create_cache_stores, create_persistent_tier
from .diskcache_adapter import DiskcacheAdapter
from .single_flight import SingleFlightCache

__all__ = [
    "CacheBackend",
    "CacheStores",
    "DiskcacheAdapter",
    "SingleFlightCache",
    "create_cache_stores",
    "create_persistent_tier",
]
