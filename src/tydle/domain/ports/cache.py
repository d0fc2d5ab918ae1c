"""Cache ports - in-process single-flight store and persistent key-value tier."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol, TypeVar, runtime_checkable

V = TypeVar("V")


class CachePort(Protocol):
    """Port for an async, persistent key-value cache.

    Implementations:
      - DiskcacheAdapter (SQLite-based, no daemon)

    Each adapter MUST support async context-manager semantics:
        async with cache:
            await cache.set("key", value)
    """

    async def get(self, key: str) -> Any:
        """Retrieve value. None = not found / expired."""
        ...

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        """Set value with optional TTL (seconds). None = never expires."""
        ...

    async def delete(self, key: str) -> bool:
        """Delete key. True = deleted, False = did not exist."""
        ...

    async def clear(self) -> None:
        """Delete ALL keys."""
        ...

    async def aclose(self) -> None:
        """Cleanup hook."""
        ...

    async def __aenter__(self) -> CachePort: ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None: ...


@runtime_checkable
class CacheStorePort(Protocol[V]):
    """Shared, concurrency-safe key -> immutable value memoization.

    At most one computation is in flight per key. Failed or cancelled
    computations leave the key absent.
    """

    async def get_or_insert_with(
        self, key: str, compute: Callable[[], Awaitable[V]]
    ) -> V:
        """Return the cached value, computing it once if absent."""
        ...

    def get(self, key: str) -> V | None:
        """Exact lookup without triggering computation."""
        ...

    def contains(self, key: str) -> bool: ...

    def snapshot(self) -> dict[str, Any]:
        """Counters for diagnostics (hits, misses, size, ...)."""
        ...
