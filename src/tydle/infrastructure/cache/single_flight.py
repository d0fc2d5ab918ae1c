"""In-process memoizing cache with a single-flight guarantee per key.

- At most one computation per key is in flight; concurrent callers for the
  same key await the same task.
- A failed or cancelled computation leaves the key absent. Only callers of
  that attempt see the failure; the next caller starts a fresh attempt.
- Entries are bounded by an LRU policy. Values are immutable, so a consumer
  holding an evicted value keeps a valid object.
- Optionally backed by a persistent ``CachePort`` tier (e.g. diskcache)
  consulted before computing and written after a successful computation.
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Generic, TypeVar

import structlog

from tydle.domain.entities.errors import LockPoisoned
from tydle.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)

V = TypeVar("V")


class _Flight(Generic[V]):
    """One in-flight computation and the number of callers awaiting it."""

    __slots__ = ("task", "waiters")

    def __init__(self, task: asyncio.Task[V]) -> None:
        self.task = task
        self.waiters = 0


class SingleFlightCache(Generic[V]):
    """Shared key -> value memoization (implements ``CacheStorePort``).

    Args:
        name: Cache name used in logs and as persistent key namespace.
        max_entries: LRU capacity (None = unbounded).
        persistent: Optional persistent tier.
        persistent_ttl: TTL for persistent entries (None = never expires).
    """

    def __init__(
        self,
        name: str,
        *,
        max_entries: int | None = 128,
        persistent: CachePort | None = None,
        persistent_ttl: int | None = None,
    ) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be >= 1 or None")
        self.name = name
        self._max_entries = max_entries
        self._persistent = persistent
        self._persistent_ttl = persistent_ttl
        self._entries: OrderedDict[str, V] = OrderedDict()
        self._inflight: dict[str, _Flight[V]] = {}
        self._loop: asyncio.AbstractEventLoop | None = None

        self._hits = 0
        self._misses = 0
        self._joined = 0
        self._computations = 0
        self._persistent_hits = 0
        self._failures = 0
        self._evictions = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, key: str) -> V | None:
        """Exact lookup; never triggers a computation."""
        value = self._entries.get(key)
        if value is not None:
            self._entries.move_to_end(key)
        return value

    def contains(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def get_or_insert_with(
        self, key: str, compute: Callable[[], Awaitable[V]]
    ) -> V:
        """Return the value for *key*, computing it at most once concurrently.

        Raises:
            LockPoisoned: If the cache is used from a second event loop while
                computations of the first one are still in flight.
            Exception: Whatever *compute* raised, for callers of that attempt.
        """
        self._bind_loop()

        value = self.get(key)
        if value is not None:
            self._hits += 1
            log.debug("cache_hit", cache=self.name, key=key)
            return value

        flight = self._inflight.get(key)
        if flight is None:
            self._misses += 1
            flight = _Flight(asyncio.ensure_future(self._run(key, compute)))
            self._inflight[key] = flight
            log.debug("cache_miss", cache=self.name, key=key)
        else:
            self._joined += 1
            log.debug("cache_join_inflight", cache=self.name, key=key)

        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        finally:
            flight.waiters -= 1
            if flight.waiters == 0 and not flight.task.done():
                # Last interested caller went away (cancelled). Detach the
                # dying flight so later callers start a fresh attempt.
                flight.task.cancel()
                if self._inflight.get(key) is flight:
                    del self._inflight[key]
                log.debug("cache_compute_abandoned", cache=self.name, key=key)

    def clear(self) -> None:
        """Drop all completed entries (in-flight computations are untouched)."""
        self._entries.clear()
        log.info("cache_cleared", cache=self.name)

    def snapshot(self) -> dict[str, Any]:
        """Return counters for diagnostics."""
        return {
            "name": self.name,
            "size": len(self._entries),
            "max_entries": self._max_entries,
            "in_flight": len(self._inflight),
            "hits": self._hits,
            "misses": self._misses,
            "joined": self._joined,
            "computations": self._computations,
            "persistent_hits": self._persistent_hits,
            "failures": self._failures,
            "evictions": self._evictions,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _bind_loop(self) -> None:
        loop = asyncio.get_running_loop()
        if self._loop is loop:
            return
        if self._loop is not None and self._inflight:
            raise LockPoisoned(self.name, "in-flight computations belong to another event loop")
        self._loop = loop

    async def _run(self, key: str, compute: Callable[[], Awaitable[V]]) -> V:
        try:
            value = await self._load_persistent(key)
            if value is None:
                self._computations += 1
                value = await compute()
                await self._store_persistent(key, value)
            self._insert(key, value)
            return value
        except asyncio.CancelledError:
            self._failures += 1
            log.debug("cache_compute_cancelled", cache=self.name, key=key)
            raise
        except Exception as exc:
            self._failures += 1
            log.debug(
                "cache_compute_failed",
                cache=self.name,
                key=key,
                error=type(exc).__name__,
            )
            raise
        finally:
            current = self._inflight.get(key)
            if current is not None and current.task is asyncio.current_task():
                del self._inflight[key]

    def _insert(self, key: str, value: V) -> None:
        self._entries[key] = value
        self._entries.move_to_end(key)
        if self._max_entries is None:
            return
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self._evictions += 1
            log.debug("cache_evicted", cache=self.name, key=evicted)

    def _persistent_key(self, key: str) -> str:
        return f"{self.name}:{key}"

    async def _load_persistent(self, key: str) -> V | None:
        if self._persistent is None:
            return None
        try:
            value = await self._persistent.get(self._persistent_key(key))
        except Exception as exc:  # noqa: BLE001
            log.warning(
                "cache_persistent_get_failed", cache=self.name, key=key, error=str(exc)
            )
            return None
        if value is not None:
            self._persistent_hits += 1
            log.debug("cache_persistent_hit", cache=self.name, key=key)
        return value

    async def _store_persistent(self, key: str, value: V) -> None:
        if self._persistent is None:
            return
        try:
            await self._persistent.set(
                self._persistent_key(key), value, ttl=self._persistent_ttl
            )
        except Exception as exc:  # noqa: BLE001
            log.warning(
                "cache_persistent_set_failed", cache=self.name, key=key, error=str(exc)
            )
