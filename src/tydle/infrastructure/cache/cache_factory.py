"""Cache factory - builds the player-source and decipher-program stores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import structlog

from tydle.domain.entities.cipher import DecipherProgram
from tydle.domain.ports.cache import CachePort
from tydle.infrastructure.cache.diskcache_adapter import DiskcacheAdapter
from tydle.infrastructure.cache.single_flight import SingleFlightCache

log = structlog.get_logger(__name__)

CacheBackend = Literal["memory", "diskcache"]


@dataclass
class CacheStores:
    """The two independent stores shared by extractor and decipher."""

    player_source: SingleFlightCache[str]
    decipher_program: SingleFlightCache[DecipherProgram]
    persistent: CachePort | None = None


def create_persistent_tier(
    backend: CacheBackend = "memory",
    *,
    directory: str = "./.cache/tydle",
    max_concurrent: int = 10,
) -> CachePort | None:
    """Return the persistent tier for *backend* (None for memory-only).

    Raises:
        ValueError: If `backend` is unknown.
    """
    if backend == "memory":
        return None
    if backend == "diskcache":
        log.info("cache_factory_create", backend=backend, directory=directory)
        return DiskcacheAdapter(directory=directory, max_concurrent=max_concurrent)
    raise ValueError(
        f"Unknown cache backend: {backend!r}. Must be 'memory' or 'diskcache'."
    )


def create_cache_stores(
    *,
    player_source_max_entries: int | None = 16,
    decipher_program_max_entries: int | None = 128,
    persistent: CachePort | None = None,
    persistent_ttl: int | None = None,
) -> CacheStores:
    """Build both stores; they share only the (optional) persistent tier."""
    stores = CacheStores(
        player_source=SingleFlightCache(
            "player_source",
            max_entries=player_source_max_entries,
            persistent=persistent,
            persistent_ttl=persistent_ttl,
        ),
        decipher_program=SingleFlightCache(
            "decipher_program",
            max_entries=decipher_program_max_entries,
            persistent=persistent,
            persistent_ttl=persistent_ttl,
        ),
        persistent=persistent,
    )
    log.debug(
        "cache_stores_created",
        player_source_max_entries=player_source_max_entries,
        decipher_program_max_entries=decipher_program_max_entries,
        persistent=persistent is not None,
    )
    return stores
