"""Tests for DiskcacheAdapter and the cache factory."""

from __future__ import annotations

from pathlib import Path

import pytest

from tydle.domain.entities import CipherOperation, DecipherProgram, OperationKind
from tydle.infrastructure.cache import (
    DiskcacheAdapter,
    create_cache_stores,
    create_persistent_tier,
)


class TestDiskcacheAdapter:
    async def test_set_get_delete(self, tmp_path: Path) -> None:
        async with DiskcacheAdapter(directory=tmp_path / "c") as cache:
            await cache.set("k", "v")
            assert await cache.get("k") == "v"
            assert await cache.delete("k") is True
            assert await cache.get("k") is None
            assert await cache.delete("k") is False

    async def test_stores_decipher_programs(self, tmp_path: Path) -> None:
        program = DecipherProgram(
            (CipherOperation(OperationKind.REVERSE), CipherOperation(OperationKind.SWAP, 3))
        )
        async with DiskcacheAdapter(directory=tmp_path / "c") as cache:
            await cache.set("p", program)
            assert await cache.get("p") == program

    async def test_clear(self, tmp_path: Path) -> None:
        async with DiskcacheAdapter(directory=tmp_path / "c") as cache:
            await cache.set("a", 1)
            await cache.clear()
            assert await cache.get("a") is None

    async def test_use_before_open_raises(self, tmp_path: Path) -> None:
        cache = DiskcacheAdapter(directory=tmp_path / "c")
        with pytest.raises(RuntimeError):
            await cache.get("k")

    async def test_persists_across_instances(self, tmp_path: Path) -> None:
        async with DiskcacheAdapter(directory=tmp_path / "c") as cache:
            await cache.set("k", "v")
        async with DiskcacheAdapter(directory=tmp_path / "c") as cache:
            assert await cache.get("k") == "v"


class TestCacheFactory:
    def test_memory_has_no_persistent_tier(self) -> None:
        assert create_persistent_tier("memory") is None

    def test_diskcache_tier(self, tmp_path: Path) -> None:
        tier = create_persistent_tier("diskcache", directory=str(tmp_path))
        assert isinstance(tier, DiskcacheAdapter)

    def test_unknown_backend(self) -> None:
        with pytest.raises(ValueError, match="Unknown cache backend"):
            create_persistent_tier("redis")  # type: ignore[arg-type]

    def test_stores_are_independent(self) -> None:
        stores = create_cache_stores(
            player_source_max_entries=2, decipher_program_max_entries=3
        )
        assert stores.player_source is not stores.decipher_program
        assert stores.player_source.snapshot()["max_entries"] == 2
        assert stores.decipher_program.snapshot()["max_entries"] == 3
        assert stores.persistent is None
