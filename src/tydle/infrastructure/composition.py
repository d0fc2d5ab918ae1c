"""Composition root: wires transport, caches, decipher and extractor."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
import structlog

from tydle.application.tydle import Tydle
from tydle.infrastructure.cache.cache_factory import (
    create_cache_stores,
    create_persistent_tier,
)
from tydle.infrastructure.cipher.matcher import StructuralCipherMatcher
from tydle.infrastructure.config.schema import AppConfig
from tydle.infrastructure.transport.cookie_jar import CookieJar
from tydle.infrastructure.transport.httpx_transport import HttpxTransport
from tydle.infrastructure.youtube.decipher import SignatureDecipher
from tydle.infrastructure.youtube.extractor import YoutubeExtractor

log = structlog.get_logger(__name__)


def create_http_client(config: AppConfig) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=config.http_follow_redirects,
    )


def create_tydle(
    config: AppConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> Tydle:
    """Build a Tydle over one transport and one pair of cache stores.

    Order matters:
        1. Persistent tier (optional, not opened yet)
        2. Cache stores (player source + decipher program)
        3. Cookie jar + HTTP transport
        4. Decipher engine (transport + both stores)
        5. Extractor (transport + decipher)

    The persistent tier must be opened before use; ``open_tydle`` does that.
    """
    persistent = create_persistent_tier(
        config.cache_backend,
        directory=str(config.cache_dir),
        max_concurrent=config.cache_max_concurrent,
    )
    stores = create_cache_stores(
        player_source_max_entries=config.cache_player_source_max_entries,
        decipher_program_max_entries=config.cache_decipher_program_max_entries,
        persistent=persistent,
        persistent_ttl=config.cache_persistent_ttl_seconds,
    )

    youtube = config.youtube
    cookies = CookieJar()
    cookies.seed(youtube.base_url, youtube.cookies)

    transport = HttpxTransport(
        http_client or create_http_client(config), cookie_store=cookies
    )
    headers = {"Accept-Language": youtube.language}

    decipher = SignatureDecipher(
        transport=transport,
        player_sources=stores.player_source,
        programs=stores.decipher_program,
        matcher=StructuralCipherMatcher(),
        headers=headers,
    )
    extractor = YoutubeExtractor(
        transport=transport,
        decipher=decipher,
        base_url=youtube.base_url,
        headers=headers,
    )
    log.info(
        "tydle_created",
        base_url=youtube.base_url,
        cache_backend=config.cache_backend,
    )
    return Tydle(
        extractor=extractor,
        decipher=decipher,
        caches=(stores.player_source, stores.decipher_program),
        transport=transport,
        persistent=persistent,
        base_url=youtube.base_url,
    )


@asynccontextmanager
async def open_tydle(
    config: AppConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> AsyncIterator[Tydle]:
    """Create a Tydle, open its persistent tier, and close everything on exit."""
    tydle = create_tydle(config, http_client=http_client)
    async with tydle:
        if tydle.persistent is not None:
            await tydle.persistent.__aenter__()
        yield tydle
