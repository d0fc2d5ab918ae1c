"""Extraction orchestrator - the public async surface of tydle."""

from __future__ import annotations

from typing import Any, Sequence
from urllib.parse import urljoin

import structlog

from tydle.domain.entities.video import Manifest, StreamResponse, VideoId, VideoInfo
from tydle.domain.ports.cache import CachePort, CacheStorePort
from tydle.domain.ports.extractor import ExtractorPort, SignatureDecipherPort
from tydle.domain.ports.transport import TransportPort

log = structlog.get_logger(__name__)


def _coerce_video_id(video_id: VideoId | str) -> VideoId:
    if isinstance(video_id, VideoId):
        return video_id
    return VideoId.parse(video_id)


class Tydle:
    """Owns one extractor and one decipher engine sharing the same caches.

    Every operation is safe to call concurrently from many tasks. There is no
    orchestrator-wide lock: only the shared stores serialize work, per key.

    Raw string identifiers are validated before any I/O
    (``InvalidVideoIdError``).
    """

    def __init__(
        self,
        *,
        extractor: ExtractorPort,
        decipher: SignatureDecipherPort,
        caches: Sequence[CacheStorePort[Any]] = (),
        transport: TransportPort | None = None,
        persistent: CachePort | None = None,
        base_url: str = "https://www.youtube.com",
    ) -> None:
        self._extractor = extractor
        self._decipher = decipher
        self._caches = tuple(caches)
        self._transport = transport
        self._persistent = persistent
        self._base_url = base_url.rstrip("/") + "/"
        self._closed = False

    @property
    def persistent(self) -> CachePort | None:
        return self._persistent

    async def __aenter__(self) -> Tydle:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the transport and the persistent cache tier (idempotent)."""
        if self._closed:
            return
        self._closed = True
        try:
            if self._transport is not None:
                await self._transport.aclose()
        finally:
            if self._persistent is not None:
                await self._persistent.aclose()
        log.debug("tydle_closed")

    # ------------------------------------------------------------------
    # Manifest / metadata
    # ------------------------------------------------------------------

    async def get_manifest(self, video_id: VideoId | str) -> Manifest:
        return await self._extractor.extract_manifest(_coerce_video_id(video_id))

    async def get_video_info(self, video_id: VideoId | str) -> VideoInfo:
        return await self._extractor.extract_video_info(_coerce_video_id(video_id))

    async def get_video_info_from_manifest(self, manifest: Manifest) -> VideoInfo:
        """Metadata from an already fetched manifest; performs no I/O."""
        return await self._extractor.extract_video_info_from_manifest(manifest)

    # ------------------------------------------------------------------
    # Streams
    # ------------------------------------------------------------------

    async def get_streams(self, video_id: VideoId | str) -> StreamResponse:
        return await self._extractor.extract_streams(_coerce_video_id(video_id))

    async def get_streams_from_manifest(self, manifest: Manifest) -> StreamResponse:
        """Streams from an already fetched manifest.

        Only decipher work (player bundle fetch on a cold cache) may hit
        the network; the manifest itself is never refetched.
        """
        return await self._extractor.extract_streams_from_manifest(manifest)

    # ------------------------------------------------------------------
    # Decipher
    # ------------------------------------------------------------------

    async def decipher_signature(self, signature: str, player_url: str) -> str:
        """Decipher one scrambled signature for the given player.

        *player_url* may be absolute or relative to the platform origin
        (``/s/player/<hash>/.../base.js``).
        """
        player_reference = urljoin(self._base_url, player_url)
        return await self._decipher.decipher(signature, player_reference)

    def cache_snapshot(self) -> list[dict[str, Any]]:
        """Per-store counters (hits, misses, size, in-flight, ...)."""
        return [cache.snapshot() for cache in self._caches]
