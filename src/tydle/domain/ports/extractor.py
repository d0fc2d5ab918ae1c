"""Ports for manifest extraction and signature decipherment."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from tydle.domain.entities.video import Manifest, StreamResponse, VideoId, VideoInfo


@runtime_checkable
class SignatureDecipherPort(Protocol):
    async def decipher(self, signature: str, player_reference: str) -> str:
        """Return the deciphered form of *signature* for the given player."""
        ...


@runtime_checkable
class ExtractorPort(Protocol):
    """Reads manifests, metadata and streams for a video."""

    async def extract_manifest(self, video_id: VideoId) -> Manifest: ...

    async def extract_video_info(self, video_id: VideoId) -> VideoInfo: ...

    async def extract_video_info_from_manifest(self, manifest: Manifest) -> VideoInfo: ...

    async def extract_streams(self, video_id: VideoId) -> StreamResponse: ...

    async def extract_streams_from_manifest(
        self, manifest: Manifest
    ) -> StreamResponse: ...
