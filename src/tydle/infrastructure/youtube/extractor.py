"""YouTube extractor - manifest, video metadata and stream descriptors.

Flow:
1. GET the watch page, parse the embedded player response (the manifest)
   and the player bundle URL (the player reference).
2. Metadata comes from ``videoDetails`` (+ ``microformat``).
3. Streams come from ``streamingData.formats`` then
   ``streamingData.adaptiveFormats``. Signature-protected entries are
   deciphered concurrently; an entry that cannot be resolved is reported as
   a ``StreamDiagnostic`` instead of failing the whole response.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping
from urllib.parse import quote

import structlog

from tydle.domain.entities.errors import (
    ExtractionError,
    ManifestFetchFailed,
    MetadataFieldMissing,
)
from tydle.domain.entities.video import (
    Manifest,
    SignatureCipher,
    StreamDescriptor,
    StreamDiagnostic,
    StreamResponse,
    Thumbnail,
    VideoId,
    VideoInfo,
)
from tydle.domain.ports.extractor import SignatureDecipherPort
from tydle.domain.ports.transport import TransportError, TransportPort
from tydle.infrastructure.common.parsers import (
    int_or_none,
    parse_signature_cipher,
    traverse,
)
from tydle.infrastructure.youtube.watch_page import parse_watch_page

log = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://www.youtube.com"


def _playability_reason(document: dict[str, Any]) -> str | None:
    status = traverse(document, "playabilityStatus", default={})
    if not isinstance(status, dict):
        return None
    return status.get("reason") or status.get("status")


def _with_signature(url: str, param: str, signature: str) -> str:
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{param}={quote(signature, safe='')}"


def _thumbnails(details: dict[str, Any]) -> tuple[Thumbnail, ...]:
    items = traverse(details, "thumbnail", "thumbnails", default=[])
    if not isinstance(items, list):
        return ()
    return tuple(
        Thumbnail(
            url=item["url"],
            width=int_or_none(item.get("width")),
            height=int_or_none(item.get("height")),
        )
        for item in items
        if isinstance(item, dict) and item.get("url")
    )


class YoutubeExtractor:
    """Implements ``ExtractorPort`` for the YouTube web player."""

    def __init__(
        self,
        *,
        transport: TransportPort,
        decipher: SignatureDecipherPort,
        base_url: str = DEFAULT_BASE_URL,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self._transport = transport
        self._decipher = decipher
        self._base_url = base_url.rstrip("/")
        self._headers = dict(headers or {})

    def watch_url(self, video_id: VideoId) -> str:
        return f"{self._base_url}/watch?v={video_id}&bpctr=9999999999&has_verified=1"

    # ------------------------------------------------------------------
    # Manifest
    # ------------------------------------------------------------------

    async def extract_manifest(self, video_id: VideoId) -> Manifest:
        """Fetch and parse the watch page of *video_id*.

        Raises:
            ManifestFetchFailed: Transport or HTTP status failure.
            ManifestMalformed: The page does not embed a player response.
        """
        url = self.watch_url(video_id)
        log.info("manifest_fetch", video_id=str(video_id))
        try:
            body = await self._transport.fetch(url, headers=self._headers)
        except TransportError as exc:
            log.warning(
                "manifest_fetch_failed",
                video_id=str(video_id),
                status=exc.status,
                reason=exc.reason,
            )
            raise ManifestFetchFailed(str(video_id), url=url, status=exc.status) from exc

        html = body.decode("utf-8", errors="replace")
        return parse_watch_page(html, video_id, self._base_url)

    # ------------------------------------------------------------------
    # Video info
    # ------------------------------------------------------------------

    async def extract_video_info(self, video_id: VideoId) -> VideoInfo:
        manifest = await self.extract_manifest(video_id)
        return await self.extract_video_info_from_manifest(manifest)

    async def extract_video_info_from_manifest(self, manifest: Manifest) -> VideoInfo:
        """Derive metadata from an already fetched manifest (no I/O).

        Raises:
            MetadataFieldMissing: ``videoDetails``, ``title``, ``author`` or
                ``lengthSeconds`` is absent.
        """
        document = manifest.document
        video_id = str(manifest.video_id)
        details = traverse(document, "videoDetails")
        if not isinstance(details, dict):
            raise MetadataFieldMissing(
                "videoDetails",
                video_id=video_id,
                reason=_playability_reason(document),
            )

        def required(name: str) -> Any:
            value = details.get(name)
            if value is None:
                raise MetadataFieldMissing(name, video_id=video_id)
            return value

        title = required("title")
        author = required("author")
        duration = int_or_none(required("lengthSeconds"))
        if duration is None:
            raise MetadataFieldMissing("lengthSeconds", video_id=video_id)

        microformat = traverse(
            document, "microformat", "playerMicroformatRenderer", default={}
        )
        keywords = details.get("keywords")
        if not isinstance(keywords, list):
            keywords = []

        return VideoInfo(
            video_id=details.get("videoId") or video_id,
            title=title,
            author=author,
            duration_seconds=duration,
            channel_id=details.get("channelId"),
            description=details.get("shortDescription") or "",
            view_count=int_or_none(details.get("viewCount")),
            keywords=tuple(str(k) for k in keywords),
            thumbnails=_thumbnails(details),
            is_live=bool(details.get("isLive") or details.get("isLiveContent")),
            is_private=bool(details.get("isPrivate")),
            category=traverse(microformat, "category"),
            publish_date=traverse(microformat, "publishDate"),
        )

    # ------------------------------------------------------------------
    # Streams
    # ------------------------------------------------------------------

    async def extract_streams(self, video_id: VideoId) -> StreamResponse:
        manifest = await self.extract_manifest(video_id)
        return await self.extract_streams_from_manifest(manifest)

    async def extract_streams_from_manifest(self, manifest: Manifest) -> StreamResponse:
        """Build stream descriptors, deciphering protected entries.

        Raises:
            MetadataFieldMissing: The manifest has no ``streamingData``
                (carries the playability reason, e.g. login required).
        """
        document = manifest.document
        video_id = str(manifest.video_id)
        streaming = traverse(document, "streamingData")
        if not isinstance(streaming, dict):
            raise MetadataFieldMissing(
                "streamingData",
                video_id=video_id,
                reason=_playability_reason(document),
            )

        entries: list[tuple[dict[str, Any], bool]] = []
        for key, adaptive in (("formats", False), ("adaptiveFormats", True)):
            items = streaming.get(key) or []
            entries.extend((item, adaptive) for item in items if isinstance(item, dict))

        parsed = [
            self._parse_format(item, adaptive, manifest.player_reference)
            for item, adaptive in entries
        ]
        pending = [
            p for p in parsed if isinstance(p, StreamDescriptor) and not p.is_resolved
        ]
        results = await asyncio.gather(
            *(self._resolve(p) for p in pending), return_exceptions=True
        )
        resolved: dict[int, StreamDescriptor | StreamDiagnostic] = {}
        for descriptor, result in zip(pending, results):
            if isinstance(result, ExtractionError):
                resolved[id(descriptor)] = StreamDiagnostic(
                    itag=descriptor.itag,
                    kind=result.kind,
                    message=str(result),
                    player_reference=manifest.player_reference,
                )
            elif isinstance(result, BaseException):
                raise result
            else:
                resolved[id(descriptor)] = result

        streams: list[StreamDescriptor] = []
        diagnostics: list[StreamDiagnostic] = []
        for item in parsed:
            outcome = resolved.get(id(item), item)
            if isinstance(outcome, StreamDescriptor):
                streams.append(outcome)
            else:
                diagnostics.append(outcome)

        log.info(
            "streams_extracted",
            video_id=video_id,
            streams=len(streams),
            diagnostics=len(diagnostics),
            deciphered=len(pending),
        )
        return StreamResponse(
            video_id=video_id,
            streams=tuple(streams),
            diagnostics=tuple(diagnostics),
            expires_in_seconds=int_or_none(streaming.get("expiresInSeconds")),
            hls_manifest_url=streaming.get("hlsManifestUrl"),
            dash_manifest_url=streaming.get("dashManifestUrl"),
            player_reference=manifest.player_reference,
        )

    def _parse_format(
        self,
        item: dict[str, Any],
        adaptive: bool,
        player_reference: str | None,
    ) -> StreamDescriptor | StreamDiagnostic:
        itag = int_or_none(item.get("itag"))
        if itag is None:
            return StreamDiagnostic(
                itag=None, kind="MalformedFormat", message="Format entry has no itag"
            )
        if item.get("drmFamilies"):
            return StreamDiagnostic(
                itag=itag,
                kind="DrmProtected",
                message=f"DRM protected ({', '.join(map(str, item['drmFamilies']))})",
            )

        url = item.get("url")
        cipher: SignatureCipher | None = None
        if not url:
            raw_cipher = item.get("signatureCipher") or item.get("cipher")
            if not raw_cipher:
                return StreamDiagnostic(
                    itag=itag,
                    kind="StreamLocationMissing",
                    message="Format has neither url nor signature cipher",
                )
            fields = (
                parse_signature_cipher(raw_cipher) if isinstance(raw_cipher, str) else {}
            )
            if not fields.get("url") or not fields.get("s"):
                return StreamDiagnostic(
                    itag=itag,
                    kind="MalformedSignatureCipher",
                    message="Signature cipher lacks url or s",
                )
            if player_reference is None:
                return StreamDiagnostic(
                    itag=itag,
                    kind="PlayerReferenceMissing",
                    message="Protected stream but the manifest names no player",
                )
            cipher = SignatureCipher(
                url=fields["url"],
                signature=fields["s"],
                player_reference=player_reference,
                signature_param=fields.get("sp") or "signature",
            )

        return StreamDescriptor(
            itag=itag,
            mime_type=item.get("mimeType") or "",
            url=url or None,
            cipher=cipher,
            bitrate=int_or_none(item.get("bitrate")),
            width=int_or_none(item.get("width")),
            height=int_or_none(item.get("height")),
            fps=int_or_none(item.get("fps")),
            quality_label=item.get("qualityLabel"),
            audio_quality=item.get("audioQuality"),
            content_length=int_or_none(item.get("contentLength")),
            approx_duration_ms=int_or_none(item.get("approxDurationMs")),
            is_adaptive=adaptive,
        )

    async def _resolve(self, descriptor: StreamDescriptor) -> StreamDescriptor:
        cipher = descriptor.cipher
        assert cipher is not None
        signature = await self._decipher.decipher(
            cipher.signature, cipher.player_reference
        )
        return descriptor.with_url(
            _with_signature(cipher.url, cipher.signature_param, signature)
        )
