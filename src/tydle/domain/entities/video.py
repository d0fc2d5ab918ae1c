"""Domain entities for videos, manifests and stream descriptors.

Pure value objects with no framework dependencies and no I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Any
from urllib.parse import parse_qs, urlparse

from tydle.domain.entities.errors import InvalidVideoIdError

_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")

# Path prefixes that carry the id as the next segment
_PATH_ID_PREFIXES = ("shorts", "embed", "live", "v", "e")

_YOUTUBE_HOSTS = {
    "youtube.com",
    "www.youtube.com",
    "m.youtube.com",
    "music.youtube.com",
    "youtube-nocookie.com",
    "www.youtube-nocookie.com",
}


def _id_from_url(raw: str) -> str | None:
    parsed = urlparse(raw)
    host = (parsed.hostname or "").lower()
    segments = [s for s in parsed.path.split("/") if s]

    if host in ("youtu.be", "www.youtu.be"):
        return segments[0] if segments else None

    if host not in _YOUTUBE_HOSTS:
        return None

    if parsed.path.rstrip("/") == "/watch":
        values = parse_qs(parsed.query).get("v")
        return values[0] if values else None

    if len(segments) >= 2 and segments[0] in _PATH_ID_PREFIXES:
        return segments[1]
    return None


@dataclass(frozen=True)
class VideoId:
    """Validated, normalized video identifier."""

    value: str

    def __post_init__(self) -> None:
        if not _VIDEO_ID_RE.match(self.value):
            raise InvalidVideoIdError(self.value)

    @classmethod
    def parse(cls, raw: str) -> VideoId:
        """Build a VideoId from a bare id or any common watch URL form.

        Raises:
            InvalidVideoIdError: When no valid id can be extracted.
        """
        candidate = (raw or "").strip()
        if candidate.startswith(("http://", "https://")) or "/" in candidate:
            if not candidate.startswith(("http://", "https://")):
                candidate = f"https://{candidate}"
            extracted = _id_from_url(candidate)
            if extracted is None:
                raise InvalidVideoIdError(raw)
            candidate = extracted
        if not _VIDEO_ID_RE.match(candidate):
            raise InvalidVideoIdError(raw)
        return cls(candidate)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Manifest:
    """Raw player response document for one video.

    ``player_reference`` is the absolute URL of the player bundle the
    document's signatures were produced for (None when the page did not
    reference one).
    """

    video_id: VideoId
    document: dict[str, Any]
    player_reference: str | None = None


@dataclass(frozen=True)
class Thumbnail:
    url: str
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True)
class VideoInfo:
    """Metadata derived from a manifest."""

    video_id: str
    title: str
    author: str
    duration_seconds: int
    channel_id: str | None = None
    description: str = ""
    view_count: int | None = None
    keywords: tuple[str, ...] = ()
    thumbnails: tuple[Thumbnail, ...] = ()
    is_live: bool = False
    is_private: bool = False
    category: str | None = None
    publish_date: str | None = None


@dataclass(frozen=True)
class SignatureCipher:
    """Signature-protected stream location awaiting decipherment."""

    url: str
    signature: str
    player_reference: str
    signature_param: str = "signature"


@dataclass(frozen=True)
class StreamDescriptor:
    """One playable variant.

    Either resolved (``url`` set) or resolvable (``cipher`` set), never neither.
    """

    itag: int
    mime_type: str
    url: str | None = None
    cipher: SignatureCipher | None = None
    bitrate: int | None = None
    width: int | None = None
    height: int | None = None
    fps: int | None = None
    quality_label: str | None = None
    audio_quality: str | None = None
    content_length: int | None = None
    approx_duration_ms: int | None = None
    is_adaptive: bool = False

    def __post_init__(self) -> None:
        if self.url is None and self.cipher is None:
            raise ValueError(
                f"Stream {self.itag} has neither a direct url nor a signature cipher"
            )

    @property
    def is_resolved(self) -> bool:
        return self.url is not None

    @property
    def has_video(self) -> bool:
        return self.mime_type.startswith("video/")

    @property
    def has_audio(self) -> bool:
        if self.mime_type.startswith("audio/"):
            return True
        return not self.is_adaptive

    def with_url(self, url: str) -> StreamDescriptor:
        """Return the resolved copy of this descriptor."""
        return replace(self, url=url, cipher=None)


@dataclass(frozen=True)
class StreamDiagnostic:
    """Why a stream entry was dropped from a StreamResponse."""

    itag: int | None
    kind: str
    message: str
    player_reference: str | None = None


@dataclass(frozen=True)
class StreamResponse:
    """Resolved streams of one video plus per-stream failures."""

    video_id: str
    streams: tuple[StreamDescriptor, ...] = ()
    diagnostics: tuple[StreamDiagnostic, ...] = ()
    expires_in_seconds: int | None = None
    hls_manifest_url: str | None = None
    dash_manifest_url: str | None = None
    player_reference: str | None = None

    def by_itag(self, itag: int) -> StreamDescriptor | None:
        for stream in self.streams:
            if stream.itag == itag:
                return stream
        return None

    @property
    def video_streams(self) -> list[StreamDescriptor]:
        return [s for s in self.streams if s.has_video]

    @property
    def audio_streams(self) -> list[StreamDescriptor]:
        return [s for s in self.streams if s.mime_type.startswith("audio/")]
