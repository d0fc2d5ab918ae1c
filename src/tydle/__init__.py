"""tydle - playable stream metadata for YouTube videos."""

from __future__ import annotations

from tydle.application.tydle import Tydle
from tydle.domain.entities import (
    ExtractionError,
    InvalidVideoIdError,
    Manifest,
    StreamDescriptor,
    StreamResponse,
    VideoId,
    VideoInfo,
)
from tydle.infrastructure.composition import create_tydle, open_tydle

__version__ = "0.1.0"

__all__ = [
    "ExtractionError",
    "InvalidVideoIdError",
    "Manifest",
    "StreamDescriptor",
    "StreamResponse",
    "Tydle",
    "VideoId",
    "VideoInfo",
    "create_tydle",
    "open_tydle",
]
