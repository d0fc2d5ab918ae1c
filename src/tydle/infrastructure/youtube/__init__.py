"""YouTube web player adapters."""

from __future__ import annotations

from .decipher import SignatureDecipher
from .extractor import DEFAULT_BASE_URL, YoutubeExtractor
from .watch_page import parse_watch_page

__all__ = [
    "DEFAULT_BASE_URL",
    "SignatureDecipher",
    "YoutubeExtractor",
    "parse_watch_page",
]
