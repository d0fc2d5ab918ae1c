"""Watch page parsing - embedded player response and player bundle URL.

The watch page inlines the player response as a JS assignment::

    var ytInitialPlayerResponse = {...};

and references the player bundle in its config blob::

    "jsUrl":"/s/player/<hash>/player_ias.vflset/en_US/base.js"
"""

from __future__ import annotations

import json
import re
from urllib.parse import urljoin

import structlog

from tydle.domain.entities.errors import ManifestMalformed
from tydle.domain.entities.video import Manifest, VideoId

log = structlog.get_logger(__name__)

_PLAYER_RESPONSE_RE = re.compile(r"\bytInitialPlayerResponse\s*=\s*(?=\{)")

_PLAYER_URL_RES = (
    re.compile(r'"jsUrl"\s*:\s*"((?:[^"\\]|\\.)+)"'),
    re.compile(r'"PLAYER_JS_URL"\s*:\s*"((?:[^"\\]|\\.)+)"'),
)

_decoder = json.JSONDecoder()


def extract_player_response(html: str, video_id: VideoId) -> dict:
    """Decode the JSON object assigned to ``ytInitialPlayerResponse``.

    Raises:
        ManifestMalformed: If the assignment is absent or not a JSON object.
    """
    match = _PLAYER_RESPONSE_RE.search(html)
    if match is None:
        raise ManifestMalformed(str(video_id), "ytInitialPlayerResponse not found")
    try:
        document, _ = _decoder.raw_decode(html, match.end())
    except json.JSONDecodeError as exc:
        raise ManifestMalformed(
            str(video_id), f"invalid player response JSON: {exc.msg}"
        ) from exc
    if not isinstance(document, dict):
        raise ManifestMalformed(str(video_id), "player response is not an object")
    return document


def extract_player_reference(html: str, base_url: str) -> str | None:
    """Return the absolute player bundle URL, or None if the page has none."""
    for pattern in _PLAYER_URL_RES:
        match = pattern.search(html)
        if match is None:
            continue
        try:
            path = json.loads(f'"{match.group(1)}"')
        except json.JSONDecodeError:
            continue
        return urljoin(base_url.rstrip("/") + "/", path)
    return None


def parse_watch_page(html: str, video_id: VideoId, base_url: str) -> Manifest:
    document = extract_player_response(html, video_id)
    player_reference = extract_player_reference(html, base_url)
    log.debug(
        "watch_page_parsed",
        video_id=str(video_id),
        player_reference=player_reference,
        has_streaming_data="streamingData" in document,
    )
    return Manifest(
        video_id=video_id, document=document, player_reference=player_reference
    )
