"""Test data builders: player bundle, player responses and watch pages."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import urlencode

BASE_URL = "https://www.youtube.com"
VIDEO_ID = "dQw4w9WgXcQ"
PLAYER_PATH = "/s/player/1a2b3c4d/player_ias.vflset/en_US/base.js"
PLAYER_URL = BASE_URL + PLAYER_PATH

# Cipher: reverse, swap 12, splice 3 (call order), with throwaway names.
PLAYER_JS = """
var _yt_player={};(function(g){var window=this;
var Lq=function(a,b){return a+b};
var Qz={Kv:function(a){a.reverse()},
Mt:function(a,b){var c=a[0];a[0]=a[b%a.length];a[b%a.length]=c},
"pR":function(a,b){a.splice(0,b)}};
var noise=function(a){a=a.split(",");return a.length};
Ab=function(a){a=a.split("");Qz.Kv(a,47);Qz.Mt(a,12);Qz["pR"](a,3);return a.join("")};
g.Xk=function(a){return Ab(a)};
})(_yt_player);
"""

# "ABCDEFGHIJKLMNOP" -> reverse -> swap(12) -> splice(3)
SCRAMBLED_SIGNATURE = "ABCDEFGHIJKLMNOP"
DECIPHERED_SIGNATURE = "MLKJIHGFEPCBA"


def _format(itag: int, **extra: Any) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "itag": itag,
        "mimeType": 'video/mp4; codecs="avc1.4d401f"',
        "bitrate": 1_000_000 + itag,
        "width": 1280,
        "height": 720,
        "fps": 30,
        "qualityLabel": "720p",
        "contentLength": str(10_000 + itag),
        "approxDurationMs": "212091",
    }
    entry.update(extra)
    return entry


def direct_format(itag: int, **extra: Any) -> dict[str, Any]:
    return _format(itag, url=f"https://rr1.googlevideo.com/videoplayback?itag={itag}", **extra)


def ciphered_format(
    itag: int, signature: str = SCRAMBLED_SIGNATURE, **extra: Any
) -> dict[str, Any]:
    cipher = urlencode(
        {
            "s": signature,
            "sp": "sig",
            "url": f"https://rr1.googlevideo.com/videoplayback?itag={itag}",
        }
    )
    return _format(itag, signatureCipher=cipher, **extra)


def player_response(
    formats: list[dict[str, Any]] | None = None,
    adaptive_formats: list[dict[str, Any]] | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    document: dict[str, Any] = {
        "playabilityStatus": {"status": "OK"},
        "videoDetails": {
            "videoId": VIDEO_ID,
            "title": "Never Gonna Give You Up",
            "author": "Rick Astley",
            "lengthSeconds": "212",
            "channelId": "UCuAXFkgsw1L7xaCfnd5JJOw",
            "shortDescription": "The official video",
            "viewCount": "1500000000",
            "keywords": ["rick", "astley"],
            "isPrivate": False,
            "isLiveContent": False,
            "thumbnail": {
                "thumbnails": [
                    {"url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/default.jpg", "width": 120, "height": 90},
                ]
            },
        },
        "microformat": {
            "playerMicroformatRenderer": {
                "category": "Music",
                "publishDate": "2009-10-24",
            }
        },
        "streamingData": {
            "expiresInSeconds": "21540",
            "formats": formats if formats is not None else [direct_format(18)],
            "adaptiveFormats": adaptive_formats or [],
        },
    }
    document.update(overrides)
    return document


def watch_page(document: dict[str, Any] | None, js_url: str | None = PLAYER_PATH) -> str:
    parts = ["<html><head><script>"]
    if js_url is not None:
        parts.append(
            'ytcfg.set({"PLAYER_JS_URL":"ignored","jsUrl":%s});' % json.dumps(js_url)
        )
    parts.append("</script></head><body><script>")
    if document is not None:
        parts.append(f"var ytInitialPlayerResponse = {json.dumps(document)};")
        parts.append("var meta = document.createElement('meta');")
    parts.append("</script></body></html>")
    return "".join(parts)


