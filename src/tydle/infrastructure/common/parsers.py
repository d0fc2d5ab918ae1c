"""Parsing utilities for manifest document access."""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qs


def traverse(document: Any, *path: str | int, default: Any = None) -> Any:
    """Follow *path* through nested dicts/lists.

    Returns *default* as soon as a step is missing or has the wrong type.

    Example:
        traverse(doc, "videoDetails", "thumbnail", "thumbnails", -1, "url")
    """
    current = document
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list):
                return default
            try:
                current = current[step]
            except IndexError:
                return default
        else:
            if not isinstance(current, dict) or step not in current:
                return default
            current = current[step]
    return current


def int_or_none(value: Any) -> int | None:
    """Convert numeric strings/numbers to int; anything else -> None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_signature_cipher(raw: str) -> dict[str, str]:
    """Parse a ``signatureCipher`` query string.

    Format: ``s=<scrambled>&sp=<param>&url=<percent-encoded url>``

    Returns a flat dict of the first value per key.
    """
    return {key: values[0] for key, values in parse_qs(raw).items() if values}
