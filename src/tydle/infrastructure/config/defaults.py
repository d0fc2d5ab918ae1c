"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "tydle",
    "environment": "dev",
    "http": {
        "timeout_seconds": 15.0,
        "follow_redirects": True,
        "user_agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
        ),
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cache": {
        "backend": "memory",
        "dir": "./.cache/tydle",
        "persistent_ttl_seconds": None,
        "player_source_max_entries": 16,
        "decipher_program_max_entries": 128,
        "max_concurrent": 10,
    },
    "youtube": {
        "base_url": "https://www.youtube.com",
        "language": "en",
        "cookies": {},
    },
}
