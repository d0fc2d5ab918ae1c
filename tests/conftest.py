"""Shared test fixtures for the tydle test suite."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest
from factories import (
    PLAYER_JS,
    PLAYER_URL,
    VIDEO_ID,
    ciphered_format,
    direct_format,
    player_response,
)

from tydle.domain.entities import DecipherProgram, Manifest, VideoId
from tydle.infrastructure.cache import SingleFlightCache
from tydle.infrastructure.cipher import StructuralCipherMatcher


@pytest.fixture()
def video_id() -> VideoId:
    return VideoId(VIDEO_ID)


@pytest.fixture()
def manifest(video_id: VideoId) -> Manifest:
    """Manifest with one direct stream and one ciphered stream."""
    document = player_response(
        formats=[direct_format(18)],
        adaptive_formats=[ciphered_format(137)],
    )
    return Manifest(video_id=video_id, document=document, player_reference=PLAYER_URL)


@pytest.fixture()
def matcher() -> StructuralCipherMatcher:
    return StructuralCipherMatcher()


@pytest.fixture()
def player_source_cache() -> SingleFlightCache[str]:
    return SingleFlightCache("player_source", max_entries=4)


@pytest.fixture()
def program_cache() -> SingleFlightCache[DecipherProgram]:
    return SingleFlightCache("decipher_program", max_entries=4)


@pytest.fixture()
def mock_transport() -> AsyncMock:
    """Transport whose fetch() serves the player bundle."""
    transport = AsyncMock()
    transport.fetch = AsyncMock(return_value=PLAYER_JS.encode())
    return transport


@pytest.fixture()
def document() -> dict[str, Any]:
    return player_response()
