"""Tests for the tydle command-line entry point."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from factories import PLAYER_URL, VIDEO_ID

from tydle.domain.entities import (
    InvalidVideoIdError,
    Manifest,
    ManifestFetchFailed,
    StreamDescriptor,
    StreamResponse,
    VideoId,
    VideoInfo,
)
from tydle.interfaces.cli import cli


@pytest.fixture()
def fake_tydle(manifest: Manifest) -> AsyncMock:
    tydle = AsyncMock()
    tydle.get_manifest = AsyncMock(return_value=manifest)
    tydle.get_video_info = AsyncMock(
        return_value=VideoInfo(
            video_id=VIDEO_ID, title="Title", author="Author", duration_seconds=10
        )
    )
    tydle.get_streams = AsyncMock(
        return_value=StreamResponse(
            video_id=VIDEO_ID,
            streams=(StreamDescriptor(itag=18, mime_type="video/mp4", url="https://x"),),
        )
    )
    tydle.decipher_signature = AsyncMock(return_value="deciphered")
    return tydle


@pytest.fixture()
def patched(monkeypatch: pytest.MonkeyPatch, fake_tydle: AsyncMock) -> dict[str, Any]:
    """Replace the composition root and logging setup of the CLI module."""
    seen: dict[str, Any] = {}

    @asynccontextmanager
    async def fake_open_tydle(config):
        seen["config"] = config
        yield fake_tydle

    monkeypatch.setattr(cli, "open_tydle", fake_open_tydle)
    monkeypatch.setattr(cli, "configure_logging", MagicMock())
    return seen


class TestParseArgs:
    def test_requires_command(self) -> None:
        with pytest.raises(SystemExit):
            cli._parse_args([])

    def test_decipher_requires_player_url(self) -> None:
        with pytest.raises(SystemExit):
            cli._parse_args(["decipher", "abc"])

    def test_overrides_only_for_given_flags(self) -> None:
        args = cli._parse_args(
            ["--cache-backend", "diskcache", "--log-level", "DEBUG", "info", VIDEO_ID]
        )
        assert cli._cli_overrides(args) == {
            "cache_backend": "diskcache",
            "log_level": "DEBUG",
        }


class TestStart:
    def test_info_prints_json(
        self,
        patched: dict[str, Any],
        fake_tydle: AsyncMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert cli.start(["info", VIDEO_ID]) == cli.EXIT_OK

        out = json.loads(capsys.readouterr().out)
        assert out["title"] == "Title"
        fake_tydle.get_video_info.assert_awaited_once_with(VIDEO_ID)

    def test_streams_prints_json(
        self, patched: dict[str, Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert cli.start(["--indent", "0", "streams", VIDEO_ID]) == cli.EXIT_OK

        out = json.loads(capsys.readouterr().out)
        assert out["streams"][0]["itag"] == 18
        assert out["diagnostics"] == []

    def test_manifest_prints_document(
        self, patched: dict[str, Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert cli.start(["manifest", VIDEO_ID]) == cli.EXIT_OK

        out = json.loads(capsys.readouterr().out)
        assert out["video_id"] == VIDEO_ID
        assert out["player_reference"] == PLAYER_URL
        assert "streamingData" in out["document"]

    def test_decipher(
        self,
        patched: dict[str, Any],
        fake_tydle: AsyncMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = cli.start(["decipher", "ABC", "--player-url", PLAYER_URL])

        assert code == cli.EXIT_OK
        assert json.loads(capsys.readouterr().out) == {"signature": "deciphered"}
        fake_tydle.decipher_signature.assert_awaited_once_with("ABC", PLAYER_URL)

    def test_cli_flags_reach_config(self, patched: dict[str, Any]) -> None:
        cli.start(["--log-format", "json", "--cache-backend", "diskcache", "info", VIDEO_ID])

        config = patched["config"]
        assert config.log_format == "json"
        assert config.cache_backend == "diskcache"

    def test_extraction_error_exit_code(
        self,
        patched: dict[str, Any],
        fake_tydle: AsyncMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        fake_tydle.get_streams.side_effect = ManifestFetchFailed(VIDEO_ID, status=503)

        assert cli.start(["streams", VIDEO_ID]) == cli.EXIT_EXTRACTION_FAILED
        assert "503" in capsys.readouterr().err

    def test_invalid_video_id_exit_code(
        self,
        patched: dict[str, Any],
        fake_tydle: AsyncMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        fake_tydle.get_video_info.side_effect = InvalidVideoIdError("bad")

        assert cli.start(["info", "bad"]) == cli.EXIT_INVALID_INPUT
        assert "bad" in capsys.readouterr().err

    def test_manifest_without_player_reference(
        self,
        patched: dict[str, Any],
        fake_tydle: AsyncMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        fake_tydle.get_manifest.return_value = Manifest(
            video_id=VideoId(VIDEO_ID), document={}, player_reference=None
        )
        assert cli.start(["manifest", VIDEO_ID]) == cli.EXIT_OK
        assert json.loads(capsys.readouterr().out)["document"] == {}
