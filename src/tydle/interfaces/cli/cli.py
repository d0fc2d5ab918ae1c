from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog

from tydle.application.tydle import Tydle
from tydle.domain.entities.errors import ExtractionError, InvalidVideoIdError
from tydle.infrastructure.composition import open_tydle
from tydle.infrastructure.config import AppConfig, load_config
from tydle.infrastructure.logging.setup import configure_logging

log = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_EXTRACTION_FAILED = 1
EXIT_INVALID_INPUT = 2


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tydle",
        description="Extract manifests, metadata and playable streams of a video.",
    )

    # Config wiring flags (no business logic)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--cache-backend",
        default=None,
        choices=["memory", "diskcache"],
        help="Override persistent cache backend.",
    )
    parser.add_argument(
        "--cache-dir",
        default=None,
        help="Override diskcache directory.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )
    parser.add_argument(
        "--indent",
        default=2,
        type=int,
        help="JSON indentation of the printed result.",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    manifest = commands.add_parser("manifest", help="Print the raw player response.")
    manifest.add_argument("video", help="Video id or watch URL.")

    info = commands.add_parser("info", help="Print video metadata.")
    info.add_argument("video", help="Video id or watch URL.")

    streams = commands.add_parser("streams", help="Print resolved streams.")
    streams.add_argument("video", help="Video id or watch URL.")

    decipher = commands.add_parser(
        "decipher", help="Decipher one signature for a player."
    )
    decipher.add_argument("signature", help="Scrambled signature (the 's' value).")
    decipher.add_argument(
        "--player-url",
        required=True,
        help="Player bundle URL (absolute or /s/player/... path).",
    )

    return parser.parse_args(argv)


def _cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.cache_backend:
        overrides["cache_backend"] = args.cache_backend
    if args.cache_dir:
        overrides["cache_dir"] = args.cache_dir
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.log_format:
        overrides["log_format"] = args.log_format
    return overrides


async def _execute(tydle: Tydle, args: argparse.Namespace) -> Any:
    if args.command == "manifest":
        manifest = await tydle.get_manifest(args.video)
        return {
            "video_id": str(manifest.video_id),
            "player_reference": manifest.player_reference,
            "document": manifest.document,
        }
    if args.command == "info":
        return dataclasses.asdict(await tydle.get_video_info(args.video))
    if args.command == "streams":
        return dataclasses.asdict(await tydle.get_streams(args.video))
    if args.command == "decipher":
        signature = await tydle.decipher_signature(args.signature, args.player_url)
        return {"signature": signature}
    raise ValueError(f"Unknown command: {args.command!r}")


async def run(config: AppConfig, args: argparse.Namespace) -> Any:
    async with open_tydle(config) as tydle:
        return await _execute(tydle, args)


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Loads config exactly once, configures logging, runs one command and
    prints its JSON result to stdout. Logs go to stderr.
    """
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    config = load_config(
        config_path=Path(args.config) if args.config else None,
        dotenv_path=Path(args.dotenv) if args.dotenv else None,
        cli_overrides=_cli_overrides(args),
    )
    configure_logging(config)

    try:
        result = asyncio.run(run(config, args))
    except InvalidVideoIdError as exc:
        log.error("invalid_video_id", raw=exc.raw)
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_INVALID_INPUT
    except ExtractionError as exc:
        log.error("extraction_failed", kind=exc.kind, **exc.context)
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_EXTRACTION_FAILED

    print(json.dumps(result, indent=args.indent or None, ensure_ascii=False, default=str))
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(start())
