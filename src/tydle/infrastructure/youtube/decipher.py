"""Signature decipher engine.

Per player reference the engine fetches the player bundle once, derives the
decipher program once, and replays the cached program for every signature
of that player. Both steps go through shared single-flight stores, so any
number of concurrent callers for a new player cause exactly one fetch and
one derivation.
"""

from __future__ import annotations

from typing import Mapping

import structlog

from tydle.domain.entities.cipher import DecipherProgram
from tydle.domain.entities.errors import CipherPatternNotFound, PlayerSourceUnavailable
from tydle.domain.ports.cache import CacheStorePort
from tydle.domain.ports.cipher_matcher import CipherMatcherPort
from tydle.domain.ports.transport import TransportError, TransportPort

log = structlog.get_logger(__name__)


class SignatureDecipher:
    """Implements ``SignatureDecipherPort`` on top of the two cache stores."""

    def __init__(
        self,
        *,
        transport: TransportPort,
        player_sources: CacheStorePort[str],
        programs: CacheStorePort[DecipherProgram],
        matcher: CipherMatcherPort,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self._transport = transport
        self._player_sources = player_sources
        self._programs = programs
        self._matcher = matcher
        self._headers = dict(headers or {})

    async def decipher(self, signature: str, player_reference: str) -> str:
        """Return *signature* transformed by the player's cipher.

        Raises:
            PlayerSourceUnavailable: The player bundle could not be fetched.
            CipherPatternNotFound: The bundle has no recognizable cipher routine.
            CipherReplayError: The program cannot be applied to *signature*.
        """
        program = await self.program_for(player_reference)
        return program.apply(signature)

    async def program_for(self, player_reference: str) -> DecipherProgram:
        """Return the (cached) decipher program of a player version."""
        return await self._programs.get_or_insert_with(
            player_reference, lambda: self._derive_program(player_reference)
        )

    async def player_source(self, player_reference: str) -> str:
        """Return the (cached) player bundle source."""
        return await self._player_sources.get_or_insert_with(
            player_reference, lambda: self._fetch_player_source(player_reference)
        )

    async def _fetch_player_source(self, player_reference: str) -> str:
        log.info("player_source_fetch", player_reference=player_reference)
        try:
            body = await self._transport.fetch(player_reference, headers=self._headers)
        except TransportError as exc:
            log.warning(
                "player_source_unavailable",
                player_reference=player_reference,
                status=exc.status,
                reason=exc.reason,
            )
            raise PlayerSourceUnavailable(player_reference, status=exc.status) from exc
        return body.decode("utf-8", errors="replace")

    async def _derive_program(self, player_reference: str) -> DecipherProgram:
        source = await self.player_source(player_reference)
        try:
            program = self._matcher.derive(source)
        except CipherPatternNotFound as exc:
            log.error(
                "decipher_pattern_not_found",
                player_reference=player_reference,
                stage=exc.stage,
            )
            raise CipherPatternNotFound(
                exc.stage, player_reference=player_reference
            ) from exc
        log.info(
            "decipher_program_derived",
            player_reference=player_reference,
            operations=program.describe(),
        )
        return program
