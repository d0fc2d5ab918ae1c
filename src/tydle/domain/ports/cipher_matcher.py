"""Port for deriving decipher programs from player source code."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from tydle.domain.entities.cipher import DecipherProgram


@runtime_checkable
class CipherMatcherPort(Protocol):
    """Locates the signature transform inside a player bundle.

    Implementations match by structure, not by identifier names, and are
    the only place that knows the player's code shape.
    """

    def derive(self, player_source: str) -> DecipherProgram:
        """Return the program replaying the player's signature transform.

        Raises:
            CipherPatternNotFound: When no routine of the expected shape exists.
        """
        ...
