"""Signature cipher operations and replayable decipher programs.

Pure value objects, no I/O. A program is derived once per player version
and replayed for every protected stream of that version.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tydle.domain.entities.errors import CipherReplayError


class OperationKind(str, Enum):
    REVERSE = "reverse"
    SWAP = "swap"
    SPLICE = "splice"


@dataclass(frozen=True)
class CipherOperation:
    """One atomic transform step.

    ``operand`` is the swap index for SWAP, the number of leading
    characters removed for SPLICE, and ignored for REVERSE.
    """

    kind: OperationKind
    operand: int = 0

    def apply(self, chars: list[str]) -> None:
        """Apply in place to a mutable character list."""
        if self.operand < 0:
            raise CipherReplayError(str(self), length=len(chars))

        if self.kind is OperationKind.REVERSE:
            chars.reverse()
        elif self.kind is OperationKind.SWAP:
            if not chars:
                raise CipherReplayError(str(self), length=0)
            index = self.operand % len(chars)
            chars[0], chars[index] = chars[index], chars[0]
        elif self.kind is OperationKind.SPLICE:
            if self.operand > len(chars):
                raise CipherReplayError(str(self), length=len(chars))
            del chars[: self.operand]

    def __str__(self) -> str:
        if self.kind is OperationKind.REVERSE:
            return "REVERSE"
        return f"{self.kind.name}({self.operand})"


@dataclass(frozen=True)
class DecipherProgram:
    """Ordered sequence of cipher operations recovered from a player."""

    operations: tuple[CipherOperation, ...]

    def apply(self, signature: str) -> str:
        """Replay all operations against *signature* and return the result."""
        chars = list(signature)
        for op in self.operations:
            op.apply(chars)
        return "".join(chars)

    def __len__(self) -> int:
        return len(self.operations)

    def describe(self) -> list[str]:
        return [str(op) for op in self.operations]
