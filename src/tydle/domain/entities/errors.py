"""Typed failures raised by manifest extraction and signature decipherment.

Every error carries a ``context`` mapping (player reference, field, video id,
...) so a failure can be diagnosed from the log line alone.
"""

from __future__ import annotations

from typing import Any


class InvalidVideoIdError(ValueError):
    """Raised when a raw string cannot be turned into a VideoId."""

    def __init__(self, raw: str) -> None:
        super().__init__(f"Invalid video id: {raw!r}")
        self.raw = raw


class ExtractionError(Exception):
    """Base error for extraction and decipher operations."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context: dict[str, Any] = {k: v for k, v in context.items() if v is not None}

    @property
    def kind(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        base = super().__str__()
        if not self.context:
            return base
        details = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"{base} ({details})"


class ManifestFetchFailed(ExtractionError):
    """Transport/HTTP failure while fetching a manifest."""

    def __init__(
        self, video_id: str, *, url: str | None = None, status: int | None = None
    ) -> None:
        super().__init__(
            "Failed to fetch manifest", video_id=video_id, url=url, status=status
        )
        self.video_id = video_id
        self.status = status


class ManifestMalformed(ExtractionError):
    """The fetched document could not be structurally parsed."""

    def __init__(self, video_id: str, reason: str) -> None:
        super().__init__("Malformed manifest", video_id=video_id, reason=reason)
        self.video_id = video_id
        self.reason = reason


class MetadataFieldMissing(ExtractionError):
    """A required manifest field is absent."""

    def __init__(
        self, field: str, *, video_id: str | None = None, reason: str | None = None
    ) -> None:
        super().__init__(
            f"Missing manifest field {field!r}",
            field=field,
            video_id=video_id,
            reason=reason,
        )
        self.field = field


class PlayerSourceUnavailable(ExtractionError):
    """The player code bundle could not be fetched."""

    def __init__(self, player_reference: str, *, status: int | None = None) -> None:
        super().__init__(
            "Player source unavailable",
            player_reference=player_reference,
            status=status,
        )
        self.player_reference = player_reference


class CipherPatternNotFound(ExtractionError):
    """No routine matching the cipher shape exists in the player source.

    Signals that the player obfuscation changed and the matcher needs an update.
    """

    def __init__(self, stage: str, *, player_reference: str | None = None) -> None:
        super().__init__(
            "Cipher pattern not found",
            stage=stage,
            player_reference=player_reference,
        )
        self.stage = stage
        self.player_reference = player_reference


class CipherReplayError(ExtractionError):
    """A cipher operation cannot be applied to the current sequence."""

    def __init__(self, operation: str, *, length: int) -> None:
        super().__init__("Cipher replay failed", operation=operation, length=length)
        self.operation = operation
        self.length = length


class LockPoisoned(ExtractionError):
    """Internal synchronization failure; fatal to the current call only."""

    def __init__(self, cache: str, reason: str) -> None:
        super().__init__("Cache synchronization failed", cache=cache, reason=reason)
