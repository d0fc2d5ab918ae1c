from .cipher import CipherOperation, DecipherProgram, OperationKind
from .errors import (
    CipherPatternNotFound,
    CipherReplayError,
    ExtractionError,
    InvalidVideoIdError,
    LockPoisoned,
    ManifestFetchFailed,
    ManifestMalformed,
    MetadataFieldMissing,
    PlayerSourceUnavailable,
)
from .video import (
    Manifest,
    SignatureCipher,
    StreamDescriptor,
    StreamDiagnostic,
    StreamResponse,
    Thumbnail,
    VideoId,
    VideoInfo,
)

__all__ = [
    "CipherOperation",
    "CipherPatternNotFound",
    "CipherReplayError",
    "DecipherProgram",
    "ExtractionError",
    "InvalidVideoIdError",
    "LockPoisoned",
    "Manifest",
    "ManifestFetchFailed",
    "ManifestMalformed",
    "MetadataFieldMissing",
    "OperationKind",
    "PlayerSourceUnavailable",
    "SignatureCipher",
    "StreamDescriptor",
    "StreamDiagnostic",
    "StreamResponse",
    "Thumbnail",
    "VideoId",
    "VideoInfo",
]
