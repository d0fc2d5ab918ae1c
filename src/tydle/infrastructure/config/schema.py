"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
CacheBackendName = Literal["memory", "diskcache"]


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class YoutubeConfig(BaseModel):
    """Platform endpoint and session settings (YAML section: youtube.*)."""

    base_url: str = Field(
        default="https://www.youtube.com",
        description="Origin used for watch pages and relative player URLs.",
    )
    language: str = Field(
        default="en",
        description="Accept-Language sent with watch page requests.",
    )
    cookies: dict[str, str] = Field(
        default_factory=dict,
        description="Cookies pre-seeded for the base_url domain.",
    )

    @field_validator("base_url")
    @classmethod
    def _validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("youtube.base_url must be an http(s) URL")
        return v.rstrip("/")


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/cache/youtube).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="tydle", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=15.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="HTTP timeout in seconds for watch pages and player bundles.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether HTTP client follows redirects.",
    )
    http_user_agent: str = Field(
        default="Mozilla/5.0 (compatible; tydle/0.1.0)",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # Cache (YAML section: cache.*)
    cache_backend: CacheBackendName = Field(
        default="memory",
        validation_alias=AliasChoices(
            "cache_backend",
            AliasPath("cache", "backend"),
        ),
        description="Persistent tier: 'memory' (none) or 'diskcache' (SQLite).",
    )
    cache_dir: Path = Field(
        default=Path("./.cache/tydle"),
        validation_alias=AliasChoices(
            "cache_dir",
            AliasPath("cache", "dir"),
        ),
        description="Diskcache directory (only when backend=diskcache).",
    )
    cache_persistent_ttl_seconds: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices(
            "cache_persistent_ttl_seconds",
            AliasPath("cache", "persistent_ttl_seconds"),
        ),
        description="TTL of persistent entries in seconds. None = never expires.",
    )
    cache_player_source_max_entries: int = Field(
        default=16,
        validation_alias=AliasChoices(
            "cache_player_source_max_entries",
            AliasPath("cache", "player_source_max_entries"),
        ),
        description="LRU capacity of the player source store.",
    )
    cache_decipher_program_max_entries: int = Field(
        default=128,
        validation_alias=AliasChoices(
            "cache_decipher_program_max_entries",
            AliasPath("cache", "decipher_program_max_entries"),
        ),
        description="LRU capacity of the decipher program store.",
    )
    cache_max_concurrent: int = Field(
        default=10,
        validation_alias=AliasChoices(
            "cache_max_concurrent",
            AliasPath("cache", "max_concurrent"),
        ),
        description="Max parallel persistent cache ops (semaphore limit).",
    )

    # Platform (YAML section: youtube.*)
    youtube: YoutubeConfig = Field(default_factory=YoutubeConfig)

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator(
        "cache_player_source_max_entries",
        "cache_decipher_program_max_entries",
        "cache_max_concurrent",
    )
    @classmethod
    def _validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("cache sizes and limits must be >= 1")
        return v

    @field_validator("cache_persistent_ttl_seconds")
    @classmethod
    def _validate_cache_ttl(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("cache_persistent_ttl_seconds must be > 0 or unset")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "cache": {
                "backend": self.cache_backend,
                "dir": str(self.cache_dir),
                "persistent_ttl_seconds": self.cache_persistent_ttl_seconds,
                "player_source_max_entries": self.cache_player_source_max_entries,
                "decipher_program_max_entries": self.cache_decipher_program_max_entries,
                "max_concurrent": self.cache_max_concurrent,
            },
            "youtube": self.youtube.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read TYDLE_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - TYDLE_HTTP_TIMEOUT_SECONDS
    - TYDLE_LOG_LEVEL
    - TYDLE_CACHE_BACKEND
    - TYDLE_YOUTUBE_BASE_URL
    """

    model_config = SettingsConfigDict(
        env_prefix="TYDLE_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cache_backend: Optional[CacheBackendName] = None
    cache_dir: Optional[Path] = None
    cache_persistent_ttl_seconds: Optional[int] = None
    cache_player_source_max_entries: Optional[int] = None
    cache_decipher_program_max_entries: Optional[int] = None

    youtube_base_url: Optional[str] = None
    youtube_language: Optional[str] = None

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
