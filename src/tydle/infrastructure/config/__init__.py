from __future__ import annotations

from .load import load_config
from .schema import AppConfig, EnvOverrides, YoutubeConfig

__all__ = ["AppConfig", "EnvOverrides", "YoutubeConfig", "load_config"]
