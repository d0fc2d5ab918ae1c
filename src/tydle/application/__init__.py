from __future__ import annotations

from .tydle import Tydle

__all__ = ["Tydle"]
