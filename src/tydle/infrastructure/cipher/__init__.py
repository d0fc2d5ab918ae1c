"""Signature cipher discovery in player source code."""

from __future__ import annotations

from .matcher import StructuralCipherMatcher

__all__ = ["StructuralCipherMatcher"]
