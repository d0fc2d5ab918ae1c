"""Shared fixtures for integration tests.

These tests use real infrastructure components (DiskcacheAdapter,
HttpxTransport, StructuralCipherMatcher) with mocked HTTP via respx.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import respx

from tydle.infrastructure.config import AppConfig, load_config


@pytest.fixture()
def respx_mock() -> respx.MockRouter:
    """Explicit respx mock router for request interception."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture()
def app_config(tmp_path: Path) -> AppConfig:
    """Config with a diskcache persistent tier under tmp_path."""
    return load_config(
        cli_overrides={
            "environment": "test",
            "cache_backend": "diskcache",
            "cache_dir": str(tmp_path / "cache"),
        }
    )
