"""Shared fixtures for integration tests.

These tests wire real components together (config loader, provider
catalog, codec registry, hop resolver) with HTTP mocked via respx.
"""

from __future__ import annotations

import os

import pytest
import respx


@pytest.fixture()
def respx_mock() -> respx.MockRouter:
    """Explicit respx mock router for request interception."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer STREAMTRAIL_* variables out of config tests."""
    for name in list(os.environ):
        if name.startswith("STREAMTRAIL_"):
            monkeypatch.delenv(name, raising=False)
