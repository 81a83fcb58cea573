"""
Pytest configuration for the welcome service.

Provides fixtures for:
- An in-memory fake of the MongoDB server and driver
- Settings with short delays for fast, deterministic tests
"""

from __future__ import annotations

import pytest

from fakes import FAKE_URI, FakeClientFactory, FakeStore
from welcome_service.config import Settings


@pytest.fixture()
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture()
def client_factory(fake_store: FakeStore) -> FakeClientFactory:
    return FakeClientFactory(fake_store)


@pytest.fixture()
def test_settings() -> Settings:
    """
    Settings fixture with short delays and the fake store URI.
    """
    return Settings(
        _env_file=None,
        mongo_uri=FAKE_URI,
        mongo_retry_delay_seconds=0.01,
        mongo_server_selection_timeout_ms=100,
        seed_timeout_seconds=1.0,
        log_level="DEBUG",
    )
