"""Shared pytest fixtures and configuration."""

import os
import sys
import pytest

# Add parent directory to path so we can import pingate and handlers
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pingate.exceptions import StoreFailureError  # noqa: E402
from pingate.store import MemoryKeyValueStore  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingStore(MemoryKeyValueStore):
    """Memory store that counts reads and can be switched to fail."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.reads = 0
        self.writes = 0
        self.fail = False

    async def get(self, key):
        self.reads += 1
        if self.fail:
            raise StoreFailureError("disk unavailable")
        return await super().get(key)

    async def set(self, key, value):
        self.writes += 1
        if self.fail:
            raise StoreFailureError("disk unavailable")
        await super().set(key, value)

    async def multi_remove(self, keys):
        if self.fail:
            raise StoreFailureError("disk unavailable")
        await super().multi_remove(keys)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return CountingStore()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Clean environment variables before each test."""
    for name in (
        "PIN_STORE_BACKEND",
        "PIN_STORE_PATH",
        "PIN_TABLE_NAME",
        "API_HOST",
        "API_TIMEOUT_SECONDS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


# Mark all tests in tests/ as unit tests by default
def pytest_collection_modifyitems(items):
    """Automatically mark tests based on location."""
    for item in items:
        # Add 'unit' marker to all tests by default
        if "integration" not in item.keywords and "slow" not in item.keywords:
            item.add_marker(pytest.mark.unit)
