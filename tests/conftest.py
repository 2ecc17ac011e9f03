"""Test fixtures for the URL shortener test suite."""

import os
import random
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

# Set test environment variables BEFORE importing app modules
os.environ.update({
    "RATE_LIMIT_ENABLED": "false",
    "BASE_URL": "http://short.test",
    "LOG_LEVEL": "WARNING",
})

from shortlinks.core.registry_manager import get_registry  # noqa: E402
from shortlinks.main import app  # noqa: E402
from shortlinks.services.registry import URLRegistry  # noqa: E402

START_TIME = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock returning aware UTC datetimes."""

    def __init__(self, now: datetime = START_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class ScriptedRandom(random.Random):
    """Random source whose choice() replays the characters of the given codes."""

    def __init__(self, *codes: str):
        super().__init__(0)
        self._chars = iter("".join(codes))

    def choice(self, seq):
        return next(self._chars)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock) -> URLRegistry:
    return URLRegistry(clock=clock, rng=random.Random(1234))


@pytest.fixture
def client(registry):
    """TestClient whose endpoints use the test registry."""
    app.dependency_overrides[get_registry] = lambda: registry
    yield TestClient(app)
    app.dependency_overrides.clear()
