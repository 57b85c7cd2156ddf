#  Shared fixtures: simulated clock, fake aiohttp session.

import pytest

from wpbot import rate_limit
from wpbot.rate_limit import RateLimiter


class FakeClock:
    """Epoch-millisecond clock driven by the test."""

    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeResponse:
    def __init__(self, status: int = 200, body: str = '{"ok":true}'):
        self.status = status
        self.body = body

    async def text(self):
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    def __init__(self, status: int = 200, error: Exception = None):
        self.status = status
        self.error = error
        self.posts = []

    def post(self, url, json=None):
        if self.error is not None:
            raise self.error
        self.posts.append((url, json))
        return FakeResponse(self.status)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_limiter(clock):
    def _make(per_minute: int = 10, per_hour: int = 100) -> RateLimiter:
        return RateLimiter(per_minute, per_hour, clock=clock)
    return _make


@pytest.fixture
def fake_sleep(monkeypatch, clock):
    """Replace asyncio.sleep inside the limiter with a clock advance."""
    slept = []

    async def _sleep(seconds):
        slept.append(seconds)
        clock.advance(round(seconds * 1000))

    monkeypatch.setattr(rate_limit.asyncio, "sleep", _sleep)
    return slept


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def make_session():
    return FakeSession
