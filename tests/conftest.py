"""Pytest configuration and fixtures."""

import pytest

from urlscan_submitter.api.client import UrlscanClient
from urlscan_submitter.utils.rate_limiter import RateLimitTracker


class FakeTime:
    """Stand-in for time.sleep / time.time that records sleeps and advances a clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start
        self.sleeps = []

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def clock(self) -> float:
        return self.now

    @property
    def total_slept(self) -> float:
        return sum(self.sleeps)


@pytest.fixture
def sample_url():
    """Return a sample URL for testing."""
    return "https://example.com"


@pytest.fixture
def api_key():
    """Return a well-formed API key."""
    return "0b1c2d3e-4f50-6172-8394-a5b6c7d8e9f0"


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def tracker(fake_time):
    return RateLimitTracker(sleep=fake_time.sleep, clock=fake_time.clock)


@pytest.fixture
def client(tracker, fake_time):
    with UrlscanClient(tracker=tracker, user_agent="test-agent", sleep=fake_time.sleep) as c:
        yield c
