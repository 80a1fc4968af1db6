"""
Shared pytest fixtures: a fake transport, a fake clock and response builders.
"""

import json
from typing import Any, List, Optional

import pytest
import requests

from fb_reach.config.settings import FacebookConfig
from fb_reach.data_acquisition.apis.facebook_api import ReachEstimateClient
from fb_reach.data_acquisition.rate_limiter import TokenBucketRateLimiter

TEST_TOKEN = "test-access-token"
TEST_ACCOUNT = "act_123456789"


def make_response(body: Any, status_code: int = 200) -> requests.Response:
    """Build a real requests.Response with the given JSON (or raw text) body."""
    response = requests.Response()
    response.status_code = status_code
    text = body if isinstance(body, str) else json.dumps(body)
    response._content = text.encode("utf-8")
    response.encoding = "utf-8"
    response.headers["Content-Type"] = "application/json"
    return response


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self, start: float = 1000.0, events: Optional[List] = None):
        self.now = start
        self.sleeps: List[float] = []
        self.events = events if events is not None else []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.events.append(("sleep", seconds))
        self.now += seconds

    def advance(self, seconds: float):
        self.now += seconds


class FakeSession:
    """Stands in for requests.Session, returning queued responses."""

    def __init__(self, responses=None, clock: Optional[FakeClock] = None, events=None):
        self.responses = list(responses or [])
        self.calls = []
        self.clock = clock
        self.events = events if events is not None else []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.calls.append(
            {
                "url": url,
                "params": params,
                "timeout": timeout,
                "time": self.clock() if self.clock else None,
            }
        )
        self.events.append(("get", url))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True


@pytest.fixture
def facebook_config():
    return FacebookConfig(access_token=TEST_TOKEN, ad_account_id=TEST_ACCOUNT)


@pytest.fixture
def events():
    return []


@pytest.fixture
def fake_clock(events):
    return FakeClock(events=events)


@pytest.fixture
def rate_limiter(fake_clock):
    return TokenBucketRateLimiter(
        requests_per_window=1,
        window_seconds=5.0,
        clock=fake_clock,
        sleep=fake_clock.sleep,
    )


@pytest.fixture
def make_client(facebook_config, rate_limiter, fake_clock, events):
    """Factory for a client whose transport returns the given responses."""

    def _make(responses, timeout=None):
        session = FakeSession(responses, clock=fake_clock, events=events)
        client = ReachEstimateClient(
            facebook_config,
            rate_limiter=rate_limiter,
            session=session,
            timeout=timeout,
        )
        return client, session

    return _make
