"""Shared fixtures for the aviation wrapper test suite.

Component factories wired to a controllable clock and a no-op sleep, so TTL,
retry backoff and breaker cooldown can be driven without waiting.
"""

import sys
from pathlib import Path

import pytest


def _ensure_repo_root_on_path():
    """Allow tests to import project modules without installation."""
    repo_root = Path(__file__).resolve().parent.parent
    repo_str = str(repo_root)
    if repo_str not in sys.path:
        sys.path.insert(0, repo_str)


_ensure_repo_root_on_path()

from aviation_wrapper.cache import TTLCache
from aviation_wrapper.resilience import CircuitBreaker, RetryPolicy
from aviation_wrapper.services.aviation_api import AviationApiClient
from aviation_wrapper.services.lookup import AirportService

from helpers import BASE_URL, FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleeps():
    """Backoff delays requested by the retry policy, in order."""
    return []


@pytest.fixture
def breaker(clock):
    return CircuitBreaker(
        window_size=4,
        minimum_calls=2,
        failure_rate_threshold=0.5,
        open_seconds=30,
        half_open_max_calls=1,
        clock=clock,
    )


@pytest.fixture
def make_client(breaker, sleeps):
    def _factory(*, max_attempts=3):
        return AviationApiClient(
            base_url=BASE_URL,
            timeout_seconds=2,
            breaker=breaker,
            retry=RetryPolicy(max_attempts=max_attempts, initial_backoff_seconds=0.1, multiplier=2.0),
            sleep=sleeps.append,
        )

    return _factory


@pytest.fixture
def cache(clock):
    return TTLCache(default_ttl_seconds=900, clock=clock)


@pytest.fixture
def service(make_client, cache):
    return AirportService(client=make_client(), cache=cache)


@pytest.fixture
def api_client(service):
    from fastapi.testclient import TestClient

    from aviation_wrapper.main import create_app

    return TestClient(create_app(service=service))
