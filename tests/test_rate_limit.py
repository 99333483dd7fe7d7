import pytest
from fastapi import HTTPException
from starlette.requests import Request
from starlette.responses import Response

from app.utils.cache import MemoryCache, caches
from app.utils.rate_limit import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 500.0

    def __call__(self):
        return self.now


def _request(host="203.0.113.7"):
    return Request({"type": "http", "method": "POST", "path": "/", "headers": [], "client": (host, 5000)})


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter("login", 2, 60, "Slow down", cache=MemoryCache(clock=clock))


def test_limiter_uses_the_cache_it_is_given(limiter):
    assert limiter.cache is not caches["rate_limits"]

    limiter(_request(), Response())
    assert len(limiter.cache) == 1
    assert len(caches["rate_limits"]) == 0


def test_limit_is_per_client(limiter):
    for _ in range(2):
        limiter(_request(), Response())

    with pytest.raises(HTTPException) as exc_info:
        limiter(_request(), Response())
    assert exc_info.value.status_code == 429
    assert exc_info.value.detail == "Slow down"

    limiter(_request("198.51.100.1"), Response())


def test_reset_follows_the_cache_clock(limiter, clock):
    response = Response()
    limiter(_request(), response)
    assert response.headers["RateLimit-Reset"] == "60"
    assert response.headers["RateLimit-Remaining"] == "1"

    clock.now += 45
    limiter(_request(), Response())
    with pytest.raises(HTTPException) as exc_info:
        limiter(_request(), Response())
    assert exc_info.value.headers["Retry-After"] == "15"


def test_window_expires_with_its_cache_entry(limiter, clock):
    for _ in range(2):
        limiter(_request(), Response())

    clock.now += 61
    response = Response()
    limiter(_request(), response)
    assert response.headers["RateLimit-Remaining"] == "1"
