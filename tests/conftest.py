"""Pytest configuration and fixtures."""

import json
import tempfile
from pathlib import Path

import pytest

from cdnsync.cache import CacheStore
from cdnsync.providers import CdnClient, build_providers


class FakeClock:
    """Controllable replacement for time.time()."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, text: str = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


class FakeSession:
    """Stands in for requests.Session; answers from a url -> response table."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, url: str, payload=None, status: int = 200, text: str = None):
        self.routes[url] = FakeResponse(status, payload, text)

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers or {}, "timeout": timeout})
        if url not in self.routes:
            return FakeResponse(404, text="Not Found")
        return self.routes[url]


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(temp_dir, clock):
    return CacheStore(temp_dir / "cache", ttl=3600, clock=clock)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    return CdnClient(session=session)


@pytest.fixture
def providers(client, cache):
    return build_providers(client, cache)
