import pytest
import requests
from requests import Response

from expiring_cache.cache import ExpiringCache
from expiring_cache.config import CacheConfig
from expiring_cache.fetcher import CachedFetcher


class DummyResponse:
    def __init__(self, data=None, status_code=200):
        self._data = data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            response = Response()
            response.status_code = self.status_code
            raise requests.HTTPError(f"{self.status_code} error", response=response)

    def json(self):
        return self._data


class DummySession:
    def __init__(self, responses):
        self._responses = list(responses)
        self.calls: list[tuple[str, dict | None, float]] = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True


def _fetcher(session, clock=None, **kwargs):
    now = clock or (lambda: 0.0)
    return CachedFetcher(ExpiringCache(now=now), session=session, sleep=lambda _: None, **kwargs)


def test_get_json_caches_response():
    session = DummySession([DummyResponse({"articles": [1, 2]})])
    fetcher = _fetcher(session, timeout_seconds=5)

    assert fetcher.get_json("https://example.test/articles", {"page": 1}) == {"articles": [1, 2]}
    assert fetcher.get_json("https://example.test/articles", {"page": 1}) == {"articles": [1, 2]}

    assert session.calls == [("https://example.test/articles", {"page": 1}, 5)]
    stats = fetcher.cache.stats()
    assert stats.hits == 1
    assert stats.misses == 1


def test_get_json_refetches_after_ttl():
    now = {"t": 0.0}
    session = DummySession([DummyResponse({"v": 1}), DummyResponse({"v": 2})])
    fetcher = _fetcher(session, clock=lambda: now["t"])

    assert fetcher.get_json("https://example.test/x", ttl_seconds=10) == {"v": 1}
    now["t"] = 10.0
    assert fetcher.get_json("https://example.test/x", ttl_seconds=10) == {"v": 2}
    assert len(session.calls) == 2


def test_cache_key_ignores_param_order():
    assert CachedFetcher.cache_key("u", {"a": 1, "b": 2}) == CachedFetcher.cache_key("u", {"b": 2, "a": 1})
    assert CachedFetcher.cache_key("u") == CachedFetcher.cache_key("u", {})
    assert CachedFetcher.cache_key("u", {"a": 1}) != CachedFetcher.cache_key("u", {"a": 2})


def test_failed_request_is_not_cached():
    session = DummySession([DummyResponse(status_code=404), DummyResponse({"ok": True})])
    fetcher = _fetcher(session)

    with pytest.raises(requests.HTTPError):
        fetcher.get_json("https://example.test/missing")
    assert fetcher.cache.size() == 0
    assert fetcher.get_json("https://example.test/missing") == {"ok": True}


def test_transient_failure_is_retried():
    session = DummySession([requests.Timeout("slow"), DummyResponse({"ok": True})])
    fetcher = _fetcher(session, retry_max_attempts=3)
    assert fetcher.get_json("https://example.test/flaky") == {"ok": True}
    assert len(session.calls) == 2


def test_refresh_bypasses_cached_value():
    session = DummySession([DummyResponse({"v": 1}), DummyResponse({"v": 2})])
    fetcher = _fetcher(session)
    fetcher.get_json("https://example.test/x")
    assert fetcher.get_json("https://example.test/x", refresh=True) == {"v": 2}
    assert fetcher.get_json("https://example.test/x") == {"v": 2}


def test_invalidate_drops_entry():
    session = DummySession([DummyResponse({"v": 1}), DummyResponse({"v": 2})])
    fetcher = _fetcher(session)
    fetcher.get_json("https://example.test/x", {"q": "a"})
    assert fetcher.invalidate("https://example.test/x", {"q": "a"}) is True
    assert fetcher.invalidate("https://example.test/x", {"q": "a"}) is False
    assert fetcher.get_json("https://example.test/x", {"q": "a"}) == {"v": 2}


def test_from_config_builds_cache_and_closes_session():
    session = DummySession([])
    config = CacheConfig(default_ttl_seconds=12, request_timeout_seconds=3)
    fetcher = CachedFetcher.from_config(config, session=session)
    assert fetcher.cache.default_ttl_seconds == 12
    assert not fetcher.cache.running
    fetcher.close()
    assert session.closed
