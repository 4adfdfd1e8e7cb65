"""
Tests for the Tavily search connector.

All HTTP goes through ``httpx.MockTransport``; rate-limit retries use
``wait_none`` so the suite never sleeps.
"""
import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
import redis
from tenacity import wait_none

from trajectory.services import caching
from trajectory.services.connectors import tavily as tavily_module
from trajectory.services.connectors.tavily import MAX_SNIPPET_CHARS, TavilyConnector
from trajectory.services.domain import RawSearchResult

from tests.fixtures.trajectory_fixtures import TAVILY_RESPONSE


def make_connector(handler, **kwargs) -> TavilyConnector:
    return TavilyConnector(
        api_key="tvly-test",
        transport=httpx.MockTransport(handler),
        use_cache=False,
        rate_limit_wait=wait_none(),
        **kwargs,
    )


class TestTavilySearch:

    @pytest.mark.asyncio
    async def test_parses_results_in_provider_order(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json=TAVILY_RESPONSE)

        results = await make_connector(handler).search("sales career story", limit=5)

        assert [r.url for r in results] == [
            "https://blog.example.com/sdr",
            "https://www.youtube.com/watch?v=xyz",
        ]
        assert results[0].snippet == "Notes from my first sales job."
        assert len(results[1].snippet) == MAX_SNIPPET_CHARS

        payload = seen[0]
        assert payload["query"] == "sales career story"
        assert payload["max_results"] == 5
        assert payload["api_key"] == "tvly-test"
        assert payload["include_raw_content"] is False

    @pytest.mark.asyncio
    async def test_rate_limit_retried(self):
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            if calls["n"] == 1:
                return httpx.Response(429, headers={"Retry-After": "1"})
            return httpx.Response(200, json=TAVILY_RESPONSE)

        results = await make_connector(handler).search("q")
        assert calls["n"] == 2
        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_persistent_rate_limit_returns_empty(self):
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            return httpx.Response(429)

        results = await make_connector(handler, rate_limit_attempts=3).search("q")
        assert results == []
        assert calls["n"] == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 500, 503])
    async def test_http_error_returns_empty(self, status):
        results = await make_connector(lambda request: httpx.Response(status, text="boom")).search("q")
        assert results == []

    @pytest.mark.asyncio
    async def test_network_error_returns_empty(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("no route", request=request)

        assert await make_connector(handler).search("q") == []

    @pytest.mark.asyncio
    async def test_timeout_returns_empty(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        assert await make_connector(handler).search("q") == []

    @pytest.mark.asyncio
    async def test_non_json_body_returns_empty(self):
        results = await make_connector(lambda request: httpx.Response(200, text="<html>")).search("q")
        assert results == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"answer": "x"}, {"results": "nope"}, [1, 2]])
    async def test_invalid_format_returns_empty(self, body):
        results = await make_connector(lambda request: httpx.Response(200, json=body)).search("q")
        assert results == []

    @pytest.mark.asyncio
    async def test_empty_results_list(self):
        results = await make_connector(lambda request: httpx.Response(200, json={"results": []})).search("q")
        assert results == []

    @pytest.mark.asyncio
    async def test_empty_query_rejected(self):
        connector = make_connector(lambda request: httpx.Response(200, json=TAVILY_RESPONSE))
        with pytest.raises(ValueError):
            await connector.search("   ")

    @pytest.mark.asyncio
    async def test_missing_key_rejected(self):
        connector = TavilyConnector(api_key="", use_cache=False)
        with pytest.raises(ValueError):
            await connector.search("q")


class FakeCache:
    """In-memory stand-in for ``cached_get`` that records writes."""

    def __init__(self, initial=None):
        self.store = dict(initial or {})
        self.writes = []

    async def __call__(self, key, set_value=None, ttl=None):
        if set_value is None:
            return self.store.get(key)
        self.writes.append((key, set_value, ttl))
        self.store[key] = set_value
        return set_value


def make_cached_connector(handler, **kwargs) -> TavilyConnector:
    return TavilyConnector(
        api_key="tvly-test",
        transport=httpx.MockTransport(handler),
        use_cache=True,
        cache_ttl=120,
        rate_limit_wait=wait_none(),
        **kwargs,
    )


class TestTavilyCache:
    """The optional Redis cache keyed by (limit, query)."""

    @pytest.mark.asyncio
    async def test_cache_hit_skips_http(self, monkeypatch):
        cache = FakeCache({
            "tavily:4:sales story": [
                {"title": "Cached SDR story", "url": "https://cached.example.com/a", "snippet": "from cache"},
                {"title": "No snippet", "url": "https://cached.example.com/b", "snippet": None},
            ]
        })
        monkeypatch.setattr(tavily_module, "cached_get", cache)

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("cache hit must not call the provider")

        results = await make_cached_connector(handler).search("  sales story ", limit=4)

        assert results == [
            RawSearchResult(title="Cached SDR story", url="https://cached.example.com/a", snippet="from cache"),
            RawSearchResult(title="No snippet", url="https://cached.example.com/b", snippet=None),
        ]
        assert cache.writes == []

    @pytest.mark.asyncio
    async def test_miss_searches_and_writes_back(self, monkeypatch):
        cache = FakeCache()
        monkeypatch.setattr(tavily_module, "cached_get", cache)

        results = await make_cached_connector(
            lambda request: httpx.Response(200, json=TAVILY_RESPONSE)
        ).search("sales story", limit=5)

        assert len(results) == 2
        assert len(cache.writes) == 1
        key, value, ttl = cache.writes[0]
        assert key == "tavily:5:sales story"
        assert ttl == 120
        assert value[0] == {
            "title": "How I became an SDR",
            "url": "https://blog.example.com/sdr",
            "snippet": "Notes from my first sales job.",
        }

        # Second call is served from the cache
        calls = {"n": 0}

        def counting_handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            return httpx.Response(200, json=TAVILY_RESPONSE)

        again = await make_cached_connector(counting_handler).search("sales story", limit=5)
        assert again == results
        assert calls["n"] == 0

    @pytest.mark.asyncio
    async def test_empty_results_not_cached(self, monkeypatch):
        cache = FakeCache()
        monkeypatch.setattr(tavily_module, "cached_get", cache)

        results = await make_cached_connector(
            lambda request: httpx.Response(200, json={"results": []})
        ).search("q")

        assert results == []
        assert cache.writes == []

    @pytest.mark.asyncio
    async def test_failed_search_not_cached(self, monkeypatch):
        cache = FakeCache()
        monkeypatch.setattr(tavily_module, "cached_get", cache)

        results = await make_cached_connector(lambda request: httpx.Response(500)).search("q")

        assert results == []
        assert cache.writes == []

    @pytest.mark.asyncio
    async def test_zero_ttl_disables_cache(self, monkeypatch):
        cache = FakeCache({"tavily:8:q": [{"title": "stale", "url": "https://x.example.com", "snippet": None}]})
        monkeypatch.setattr(tavily_module, "cached_get", cache)

        connector = TavilyConnector(
            api_key="tvly-test",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=TAVILY_RESPONSE)),
            cache_ttl=0,
        )
        results = await connector.search("q")

        assert [r.title for r in results] == ["How I became an SDR", "Internship to account executive"]
        assert cache.writes == []

    @pytest.mark.asyncio
    async def test_redis_error_falls_through_to_live_search(self, monkeypatch):
        broken = MagicMock()
        broken.get.side_effect = redis.ConnectionError("redis down")
        broken.set.side_effect = redis.ConnectionError("redis down")
        monkeypatch.setattr(caching, "get_settings", lambda: SimpleNamespace(REDIS_URL="redis://cache:6379/0"))
        monkeypatch.setattr(caching, "_get_sync_redis", lambda url: broken)

        results = await make_cached_connector(
            lambda request: httpx.Response(200, json=TAVILY_RESPONSE)
        ).search("sales story")

        assert len(results) == 2
        broken.get.assert_called_once_with("tavily:8:sales story")
        broken.set.assert_called_once()
        assert broken.close.call_count == 2


class TestCachedGet:

    @pytest.mark.asyncio
    async def test_disabled_without_redis_url(self, monkeypatch):
        monkeypatch.setattr(caching, "get_settings", lambda: SimpleNamespace(REDIS_URL=None))
        monkeypatch.setattr(caching, "_get_sync_redis", MagicMock(side_effect=AssertionError("no client")))

        assert await caching.cached_get("k") is None
        assert await caching.cached_get("k", set_value=[1], ttl=5) is None

    @pytest.mark.asyncio
    async def test_round_trips_json_with_ttl(self, monkeypatch):
        client = MagicMock()
        client.get.return_value = json.dumps([{"title": "t"}])
        monkeypatch.setattr(caching, "get_settings", lambda: SimpleNamespace(REDIS_URL="redis://cache:6379/0"))
        monkeypatch.setattr(caching, "_get_sync_redis", lambda url: client)

        assert await caching.cached_get("k") == [{"title": "t"}]
        assert await caching.cached_get("k", set_value={"a": 1}, ttl=30) == {"a": 1}
        client.set.assert_called_once_with("k", json.dumps({"a": 1}), ex=30)

    @pytest.mark.asyncio
    async def test_corrupt_value_is_a_miss(self, monkeypatch):
        client = MagicMock()
        client.get.return_value = "{not json"
        monkeypatch.setattr(caching, "get_settings", lambda: SimpleNamespace(REDIS_URL="redis://cache:6379/0"))
        monkeypatch.setattr(caching, "_get_sync_redis", lambda url: client)

        assert await caching.cached_get("k") is None
