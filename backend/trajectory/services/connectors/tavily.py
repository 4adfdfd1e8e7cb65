# backend/trajectory/services/connectors/tavily.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from .base import BaseSearchConnector
from ..caching import cached_get
from ..domain import RawSearchResult

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_URL = "https://api.tavily.com/search"
MAX_SNIPPET_CHARS = 300


class _RateLimited(Exception):
    """Raised inside the retry loop when the provider answers 429."""


class TavilyConnector(BaseSearchConnector):
    """
    Tavily web search, normalised into ``RawSearchResult`` items.

    Design goals:
    - One POST per query, provider ordering preserved (no client-side reranking).
    - Bounded timeout on every call; a timeout is handled like any HTTP error.
    - 429 responses are retried a couple of times with exponential backoff.
    - Every other failure (network, non-2xx, malformed JSON) yields ``[]``.
    - Optional Redis TTL cache keyed by (limit, query).
    """

    name = "tavily"

    def __init__(
        self,
        api_key: str,
        timeout: float = 10.0,
        search_url: str = DEFAULT_SEARCH_URL,
        transport: httpx.AsyncBaseTransport | None = None,
        use_cache: bool = True,
        cache_ttl: int = 60 * 60,
        rate_limit_attempts: int = 3,
        rate_limit_wait: wait_base | None = None,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.search_url = search_url
        self.transport = transport
        self.use_cache = use_cache and cache_ttl > 0
        self.cache_ttl = cache_ttl
        self.rate_limit_attempts = max(1, rate_limit_attempts)
        self.rate_limit_wait = rate_limit_wait or wait_exponential(multiplier=1, min=1, max=8)

    def _build_payload(self, query: str, limit: int) -> Dict[str, Any]:
        return {
            "api_key": self.api_key,
            "query": query,
            "search_depth": "basic",
            "include_answer": False,
            "include_images": False,
            "include_raw_content": False,
            "max_results": limit,
        }

    def _parse_results(self, data: Any) -> Optional[List[RawSearchResult]]:
        """
        Normalise Tavily results; ``None`` means the payload had no usable
        ``results`` list at all.
        """
        if not isinstance(data, dict):
            return None
        raw_results = data.get("results")
        if not isinstance(raw_results, list):
            return None

        results: List[RawSearchResult] = []
        for r in raw_results:
            if not isinstance(r, dict):
                continue
            title = r.get("title")
            url = r.get("url")
            if not title or not url:
                continue
            content = r.get("content")
            snippet = content[:MAX_SNIPPET_CHARS] if isinstance(content, str) else None
            results.append(RawSearchResult(title=str(title), url=str(url), snippet=snippet))
        return results

    async def _post(self, client: httpx.AsyncClient, payload: Dict[str, Any]) -> httpx.Response:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(_RateLimited),
            wait=self.rate_limit_wait,
            stop=stop_after_attempt(self.rate_limit_attempts),
        ):
            with attempt:
                resp = await client.post(self.search_url, json=payload)
                if resp.status_code == 429:
                    raise _RateLimited(resp.headers.get("Retry-After") or "")
        return resp

    async def search(self, query: str, limit: int = 8) -> List[RawSearchResult]:
        if not query or not query.strip():
            raise ValueError("search query must not be empty")
        if not self.api_key:
            raise ValueError("search API key is required")

        cache_key = f"tavily:{limit}:{query.strip()}"
        if self.use_cache:
            cached = await cached_get(cache_key)
            if cached is not None:
                return [RawSearchResult(**item) for item in cached]

        payload = self._build_payload(query.strip(), limit)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await self._post(client, payload)
        except RetryError:
            logger.warning(
                "Tavily rate limit persisted after %s attempts",
                self.rate_limit_attempts,
                extra={"provider": self.name, "step": "search"},
            )
            return []
        except httpx.HTTPError as e:
            logger.warning(
                "Tavily request failed: %s",
                e,
                extra={"provider": self.name, "step": "search"},
            )
            return []

        if not resp.is_success:
            logger.warning(
                "Tavily HTTP error %s: %s",
                resp.status_code,
                resp.text[:500],
                extra={"provider": self.name, "step": "search"},
            )
            return []

        try:
            data = resp.json()
        except ValueError:
            logger.warning(
                "Tavily returned a non-JSON body",
                extra={"provider": self.name, "step": "search"},
            )
            return []

        results = self._parse_results(data)
        if results is None:
            logger.warning(
                "Tavily returned invalid response format",
                extra={"provider": self.name, "step": "search"},
            )
            return []

        if results and self.use_cache:
            await cached_get(
                cache_key,
                set_value=[{"title": r.title, "url": r.url, "snippet": r.snippet} for r in results],
                ttl=self.cache_ttl,
            )

        return results
