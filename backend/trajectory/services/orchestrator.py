"""
Story and overview orchestration.

Story generation runs as a fixed sequence of tiers:

    NoKeys -> Searching -> Filtering -> Selecting -> strategy chain -> Persist

The strategy chain is an ordered tuple of ``StoryStrategy`` objects; the
first one that returns stories wins, and a ``NeedsFallback`` hands over to
the next. Credentials arrive through ``PipelineConfig`` so the pipeline
never reads process configuration on its own.
"""
from __future__ import annotations

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Sequence, Tuple, Union

from ..core.config import Settings
from ..repositories import CaseStudyLog, ProfileStore
from .connectors import BaseSearchConnector, TavilyConnector
from .domain import (
    Overview,
    ProfileContext,
    RawSearchResult,
    Story,
    StoryGenerationResult,
)
from .llm import get_llm_client
from .overview import (
    MAX_OVERVIEW_RESULTS,
    STATIC_OVERVIEW_NO_RELEVANT,
    STATIC_OVERVIEW_UNAVAILABLE,
    build_fallback_overview,
    generate_overview_with_llm,
)
from .paths import build_search_query, resolve_path
from .relevance import filter_results_for_relevance
from .selection import DEFAULT_SELECTION_LIMIT, select_results_for_path
from .story_builder import build_stories_from_search_results
from .summarizer import summarize_results_with_llm

logger = logging.getLogger(__name__)

STORY_SEARCH_LIMIT = 8
OVERVIEW_SEARCH_LIMIT = 6


@dataclass(frozen=True)
class PipelineConfig:
    search_api_key: Optional[str] = None
    llm_api_key: Optional[str] = None
    llm_model: str = "gemini-2.5-flash"
    llm_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    llm_timeout: float = 10.0
    search_url: str = "https://api.tavily.com/search"
    search_timeout: float = 10.0
    search_cache_ttl: int = 60 * 60
    # When False, a missing LLM key degrades to search-only stories
    require_llm_key: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "PipelineConfig":
        return cls(
            search_api_key=settings.WEB_SEARCH_API_KEY or None,
            llm_api_key=settings.GEMINI_API_KEY or None,
            llm_model=settings.LLM_MODEL,
            llm_base_url=settings.LLM_BASE_URL,
            llm_timeout=settings.LLM_TIMEOUT_SECONDS,
            search_url=settings.WEB_SEARCH_URL,
            search_timeout=settings.WEB_SEARCH_TIMEOUT_SECONDS,
            search_cache_ttl=settings.WEB_SEARCH_CACHE_TTL_SECONDS,
            require_llm_key=settings.STORIES_REQUIRE_LLM_KEY,
        )

    @property
    def has_search_key(self) -> bool:
        return bool(self.search_api_key)

    @property
    def has_llm_key(self) -> bool:
        return bool(self.llm_api_key)


@dataclass(frozen=True)
class NeedsFallback:
    reason: str


@dataclass(frozen=True)
class StoryContext:
    profile: ProfileContext
    results: Tuple[RawSearchResult, ...]
    path_rank: int
    path_label: Optional[str] = None


StrategyResult = Union[List[Story], NeedsFallback]


class StoryStrategy(Protocol):
    name: str
    tags: str

    async def attempt(self, ctx: StoryContext) -> StrategyResult:
        ...


class LlmSummaryStrategy:
    name = "llm-summary"
    tags = "gemini-summarized"

    def __init__(self, client: Any, model: str):
        self.client = client
        self.model = model

    async def attempt(self, ctx: StoryContext) -> StrategyResult:
        stories = await summarize_results_with_llm(
            ctx.results,
            ctx.profile,
            client=self.client,
            model=self.model,
            path_rank=ctx.path_rank,
            path_label=ctx.path_label,
        )
        if not stories:
            return NeedsFallback("llm-returned-no-stories")
        return stories


class SearchOnlyStrategy:
    name = "search-only"

    def __init__(self, fallback: bool = False):
        self.tags = "tavily-only-fallback" if fallback else "tavily-only"

    async def attempt(self, ctx: StoryContext) -> StrategyResult:
        stories = build_stories_from_search_results(
            ctx.results,
            ctx.profile,
            path_rank=ctx.path_rank,
            path_label=ctx.path_label,
        )
        if not stories:
            return NeedsFallback("no-results-to-build-from")
        return stories


class StoryPipeline:
    def __init__(
        self,
        config: PipelineConfig,
        profiles: ProfileStore,
        case_studies: Optional[CaseStudyLog] = None,
        search: Optional[BaseSearchConnector] = None,
        llm_client: Any = None,
        request_id: Optional[str] = None,
    ) -> None:
        self.config = config
        self.profiles = profiles
        self.case_studies = case_studies
        self.request_id = request_id

        if search is None and config.has_search_key:
            search = TavilyConnector(
                api_key=config.search_api_key,
                timeout=config.search_timeout,
                search_url=config.search_url,
                cache_ttl=config.search_cache_ttl,
            )
        self.search = search

        if llm_client is None and config.has_llm_key:
            llm_client = get_llm_client(config.llm_api_key, config.llm_base_url, config.llm_timeout)
        self.llm_client = llm_client

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _log_extra(self, profile_id: str, path_rank: int, **kwargs: Any) -> dict:
        return {
            "request_id": self.request_id,
            "profile_id": profile_id,
            "path_rank": path_rank,
            **kwargs,
        }

    def _can_generate_stories(self) -> bool:
        if not self.config.has_search_key or self.search is None:
            return False
        if self.config.require_llm_key and not self.config.has_llm_key:
            return False
        return True

    def story_strategies(self) -> Tuple[StoryStrategy, ...]:
        if self.config.has_llm_key and self.llm_client is not None:
            return (
                LlmSummaryStrategy(self.llm_client, self.config.llm_model),
                SearchOnlyStrategy(fallback=True),
            )
        return (SearchOnlyStrategy(fallback=False),)

    async def _search_relevant(
        self,
        profile: ProfileContext,
        path_rank: int,
        path_label: Optional[str],
        limit: int,
    ) -> Tuple[List[RawSearchResult], List[RawSearchResult]]:
        query = build_search_query(profile, path_rank, path_label)
        results = await self.search.search(query, limit=limit)
        if not results:
            return [], []
        return results, filter_results_for_relevance(results, profile)

    async def _load_profile(self, profile_id: str) -> ProfileContext:
        # Session I/O stays off the event loop
        def _load() -> ProfileContext:
            return ProfileContext.from_model(self.profiles.require(profile_id))

        return await asyncio.to_thread(_load)

    async def _persist(self, stories: Sequence[Story], tags: str, stage: str, log_extra: dict) -> None:
        if self.case_studies is None or not stories:
            return
        try:
            outcomes = await asyncio.to_thread(
                self.case_studies.persist_stories, list(stories), tags=tags, stage=stage
            )
        except Exception:
            logger.exception("Case-study persistence failed", extra={**log_extra, "step": "persist"})
            return

        counts = Counter(o.status for o in outcomes)
        logger.info(
            "Persisted stories: %s saved, %s duplicate, %s failed",
            counts.get("saved", 0),
            counts.get("duplicate", 0),
            counts.get("failed", 0),
            extra={**log_extra, "step": "persist"},
        )

    # ------------------------------------------------------------------
    # public operations
    # ------------------------------------------------------------------

    async def generate_stories(
        self,
        profile_id: str,
        path_rank: Optional[int] = None,
        path_label: Optional[str] = None,
    ) -> StoryGenerationResult:
        profile = await self._load_profile(profile_id)
        rank = resolve_path(path_rank, path_label).rank
        log_extra = self._log_extra(profile_id, rank)

        if not self._can_generate_stories():
            logger.warning(
                "Missing API keys, returning no stories",
                extra={**log_extra, "step": "no_keys", "outcome": "no-keys"},
            )
            return StoryGenerationResult(outcome="no-keys")

        results, relevant = await self._search_relevant(profile, rank, path_label, STORY_SEARCH_LIMIT)
        logger.info(
            "Web search returned %s results, %s relevant",
            len(results),
            len(relevant),
            extra={**log_extra, "step": "search"},
        )
        if not results:
            return StoryGenerationResult(outcome="no-search-results")
        if not relevant:
            logger.warning(
                "No relevant web search results after filtering",
                extra={**log_extra, "step": "filter", "outcome": "no-relevant-results"},
            )
            return StoryGenerationResult(outcome="no-relevant-results")

        selected = select_results_for_path(relevant, DEFAULT_SELECTION_LIMIT, rank)
        ctx = StoryContext(
            profile=profile,
            results=tuple(selected),
            path_rank=rank,
            path_label=path_label,
        )

        for strategy in self.story_strategies():
            outcome = await strategy.attempt(ctx)
            if isinstance(outcome, NeedsFallback):
                logger.warning(
                    "Strategy %s needs fallback: %s",
                    strategy.name,
                    outcome.reason,
                    extra={**log_extra, "step": strategy.name},
                )
                continue

            logger.info(
                "Returning %s stories from %s",
                len(outcome),
                strategy.name,
                extra={**log_extra, "step": strategy.name, "outcome": "ok"},
            )
            await self._persist(outcome, strategy.tags, profile.stage, log_extra)
            return StoryGenerationResult(stories=list(outcome), outcome="ok", strategy=strategy.name)

        return StoryGenerationResult(outcome="no-search-results")

    async def generate_overview(
        self,
        profile_id: str,
        path_rank: Optional[int] = None,
        path_label: Optional[str] = None,
    ) -> Overview:
        profile = await self._load_profile(profile_id)
        rank = resolve_path(path_rank, path_label).rank
        log_extra = self._log_extra(profile_id, rank)

        if (
            not self.config.has_search_key
            or not self.config.has_llm_key
            or self.search is None
            or self.llm_client is None
        ):
            logger.warning(
                "Overview missing API keys, using static text",
                extra={**log_extra, "step": "no_keys", "outcome": "static"},
            )
            return Overview(STATIC_OVERVIEW_UNAVAILABLE, "static")

        results, relevant = await self._search_relevant(profile, rank, path_label, OVERVIEW_SEARCH_LIMIT)
        if not results:
            logger.warning(
                "Overview has no web search results, using static text",
                extra={**log_extra, "step": "search", "outcome": "static"},
            )
            return Overview(STATIC_OVERVIEW_UNAVAILABLE, "static")
        if not relevant:
            logger.warning(
                "Overview has no relevant web search results after filtering",
                extra={**log_extra, "step": "filter", "outcome": "static"},
            )
            return Overview(STATIC_OVERVIEW_NO_RELEVANT, "static")

        top = relevant[:MAX_OVERVIEW_RESULTS]
        text = await generate_overview_with_llm(
            profile,
            top,
            client=self.llm_client,
            model=self.config.llm_model,
            path_rank=rank,
            path_label=path_label,
        )
        if text:
            return Overview(text, "ai")

        logger.warning(
            "LLM overview unavailable, using template fallback",
            extra={**log_extra, "step": "overview", "outcome": "fallback"},
        )
        return Overview(build_fallback_overview(profile, top, rank, path_label), "fallback")
