"""
Shared test data for the story and overview pipelines.

Canned search results, LLM payloads and small fakes for the two external
providers (web search and the LLM client).
"""
import json
from types import SimpleNamespace
from typing import List, Optional
from unittest.mock import MagicMock

from trajectory.services.connectors.base import BaseSearchConnector
from trajectory.services.domain import ProfileContext, RawSearchResult


SALES_PROFILE = ProfileContext(
    current_status="Business student",
    interests="sales, business development",
    timeline="6 months",
    stage="Student",
)

QUANTUM_PROFILE = ProfileContext(
    current_status="Physics graduate",
    interests="quantum computing, research",
    timeline="1 year",
    stage="NewGrad",
)


def make_results(count: int, prefix: str = "Sales career story") -> List[RawSearchResult]:
    """Results that all pass the relevance filter for SALES_PROFILE."""
    return [
        RawSearchResult(
            title=f"{prefix} {i}",
            url=f"https://stories.example.org/post-{i}",
            snippet=f"How one student landed a sales job, part {i}.",
        )
        for i in range(count)
    ]


HANDBOOK_RESULT = RawSearchResult(
    title="Student-Parent Handbook 2024 policies",
    url="https://district.example.edu/handbook.pdf",
    snippet="Attendance, dress code and career center hours.",
)

PRESS_RELEASE_RESULT = RawSearchResult(
    title="Company announces sales growth in press release",
    url="https://news.example.com/pr",
    snippet="Quarterly business results.",
)

QUANTUM_RESULT = RawSearchResult(
    title="Quantum computing careers explained",
    url="https://physics.example.com/quantum-jobs",
    snippet="What a career in quantum research looks like.",
)

UNRELATED_RESULT = RawSearchResult(
    title="Best pancake recipes",
    url="https://food.example.com/pancakes",
    snippet="Fluffy and easy.",
)

VIDEO_RESULT = RawSearchResult(
    title="My first year in sales",
    url="https://www.youtube.com/watch?v=abc123",
    snippet="A vlog about starting as an SDR.",
)

LINKEDIN_RESULT = RawSearchResult(
    title="From barista to account executive",
    url="https://www.linkedin.com/pulse/barista-to-ae",
    snippet="A career switch story.",
)


def story_payload(*indexes: int) -> str:
    return json.dumps(
        {
            "stories": [
                {
                    "index": i,
                    "shortSummary": f"Summary for result {i}.",
                    "whyItMatches": f"Result {i} fits a sales student.",
                }
                for i in indexes
            ]
        }
    )


TAVILY_RESPONSE = {
    "query": "career story",
    "results": [
        {
            "title": "How I became an SDR",
            "url": "https://blog.example.com/sdr",
            "content": "Notes from my first sales job.",
            "score": 0.91,
        },
        {
            "title": "Internship to account executive",
            "url": "https://www.youtube.com/watch?v=xyz",
            "content": "x" * 500,
            "score": 0.85,
        },
        {
            "title": "Missing url entry",
            "content": "dropped",
        },
    ],
}


class FakeSearchConnector(BaseSearchConnector):
    """Records every query and returns a fixed result list."""

    name = "fake"

    def __init__(self, results: Optional[List[RawSearchResult]] = None, honor_limit: bool = True):
        self.results = list(results or [])
        self.honor_limit = honor_limit
        self.calls = []

    async def search(self, query: str, limit: int = 8) -> List[RawSearchResult]:
        self.calls.append((query, limit))
        if not self.honor_limit:
            return list(self.results)
        return self.results[:limit]


def make_llm_client(content: Optional[str] = None, error: Optional[Exception] = None, finish_reason: str = "stop"):
    """MagicMock shaped like an OpenAI client's ``chat.completions.create``."""
    client = MagicMock()
    if error is not None:
        client.chat.completions.create.side_effect = error
    else:
        client.chat.completions.create.return_value = SimpleNamespace(
            choices=[
                SimpleNamespace(
                    message=SimpleNamespace(content=content),
                    finish_reason=finish_reason,
                )
            ]
        )
    return client
