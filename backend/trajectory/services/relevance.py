"""
Relevance filtering for raw web-search results.

Each heuristic is a ``RelevanceRule``: a named predicate over the
normalised result text and the user's profile. ``reject`` rules drop a
result as soon as one matches; a surviving result is kept only if at least
one ``keep`` rule matches.

The keyword and pattern lists are hand-tuned defaults; callers can pass
their own rule tuple without touching the orchestration code.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Literal, Sequence, Tuple

from .domain import ProfileContext, RawSearchResult

RuleAction = Literal["reject", "keep"]


@dataclass(frozen=True)
class ResultText:
    title: str
    snippet: str
    url: str

    @property
    def combined(self) -> str:
        return f"{self.title} {self.snippet} {self.url}"

    @classmethod
    def from_result(cls, result: RawSearchResult) -> "ResultText":
        return cls(
            title=(result.title or "").lower(),
            snippet=(result.snippet or "").lower(),
            url=(result.url or "").lower(),
        )


@dataclass(frozen=True)
class RelevanceRule:
    name: str
    action: RuleAction
    predicate: Callable[[ResultText, ProfileContext], bool]

    def matches(self, text: ResultText, profile: ProfileContext) -> bool:
        return self.predicate(text, profile)


INSTITUTIONAL_NOISE_PATTERNS: Tuple[re.Pattern, ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"student catalog",
        r"\bcatalog\b",
        r"handbook",
        r"version ii",
        r"technical college",
        r"student-parent handbook",
        r"policies and procedures",
        r"press release",
        r"global releases",
        r"culinary institute",
    )
)

OFF_TOPIC_TECH_MARKERS = re.compile(
    r"quantum|machine learning|deep learning|ai model|neural network",
    re.IGNORECASE,
)

USER_TECH_INTEREST = re.compile(
    r"quantum|\bai\b|artificial intelligence|machine learning",
    re.IGNORECASE,
)

CAREER_KEYWORDS: Tuple[str, ...] = (
    "career",
    "job",
    "jobs",
    "entry level",
    "internship",
    "internships",
    "sales",
    "business",
    "business development",
    "account executive",
    "sales development representative",
    "bdr",
    "sdr",
)

MIN_INTEREST_TOKEN_LEN = 3


def interest_tokens(profile: ProfileContext) -> List[str]:
    return [t for t in re.split(r"[,\s]+", (profile.interests or "").lower()) if t]


def _is_institutional_noise(text: ResultText, profile: ProfileContext) -> bool:
    combined = text.combined
    return any(p.search(combined) for p in INSTITUTIONAL_NOISE_PATTERNS)


def _is_off_topic_tech(text: ResultText, profile: ProfileContext) -> bool:
    if not OFF_TOPIC_TECH_MARKERS.search(text.combined):
        return False
    user_mentions_tech = bool(
        USER_TECH_INTEREST.search(profile.interests or "")
        or USER_TECH_INTEREST.search(profile.extra_info or "")
    )
    return not user_mentions_tech


def _has_career_keyword(text: ResultText, profile: ProfileContext) -> bool:
    combined = text.combined
    return any(kw in combined for kw in CAREER_KEYWORDS)


def _shares_interest_token(text: ResultText, profile: ProfileContext) -> bool:
    combined = text.combined
    return any(
        len(tok) >= MIN_INTEREST_TOKEN_LEN and tok in combined
        for tok in interest_tokens(profile)
    )


INSTITUTIONAL_NOISE = RelevanceRule("institutional_noise", "reject", _is_institutional_noise)
OFF_TOPIC_TECH = RelevanceRule("off_topic_tech", "reject", _is_off_topic_tech)
CAREER_KEYWORD = RelevanceRule("career_keyword", "keep", _has_career_keyword)
INTEREST_OVERLAP = RelevanceRule("interest_overlap", "keep", _shares_interest_token)

DEFAULT_RULES: Tuple[RelevanceRule, ...] = (
    INSTITUTIONAL_NOISE,
    OFF_TOPIC_TECH,
    CAREER_KEYWORD,
    INTEREST_OVERLAP,
)


def is_relevant(
    result: RawSearchResult,
    profile: ProfileContext,
    rules: Sequence[RelevanceRule] = DEFAULT_RULES,
) -> bool:
    text = ResultText.from_result(result)

    if any(r.matches(text, profile) for r in rules if r.action == "reject"):
        return False

    return any(r.matches(text, profile) for r in rules if r.action == "keep")


def filter_results_for_relevance(
    results: Iterable[RawSearchResult],
    profile: ProfileContext,
    rules: Sequence[RelevanceRule] = DEFAULT_RULES,
) -> List[RawSearchResult]:
    """
    Drop school catalogs, handbooks, press releases and off-topic technical
    pages; keep results that look like career content or mention one of the
    user's interests. Input order is preserved.
    """
    return [r for r in results if is_relevant(r, profile, rules)]
