"""
Transient value types shared by the story and overview pipelines.

None of these are persisted as-is; ``CaseStudy`` rows are the only
historical trace of a generated story.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

SourceType = Literal["video", "article", "linkedin", "other"]
OverviewSource = Literal["ai", "fallback", "static"]
StoryOutcome = Literal["ok", "no-keys", "no-search-results", "no-relevant-results"]

VIDEO_HOST_MARKERS = ("youtube.com", "youtu.be", "vimeo.com")
LINKEDIN_HOST_MARKER = "linkedin.com"


@dataclass(frozen=True)
class ProfileContext:
    current_status: str
    interests: str
    timeline: str
    stage: str
    extra_info: Optional[str] = None

    @classmethod
    def from_model(cls, profile) -> "ProfileContext":
        stage = profile.stage
        return cls(
            current_status=profile.current_status or "",
            interests=profile.interests or "",
            timeline=profile.timeline or "",
            stage=getattr(stage, "value", stage) or "",
            extra_info=profile.extra_info,
        )


@dataclass(frozen=True)
class RawSearchResult:
    title: str
    url: str
    snippet: Optional[str] = None


@dataclass(frozen=True)
class Story:
    id: str
    title: str
    source_url: str
    source_type: SourceType
    short_summary: str
    why_it_matches: str


@dataclass(frozen=True)
class Overview:
    overview: str
    source: OverviewSource


@dataclass(frozen=True)
class StoryGenerationResult:
    stories: list[Story] = field(default_factory=list)
    outcome: StoryOutcome = "ok"
    # Name of the strategy that produced the stories, empty when none did
    strategy: str = ""


def infer_source_type(url: str) -> SourceType:
    """
    Classify a story source purely from its URL.

    Every story builder goes through this function so the mapping is the
    same regardless of which tier produced the story.
    """
    lower = (url or "").lower()
    if any(marker in lower for marker in VIDEO_HOST_MARKERS):
        return "video"
    if LINKEDIN_HOST_MARKER in lower:
        return "linkedin"
    return "article"
