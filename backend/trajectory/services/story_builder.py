from __future__ import annotations

from typing import Iterable, List, Optional

from .domain import ProfileContext, RawSearchResult, Story, infer_source_type
from .paths import display_label, resolve_path

DEFAULT_STORY_TITLE = "Career story"
DEFAULT_STORY_URL = "https://example.com"
DEFAULT_STORY_SUMMARY = (
    "A real career story pulled from the web that looks similar to your situation."
)
MAX_SEARCH_SUMMARY_CHARS = 400


def build_stories_from_search_results(
    results: Iterable[RawSearchResult],
    profile: ProfileContext,
    path_rank: Optional[int] = None,
    path_label: Optional[str] = None,
) -> List[Story]:
    """
    Turn already-selected search results straight into stories, one per
    result, without any LLM involvement.
    """
    label = display_label(resolve_path(path_rank, path_label), path_label)
    why = (
        f"This story was found based on your background ({profile.current_status}), "
        f"interests ({profile.interests}), stage ({profile.stage}), "
        f'and the "{label}" path.'
    )

    stories: List[Story] = []
    for position, r in enumerate(results, start=1):
        url = r.url or DEFAULT_STORY_URL
        snippet = (r.snippet or "").strip()
        stories.append(
            Story(
                id=f"search-{position}",
                title=r.title or DEFAULT_STORY_TITLE,
                source_url=url,
                source_type=infer_source_type(url),
                short_summary=snippet[:MAX_SEARCH_SUMMARY_CHARS] if snippet else DEFAULT_STORY_SUMMARY,
                why_it_matches=why,
            )
        )
    return stories
