"""
LLM summarisation of selected search results into personalised stories.

The model is asked for strict JSON:

    {"stories": [{"index": 0, "shortSummary": "...", "whyItMatches": "..."}]}

with one entry per *relevant* result. Partial answers are expected; each
entry is validated on its own and mapped back to the original result by
index. Anything unusable results in an empty list so the caller can fall
back to search-only stories.
"""
from __future__ import annotations

import asyncio
import json
import logging
import textwrap
from typing import Any, List, Optional, Sequence

from .domain import ProfileContext, RawSearchResult, Story, infer_source_type
from .llm import limit_llm_concurrency, strip_code_fences
from .paths import display_label, resolve_path

logger = logging.getLogger(__name__)

SUMMARY_TEMPERATURE = 0.3
SUMMARY_MAX_TOKENS = 2048


def _format_results(results: Sequence[RawSearchResult]) -> str:
    return "\n".join(
        f"{i}) Title: {r.title or 'Untitled'}\n"
        f"   URL: {r.url or ''}\n"
        f"   Snippet: {r.snippet or 'No snippet available'}\n"
        for i, r in enumerate(results)
    )


def build_summary_prompt(
    results: Sequence[RawSearchResult],
    profile: ProfileContext,
    path_label: str,
) -> str:
    extra = f"- Extra Context: {profile.extra_info}\n" if profile.extra_info else ""
    last_index = len(results) - 1

    return textwrap.dedent(
        """\
        You are a career advisor helping someone find relevant career transition stories.

        User Profile:
        - Current Status: {status}
        - Interests: {interests}
        - Timeline: {timeline}
        - Stage: {stage}
        {extra}
        Current path: {path_label}

        Here are {count} search results:

        {results}
        Your task:
        Only create stories for results that are clearly relevant to this user's situation ({status} background, interest in {interests}, {stage} stage, and their {path_label} path type). If a result is mostly about school catalogs, generic college handbooks, or unrelated technical fields, IGNORE it completely and do not create a story for it.

        For each RELEVANT result (indexed 0 to {last_index}), write:
        1. shortSummary: 2-3 sentences summarizing this specific article/video/story
        2. whyItMatches: 1-2 sentences explaining why this story is relevant to THIS user profile and THIS path

        Return between 2 and 5 stories. If fewer than 2 results are relevant, just return stories for those and ignore the rest.

        Return ONLY valid JSON in this exact shape (no markdown, no code fences, no commentary):
        {{
          "stories": [
            {{
              "index": 0,
              "shortSummary": "2-3 sentence summary of this specific link",
              "whyItMatches": "1-2 sentences tailored to THIS user and THIS path"
            }}
          ]
        }}

        Make sure you return one entry per relevant result, with the index matching the result order above. Skip any irrelevant results completely.
        """
    ).format(
        status=profile.current_status,
        interests=profile.interests,
        timeline=profile.timeline,
        stage=profile.stage,
        extra=extra,
        path_label=path_label,
        count=len(results),
        results=_format_results(results),
        last_index=last_index,
    )


def parse_story_payload(raw_text: str) -> Optional[List[Any]]:
    """
    Return the raw ``stories`` list from a model response, or ``None`` when
    the text is empty, not JSON, or lacks a ``stories`` array.
    """
    json_text = strip_code_fences(raw_text)
    if not json_text:
        return None

    try:
        parsed = json.loads(json_text)
    except json.JSONDecodeError as e:
        logger.warning(
            "LLM summarize parse error: %s (preview: %r)",
            e,
            json_text[:200],
            extra={"step": "summarize"},
        )
        return None

    if not isinstance(parsed, dict) or not isinstance(parsed.get("stories"), list):
        logger.warning(
            "LLM summarize returned JSON without 'stories' array",
            extra={"step": "summarize"},
        )
        return None

    return parsed["stories"]


def coerce_index(value: Any) -> Optional[int]:
    """
    Accept ints, integral floats and numeric strings; anything else is ``None``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def map_stories_to_results(
    items: Sequence[Any],
    results: Sequence[RawSearchResult],
    path_rank: int,
) -> List[Story]:
    """
    Map validated model entries back onto the original results.

    Bad entries are dropped one by one; a repeated index keeps its first entry.
    """
    stories: List[Story] = []
    seen: set[int] = set()

    for item in items:
        if not isinstance(item, dict):
            logger.warning("LLM story entry is not an object, skipping", extra={"step": "summarize"})
            continue

        raw_index = item.get("index")
        index = coerce_index(raw_index)
        if index is None or not 0 <= index < len(results):
            logger.warning("LLM story index %r out of range, skipping", raw_index, extra={"step": "summarize"})
            continue
        if index in seen:
            continue

        r = results[index]
        if not r.url or not r.title:
            logger.warning(
                "LLM story index %s missing result URL or title, skipping",
                index,
                extra={"step": "summarize"},
            )
            continue

        summary = item.get("shortSummary")
        why = item.get("whyItMatches")
        if not isinstance(summary, str) or not summary.strip() or not isinstance(why, str) or not why.strip():
            logger.warning(
                "LLM story index %s missing summary fields, skipping",
                index,
                extra={"step": "summarize"},
            )
            continue

        seen.add(index)
        stories.append(
            Story(
                id=f"gemini-{path_rank}-{index}",
                title=r.title,
                source_url=r.url,
                source_type=infer_source_type(r.url),
                short_summary=summary.strip(),
                why_it_matches=why.strip(),
            )
        )

    return stories


async def summarize_results_with_llm(
    results: Sequence[RawSearchResult],
    profile: ProfileContext,
    client: Any,
    model: str,
    path_rank: Optional[int] = None,
    path_label: Optional[str] = None,
) -> List[Story]:
    """
    Ask the LLM for personalised summaries of ``results``.

    Returns an empty list on any transport error or unusable payload; a
    partial list when the model skipped results it judged irrelevant.
    """
    if not results:
        return []

    path = resolve_path(path_rank, path_label)
    prompt = build_summary_prompt(results, profile, display_label(path, path_label))

    logger.info(
        "LLM summarize request (%s results, prompt %s chars)",
        len(results),
        len(prompt),
        extra={"path_rank": path.rank, "step": "summarize"},
    )

    def _call_sync() -> str:
        with limit_llm_concurrency():
            resp = client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                response_format={"type": "json_object"},
                temperature=SUMMARY_TEMPERATURE,
                max_tokens=SUMMARY_MAX_TOKENS,
            )
        if not resp.choices:
            return ""
        return resp.choices[0].message.content or ""

    try:
        raw_text = await asyncio.to_thread(_call_sync)
    except Exception as e:
        logger.warning(
            "LLM summarize call failed: %s",
            e,
            extra={"path_rank": path.rank, "step": "summarize"},
        )
        return []

    if not raw_text.strip():
        logger.warning("LLM summarize returned empty response", extra={"step": "summarize"})
        return []

    items = parse_story_payload(raw_text)
    if items is None:
        return []

    stories = map_stories_to_results(items, results, path.rank)
    logger.info(
        "Parsed %s LLM stories",
        len(stories),
        extra={"path_rank": path.rank, "step": "summarize"},
    )
    return stories
