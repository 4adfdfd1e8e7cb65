"""
Path overviews: a two-paragraph "Summary:" / "Next moves:" narrative.

Three tiers produce one:

- ``ai``: the LLM writes it from the profile and a few filtered results.
- ``fallback``: fixed per-path templates when the LLM call fails.
- ``static``: a fixed notice when the pipeline cannot run at all.
"""
from __future__ import annotations

import asyncio
import logging
import re
import textwrap
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from .domain import ProfileContext, RawSearchResult
from .llm import limit_llm_concurrency
from .paths import display_label, resolve_path

logger = logging.getLogger(__name__)

OVERVIEW_TEMPERATURE = 0.5
OVERVIEW_MAX_TOKENS = 1024
MAX_OVERVIEW_RESULTS = 6

STATIC_OVERVIEW_UNAVAILABLE = (
    "AI overview is temporarily unavailable for this path right now, "
    "but you can still explore the links below for real examples."
)
STATIC_OVERVIEW_NO_RELEVANT = (
    "AI overview is temporarily unavailable for this path right now because we "
    "couldn't find relevant real-world examples. Try adjusting your inputs or path "
    "and generating again."
)

_SECTION_LABELS = (
    ("summary", re.compile(r"^\s*summary\s*:\s*", re.IGNORECASE)),
    ("next_moves", re.compile(r"^\s*next moves\s*:\s*", re.IGNORECASE)),
)


def _or_unspecified(value: Optional[str]) -> str:
    return value or "not specified"


def build_overview_prompt(
    profile: ProfileContext,
    results: Sequence[RawSearchResult],
    path_rank: Optional[int] = None,
    path_label: Optional[str] = None,
) -> str:
    path = resolve_path(path_rank, path_label)
    label = display_label(path, path_label)

    results_text = "\n".join(
        f"{i}. Title: {r.title or 'Untitled'}\n"
        f"   Snippet: {r.snippet or 'No snippet available'}\n"
        f"   URL: {r.url or ''}\n"
        for i, r in enumerate(results, start=1)
    )
    extra = f"- Extra info: {profile.extra_info}\n" if profile.extra_info else ""

    status = _or_unspecified(profile.current_status)
    interests = _or_unspecified(profile.interests)
    timeline = _or_unspecified(profile.timeline)
    stage = _or_unspecified(profile.stage)

    return textwrap.dedent(
        """\
        You are a calm, practical career coach writing inside a modern career app.
        Write in simple, direct language that is easy to skim on a phone.

        User profile:
        - Current status: {status}
        - Interests: {interests}
        - Timeline: {timeline}
        - Stage: {stage}
        {extra}
        Here are {count} relevant links about this {label} path:

        {results}
        {hint}

        Write a single plain-text response (no markdown, no bullet characters like "-" or "*").

        Structure:
        - Paragraph 1 must start with "Summary:". In 2-3 short sentences, explain what this {label} path typically looks like for someone in their situation (status {status}, stage {stage}, timeline {timeline}, interests {interests}). Mention 1-2 key themes from the links only if they clearly fit.
        - Paragraph 2 must start with "Next moves:". In 3-5 concrete actions written as one flowing paragraph, tell them exactly what to do next (types of roles to search, projects to build, resources to read, or people to contact). Where useful, reference at most one link by its exact title in quotes.

        Style rules:
        - Use "you" and talk directly to the user.
        - Keep the whole answer under 170 words.
        - Sentences should be short and punchy (no walls of text).
        - No lists, no markdown, no headings beyond the "Summary:" and "Next moves:" labels.
        - Keep the tone grounded and realistic, not motivational-poster style.
        """
    ).format(
        status=status,
        interests=interests,
        timeline=timeline,
        stage=stage,
        extra=extra,
        count=len(results),
        label=label,
        results=results_text,
        hint=path.overview_hint,
    )


async def generate_overview_with_llm(
    profile: ProfileContext,
    results: Sequence[RawSearchResult],
    client: Any,
    model: str,
    path_rank: Optional[int] = None,
    path_label: Optional[str] = None,
) -> Optional[str]:
    """
    Plain-text overview from the LLM, or ``None`` when the provider errors,
    blocks the prompt, or returns no text.
    """
    path = resolve_path(path_rank, path_label)
    prompt = build_overview_prompt(profile, results[:MAX_OVERVIEW_RESULTS], path_rank, path_label)

    logger.info(
        "LLM overview request (%s results, prompt %s chars)",
        len(results),
        len(prompt),
        extra={"path_rank": path.rank, "step": "overview"},
    )

    def _call_sync():
        with limit_llm_concurrency():
            return client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                temperature=OVERVIEW_TEMPERATURE,
                max_tokens=OVERVIEW_MAX_TOKENS,
            )

    try:
        resp = await asyncio.to_thread(_call_sync)
    except Exception as e:
        logger.warning(
            "LLM overview call failed: %s",
            e,
            extra={"path_rank": path.rank, "step": "overview"},
        )
        return None

    choices = list(getattr(resp, "choices", None) or [])
    if not choices:
        logger.warning("LLM overview returned no choices", extra={"step": "overview"})
        return None

    finish_reason = getattr(choices[0], "finish_reason", None)
    if finish_reason and finish_reason != "stop":
        logger.warning(
            "LLM overview finish reason %s",
            finish_reason,
            extra={"path_rank": path.rank, "step": "overview"},
        )

    parts = [((c.message.content if c.message else None) or "").strip() for c in choices]
    combined = "\n\n".join(p for p in parts if p).strip()
    if not combined:
        logger.warning(
            "LLM overview returned empty content (finish reason %s)",
            finish_reason,
            extra={"step": "overview"},
        )
        return None

    logger.info(
        "LLM overview success (%s chars)",
        len(combined),
        extra={"path_rank": path.rank, "step": "overview"},
    )
    return combined


def build_fallback_overview(
    profile: ProfileContext,
    results: Sequence[RawSearchResult],
    path_rank: Optional[int] = None,
    path_label: Optional[str] = None,
) -> str:
    path = resolve_path(path_rank, path_label)
    label = display_label(path, path_label)

    titles = [r.title.strip() for r in results if r.title and r.title.strip()][:2]

    summary = (
        f"Summary: For someone in {profile.current_status or 'your field'} at the "
        f"{profile.stage or 'current'} stage, the {label} path typically means exploring "
        f"practical ways to apply your skills over the next {profile.timeline or 'few months'}. "
        f"This path focuses on {path.overview_focus}."
    )

    next_moves = "Next moves: " + ", ".join(path.fallback_actions[:4]) + "."
    if titles:
        next_moves += f" If you want specific examples, start with '{titles[0]}'."

    return f"{summary}\n\n{next_moves}"


@dataclass(frozen=True)
class OverviewSection:
    label: Optional[str]  # "summary", "next_moves", or None for unlabeled text
    text: str


def split_overview_sections(text: str) -> List[OverviewSection]:
    """
    Split an overview into display paragraphs.

    Paragraphs starting with "Summary:" or "Next moves:" are labelled and
    lose the prefix; anything else is kept as an unlabeled paragraph, so a
    model answer that ignored the format still renders.
    """
    sections: List[OverviewSection] = []
    for paragraph in re.split(r"\n\s*\n", text or ""):
        paragraph = paragraph.strip()
        if not paragraph:
            continue
        for label, pattern in _SECTION_LABELS:
            if pattern.match(paragraph):
                sections.append(OverviewSection(label=label, text=pattern.sub("", paragraph, count=1)))
                break
        else:
            sections.append(OverviewSection(label=None, text=paragraph))
    return sections
