"""
Career path archetypes and the search query built for each of them.

Paths are ranked 1-3:

1. Conventional (internships, entry-level roles, structured programs)
2. Project & Portfolio Heavy (self-directed builds)
3. Unconventional / Cross-Discipline (hybrid, non-linear moves)
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from .domain import ProfileContext


@dataclass(frozen=True)
class PathKind:
    rank: int
    label: str
    query_modifiers: Tuple[str, ...]
    keywords: Tuple[str, ...]
    overview_hint: str
    overview_focus: str
    fallback_actions: Tuple[str, ...]


CONVENTIONAL = PathKind(
    rank=1,
    label="Conventional",
    query_modifiers=(
        "traditional career path",
        "industry-standard role",
        "entry level job",
        "internship route",
    ),
    keywords=(
        "internship",
        "co-op",
        "entry-level sales",
        "business development",
        "student",
        "early career",
    ),
    overview_hint=(
        "Focus mainly on conventional, structured routes like internships, "
        "entry-level roles, and well-defined corporate programs."
    ),
    overview_focus="structured routes like internships, entry-level roles, and well-defined programs",
    fallback_actions=(
        "search for entry-level roles and internships in your target field",
        "build relevant skills through courses or side projects",
        "reach out to professionals for informational conversations",
        "apply to structured programs that match your timeline",
    ),
)

PROJECT_PORTFOLIO = PathKind(
    rank=2,
    label="Project & Portfolio Heavy",
    query_modifiers=(
        "portfolio projects",
        "self-directed projects",
        "open-source contributions",
        "building side projects",
    ),
    keywords=(
        "student portfolio",
        "portfolio projects",
        "case study",
        "self-directed project",
        "sales side project",
    ),
    overview_hint=(
        "Focus mainly on self-directed projects and portfolio pieces. Talk about "
        "building real artifacts like: a small outbound sales campaign, a mini CRM "
        "pipeline in a free tool, a case study about helping a student club or small "
        "business improve their outreach, or a simple Notion/Google Sheet tracking "
        "prospects and follow-ups. Internships can be mentioned briefly, but the core "
        "of this path is what they build themselves and can show as a portfolio."
    ),
    overview_focus="building real projects and portfolio pieces you can showcase",
    fallback_actions=(
        "pick an industry and design a small sales project",
        "build a repeatable outreach script",
        "create a simple CRM or tracking system",
        "turn your work into portfolio pieces or case studies",
    ),
)

UNCONVENTIONAL = PathKind(
    rank=3,
    label="Unconventional / Cross-Discipline",
    query_modifiers=(
        "unconventional career path",
        "career switch story",
        "nonlinear career",
        "hybrid role combining multiple fields",
    ),
    keywords=(
        "career switch",
        "nonlinear career",
        "hybrid role",
        "cross-disciplinary",
        "unconventional path",
    ),
    overview_hint=(
        "Focus on unconventional or cross-discipline paths, creative combinations "
        "of skills, and non-linear moves."
    ),
    overview_focus="creative combinations of skills and non-linear career moves",
    fallback_actions=(
        "explore hybrid roles that combine multiple fields",
        "reach out to people in unconventional career paths",
        "build projects that showcase cross-disciplinary skills",
        "look for opportunities that value your unique combination of interests",
    ),
)

PATHS_BY_RANK = {p.rank: p for p in (CONVENTIONAL, PROJECT_PORTFOLIO, UNCONVENTIONAL)}

_UNCONVENTIONAL_LABEL = re.compile(r"unconventional|cross-?discipline", re.IGNORECASE)
_PROJECT_LABEL = re.compile(r"project", re.IGNORECASE)
_CONVENTIONAL_LABEL = re.compile(r"conventional", re.IGNORECASE)


def resolve_path(path_rank: Optional[int] = None, path_label: Optional[str] = None) -> PathKind:
    """
    An explicit rank wins; otherwise the free-text label is matched.

    "unconventional" contains "conventional", so the more specific patterns
    are checked first.
    """
    if path_rank in PATHS_BY_RANK:
        return PATHS_BY_RANK[path_rank]

    label = path_label or ""
    if _UNCONVENTIONAL_LABEL.search(label):
        return UNCONVENTIONAL
    if _PROJECT_LABEL.search(label):
        return PROJECT_PORTFOLIO
    if _CONVENTIONAL_LABEL.search(label):
        return CONVENTIONAL
    return CONVENTIONAL


def display_label(path: PathKind, path_label: Optional[str] = None) -> str:
    return (path_label or "").strip() or path.label


def build_search_query(
    profile: ProfileContext,
    path_rank: Optional[int] = None,
    path_label: Optional[str] = None,
) -> str:
    path = resolve_path(path_rank, path_label)

    parts = [
        "career story",
        *path.query_modifiers,
        *path.keywords,
        profile.current_status,
        profile.interests,
        f"stage: {profile.stage}",
        f"timeline: {profile.timeline}" if profile.timeline else None,
        f"details: {profile.extra_info}" if profile.extra_info else None,
    ]
    return " ".join(p for p in parts if p)
