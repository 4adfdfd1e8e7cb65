from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..models.path_selection import UserPathSelection
from ..models.user_profile import UserProfile
from ..repositories import PathSelectionStore, ProfileStore

logger = logging.getLogger(__name__)


def build_path_templates(profile: UserProfile) -> List[Dict[str, Any]]:
    """
    The three ranked path archetypes, personalised with the profile fields.
    """
    stage = getattr(profile.stage, "value", profile.stage)
    return [
        {
            "user_profile_id": profile.id,
            "rank": 1,
            "ai_label": "Conventional Path",
            "ai_explanation": (
                f'Based on your background as "{profile.current_status}", this path follows '
                "a traditional trajectory in your field. It emphasizes building core skills "
                "and gaining experience through established channels."
            ),
            "target_role": "Industry Standard Role",
            "target_industry": None,
        },
        {
            "user_profile_id": profile.id,
            "rank": 2,
            "ai_label": "Project & Portfolio Heavy",
            "ai_explanation": (
                f'Given your interests in "{profile.interests}", this path focuses on building '
                "a strong portfolio of personal projects and open-source contributions to "
                "demonstrate your capabilities."
            ),
            "target_role": "Self-Directed Builder",
            "target_industry": None,
        },
        {
            "user_profile_id": profile.id,
            "rank": 3,
            "ai_label": "Unconventional / Cross-Discipline",
            "ai_explanation": (
                f'For someone at the "{stage}" stage with your timeline of "{profile.timeline}", '
                "this path explores non-traditional routes that combine multiple domains or "
                "leverage transferable skills."
            ),
            "target_role": "Hybrid Role",
            "target_industry": None,
        },
    ]


def generate_paths_for_profile(
    profile_id: str,
    profiles: ProfileStore,
    paths: PathSelectionStore,
) -> List[UserPathSelection]:
    """
    Regenerate the ranked paths for a profile: delete all, then recreate.

    Raises ``ProfileNotFound`` for an unknown profile id.
    """
    profile = profiles.require(profile_id)

    deleted = paths.delete_all_for_profile(profile.id)
    created = paths.create_many(build_path_templates(profile))

    logger.info(
        "Regenerated %s paths (replaced %s)",
        len(created),
        deleted,
        extra={"profile_id": profile.id, "step": "generate_paths"},
    )
    return created
