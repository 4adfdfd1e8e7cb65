"""
Thin data-access layer over the SQLAlchemy session.

The pipeline only talks to these stores, never to the session directly.
"""

from .profile_repository import ProfileStore, ProfileNotFound
from .path_repository import PathSelectionStore
from .case_study_repository import CaseStudyLog, PersistOutcome

__all__ = [
    "ProfileStore",
    "ProfileNotFound",
    "PathSelectionStore",
    "CaseStudyLog",
    "PersistOutcome",
]
