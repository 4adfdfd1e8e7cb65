from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..models.user_profile import UserProfile


class ProfileNotFound(LookupError):
    """Raised when a profile id does not resolve to a stored profile."""

    def __init__(self, profile_id: str):
        super().__init__(f'Profile with ID "{profile_id}" not found')
        self.profile_id = profile_id


class ProfileStore:
    def __init__(self, session: Session):
        self.session = session

    def create(self, fields: Dict[str, Any]) -> UserProfile:
        profile = UserProfile(**fields)
        self.session.add(profile)
        self.session.commit()
        self.session.refresh(profile)
        return profile

    def get(self, profile_id: str) -> Optional[UserProfile]:
        return self.session.query(UserProfile).filter(UserProfile.id == profile_id).first()

    def require(self, profile_id: str) -> UserProfile:
        profile = self.get(profile_id)
        if profile is None:
            raise ProfileNotFound(profile_id)
        return profile
