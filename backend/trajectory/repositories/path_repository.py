from __future__ import annotations

from typing import Any, Dict, Iterable, List

from sqlalchemy.orm import Session

from ..models.path_selection import UserPathSelection


class PathSelectionStore:
    """
    Path selections are regenerated wholesale: delete everything for the
    profile, then create the new set. There is no partial update.
    """

    def __init__(self, session: Session):
        self.session = session

    def delete_all_for_profile(self, profile_id: str) -> int:
        deleted = (
            self.session.query(UserPathSelection)
            .filter(UserPathSelection.user_profile_id == profile_id)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted

    def create_many(self, paths: Iterable[Dict[str, Any]]) -> List[UserPathSelection]:
        rows = [UserPathSelection(**p) for p in paths]
        self.session.add_all(rows)
        self.session.commit()
        for row in rows:
            self.session.refresh(row)
        return rows

    def list_for_profile(self, profile_id: str) -> List[UserPathSelection]:
        return (
            self.session.query(UserPathSelection)
            .filter(UserPathSelection.user_profile_id == profile_id)
            .order_by(UserPathSelection.rank.asc())
            .all()
        )
