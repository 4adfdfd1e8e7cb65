from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Literal, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.case_study import CaseStudy
from ..services.domain import Story

logger = logging.getLogger(__name__)

PersistStatus = Literal["saved", "duplicate", "failed"]

MAX_LIST_LIMIT = 100


@dataclass(frozen=True)
class PersistOutcome:
    source_url: str
    status: PersistStatus
    error: Optional[str] = None


class CaseStudyLog:
    """
    Best-effort historical log of generated stories.

    Each story is written and committed on its own so one failure cannot
    take the others down. Duplicate urls are expected and reported as
    ``duplicate`` without logging.
    """

    def __init__(self, session: Session):
        self.session = session

    def record(
        self,
        story: Story,
        tags: Optional[str] = None,
        stage: Optional[str] = None,
        fetched_at: Optional[datetime] = None,
    ) -> PersistOutcome:
        row = CaseStudy(
            source_url=story.source_url,
            source_type=story.source_type,
            title=story.title,
            short_summary=story.short_summary,
            tags=tags,
            stage=stage,
            fetched_at=fetched_at or datetime.utcnow(),
        )
        try:
            self.session.add(row)
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            return PersistOutcome(story.source_url, "duplicate")
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.warning(
                "Failed to save story to case-study log: %s",
                e,
                extra={"step": "persist"},
            )
            return PersistOutcome(story.source_url, "failed", error=str(e)[:500])
        return PersistOutcome(story.source_url, "saved")

    def persist_stories(
        self,
        stories: Iterable[Story],
        tags: Optional[str] = None,
        stage: Optional[str] = None,
    ) -> List[PersistOutcome]:
        fetched_at = datetime.utcnow()
        return [self.record(s, tags=tags, stage=stage, fetched_at=fetched_at) for s in stories]

    def create_manual(self, fields: Dict[str, Any]) -> CaseStudy:
        """
        Insert an operator-supplied case study.

        Unlike ``record`` this propagates ``IntegrityError`` so the caller
        can report the duplicate url.
        """
        row = CaseStudy(fetched_at=datetime.utcnow(), **fields)
        self.session.add(row)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise
        self.session.refresh(row)
        return row

    def list_recent(
        self,
        role_type: Optional[str] = None,
        stage: Optional[str] = None,
        limit: int = 20,
    ) -> List[CaseStudy]:
        # Hard cap to avoid unbounded scans
        safe_limit = max(1, min(limit, MAX_LIST_LIMIT))

        query = self.session.query(CaseStudy)
        if role_type:
            query = query.filter(CaseStudy.role_type == role_type)
        if stage:
            query = query.filter(CaseStudy.stage == stage)

        return (
            query.order_by(CaseStudy.fetched_at.desc(), CaseStudy.created_at.desc())
            .limit(safe_limit)
            .all()
        )
