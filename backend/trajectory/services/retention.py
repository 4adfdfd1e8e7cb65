from __future__ import annotations

from datetime import datetime, timedelta
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..core.celery_app import celery_app
from ..core.config import get_settings
from ..core.db import SessionLocal
from ..models.case_study import CaseStudy

logger = logging.getLogger(__name__)
settings = get_settings()


def delete_expired_case_studies(db: Session, retention_days: int, now: datetime | None = None) -> int:
    """
    Delete case-study rows older than ``retention_days``.

    Age is taken from ``fetched_at``, or ``created_at`` for rows that were
    never stamped with a fetch time.
    """
    cutoff = (now or datetime.utcnow()) - timedelta(days=retention_days)
    deleted = (
        db.query(CaseStudy)
        .filter(
            or_(
                CaseStudy.fetched_at < cutoff,
                (CaseStudy.fetched_at.is_(None)) & (CaseStudy.created_at < cutoff),
            )
        )
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


@celery_app.task(name="trajectory.services.retention.cleanup_expired_case_studies")
def cleanup_expired_case_studies() -> int:
    """
    Periodic task enforcing the case-study retention policy
    (CASE_STUDY_RETENTION_DAYS). Profiles and paths are kept indefinitely.
    """
    db: Session = SessionLocal()
    try:
        deleted = delete_expired_case_studies(db, settings.CASE_STUDY_RETENTION_DAYS)

        if not deleted:
            logger.info(
                "No expired case studies found for cleanup",
                extra={"step": "retention"},
            )
            return 0

        logger.info(
            "Deleted %s expired case studies",
            deleted,
            extra={"step": "retention"},
        )
        return deleted
    except Exception:
        db.rollback()
        logger.exception(
            "Error during cleanup_expired_case_studies",
            extra={"step": "retention"},
        )
        raise
    finally:
        db.close()
