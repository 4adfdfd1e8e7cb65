import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.db import get_db
from ..repositories import CaseStudyLog
from ..schemas.trajectory import CaseStudyCreate, CaseStudyOut

router = APIRouter(tags=["case-studies"])

logger = logging.getLogger(__name__)


@router.post("/case-studies", response_model=CaseStudyOut, status_code=201)
def create_case_study(
    payload: CaseStudyCreate,
    db: Session = Depends(get_db),
):
    try:
        row = CaseStudyLog(db).create_manual(payload.model_dump())
    except IntegrityError:
        raise HTTPException(status_code=409, detail="A case study with this URL already exists")

    logger.info("Case study created", extra={"step": "create_case_study"})
    return row


@router.get("/case-studies", response_model=list[CaseStudyOut])
def list_case_studies(
    role_type: str | None = None,
    stage: str | None = None,
    limit: int = 20,
    db: Session = Depends(get_db),
):
    """
    Recent entries from the case-study log, newest first.

    Supports filtering by role type and stage; ``limit`` is clamped to 1..100.
    """
    rows = CaseStudyLog(db).list_recent(role_type=role_type, stage=stage, limit=limit)
    return [CaseStudyOut.model_validate(row) for row in rows]
