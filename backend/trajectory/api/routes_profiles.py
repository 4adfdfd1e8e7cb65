from uuid import uuid4
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..core.db import get_db
from ..repositories import PathSelectionStore, ProfileNotFound, ProfileStore
from ..schemas.trajectory import (
    PathSelectionOut,
    ProfileCreate,
    ProfileDetailOut,
    ProfileOut,
)
from ..services.recommendation import generate_paths_for_profile

router = APIRouter(tags=["profiles"])

logger = logging.getLogger(__name__)


@router.post("/profiles", response_model=ProfileOut, status_code=201)
def create_profile(
    payload: ProfileCreate,
    db: Session = Depends(get_db),
):
    request_id = str(uuid4())
    fields = payload.model_dump()

    profile = ProfileStore(db).create(fields)

    logger.info(
        "Profile created",
        extra={
            "request_id": request_id,
            "profile_id": profile.id,
            "step": "create_profile",
        },
    )
    return profile


@router.get("/profiles/{profile_id}", response_model=ProfileDetailOut)
def get_profile(
    profile_id: str,
    db: Session = Depends(get_db),
):
    profile = ProfileStore(db).get(profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.post("/profiles/{profile_id}/paths", response_model=list[PathSelectionOut], status_code=201)
def regenerate_paths(
    profile_id: str,
    db: Session = Depends(get_db),
):
    try:
        rows = generate_paths_for_profile(profile_id, ProfileStore(db), PathSelectionStore(db))
    except ProfileNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    return [PathSelectionOut.model_validate(row) for row in rows]


@router.get("/profiles/{profile_id}/paths", response_model=list[PathSelectionOut])
def list_paths(
    profile_id: str,
    db: Session = Depends(get_db),
):
    if not ProfileStore(db).get(profile_id):
        raise HTTPException(status_code=404, detail="Profile not found")

    rows = PathSelectionStore(db).list_for_profile(profile_id)
    return [PathSelectionOut.model_validate(row) for row in rows]
