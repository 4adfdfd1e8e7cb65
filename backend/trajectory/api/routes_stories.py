from uuid import uuid4
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..core.db import get_db
from ..repositories import CaseStudyLog, ProfileNotFound, ProfileStore
from ..schemas.trajectory import OverviewOut, OverviewSectionOut, StoriesOut, StoryOut
from ..services.orchestrator import PipelineConfig, StoryPipeline
from ..services.overview import split_overview_sections

router = APIRouter(tags=["stories"])

logger = logging.getLogger(__name__)


def get_pipeline_config() -> PipelineConfig:
    return PipelineConfig.from_settings(get_settings())


def get_story_pipeline(
    db: Session = Depends(get_db),
    config: PipelineConfig = Depends(get_pipeline_config),
) -> StoryPipeline:
    # One correlation ID per request so every pipeline log line can be traced
    return StoryPipeline(
        config=config,
        profiles=ProfileStore(db),
        case_studies=CaseStudyLog(db),
        request_id=str(uuid4()),
    )


@router.get("/profiles/{profile_id}/stories", response_model=StoriesOut)
async def get_stories(
    profile_id: str,
    path_rank: int | None = Query(default=None, ge=1, le=3),
    path_label: str | None = Query(default=None, max_length=200),
    pipeline: StoryPipeline = Depends(get_story_pipeline),
):
    try:
        result = await pipeline.generate_stories(profile_id, path_rank=path_rank, path_label=path_label)
    except ProfileNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception(
            "Story generation failed for profile %s: %s", profile_id, e,
            extra={"profile_id": profile_id, "request_id": pipeline.request_id},
        )
        raise HTTPException(status_code=500, detail="Failed to generate stories")

    return StoriesOut(
        stories=[StoryOut.model_validate(s) for s in result.stories],
        outcome=result.outcome,
        strategy=result.strategy,
    )


@router.get("/profiles/{profile_id}/overview", response_model=OverviewOut)
async def get_overview(
    profile_id: str,
    path_rank: int | None = Query(default=None, ge=1, le=3),
    path_label: str | None = Query(default=None, max_length=200),
    pipeline: StoryPipeline = Depends(get_story_pipeline),
):
    try:
        overview = await pipeline.generate_overview(profile_id, path_rank=path_rank, path_label=path_label)
    except ProfileNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception(
            "Overview generation failed for profile %s: %s", profile_id, e,
            extra={"profile_id": profile_id, "request_id": pipeline.request_id},
        )
        raise HTTPException(status_code=500, detail="Failed to generate overview")

    return OverviewOut(
        overview=overview.overview,
        source=overview.source,
        sections=[
            OverviewSectionOut.model_validate(s)
            for s in split_overview_sections(overview.overview)
        ],
    )
