from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

from ..models.user_profile import CareerStage

MAX_SHORT_FIELD_LEN = 200
MAX_LONG_FIELD_LEN = 4000
MAX_URL_LEN = 2048


class ProfileCreate(BaseModel):
    name: str | None = None
    current_status: str
    interests: str
    location: str | None = None
    timeline: str
    stage: CareerStage
    extra_info: str | None = None

    @field_validator("name", "location", "extra_info", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if v is None:
            return None
        if isinstance(v, str):
            stripped = v.strip()
            return stripped or None
        return v

    @field_validator("current_status", "timeline")
    @classmethod
    def validate_short_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        if len(v) > MAX_SHORT_FIELD_LEN:
            raise ValueError(f"must be at most {MAX_SHORT_FIELD_LEN} characters")
        return v

    @field_validator("interests")
    @classmethod
    def validate_interests(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("interests must not be empty")
        if len(v) > MAX_LONG_FIELD_LEN:
            raise ValueError(
                f"interests is too long; maximum length is {MAX_LONG_FIELD_LEN} characters"
            )
        return v

    @field_validator("extra_info")
    @classmethod
    def validate_extra_info(cls, v: str | None) -> str | None:
        if v is not None and len(v) > MAX_LONG_FIELD_LEN:
            raise ValueError(
                f"extra_info is too long; maximum length is {MAX_LONG_FIELD_LEN} characters"
            )
        return v


class ProfileOut(BaseModel):
    id: str
    current_status: str
    stage: CareerStage

    model_config = ConfigDict(from_attributes=True)


class PathSelectionOut(BaseModel):
    id: str
    rank: int
    ai_label: str
    ai_explanation: str
    target_role: str | None = None
    target_industry: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileDetailOut(BaseModel):
    id: str
    name: str | None = None
    current_status: str
    interests: str
    location: str | None = None
    timeline: str
    stage: CareerStage
    extra_info: str | None = None
    created_at: datetime
    paths: list[PathSelectionOut] = []

    model_config = ConfigDict(from_attributes=True)


class StoryOut(BaseModel):
    id: str
    title: str
    source_url: str
    source_type: Literal["video", "article", "linkedin", "other"]
    short_summary: str
    why_it_matches: str

    model_config = ConfigDict(from_attributes=True)


class StoriesOut(BaseModel):
    stories: list[StoryOut]
    # "ok" | "no-keys" | "no-search-results" | "no-relevant-results"
    outcome: str
    strategy: str = ""


class OverviewSectionOut(BaseModel):
    label: str | None = None
    text: str

    model_config = ConfigDict(from_attributes=True)


class OverviewOut(BaseModel):
    overview: str
    source: Literal["ai", "fallback", "static"]
    sections: list[OverviewSectionOut] = []


class CaseStudyCreate(BaseModel):
    source_url: str
    source_type: Literal["video", "article", "linkedin", "other"] = "article"
    title: str
    role_type: str | None = None
    stage: str | None = None
    tags: str | None = None
    short_summary: str | None = None

    @field_validator("source_url")
    @classmethod
    def validate_source_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("source_url must be an http(s) URL")
        if len(v) > MAX_URL_LEN:
            raise ValueError("source_url is too long")
        return v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be empty")
        return v


class CaseStudyOut(BaseModel):
    id: str
    source_url: str
    source_type: str
    title: str
    role_type: str | None = None
    stage: str | None = None
    tags: str | None = None
    short_summary: str | None = None
    fetched_at: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class HealthOut(BaseModel):
    status: str = "ok"
    has_search_key: bool
    has_llm_key: bool
