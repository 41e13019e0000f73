"""Job listing API schemas."""

from datetime import date
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from api.schemas.common import MAX_BIGINT, CatalogItem, TimestampMixin
from database.models.jobs import ExperienceLevel, JobStatus, WorkType

SALARY_RANGE_MESSAGE = "The salary to field must be greater than salary from."


def _dedupe_ids(v: Optional[list[int]]) -> Optional[list[int]]:
    if v is None:
        return None
    seen: list[int] = []
    for item in v:
        if not 1 <= item <= MAX_BIGINT:
            raise ValueError("Ids must be positive integers within range.")
        if item not in seen:
            seen.append(item)
    return seen


class JobCreate(BaseModel):
    """Schema for posting a job listing."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    deadline: date
    experience_level: ExperienceLevel
    salary_from: int = Field(..., ge=0, le=MAX_BIGINT)
    salary_to: int = Field(..., ge=0, le=MAX_BIGINT)
    work_type: WorkType
    location_id: int = Field(..., ge=1, le=MAX_BIGINT)
    skills: Optional[list[int]] = Field(None, description="Skill ids; unknown ids may be created")
    benefits: Optional[list[int]] = Field(None, description="Benefit ids; unknown ids may be created")
    categories: Optional[list[int]] = Field(None, description="Category ids; unknown ids may be created")

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("salary_to")
    @classmethod
    def salary_range(cls, v: int, info: ValidationInfo) -> int:
        """salary_to must exceed salary_from."""
        salary_from = info.data.get("salary_from")
        if salary_from is not None and v <= salary_from:
            raise ValueError(SALARY_RANGE_MESSAGE)
        return v

    @field_validator("skills", "benefits", "categories")
    @classmethod
    def dedupe_ids(cls, v: Optional[list[int]]) -> Optional[list[int]]:
        return _dedupe_ids(v)


class JobUpdate(BaseModel):
    """
    Schema for updating a job listing. Every field is optional; the salary
    range is checked against the stored values by the service.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    deadline: Optional[date] = None
    experience_level: Optional[ExperienceLevel] = None
    salary_from: Optional[int] = Field(None, ge=0, le=MAX_BIGINT)
    salary_to: Optional[int] = Field(None, ge=0, le=MAX_BIGINT)
    work_type: Optional[WorkType] = None
    location_id: Optional[int] = Field(None, ge=1, le=MAX_BIGINT)
    skills: Optional[list[int]] = None
    benefits: Optional[list[int]] = None
    categories: Optional[list[int]] = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("skills", "benefits", "categories")
    @classmethod
    def dedupe_ids(cls, v: Optional[list[int]]) -> Optional[list[int]]:
        return _dedupe_ids(v)


class JobStatusDecision(BaseModel):
    """Admin decision on a pending listing."""

    status: Literal["accepted", "rejected"]


class JobResponse(TimestampMixin):
    """Schema for a job listing."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    description: str
    experience_level: ExperienceLevel
    salary_from: int
    salary_to: int
    work_type: WorkType
    status: JobStatus
    deadline: date
    location: CatalogItem
    employer_id: int
    number_of_applications: int
    skills: list[CatalogItem] = []
    benefits: list[CatalogItem] = []
    categories: list[CatalogItem] = []


class JobEnvelope(BaseModel):
    """A message together with the affected listing."""

    message: str
    job: JobResponse
