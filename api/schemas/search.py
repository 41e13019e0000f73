"""Search and autocomplete schemas."""

from datetime import date
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from api.schemas.common import MAX_BIGINT
from database.models.jobs import ExperienceLevel, JobStatus, WorkType


class AutocompleteType(str, Enum):
    """Catalog searched by autocomplete; singular and plural both accepted."""

    SKILL = "skill"
    SKILLS = "skills"
    LOCATION = "location"
    LOCATIONS = "locations"
    CATEGORY = "category"
    CATEGORIES = "categories"
    BENEFIT = "benefit"
    BENEFITS = "benefits"

    @property
    def catalog(self) -> str:
        """Singular catalog name."""
        return {
            "skills": "skill",
            "locations": "location",
            "categories": "category",
            "benefits": "benefit",
        }.get(self.value, self.value)


class SearchParams(BaseModel):
    """
    Job search filters. All are optional and combine with AND; blank
    strings are treated as absent.
    """

    query: Optional[str] = Field(None, max_length=255, description="Substring of title or description")
    location: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = Field(None, max_length=255)
    skill: Optional[str] = Field(None, max_length=255)
    benefit: Optional[str] = Field(None, max_length=255)
    experience_level: Optional[ExperienceLevel] = None
    work_type: Optional[WorkType] = None
    salary_from: Optional[int] = Field(None, ge=0, le=MAX_BIGINT, description="Minimum salary_from")
    salary_to: Optional[int] = Field(None, ge=0, le=MAX_BIGINT, description="Maximum salary_to")
    posted_after: Optional[date] = Field(None, description="Jobs created on or after this date")
    status: Optional[JobStatus] = Field(None, description="Admin only")

    @field_validator(
        "query", "location", "category", "skill", "benefit",
        "experience_level", "work_type", "salary_from", "salary_to",
        "posted_after", "status",
        mode="before",
    )
    @classmethod
    def blank_as_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v
