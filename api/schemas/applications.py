"""Application API schemas."""

from datetime import datetime
from typing import Any, Union
from pydantic import BaseModel, ConfigDict, Field

from api.schemas.common import TimestampMixin
from database.models.applications import ApplicationStatus, ApplicationType
from database.models.jobs import JobStatus


class CVPayload(BaseModel):
    cv: str | None = Field(..., description="Stored CV path relative to CV storage")


class FormPayload(BaseModel):
    name: str
    email: str
    phone_number: str


class ApplicationResponse(TimestampMixin):
    """Full representation, shown to admins and on show."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    type: ApplicationType
    status: ApplicationStatus
    job_id: int
    candidate_id: int
    payload: Union[CVPayload, FormPayload]


class ApplicationJobSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    status: JobStatus


class ApplicationSummary(BaseModel):
    """What a candidate sees when listing their own applications."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    type: ApplicationType
    status: ApplicationStatus
    applied_at: datetime = Field(validation_alias="created_at")
    job: ApplicationJobSummary


class ApplicationEnvelope(BaseModel):
    message: str
    application: ApplicationResponse


def serialize_application(application: Any, full: bool) -> dict[str, Any]:
    """Representation of an application for the given visibility."""
    schema = ApplicationResponse if full else ApplicationSummary
    return schema.model_validate(application).model_dump(mode="json")
