"""Job listing endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_cv_storage, require_authenticated_user
from api.schemas.common import MAX_BIGINT, MessageResponse
from api.schemas.jobs import (
    JobCreate,
    JobEnvelope,
    JobResponse,
    JobStatusDecision,
    JobUpdate,
)
from api.services import jobs as job_service
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import Ability, require_ability
from core.storage.local import LocalStorage
from database.engine import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=list[JobResponse], summary="List job listings")
async def list_jobs(
    user: CurrentUser = Depends(require_ability(Ability.JOB_LIST)),
    db: AsyncSession = Depends(get_db),
):
    """Admins see every listing; everyone else sees open listings."""
    return await job_service.list_jobs(db, user)


@router.post(
    "",
    response_model=JobEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Post a job listing",
)
async def create_job(
    payload: JobCreate,
    user: CurrentUser = Depends(require_ability(Ability.JOB_CREATE)),
    db: AsyncSession = Depends(get_db),
):
    """
    Post a listing. It starts as ``pending`` until an admin accepts it.

    - **skills**, **benefits**, **categories**: catalog ids; unknown ids are
      created when catalog auto-creation is enabled
    """
    job = await job_service.create_job(db, user, payload)
    return JobEnvelope(message="Job listing created successfully", job=JobResponse.model_validate(job))


@router.get("/{job_id}", response_model=JobResponse, summary="Show a job listing")
async def show_job(
    job_id: Annotated[int, Path(le=MAX_BIGINT)],
    user: CurrentUser = Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await job_service.show_job(db, user, job_id)


@router.put("/{job_id}", response_model=JobEnvelope, summary="Update a job listing")
async def update_job(
    job_id: Annotated[int, Path(le=MAX_BIGINT)],
    payload: JobUpdate,
    user: CurrentUser = Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    job = await job_service.update_job(db, user, job_id, payload)
    return JobEnvelope(message="Job listing updated successfully", job=JobResponse.model_validate(job))


@router.delete("/{job_id}", response_model=MessageResponse, summary="Delete a job listing")
async def delete_job(
    job_id: Annotated[int, Path(le=MAX_BIGINT)],
    user: CurrentUser = Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
    storage: LocalStorage = Depends(get_cv_storage),
):
    await job_service.delete_job(db, storage, user, job_id)
    return MessageResponse(message="Job listing deleted successfully")


@router.patch(
    "/{job_id}/accept-reject",
    response_model=JobEnvelope,
    summary="Accept or reject a pending listing",
)
async def accept_reject_job(
    job_id: Annotated[int, Path(le=MAX_BIGINT)],
    payload: JobStatusDecision,
    user: CurrentUser = Depends(require_ability(Ability.JOB_ACCEPT_REJECT)),
    db: AsyncSession = Depends(get_db),
):
    """``accepted`` opens the listing, ``rejected`` closes it."""
    job = await job_service.decide_job(db, user, job_id, payload.status)
    return JobEnvelope(
        message=f"Job {payload.status} successfully.",
        job=JobResponse.model_validate(job),
    )
