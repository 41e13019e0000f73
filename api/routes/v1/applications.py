"""Application endpoints."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_cv_storage, require_authenticated_user
from api.schemas.applications import (
    ApplicationEnvelope,
    ApplicationResponse,
    serialize_application,
)
from api.schemas.common import MAX_BIGINT, MessageResponse
from api.services import applications as application_service
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import Ability, require_ability
from core.storage.local import LocalStorage
from database.engine import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])


@router.get("", summary="List applications")
async def list_applications(
    user: CurrentUser = Depends(require_ability(Ability.APPLICATION_LIST)),
    db: AsyncSession = Depends(get_db),
) -> list[dict]:
    """
    Admins get every application in full. Candidates get a summary of
    their own: id, type, status, applied_at and the job's id, title,
    slug and status.
    """
    applications, full = await application_service.list_applications(db, user)
    return [serialize_application(application, full) for application in applications]


@router.post("", response_model=ApplicationEnvelope, summary="Apply for a job")
async def create_application(
    type: Optional[str] = Form(None, description="cv or form"),
    job_id: Optional[int] = Form(None, le=MAX_BIGINT),
    cv: Optional[UploadFile] = File(None, description="doc, pdf or docx; required for type cv"),
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone_number: Optional[str] = Form(None),
    user: CurrentUser = Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
    storage: LocalStorage = Depends(get_cv_storage),
):
    application = await application_service.create_application(
        db,
        storage,
        user,
        type=type,
        job_id=job_id,
        cv=cv,
        name=name,
        email=email,
        phone_number=phone_number,
    )
    return ApplicationEnvelope(
        message="application was submitted successfully",
        application=ApplicationResponse.model_validate(application),
    )


@router.get("/{application_id}", response_model=ApplicationResponse, summary="Show an application")
async def show_application(
    application_id: Annotated[int, Path(le=MAX_BIGINT)],
    user: CurrentUser = Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    application = await application_service.show_application(db, user, application_id)
    return ApplicationResponse.model_validate(application)


@router.delete("/{application_id}", response_model=MessageResponse, summary="Withdraw an application")
async def delete_application(
    application_id: Annotated[int, Path(le=MAX_BIGINT)],
    user: CurrentUser = Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
    storage: LocalStorage = Depends(get_cv_storage),
):
    await application_service.delete_application(db, storage, user, application_id)
    return MessageResponse(message="application deleted successfully")
