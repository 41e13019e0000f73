"""Application service functions."""

from typing import Optional, Sequence
import logging

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.services.transactions import atomic
from core.config import settings
from core.exceptions import NotFoundError, TransactionFailed, ValidationFailed
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import Ability, authorize
from core.security import AuditAction, ResourceType, log_audit_event
from core.storage.local import LocalStorage, generate_cv_filename
from core.utils.validators import file_extension, validate_email, validate_phone
from database.models.applications import (
    Application,
    ApplicationStatus,
    ApplicationType,
    CVApplication,
    FormApplication,
)
from database.models.jobs import Job

logger = logging.getLogger(__name__)


async def load_application(db: AsyncSession, application_id: int) -> Optional[Application]:
    result = await db.execute(
        select(Application)
        .where(Application.id == application_id)
        .options(selectinload(Application.job))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_application(db: AsyncSession, application_id: int) -> Application:
    """
    Raises:
        NotFoundError: If no application has ``application_id``
    """
    application = await load_application(db, application_id)
    if application is None:
        raise NotFoundError("Application not found")
    return application


async def list_applications(db: AsyncSession, user: CurrentUser) -> tuple[Sequence[Application], bool]:
    """
    Applications visible to ``user`` and whether they get the full view.

    Admins get every application in full; candidates get a summary of
    their own; anyone else gets nothing.

    Raises:
        NotFoundError: If nothing is visible
    """
    applications: Sequence[Application] = []
    if user.is_admin or user.is_candidate:
        query = (
            select(Application)
            .options(selectinload(Application.job))
            .order_by(Application.created_at.desc(), Application.id.desc())
        )
        if not user.is_admin:
            query = query.where(Application.candidate_id == user.id)
        applications = (await db.execute(query)).scalars().all()

    if not applications:
        raise NotFoundError("No applications found")
    return applications, user.is_admin


async def show_application(db: AsyncSession, user: CurrentUser, application_id: int) -> Application:
    application = await get_application(db, application_id)
    await authorize(user, Ability.APPLICATION_VIEW, application)
    return application


async def _validate_submission(
    db: AsyncSession,
    type: Optional[str],
    job_id: Optional[int],
    cv: Optional[UploadFile],
    name: Optional[str],
    email: Optional[str],
    phone_number: Optional[str],
) -> tuple[ApplicationType, Optional[bytes], dict[str, str]]:
    """
    Check a submission before anything is written.

    Returns:
        The application type, the CV content for ``cv`` submissions and
        the normalized contact fields for ``form`` submissions

    Raises:
        ValidationFailed: With every problem found, keyed by field
    """
    errors: dict[str, list[str]] = {}
    content = None
    contact: dict[str, str] = {}

    app_type = None
    if not type:
        errors["type"] = ["The type field is required."]
    else:
        try:
            app_type = ApplicationType(type)
        except ValueError:
            errors["type"] = ["The selected type is invalid."]

    if job_id is None:
        errors["job_id"] = ["The job id field is required."]
    elif (await db.execute(select(Job.id).where(Job.id == job_id))).scalar_one_or_none() is None:
        errors["job_id"] = ["The selected job id is invalid."]

    if app_type is ApplicationType.CV:
        allowed = settings.cv_allowed_extensions
        if cv is None or not cv.filename:
            errors["cv"] = ["The cv field is required when type is cv."]
        elif file_extension(cv.filename) not in allowed:
            errors["cv"] = [f"The cv must be a file of type: {', '.join(allowed)}."]
        else:
            content = await cv.read()
            if not content:
                errors["cv"] = ["The cv must not be empty."]
            elif len(content) > settings.cv_max_size_bytes:
                errors["cv"] = [
                    f"The cv may not be greater than {settings.cv_max_size_bytes // 1024} kilobytes."
                ]

    elif app_type is ApplicationType.FORM:
        name = (name or "").strip()
        if not name:
            errors["name"] = ["The name field is required when type is form."]
        elif len(name) > 200:
            errors["name"] = ["The name may not be greater than 200 characters."]
        else:
            contact["name"] = name

        email = (email or "").strip()
        if not email:
            errors["email"] = ["The email field is required when type is form."]
        else:
            valid, normalized = validate_email(email)
            if valid:
                contact["email"] = normalized
            else:
                errors["email"] = ["The email must be a valid email address."]

        phone_number = (phone_number or "").strip()
        if not phone_number:
            errors["phone_number"] = ["The phone number field is required when type is form."]
        else:
            valid, message = validate_phone(phone_number)
            if valid:
                contact["phone_number"] = phone_number
            else:
                errors["phone_number"] = [message]

    if errors:
        raise ValidationFailed(errors)
    return app_type, content, contact


async def create_application(
    db: AsyncSession,
    storage: LocalStorage,
    user: CurrentUser,
    type: Optional[str],
    job_id: Optional[int],
    cv: Optional[UploadFile] = None,
    name: Optional[str] = None,
    email: Optional[str] = None,
    phone_number: Optional[str] = None,
) -> Application:
    """
    Submit an application to a job.

    The application row, its CV or form record and the job's counter
    increment commit together. A CV is written to storage inside the
    transaction and removed again if the transaction rolls back.

    Raises:
        AuthorizationError: Unless the caller is a candidate or an admin
        ValidationFailed: If the submission is incomplete or invalid
        TransactionFailed: If any write fails; nothing is persisted
    """
    await authorize(user, Ability.APPLICATION_CREATE)
    app_type, content, contact = await _validate_submission(
        db, type, job_id, cv, name, email, phone_number
    )

    stored_path = None
    try:
        async with atomic(db, "Application submission"):
            if app_type is ApplicationType.CV:
                stored_path = await run_in_threadpool(
                    storage.save, content, generate_cv_filename(cv.filename)
                )
                application = CVApplication(
                    job_id=job_id,
                    candidate_id=user.id,
                    status=ApplicationStatus.PENDING,
                    cv=stored_path,
                )
            else:
                application = FormApplication(
                    job_id=job_id,
                    candidate_id=user.id,
                    status=ApplicationStatus.PENDING,
                    **contact,
                )
            db.add(application)
            await db.flush()
            application_id = application.id

            await db.execute(
                update(Job)
                .where(Job.id == job_id)
                .values(number_of_applications=Job.number_of_applications + 1)
                .execution_options(synchronize_session=False)
            )
    except TransactionFailed:
        if stored_path is not None:
            await run_in_threadpool(storage.delete, stored_path)
        raise

    logger.info(f"Application {application_id} ({app_type.value}) submitted to job {job_id} by user {user.id}")
    await log_audit_event(
        action=AuditAction.CREATE,
        resource_type=ResourceType.APPLICATION,
        resource_id=application_id,
        user_id=user.id,
        details={"job_id": job_id, "type": app_type.value, **contact},
        contains_pii=bool(contact),
    )
    return await get_application(db, application_id)


async def delete_application(
    db: AsyncSession, storage: LocalStorage, user: CurrentUser, application_id: int
) -> None:
    """
    Withdraw an application.

    The application and its CV or form record are removed and the job's
    counter decremented (never below zero) in one transaction. A stored
    CV is deleted after the commit.

    Raises:
        NotFoundError: If the application does not exist
        AuthorizationError: Unless the caller owns it or is an admin
        TransactionFailed: If any write fails
    """
    application = await get_application(db, application_id)
    await authorize(user, Ability.APPLICATION_DELETE, application)

    job_id = application.job_id
    cv_path = application.cv if isinstance(application, CVApplication) else None

    async with atomic(db, f"Application {application_id} deletion"):
        await db.delete(application)
        await db.execute(
            update(Job)
            .where(Job.id == job_id)
            .values(
                number_of_applications=case(
                    (Job.number_of_applications > 0, Job.number_of_applications - 1),
                    else_=0,
                )
            )
            .execution_options(synchronize_session=False)
        )

    if cv_path:
        try:
            removed = await run_in_threadpool(storage.delete, cv_path)
        except OSError as e:
            logger.error(f"Could not remove CV {cv_path} of application {application_id}: {e}")
        else:
            if not removed:
                logger.warning(f"CV {cv_path} of application {application_id} was already gone")

    logger.info(f"Application {application_id} deleted by user {user.id}")
    await log_audit_event(
        action=AuditAction.DELETE,
        resource_type=ResourceType.APPLICATION,
        resource_id=application_id,
        user_id=user.id,
        details={"job_id": job_id},
    )
