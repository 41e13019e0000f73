"""Job service functions."""

from typing import Optional, Sequence
import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi.concurrency import run_in_threadpool

from api.schemas.jobs import JobCreate, JobUpdate, SALARY_RANGE_MESSAGE
from api.services.catalogs import (
    ASSOCIATION_FIELDS,
    check_catalog_ids,
    ensure_location,
    resolve_catalog_ids,
)
from api.services.transactions import atomic
from core.exceptions import NotFoundError, ValidationFailed
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import Ability, authorize
from core.security import AuditAction, ResourceType, log_audit_event
from core.storage.local import LocalStorage
from core.utils.formatting import slugify
from database.models.applications import Application, CVApplication
from database.models.jobs import (
    EmployerJob,
    EmployerJobStatus,
    Job,
    JobComment,
    JobStatus,
)

logger = logging.getLogger(__name__)


async def load_job(db: AsyncSession, job_id: int) -> Optional[Job]:
    """Fetch a job with fresh column values and associations."""
    result = await db.execute(
        select(Job)
        .where(Job.id == job_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_job(db: AsyncSession, job_id: int) -> Job:
    """
    Raises:
        NotFoundError: If no job has ``job_id``
    """
    job = await load_job(db, job_id)
    if job is None:
        raise NotFoundError("Job not found")
    return job


async def unique_slug(db: AsyncSession, title: str, exclude_id: Optional[int] = None) -> str:
    """
    Slug for ``title`` not used by any other job.

    A taken slug gets the first free numeric suffix: ``backend-engineer-2``.
    """
    base = slugify(title)
    query = select(Job.slug).where(Job.slug.like(f"{base}%"))
    if exclude_id is not None:
        query = query.where(Job.id != exclude_id)
    taken = set((await db.execute(query)).scalars().all())

    candidate = base
    suffix = 2
    while candidate in taken:
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


async def list_jobs(db: AsyncSession, user: CurrentUser) -> Sequence[Job]:
    """
    Admins see every job; everyone else sees open jobs only.

    Raises:
        NotFoundError: If nothing is visible
    """
    query = select(Job)
    if not user.is_admin:
        query = query.where(Job.status == JobStatus.OPEN)
    query = query.order_by(Job.created_at.desc(), Job.id.desc())

    jobs = (await db.execute(query)).scalars().all()
    if not jobs:
        raise NotFoundError("No jobs found")
    return jobs


async def show_job(db: AsyncSession, user: CurrentUser, job_id: int) -> Job:
    job = await get_job(db, job_id)
    await authorize(user, Ability.JOB_VIEW, job)
    return job


async def create_job(db: AsyncSession, user: CurrentUser, data: JobCreate) -> Job:
    """
    Post a job listing for the calling employer.

    The job, its ownership row and all three association sets are written
    in one transaction. The listing starts ``pending`` until an admin
    accepts it.

    Raises:
        ValidationFailed: Unknown location, or unknown catalog ids when
            they may not be created
        TransactionFailed: If any write fails; nothing is persisted
    """
    associations = {field: getattr(data, field) or [] for field in ASSOCIATION_FIELDS}

    await ensure_location(db, data.location_id)
    await check_catalog_ids(db, associations)
    slug = await unique_slug(db, data.title)

    async with atomic(db, "Job creation"):
        resolved = {
            field: await resolve_catalog_ids(db, field, ids)
            for field, ids in associations.items()
        }
        job = Job(
            title=data.title,
            slug=slug,
            description=data.description,
            experience_level=data.experience_level,
            work_type=data.work_type,
            status=JobStatus.PENDING,
            salary_from=data.salary_from,
            salary_to=data.salary_to,
            deadline=data.deadline,
            location_id=data.location_id,
            employer_id=user.id,
            number_of_applications=0,
            ownership=EmployerJob(employer_id=user.id, status=EmployerJobStatus.PENDING),
            **resolved,
        )
        db.add(job)
        await db.flush()
        job_id = job.id

    logger.info(f"Job {job_id} created by user {user.id}")
    await log_audit_event(
        action=AuditAction.CREATE,
        resource_type=ResourceType.JOB,
        resource_id=job_id,
        user_id=user.id,
        details={"title": data.title, "slug": slug},
    )
    return await get_job(db, job_id)


async def update_job(db: AsyncSession, user: CurrentUser, job_id: int, data: JobUpdate) -> Job:
    """
    Apply the supplied fields to a job.

    Association arrays present in the payload replace the stored set;
    absent ones are left alone. A new title regenerates the slug.

    Raises:
        NotFoundError: If the job does not exist
        AuthorizationError: Unless the caller owns the job or is an admin
        ValidationFailed: Bad salary range, location or catalog ids
        TransactionFailed: If any write fails; nothing is persisted
    """
    job = await get_job(db, job_id)
    await authorize(user, Ability.JOB_UPDATE, job)

    fields = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    associations = {f: fields.pop(f) for f in ASSOCIATION_FIELDS if f in fields}

    salary_from = fields.get("salary_from", job.salary_from)
    salary_to = fields.get("salary_to", job.salary_to)
    if salary_to <= salary_from:
        raise ValidationFailed.single("salary_to", SALARY_RANGE_MESSAGE)
    if "location_id" in fields:
        await ensure_location(db, fields["location_id"])
    await check_catalog_ids(db, associations)

    if "title" in fields and fields["title"] != job.title:
        fields["slug"] = await unique_slug(db, fields["title"], exclude_id=job.id)

    async with atomic(db, f"Job {job_id} update"):
        for name, value in fields.items():
            setattr(job, name, value)
        for field, ids in associations.items():
            setattr(job, field, await resolve_catalog_ids(db, field, ids))

    logger.info(f"Job {job_id} updated by user {user.id}")
    await log_audit_event(
        action=AuditAction.UPDATE,
        resource_type=ResourceType.JOB,
        resource_id=job_id,
        user_id=user.id,
        details={"fields": sorted([*fields, *associations])},
    )
    return await get_job(db, job_id)


async def delete_job(
    db: AsyncSession, storage: LocalStorage, user: CurrentUser, job_id: int
) -> None:
    """
    Delete a job together with everything hanging off it.

    Association sets, comments, the ownership row and the job's
    applications go in the same transaction. Stored CVs of those
    applications are removed once the transaction has committed.
    """
    job = await get_job(db, job_id)
    await authorize(user, Ability.JOB_DELETE, job)

    cv_paths = (
        await db.execute(
            select(CVApplication.cv).where(
                CVApplication.job_id == job_id, CVApplication.cv.is_not(None)
            )
        )
    ).scalars().all()

    async with atomic(db, f"Job {job_id} deletion"):
        job.skills = []
        job.benefits = []
        job.categories = []
        await db.execute(delete(JobComment).where(JobComment.job_id == job_id))
        await db.execute(delete(EmployerJob).where(EmployerJob.job_listing_id == job_id))
        await db.execute(
            delete(Application)
            .where(Application.job_id == job_id)
            .execution_options(synchronize_session=False)
        )
        await db.delete(job)

    for path in cv_paths:
        if not await run_in_threadpool(storage.delete, path):
            logger.warning(f"Stored CV {path} of deleted job {job_id} was already gone")

    logger.info(f"Job {job_id} deleted by user {user.id}")
    await log_audit_event(
        action=AuditAction.DELETE,
        resource_type=ResourceType.JOB,
        resource_id=job_id,
        user_id=user.id,
        details={"removed_cvs": len(cv_paths)},
    )


async def decide_job(db: AsyncSession, user: CurrentUser, job_id: int, decision: str) -> Job:
    """
    Accept or reject a listing.

    ``accepted`` opens the job and ``rejected`` closes it; the ownership
    row records the decision in the same transaction.
    """
    job = await get_job(db, job_id)
    accepted = decision == EmployerJobStatus.ACCEPTED.value

    async with atomic(db, f"Job {job_id} {decision}"):
        job.status = JobStatus.OPEN if accepted else JobStatus.CLOSED
        await db.execute(
            update(EmployerJob)
            .where(EmployerJob.job_listing_id == job_id)
            .values(status=EmployerJobStatus(decision), updated_at=func.now())
            .execution_options(synchronize_session=False)
        )

    logger.info(f"Job {job_id} {decision} by user {user.id}")
    await log_audit_event(
        action=AuditAction.ACCEPT if accepted else AuditAction.REJECT,
        resource_type=ResourceType.JOB,
        resource_id=job_id,
        user_id=user.id,
    )
    return await get_job(db, job_id)
