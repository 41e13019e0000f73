"""Search service functions: job filtering and catalog autocomplete."""

from datetime import datetime, time, timezone
from typing import Sequence
import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.search import AutocompleteType, SearchParams
from api.services.catalogs import CATALOG_MODELS
from core.middleware.authentication import CurrentUser
from database.models.catalogs import Benefit, Category, Location, Skill
from database.models.jobs import Job, JobStatus

logger = logging.getLogger(__name__)

AUTOCOMPLETE_ALL = "all"


async def search_jobs(db: AsyncSession, user: CurrentUser, params: SearchParams) -> Sequence[Job]:
    """
    Jobs matching every supplied filter, newest first.

    Text filters are case-insensitive substring matches. Non-admins only
    ever see open jobs; admins may narrow by ``status``.
    """
    query = select(Job)

    if user.is_admin:
        if params.status is not None:
            query = query.where(Job.status == params.status)
    else:
        query = query.where(Job.status == JobStatus.OPEN)

    if params.query:
        query = query.where(
            or_(
                Job.title.icontains(params.query, autoescape=True),
                Job.description.icontains(params.query, autoescape=True),
            )
        )

    if params.location:
        query = query.where(Job.location.has(Location.name.icontains(params.location, autoescape=True)))
    if params.category:
        query = query.where(Job.categories.any(Category.name.icontains(params.category, autoescape=True)))
    if params.skill:
        query = query.where(Job.skills.any(Skill.name.icontains(params.skill, autoescape=True)))
    if params.benefit:
        query = query.where(Job.benefits.any(Benefit.name.icontains(params.benefit, autoescape=True)))

    if params.experience_level is not None:
        query = query.where(Job.experience_level == params.experience_level)
    if params.work_type is not None:
        query = query.where(Job.work_type == params.work_type)

    if params.salary_from is not None:
        query = query.where(Job.salary_from >= params.salary_from)
    if params.salary_to is not None:
        query = query.where(Job.salary_to <= params.salary_to)

    if params.posted_after is not None:
        since = datetime.combine(params.posted_after, time.min, tzinfo=timezone.utc)
        query = query.where(Job.created_at >= since)

    query = query.order_by(Job.created_at.desc(), Job.id.desc())
    jobs = (await db.execute(query)).scalars().all()

    logger.debug(
        f"Search by user {user.id} with {params.model_dump(exclude_none=True)} matched {len(jobs)} jobs"
    )
    return jobs


async def autocomplete(
    db: AsyncSession, searchtype: AutocompleteType, keyword: str, limit: int
) -> Sequence:
    """
    Catalog rows whose name starts with ``keyword``.

    The keyword ``all`` returns the whole catalog ordered by id; otherwise
    at most ``limit`` case-insensitive prefix matches ordered by name.
    """
    model = CATALOG_MODELS[searchtype.catalog]
    keyword = keyword.strip()

    if keyword == AUTOCOMPLETE_ALL:
        query = select(model).order_by(model.id)
    else:
        query = (
            select(model)
            .where(model.name.istartswith(keyword, autoescape=True))
            .order_by(model.name, model.id)
            .limit(limit)
        )

    return (await db.execute(query)).scalars().all()
