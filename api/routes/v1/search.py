"""Job search and catalog autocomplete endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import CatalogItem
from api.schemas.jobs import JobResponse
from api.schemas.search import AutocompleteType, SearchParams
from api.services import search as search_service
from core.config import settings
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import Ability, require_ability
from database.engine import get_db

router = APIRouter(tags=["search"])


@router.get("/search", response_model=list[JobResponse], summary="Search job listings")
async def search_jobs(
    params: Annotated[SearchParams, Query()],
    user: CurrentUser = Depends(require_ability(Ability.JOB_SEARCH)),
    db: AsyncSession = Depends(get_db),
):
    """
    Filter listings. Every parameter is optional and they combine with AND.
    Candidates and employers only see open listings; ``status`` is honoured
    for admins only. An empty result is an empty list.
    """
    return await search_service.search_jobs(db, user, params)


@router.get("/autocomplete", response_model=list[CatalogItem], summary="Autocomplete catalog names")
async def autocomplete(
    query: str = Query(..., min_length=1, max_length=255, description="Name prefix, or 'all'"),
    searchtype: AutocompleteType = Query(..., description="skill, location, category or benefit"),
    user: CurrentUser = Depends(require_ability(Ability.CATALOG_READ)),
    db: AsyncSession = Depends(get_db),
):
    return await search_service.autocomplete(db, searchtype, query, settings.autocomplete_limit)
