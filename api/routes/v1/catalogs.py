"""Catalog listing endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import CatalogItem
from api.services.catalogs import list_catalog
from core.middleware.authentication import CurrentUser
from core.middleware.authorization import Ability, require_ability
from database.engine import get_db

router = APIRouter(tags=["catalogs"])

read_catalogs = require_ability(Ability.CATALOG_READ)


@router.get("/locations", response_model=list[CatalogItem])
async def list_locations(
    user: CurrentUser = Depends(read_catalogs),
    db: AsyncSession = Depends(get_db),
):
    return await list_catalog(db, "location")


@router.get("/skills", response_model=list[CatalogItem])
async def list_skills(
    user: CurrentUser = Depends(read_catalogs),
    db: AsyncSession = Depends(get_db),
):
    return await list_catalog(db, "skill")


@router.get("/benefits", response_model=list[CatalogItem])
async def list_benefits(
    user: CurrentUser = Depends(read_catalogs),
    db: AsyncSession = Depends(get_db),
):
    return await list_catalog(db, "benefit")


@router.get("/categories", response_model=list[CatalogItem])
async def list_categories(
    user: CurrentUser = Depends(read_catalogs),
    db: AsyncSession = Depends(get_db),
):
    return await list_catalog(db, "category")
