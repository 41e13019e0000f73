"""Catalog service functions: skills, benefits, categories and locations."""

import logging
from typing import Sequence, Type

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import ValidationFailed
from database.models.catalogs import Benefit, Category, Location, Skill

logger = logging.getLogger(__name__)

CatalogModel = Type[Skill] | Type[Benefit] | Type[Category] | Type[Location]

CATALOG_MODELS: dict[str, CatalogModel] = {
    "skill": Skill,
    "benefit": Benefit,
    "category": Category,
    "location": Location,
}

# Job payload field -> catalog holding its ids
ASSOCIATION_FIELDS: dict[str, CatalogModel] = {
    "skills": Skill,
    "benefits": Benefit,
    "categories": Category,
}

PLACEHOLDER_KINDS = {"skills": "skill", "benefits": "benefit", "categories": "category"}


async def list_catalog(db: AsyncSession, kind: str) -> Sequence:
    """Every row of a catalog, ordered by id."""
    model = CATALOG_MODELS[kind]
    result = await db.execute(select(model).order_by(model.id))
    return result.scalars().all()


async def location_exists(db: AsyncSession, location_id: int) -> bool:
    result = await db.execute(select(Location.id).where(Location.id == location_id))
    return result.scalar_one_or_none() is not None


async def ensure_location(db: AsyncSession, location_id: int) -> None:
    """
    Raises:
        ValidationFailed: Keyed ``location_id`` when the location is unknown
    """
    if not await location_exists(db, location_id):
        raise ValidationFailed.single("location_id", "The selected location id is invalid.")


async def missing_ids(db: AsyncSession, field: str, ids: list[int]) -> list[int]:
    """Ids in ``ids`` with no row in the field's catalog, in input order."""
    if not ids:
        return []
    model = ASSOCIATION_FIELDS[field]
    result = await db.execute(select(model.id).where(model.id.in_(ids)))
    found = set(result.scalars().all())
    return [i for i in ids if i not in found]


async def check_catalog_ids(db: AsyncSession, associations: dict[str, list[int]]) -> None:
    """
    Reject unknown catalog ids unless they may be created on the fly.

    Raises:
        ValidationFailed: Keyed by payload field, one message per unknown id
    """
    if settings.catalog_autocreate:
        return

    errors: dict[str, list[str]] = {}
    for field, ids in associations.items():
        for missing in await missing_ids(db, field, ids):
            errors.setdefault(field, []).append(f"The selected {field} id {missing} is invalid.")
    if errors:
        raise ValidationFailed(errors)


async def resolve_catalog_ids(db: AsyncSession, field: str, ids: list[int]) -> list:
    """
    Rows for ``ids`` in input order, creating any that do not exist yet.

    Created rows keep the requested id and get a placeholder name such as
    ``skill #42``. Must run inside the caller's transaction.
    """
    if not ids:
        return []

    model = ASSOCIATION_FIELDS[field]
    created = await missing_ids(db, field, ids)
    if created:
        kind = PLACEHOLDER_KINDS[field]
        db.add_all([model(id=i, name=f"{kind} #{i}") for i in created])
        await db.flush()
        await _advance_sequence(db, model)
        logger.info(f"Created {len(created)} {model.__tablename__} rows on the fly: {created}")

    result = await db.execute(select(model).where(model.id.in_(ids)))
    by_id = {row.id: row for row in result.scalars().all()}
    return [by_id[i] for i in ids]


async def _advance_sequence(db: AsyncSession, model: CatalogModel) -> None:
    """Keep the PostgreSQL id sequence ahead of explicitly inserted ids."""
    if db.get_bind().dialect.name != "postgresql":
        return
    table = model.__tablename__
    max_id = (await db.execute(select(func.max(model.id)))).scalar_one()
    await db.execute(
        text("SELECT setval(pg_get_serial_sequence(:table, 'id'), :value)"),
        {"table": table, "value": max_id},
    )
