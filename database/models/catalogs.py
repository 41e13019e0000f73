"""
Catalog Models

Name-keyed reference data that job listings point at: skills, benefits,
categories and locations.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String
from database.engine import Base, BigIntId


class CatalogMixin:
    """Columns shared by every catalog table."""

    id: Mapped[int] = mapped_column(
        BigIntId, primary_key=True, nullable=False, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id} name={self.name!r}>"


class Skill(CatalogMixin, Base):
    __tablename__ = "skills"


class Benefit(CatalogMixin, Base):
    __tablename__ = "benefits"


class Category(CatalogMixin, Base):
    __tablename__ = "categories"


class Location(CatalogMixin, Base):
    __tablename__ = "locations"
