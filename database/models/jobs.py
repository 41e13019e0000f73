"""
Jobs Module

Job listings owned by an employer, their many-to-many links to the skill,
benefit and category catalogs, the employer ownership row that carries the
moderation status, and comments left on a listing.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    Column,
    String,
    ForeignKey,
    BigInteger,
    Integer,
    Date,
    DateTime,
    func,
    Text,
    Table,
    Enum as SQLEnum,
    Index,
    CheckConstraint,
)
from database.engine import Base, BigIntId
from database.models.catalogs import Skill, Benefit, Category, Location
from datetime import date, datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.applications import Application


# ==================== Job Enums ===================== #
class JobStatus(str, PyEnum):
    """Job listing status."""

    OPEN = "open"
    CLOSED = "closed"
    PENDING = "pending"


class ExperienceLevel(str, PyEnum):
    """Seniority a listing asks for."""

    ENTRY_LEVEL = "entry_level"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"


class WorkType(str, PyEnum):
    """Where the work happens."""

    REMOTE = "remote"
    ONSITE = "onsite"
    HYBRID = "hybrid"


class EmployerJobStatus(str, PyEnum):
    """Moderation status of an employer's listing."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# ==================== Association Tables ===================== #
job_skills = Table(
    "job_skills",
    Base.metadata,
    Column("job_listing_id", BigInteger, ForeignKey("job_listings.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", BigInteger, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
)

job_benefits = Table(
    "job_benefits",
    Base.metadata,
    Column("job_listing_id", BigInteger, ForeignKey("job_listings.id", ondelete="CASCADE"), primary_key=True),
    Column("benefit_id", BigInteger, ForeignKey("benefits.id", ondelete="CASCADE"), primary_key=True),
)

job_categories = Table(
    "job_categories",
    Base.metadata,
    Column("job_listing_id", BigInteger, ForeignKey("job_listings.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", BigInteger, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)


# ==================== Job Model ===================== #
class Job(Base):
    """
    Job listing posted by an employer.

    ``number_of_applications`` is maintained by the application lifecycle,
    never written directly by job operations.
    """

    __tablename__ = "job_listings"

    id: Mapped[int] = mapped_column(
        BigIntId, primary_key=True, nullable=False, autoincrement=True
    )

    # Basic info
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(
        String(300), unique=True, nullable=False, index=True
    )  # URL-friendly
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Classification
    experience_level: Mapped[ExperienceLevel] = mapped_column(
        SQLEnum(ExperienceLevel, native_enum=False, length=50), nullable=False
    )
    work_type: Mapped[WorkType] = mapped_column(
        SQLEnum(WorkType, native_enum=False, length=50), nullable=False
    )
    status: Mapped[JobStatus] = mapped_column(
        SQLEnum(JobStatus, native_enum=False, length=50),
        nullable=False,
        default=JobStatus.PENDING,
        index=True,
    )

    # Compensation
    salary_from: Mapped[int] = mapped_column(BigInteger, nullable=False)
    salary_to: Mapped[int] = mapped_column(BigInteger, nullable=False)

    deadline: Mapped[date] = mapped_column(Date, nullable=False)

    # References
    location_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("locations.id"), nullable=False, index=True
    )
    employer_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False, index=True
    )

    # Application tracking
    number_of_applications: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    location: Mapped[Location] = relationship(Location, lazy="selectin")
    skills: Mapped[list[Skill]] = relationship(
        Skill, secondary=job_skills, lazy="selectin", order_by=Skill.id
    )
    benefits: Mapped[list[Benefit]] = relationship(
        Benefit, secondary=job_benefits, lazy="selectin", order_by=Benefit.id
    )
    categories: Mapped[list[Category]] = relationship(
        Category, secondary=job_categories, lazy="selectin", order_by=Category.id
    )
    ownership: Mapped["EmployerJob | None"] = relationship(
        "EmployerJob",
        back_populates="job",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    comments: Mapped[list["JobComment"]] = relationship(
        "JobComment",
        back_populates="job",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    applications: Mapped[list["Application"]] = relationship(
        "Application", back_populates="job", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("salary_to > salary_from", name="ck_job_salary_range"),
        CheckConstraint("number_of_applications >= 0", name="ck_job_application_count"),
        Index("idx_job_status_created", "status", "created_at"),
    )


# ==================== Employer Ownership ===================== #
class EmployerJob(Base):
    """
    Tracks which employer posted a listing and whether an admin
    accepted or rejected it.
    """

    __tablename__ = "employer_jobs"

    id: Mapped[int] = mapped_column(
        BigIntId, primary_key=True, nullable=False, autoincrement=True
    )
    employer_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False, index=True
    )
    job_listing_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("job_listings.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    status: Mapped[EmployerJobStatus] = mapped_column(
        SQLEnum(EmployerJobStatus, native_enum=False, length=20),
        nullable=False,
        default=EmployerJobStatus.PENDING,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    job: Mapped[Job] = relationship(Job, back_populates="ownership")


# ==================== Job Comments ===================== #
class JobComment(Base):
    """Comment left on a job listing; removed together with the listing."""

    __tablename__ = "job_comments"

    id: Mapped[int] = mapped_column(
        BigIntId, primary_key=True, nullable=False, autoincrement=True
    )
    job_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("job_listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    job: Mapped[Job] = relationship(Job, back_populates="comments")
