"""
Application Models

A candidate's application to a job listing. The ``type`` column is the
polymorphic discriminator: every row is loaded as exactly one of
``CVApplication`` (uploaded document) or ``FormApplication`` (contact
fields), each backed by its own table keyed by ``application_id``.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    ForeignKey,
    BigInteger,
    DateTime,
    func,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base, BigIntId
from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.jobs import Job


# ==================== Application Enums ===================== #
class ApplicationType(str, PyEnum):
    """How the candidate applied."""

    CV = "cv"
    FORM = "form"


class ApplicationStatus(str, PyEnum):
    """Review status of an application."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# ==================== Application Model ===================== #
class Application(Base):
    """
    Base application row. Never instantiated directly; create one of the
    subclasses so the variant record is written in the same flush.
    """

    __tablename__ = "applications"

    id: Mapped[int] = mapped_column(
        BigIntId, primary_key=True, nullable=False, autoincrement=True
    )
    type: Mapped[ApplicationType] = mapped_column(
        SQLEnum(ApplicationType, native_enum=False, length=10), nullable=False
    )
    job_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("job_listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    candidate_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False, index=True
    )
    status: Mapped[ApplicationStatus] = mapped_column(
        SQLEnum(ApplicationStatus, native_enum=False, length=20),
        nullable=False,
        default=ApplicationStatus.PENDING,
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
    job: Mapped["Job"] = relationship("Job", back_populates="applications")

    __mapper_args__ = {
        "polymorphic_on": "type",
        "with_polymorphic": "*",
    }

    __table_args__ = (
        Index("idx_application_candidate_job", "candidate_id", "job_id"),
    )

    @property
    def payload(self) -> dict[str, Any]:
        """Variant-specific fields."""
        raise NotImplementedError


class CVApplication(Application):
    """Application made by uploading a CV document."""

    __tablename__ = "cv_applications"

    application_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("applications.id", ondelete="CASCADE"),
        primary_key=True,
    )
    cv: Mapped[str | None] = mapped_column(String(500))  # path relative to CV storage

    __mapper_args__ = {
        "polymorphic_identity": ApplicationType.CV,
    }

    @property
    def payload(self) -> dict[str, Any]:
        return {"cv": self.cv}


class FormApplication(Application):
    """Application made by filling in contact details."""

    __tablename__ = "form_applications"

    application_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("applications.id", ondelete="CASCADE"),
        primary_key=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(50), nullable=False)

    __mapper_args__ = {
        "polymorphic_identity": ApplicationType.FORM,
    }

    @property
    def payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "phone_number": self.phone_number,
        }
