"""Import every model so Base.metadata knows all tables."""

from database.models.users import User, UserRole
from database.models.catalogs import Skill, Benefit, Category, Location
from database.models.jobs import (
    Job,
    JobStatus,
    ExperienceLevel,
    WorkType,
    EmployerJob,
    EmployerJobStatus,
    JobComment,
    job_skills,
    job_benefits,
    job_categories,
)
from database.models.applications import (
    Application,
    ApplicationType,
    ApplicationStatus,
    CVApplication,
    FormApplication,
)

__all__ = [
    "User",
    "UserRole",
    "Skill",
    "Benefit",
    "Category",
    "Location",
    "Job",
    "JobStatus",
    "ExperienceLevel",
    "WorkType",
    "EmployerJob",
    "EmployerJobStatus",
    "JobComment",
    "job_skills",
    "job_benefits",
    "job_categories",
    "Application",
    "ApplicationType",
    "ApplicationStatus",
    "CVApplication",
    "FormApplication",
]
