"""
Authorization checks for every job board operation.

Each operation is an ``Ability``. A single policy table maps abilities to
predicates over the caller and, where ownership matters, the resource.
Routes and services call ``authorize`` instead of branching on roles.
"""

import logging
from enum import Enum
from typing import Any, Callable, Optional

from fastapi import Depends

from core.exceptions import AuthorizationError
from core.security import AuditAction, ResourceType, log_audit_event
from core.middleware.authentication import CurrentUser, get_current_user
from database.models.jobs import Job, JobStatus
from database.models.applications import Application

logger = logging.getLogger(__name__)


class Ability(str, Enum):
    """Operations subject to authorization."""

    JOB_LIST = "job:list"
    JOB_VIEW = "job:view"
    JOB_CREATE = "job:create"
    JOB_UPDATE = "job:update"
    JOB_DELETE = "job:delete"
    JOB_ACCEPT_REJECT = "job:accept_reject"
    JOB_SEARCH = "job:search"

    APPLICATION_LIST = "application:list"
    APPLICATION_VIEW = "application:view"
    APPLICATION_CREATE = "application:create"
    APPLICATION_DELETE = "application:delete"

    CATALOG_READ = "catalog:read"


# Fixed message returned with a 403 for each ability
DENIAL_MESSAGES: dict[Ability, str] = {
    Ability.JOB_LIST: "You do not have permission to list jobs",
    Ability.JOB_VIEW: "You do not have permission to view this job",
    Ability.JOB_CREATE: "You do not have permission to create job, only employers can create jobs",
    Ability.JOB_UPDATE: "You do not have permission to update this job",
    Ability.JOB_DELETE: "You do not have permission to delete this job",
    Ability.JOB_ACCEPT_REJECT: "You do not have permission to accept or reject this job",
    Ability.JOB_SEARCH: "You do not have permission to search jobs",
    Ability.APPLICATION_LIST: "You do not have permission to list applications",
    Ability.APPLICATION_VIEW: "You do not have permission to view this application",
    Ability.APPLICATION_CREATE: "You do not have permission to apply for a job, only candidates can apply for jobs",
    Ability.APPLICATION_DELETE: "You do not have permission to delete this application",
    Ability.CATALOG_READ: "You do not have permission to read catalogs",
}


def _any_user(user: CurrentUser, resource: Any) -> bool:
    return True


def _owns_job(user: CurrentUser, job: Job) -> bool:
    return user.is_employer and job.employer_id == user.id


def _owns_application(user: CurrentUser, application: Application) -> bool:
    return application.candidate_id == user.id


POLICIES: dict[Ability, Callable[[CurrentUser, Any], bool]] = {
    Ability.JOB_LIST: _any_user,
    Ability.JOB_SEARCH: _any_user,
    Ability.JOB_VIEW: lambda user, job: (
        user.is_admin or job.status == JobStatus.OPEN or _owns_job(user, job)
    ),
    Ability.JOB_CREATE: lambda user, _: user.is_admin or user.is_employer,
    Ability.JOB_UPDATE: lambda user, job: user.is_admin or _owns_job(user, job),
    Ability.JOB_DELETE: lambda user, job: user.is_admin or _owns_job(user, job),
    Ability.JOB_ACCEPT_REJECT: lambda user, _: user.is_admin,
    Ability.APPLICATION_LIST: _any_user,
    Ability.APPLICATION_CREATE: lambda user, _: user.is_admin or user.is_candidate,
    Ability.APPLICATION_VIEW: lambda user, app: user.is_admin or _owns_application(user, app),
    Ability.APPLICATION_DELETE: lambda user, app: user.is_admin or _owns_application(user, app),
    Ability.CATALOG_READ: _any_user,
}

# Abilities whose policy inspects the resource
RESOURCE_ABILITIES = {
    Ability.JOB_VIEW,
    Ability.JOB_UPDATE,
    Ability.JOB_DELETE,
    Ability.APPLICATION_VIEW,
    Ability.APPLICATION_DELETE,
}


def can(user: CurrentUser, ability: Ability, resource: Optional[Any] = None) -> bool:
    """Return whether ``user`` may perform ``ability`` on ``resource``."""
    if ability in RESOURCE_ABILITIES and resource is None:
        raise ValueError(f"{ability.value} requires a resource")
    return POLICIES[ability](user, resource)


def _resource_type(ability: Ability) -> ResourceType:
    prefix = ability.value.split(":", 1)[0]
    return {
        "job": ResourceType.JOB,
        "application": ResourceType.APPLICATION,
    }.get(prefix, ResourceType.CATALOG)


async def authorize(user: CurrentUser, ability: Ability, resource: Optional[Any] = None) -> None:
    """
    Raise ``AuthorizationError`` unless ``user`` may perform ``ability``.

    Denials are written to the audit log before the error is raised.

    Args:
        user: Authenticated caller
        ability: Operation being attempted
        resource: Job or application the operation targets, when ownership matters

    Raises:
        AuthorizationError: With the ability's fixed denial message
    """
    if can(user, ability, resource):
        return

    resource_id = getattr(resource, "id", None)
    logger.warning(
        f"User {user.id} with role {user.role.value} denied {ability.value}"
        + (f" on {resource_id}" if resource_id is not None else "")
    )
    await log_audit_event(
        action=AuditAction.DENIED,
        resource_type=_resource_type(ability),
        resource_id=resource_id,
        user_id=user.id,
        details={"ability": ability.value, "role": user.role.value},
    )
    raise AuthorizationError(DENIAL_MESSAGES[ability])


def require_ability(ability: Ability) -> Callable:
    """
    Dependency that gates a route on a resource-free ability.

    Returns:
        FastAPI dependency yielding the authorized ``CurrentUser``
    """
    if ability in RESOURCE_ABILITIES:
        raise ValueError(f"{ability.value} must be checked against its resource")

    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        await authorize(user, ability)
        return user

    return dependency
