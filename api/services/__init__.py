"""
API Services Layer.

Database operations behind the API endpoints. Each service authorizes the
caller, validates against stored state and wraps multi-step writes in one
transaction.
"""

from api.services.jobs import (
    get_job,
    list_jobs,
    show_job,
    create_job,
    update_job,
    delete_job,
    decide_job,
)

from api.services.applications import (
    get_application,
    list_applications,
    show_application,
    create_application,
    delete_application,
)

from api.services.search import (
    search_jobs,
    autocomplete,
)

from api.services.catalogs import (
    list_catalog,
    resolve_catalog_ids,
)

__all__ = [
    # Jobs
    "get_job",
    "list_jobs",
    "show_job",
    "create_job",
    "update_job",
    "delete_job",
    "decide_job",
    # Applications
    "get_application",
    "list_applications",
    "show_application",
    "create_application",
    "delete_application",
    # Search
    "search_jobs",
    "autocomplete",
    # Catalogs
    "list_catalog",
    "resolve_catalog_ids",
]
