"""FastAPI dependencies for dependency injection."""

from functools import lru_cache

from fastapi import Request

from core.config import settings
from core.middleware.authentication import CurrentUser, get_current_user
from core.storage.local import LocalStorage


async def require_authenticated_user(request: Request) -> CurrentUser:
    """
    Require the authentication middleware to have identified the caller.

    Raises:
        AuthenticationError: If the request carries no identity
    """
    return get_current_user(request)


@lru_cache
def get_cv_storage() -> LocalStorage:
    """Storage area for uploaded CVs."""
    return LocalStorage(settings.cv_storage_path)
