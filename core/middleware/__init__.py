"""
Core middleware package.

- Error handling with sensitive data sanitization
- Structured logging with PII masking
- Bearer token authentication
- Ability-based authorization
"""

from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    sanitize_error_message,
)

from core.middleware.logging import (
    StructuredLoggingMiddleware,
    setup_logging,
)

from core.middleware.authentication import (
    AuthenticationMiddleware,
    CurrentUser,
    get_current_user,
)

from core.middleware.authorization import (
    Ability,
    authorize,
    can,
    require_ability,
)

__all__ = [
    # Error handling
    "ErrorHandlingMiddleware",
    "setup_error_handlers",
    "sanitize_error_message",
    # Logging
    "StructuredLoggingMiddleware",
    "setup_logging",
    # Authentication
    "AuthenticationMiddleware",
    "CurrentUser",
    "get_current_user",
    # Authorization
    "Ability",
    "authorize",
    "can",
    "require_ability",
]
