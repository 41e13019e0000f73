"""
Domain exceptions raised by services and translated to HTTP responses
by the error handlers in core.middleware.error_handling.
"""

from typing import Optional

from fastapi import status


class JobBoardError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(JobBoardError):
    """Raised when the request carries no valid identity."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"


class AuthorizationError(JobBoardError):
    """Raised when the caller lacks the role or ownership an operation needs."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class NotFoundError(JobBoardError):
    """Raised when an item, or a non-empty result set, was expected."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class ValidationFailed(JobBoardError):
    """
    Raised for input that passed schema parsing but fails a domain rule.

    Args:
        errors: Field name mapped to its error messages
        message: Summary message
    """

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "VALIDATION_ERROR"

    def __init__(self, errors: dict[str, list[str]], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = errors

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationFailed":
        return cls({field: [message]})


class TransactionFailed(JobBoardError):
    """Raised after a multi-step write has been rolled back."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "TRANSACTION_FAILED"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
