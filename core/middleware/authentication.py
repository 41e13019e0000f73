"""
Authentication middleware for verifying the caller's identity.

Identity and role assignment live in an external provider. This middleware:
1. Extracts the bearer token from the Authorization header
2. Verifies its signature and expiry
3. Injects a ``CurrentUser`` (id and role) into the request scope
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

import jwt
from fastapi import Request, status
from fastapi.responses import JSONResponse

from core.exceptions import AuthenticationError
from core.security import verify_jwt_token
from database.models.users import UserRole

logger = logging.getLogger(__name__)

# Paths served without a token
PUBLIC_PATHS = frozenset({"/", "/health", "/ready", "/docs", "/redoc", "/openapi.json"})
PUBLIC_PREFIXES = ("/health", "/docs", "/redoc", "/openapi")


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated caller as seen by every operation."""

    id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_employer(self) -> bool:
        return self.role == UserRole.EMPLOYER

    @property
    def is_candidate(self) -> bool:
        return self.role == UserRole.CANDIDATE


class TokenExpiredError(AuthenticationError):
    code = "TOKEN_EXPIRED"


class TokenInvalidError(AuthenticationError):
    code = "TOKEN_INVALID"


# Client-facing text per failure; details stay in the logs
FAILURE_MESSAGES = {
    TokenExpiredError.code: "Authentication token has expired. Please refresh your token.",
    TokenInvalidError.code: "Invalid authentication token.",
}


def is_public_path(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES)


def bearer_token(request: Request) -> Optional[str]:
    """Credentials of a ``Bearer`` Authorization header, if any."""
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme != "Bearer" or not credentials:
        return None
    return credentials


class AuthenticationMiddleware:
    """
    Pure ASGI middleware validating bearer tokens.

    Public paths pass through untouched; every other HTTP request must
    carry a valid token or receives a 401 JSON response.
    """

    def __init__(self, app: Callable, jwt_secret: str, jwt_algorithm: str = "HS256"):
        self.app = app
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] == "http" and not is_public_path(scope["path"]):
            try:
                scope["user"], scope["jwt_payload"] = self._authenticate(Request(scope))
            except AuthenticationError as e:
                if isinstance(e, TokenInvalidError):
                    logger.warning(f"Rejected token on {scope['path']}: {e.message}")
                await self._reject(e.code)(scope, receive, send)
                return

        await self.app(scope, receive, send)

    def _authenticate(self, request: Request) -> tuple[CurrentUser, dict]:
        """
        Raises:
            TokenExpiredError: If the token is past its ``exp``
            TokenInvalidError: Missing, malformed or wrongly signed token,
                or claims that do not name a user and a known role
        """
        token = bearer_token(request)
        if token is None:
            raise TokenInvalidError("No bearer token provided")

        try:
            payload = verify_jwt_token(token, self.jwt_secret, self.jwt_algorithm)
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(f"Token failed verification: {e}")

        try:
            user = CurrentUser(id=int(payload["sub"]), role=UserRole(payload["role"]))
        except (KeyError, ValueError):
            raise TokenInvalidError("Token carries an unknown subject or role")
        return user, payload

    @staticmethod
    def _reject(code: str) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={
                "message": FAILURE_MESSAGES[code],
                "error": {
                    "code": code,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                },
            },
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user(request: Request) -> CurrentUser:
    """
    The caller identified by ``AuthenticationMiddleware``.

    Raises:
        AuthenticationError: If no user was injected by the middleware
    """
    user = request.scope.get("user")
    if not isinstance(user, CurrentUser):
        raise AuthenticationError("Authentication required")
    return user
