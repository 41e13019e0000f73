"""
Security utilities.

Provides bearer token handling for the externally issued identity,
audit logging of mutations and denials, and PII masking for log records.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional, Set, TypedDict

import jwt

from core.config import settings

logger = logging.getLogger("security.audit")


class JWTPayload(TypedDict, total=False):
    """Claims carried by an access token."""
    sub: str
    role: str
    exp: int
    iat: int


class AuditAction(str, Enum):
    """Audit log action types."""
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    DENIED = "DENIED"


class ResourceType(str, Enum):
    """Resource types for audit logging."""
    JOB = "JOB"
    APPLICATION = "APPLICATION"
    CATALOG = "CATALOG"


# Applicant contact fields
PII_FIELDS: Set[str] = {
    "email", "phone", "phone_number", "name", "cv",
}


def create_access_token(
    user_id: int,
    role: str,
    expires_minutes: Optional[int] = None,
    secret: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> str:
    """
    Issue a signed access token.

    The identity provider normally issues these; the helper exists for
    local development and tests.
    """
    now = datetime.now(timezone.utc)
    expires = now + timedelta(
        minutes=expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    )
    payload = {
        "sub": str(user_id),
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(
        payload,
        secret or settings.jwt_secret_key,
        algorithm=algorithm or settings.jwt_algorithm,
    )


def verify_jwt_token(token: str, secret: str, algorithm: str = "HS256") -> JWTPayload:
    """
    Decode and verify an access token.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired
        jwt.InvalidTokenError: If the token is malformed or the signature is wrong
    """
    return jwt.decode(
        token,
        secret,
        algorithms=[algorithm],
        options={"require": ["sub", "role", "exp"]},
    )


def _partial(value: Any) -> str:
    """``"Ada"`` becomes ``"A***[3]"``: first character and length only."""
    if isinstance(value, str) and value:
        return f"{value[0]}***[{len(value)}]"
    return "[MASKED]"


def mask_pii(data: Any, depth: int = 0) -> Any:
    """
    Copy of ``data`` with applicant contact fields partially masked.

    Lists are cut to their first five items and nesting stops at ten levels.
    """
    if depth > 10:
        return "[MAX_DEPTH]"
    if isinstance(data, list):
        return [mask_pii(item, depth + 1) for item in data[:5]]
    if not isinstance(data, dict):
        return data
    return {
        key: _partial(value) if str(key).lower() in PII_FIELDS else mask_pii(value, depth + 1)
        for key, value in data.items()
    }


async def log_audit_event(
    action: AuditAction,
    resource_type: ResourceType,
    resource_id: Optional[int] = None,
    user_id: Optional[int] = None,
    details: Optional[Dict[str, Any]] = None,
    contains_pii: bool = False,
) -> Dict[str, Any]:
    """
    Write one ``AUDIT`` record for a mutation or an authorization denial.

    ``details`` pass through ``mask_pii`` when ``contains_pii`` is set.
    Returns the event as written.
    """
    if details and contains_pii:
        details = mask_pii(details)

    event = dict(
        timestamp=datetime.now(timezone.utc).isoformat(),
        event_type="AUDIT",
        action=action.value,
        resource_type=resource_type.value,
        resource_id=None if resource_id is None else str(resource_id),
        user_id=user_id,
        contains_pii=contains_pii,
        details=details,
    )
    logger.info(json.dumps(event, default=str))
    return event
