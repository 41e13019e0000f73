"""
Structured request logging with PII masking.

Applications carry candidate contact details (name, email, phone number)
and CV uploads; none of those may reach a log line unmasked.
"""

import json
import logging
import re
import sys
import time
import traceback
import uuid
from typing import Any, Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


# Keys whose values never reach a log line
SECRET_KEY_PATTERN = re.compile(
    r'password|token|api[_-]?key|secret|authorization|cookie|session',
    re.IGNORECASE,
)

# Candidate contact fields submitted with form applications
PII_FIELD_NAMES = frozenset({"name", "email", "phone", "phone_number", "cv"})

# Emails and phone numbers inside free text (query strings, messages)
PII_PATTERNS = (
    (re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'), '[EMAIL]'),
    (re.compile(r'\+\d{1,3}(?:[-.\s]?\d{1,4}){2}[-.\s]?\d{1,9}'), '[PHONE]'),
    (re.compile(r'\b\d{3}[-.]?\d{3}[-.]?\d{4}\b'), '[PHONE]'),
)

# Liveness and readiness probes
SKIP_PATHS = ('/health', '/ready')

MAX_MASK_DEPTH = 10


def is_sensitive_field(field_name: str) -> bool:
    return SECRET_KEY_PATTERN.search(field_name) is not None


def mask_text(value: str) -> str:
    """Replace emails and phone numbers inside a string."""
    for pattern, placeholder in PII_PATTERNS:
        value = pattern.sub(placeholder, value)
    return value


def _mask_value(key: str, value: Any, depth: int) -> Any:
    if is_sensitive_field(key):
        return "[REDACTED]"
    if key.lower() in PII_FIELD_NAMES and value not in (None, ""):
        return "[PII]"
    return mask_sensitive_data(value, depth + 1)


def mask_sensitive_data(data: Any, depth: int = 0) -> Any:
    """
    Copy of ``data`` that is safe to log.

    Secret-looking keys are redacted, applicant contact fields become
    ``[PII]`` and strings have emails and phone numbers masked. Nesting
    deeper than ``MAX_MASK_DEPTH`` is cut off.
    """
    if depth > MAX_MASK_DEPTH:
        return "[MAX_DEPTH_EXCEEDED]"
    if isinstance(data, dict):
        return {key: _mask_value(str(key), value, depth) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [mask_sensitive_data(item, depth + 1) for item in data]
    if isinstance(data, str):
        return mask_text(data)
    return data


def mask_headers(headers: dict) -> dict:
    """Redact credential headers; ``Authorization`` keeps its scheme."""
    masked = {}
    for name, value in headers.items():
        if not is_sensitive_field(name):
            masked[name] = value
            continue
        scheme, _, credentials = value.partition(' ')
        if name.lower() == 'authorization' and credentials:
            masked[name] = f"{scheme} [REDACTED]"
        else:
            masked[name] = "[REDACTED]"
    return masked


def should_log_request(path: str) -> bool:
    return not path.startswith(SKIP_PATHS)


def get_client_ip(request: Request) -> str:
    """
    Caller's IPv4 address with the host octet hidden, e.g. ``203.0.113.xxx``.

    The first ``X-Forwarded-For`` hop wins over the socket peer. Anything
    that is not dotted IPv4 is reported as ``unknown``.
    """
    forwarded = request.headers.get('x-forwarded-for', '')
    ip = forwarded.split(',')[0].strip()
    if not ip and request.client:
        ip = request.client.host

    octets = ip.split('.')
    if len(octets) != 4:
        return 'unknown'
    return '.'.join(octets[:3] + ['xxx'])


def _user_id(request: Request) -> Optional[int]:
    return getattr(request.scope.get("user"), "id", None)


def _emit(status_code: int, event: dict) -> None:
    """Log a request event at a level matching its status."""
    if status_code >= 500:
        level = logging.ERROR
    elif status_code >= 400:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger.log(level, json.dumps(event, default=str))


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs a ``request_started`` and a ``request_completed`` JSON event per
    request, tagged with a request id that is echoed back in the
    ``x-request-id`` response header.
    """

    def __init__(
        self,
        app: ASGIApp,
        log_request_body: bool = False,
        log_response_body: bool = False,
        max_body_size: int = 1024,
    ):
        """
        Args:
            app: The ASGI application
            log_request_body: Include masked JSON request bodies
            log_response_body: Log masked JSON response bodies at DEBUG
            max_body_size: Largest body, in bytes, that is logged
        """
        super().__init__(app)
        self.log_request_body = log_request_body
        self.log_response_body = log_response_body
        self.max_body_size = max_body_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get('x-request-id') or str(uuid.uuid4())
        request.state.request_id = request_id

        if not should_log_request(request.url.path):
            response = await call_next(request)
            response.headers['x-request-id'] = request_id
            return response

        started = time.perf_counter()
        logger.info(json.dumps(await self._started_event(request, request_id), default=str))

        response = None
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                exc_info=True,
                extra={'request_id': request_id, 'error_type': type(exc).__name__},
            )
            raise
        finally:
            status_code = response.status_code if response is not None else 500
            _emit(status_code, {
                'event': 'request_completed',
                'request_id': request_id,
                'method': request.method,
                'path': request.url.path,
                'user_id': _user_id(request),
                'status_code': status_code,
                'duration_ms': round((time.perf_counter() - started) * 1000, 2),
            })

        response.headers['x-request-id'] = request_id
        if self.log_response_body:
            response = await self._log_response_body(response, request_id)
        return response

    async def _started_event(self, request: Request, request_id: str) -> dict:
        event = {
            'event': 'request_started',
            'request_id': request_id,
            'method': request.method,
            'path': request.url.path,
            'query_params': mask_sensitive_data(dict(request.query_params)),
            'client_ip': get_client_ip(request),
            'user_agent': request.headers.get('user-agent', 'unknown'),
            'headers': mask_headers(dict(request.headers)),
        }
        if self.log_request_body and request.method in ('POST', 'PUT', 'PATCH'):
            body = await self._read_json_body(request)
            if body is not None:
                event['body'] = mask_sensitive_data(body)
        return event

    async def _read_json_body(self, request: Request) -> Any:
        """JSON bodies only; multipart uploads (CVs) are never read here."""
        content_type = request.headers.get('content-type', '')
        if 'application/json' not in content_type:
            return {'_content_type': content_type.split(';')[0]}

        raw = await request.body()
        if len(raw) > self.max_body_size:
            return {'_truncated': True, '_size': len(raw)}
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.debug(f"Request body is not valid JSON: {e}")
            return None

    async def _log_response_body(self, response: Response, request_id: str) -> Response:
        body = b"".join([chunk async for chunk in response.body_iterator])

        is_json = 'application/json' in response.headers.get('content-type', '')
        if is_json and len(body) <= self.max_body_size:
            try:
                logged = mask_sensitive_data(json.loads(body))
            except ValueError:
                logged = {'_unparsed': True}
            logger.debug(json.dumps(
                {'event': 'response_body', 'request_id': request_id, 'body': logged},
                default=str,
            ))

        return Response(
            content=body,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    EXTRA_FIELDS = ('request_id', 'user_id', 'error_type')

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': self.formatTime(record, self.datefmt),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        for field in self.EXTRA_FIELDS:
            if hasattr(record, field):
                entry[field] = getattr(record, field)

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry['exception'] = {
                'type': exc_type.__name__,
                'message': str(exc_value),
                'traceback': traceback.format_exception(*record.exc_info),
            }
        return json.dumps(entry, default=str)


def setup_logging(log_level: str = "INFO", json_logs: bool = True):
    """
    Route every logger through one stdout handler.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        json_logs: JSON lines when true, plain text otherwise
    """
    level = logging.getLevelName(log_level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        StructuredFormatter() if json_logs
        else logging.Formatter('%(asctime)s %(levelname)s [%(name)s] %(message)s')
    )

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    # Quiet third-party loggers
    for noisy in ('uvicorn.access', 'sqlalchemy.engine'):
        logging.getLogger(noisy).setLevel(logging.WARNING)
