"""
Tests for error handling: the JSON envelope, domain error mapping,
field-keyed validation errors and message sanitization.
"""

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError, OperationalError

from core.exceptions import (
    AuthorizationError,
    NotFoundError,
    TransactionFailed,
    ValidationFailed,
)
from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    error_body,
    sanitize_error_message,
    setup_error_handlers,
)


class Payload(BaseModel):
    title: str = Field(..., min_length=1)
    salary_from: int
    skills: list[int] = []


@pytest.fixture
def app():
    app = FastAPI()
    setup_error_handlers(app)

    @app.get("/forbidden")
    async def forbidden():
        raise AuthorizationError("You do not have permission to view this application")

    @app.get("/missing")
    async def missing():
        raise NotFoundError("No jobs found")

    @app.get("/invalid")
    async def invalid():
        raise ValidationFailed({"location_id": ["The selected location id is invalid."]})

    @app.get("/rolled-back")
    async def rolled_back():
        raise TransactionFailed("CHECK constraint failed: ck_job_salary_range")

    @app.get("/http")
    async def http():
        raise HTTPException(status_code=409, detail="Conflict")

    @app.post("/payload")
    async def payload(body: Payload):
        return body

    return app


@pytest.fixture
def client(app):
    return TestClient(app)


class TestDomainErrors:
    """JobBoardError subclasses keep their status and message."""

    def test_authorization_error(self, client):
        response = client.get("/forbidden")

        assert response.status_code == 403
        assert response.json() == {
            "message": "You do not have permission to view this application",
            "error": {"code": "FORBIDDEN", "path": "/forbidden", "method": "GET"},
        }

    def test_not_found(self, client):
        response = client.get("/missing")

        assert response.status_code == 404
        assert response.json()["message"] == "No jobs found"

    def test_validation_failed_has_errors_map(self, client):
        response = client.get("/invalid")

        assert response.status_code == 422
        assert response.json()["errors"] == {
            "location_id": ["The selected location id is invalid."]
        }

    def test_transaction_failed_carries_cause(self, client):
        response = client.get("/rolled-back")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "TRANSACTION_FAILED"
        assert "ck_job_salary_range" in response.json()["message"]

    def test_http_exception_uses_envelope(self, client):
        response = client.get("/http")

        assert response.status_code == 409
        assert response.json()["message"] == "Conflict"


class TestRequestValidation:
    """FastAPI validation errors become a field-keyed map."""

    def test_fields_keyed_without_location_prefix(self, client):
        response = client.post("/payload", json={"title": ""})

        assert response.status_code == 422
        errors = response.json()["errors"]
        assert set(errors) == {"title", "salary_from"}
        assert all(isinstance(messages, list) for messages in errors.values())

    def test_list_item_keyed_by_field(self, client):
        response = client.post(
            "/payload", json={"title": "Engineer", "salary_from": 1, "skills": [1, "x"]}
        )

        assert response.status_code == 422
        errors = response.json()["errors"]
        assert list(errors) == ["skills"]
        assert "valid integer" in errors["skills"][0]

    def test_missing_body(self, client):
        response = client.post("/payload")

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestErrorHandlingMiddleware:
    """Exceptions escaping the app become sanitized JSON."""

    def _client(self, exc):
        async def app(scope, receive, send):
            raise exc

        return TestClient(ErrorHandlingMiddleware(app), raise_server_exceptions=False)

    def test_domain_error(self):
        response = self._client(NotFoundError("Job not found")).get("/jobs/1")

        assert response.status_code == 404
        assert response.json()["error"]["path"] == "/jobs/1"

    def test_integrity_error(self):
        exc = IntegrityError("INSERT", {}, Exception("duplicate"))
        response = self._client(exc).get("/")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INTEGRITY_ERROR"

    def test_operational_error(self):
        exc = OperationalError("SELECT 1", {}, Exception("connection refused"))
        response = self._client(exc).get("/")

        assert response.status_code == 503

    def test_unexpected_error_hides_details(self):
        response = self._client(RuntimeError("password=hunter2")).get("/")

        assert response.status_code == 500
        assert response.json()["message"] == "An unexpected error occurred"
        assert "hunter2" not in response.text


class TestSanitization:
    """Secrets never reach a response or log line."""

    @pytest.mark.parametrize("message", [
        'password="secret123"',
        "token: abc.def.ghi",
        "api_key=sk_live_12345",
        "secret=confidential",
        "Authorization: Bearer eyJhbGciOi",
    ])
    def test_redacted(self, message):
        assert "[REDACTED]" in sanitize_error_message(message)

    def test_plain_message_untouched(self):
        assert sanitize_error_message("Job not found") == "Job not found"

    def test_error_body_without_errors(self):
        body = error_body("Job not found", "NOT_FOUND", "/api/v1/jobs/3", "GET")
        assert "errors" not in body
