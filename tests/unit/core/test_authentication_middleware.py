"""
Tests for authentication middleware.

Tests:
- Public endpoint exemptions
- Bearer token validation
- CurrentUser injection
- Expired, malformed and wrongly signed tokens
"""

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from core.config import settings
from core.exceptions import AuthenticationError
from core.middleware.authentication import (
    AuthenticationMiddleware,
    CurrentUser,
    bearer_token,
    get_current_user,
    is_public_path,
)
from core.middleware.error_handling import setup_error_handlers
from core.security import create_access_token
from database.models.users import UserRole


@pytest.fixture
def app():
    """Create test FastAPI app."""
    app = FastAPI()
    setup_error_handlers(app)

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.get("/protected")
    async def protected(user: CurrentUser = Depends(get_current_user)):
        return {"user_id": user.id, "role": user.role.value}

    app.add_middleware(
        AuthenticationMiddleware,
        jwt_secret=settings.jwt_secret_key,
        jwt_algorithm=settings.jwt_algorithm,
    )
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


class TestAuthenticationMiddleware:
    """Test authentication middleware functionality."""

    def test_public_endpoint_no_auth(self, client):
        response = client.get("/health")
        assert response.status_code == 200

    def test_missing_token(self, client):
        response = client.get("/protected")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["error"]["code"] == "TOKEN_INVALID"

    def test_valid_token_injects_current_user(self, client):
        token = create_access_token(7, "employer")
        response = client.get("/protected", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == {"user_id": 7, "role": "employer"}

    def test_expired_token(self, client):
        token = create_access_token(7, "candidate", expires_minutes=-5)
        response = client.get("/protected", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "TOKEN_EXPIRED"

    def test_wrong_signature(self, client):
        token = create_access_token(7, "candidate", secret="another-secret-key-that-is-long-enough")
        response = client.get("/protected", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "TOKEN_INVALID"

    def test_unknown_role(self, client):
        token = create_access_token(7, "recruiter")
        response = client.get("/protected", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_non_bearer_scheme(self, client):
        token = create_access_token(7, "candidate")
        response = client.get("/protected", headers={"Authorization": f"Token {token}"})

        assert response.status_code == 401

    def test_error_body_has_no_token(self, client):
        response = client.get("/protected", headers={"Authorization": "Bearer not.a.jwt"})

        assert "not.a.jwt" not in response.text


class TestCurrentUser:
    """CurrentUser role helpers and the request accessor."""

    @pytest.mark.parametrize("role,admin,employer,candidate", [
        (UserRole.ADMIN, True, False, False),
        (UserRole.EMPLOYER, False, True, False),
        (UserRole.CANDIDATE, False, False, True),
    ])
    def test_role_properties(self, role, admin, employer, candidate):
        user = CurrentUser(id=1, role=role)
        assert (user.is_admin, user.is_employer, user.is_candidate) == (admin, employer, candidate)

    def test_get_current_user_without_middleware(self):
        request = type("FakeRequest", (), {"scope": {}})()
        with pytest.raises(AuthenticationError):
            get_current_user(request)


class TestRequestHelpers:

    @pytest.mark.parametrize("path,public", [
        ("/health", True),
        ("/ready", True),
        ("/openapi.json", True),
        ("/api/v1/jobs", False),
        ("/api/v1/health", False),
    ])
    def test_is_public_path(self, path, public):
        assert is_public_path(path) is public

    @pytest.mark.parametrize("header,token", [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("Bearer ", None),
        ("Basic dXNlcjpwYXNz", None),
        ("", None),
    ])
    def test_bearer_token(self, header, token):
        request = type("FakeRequest", (), {"headers": {"Authorization": header} if header else {}})()
        assert bearer_token(request) == token
