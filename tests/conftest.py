"""Shared fixtures and utilities for tests."""

import os
import tempfile
import uuid
from datetime import date

# Settings are read at import time, so the environment must be ready before
# anything from the application is imported.
_TEST_ROOT = tempfile.mkdtemp(prefix="jobboard-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/import.db"
os.environ["CV_STORAGE_PATH"] = os.path.join(_TEST_ROOT, "cv")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-min-32-chars-long-for-security")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "60")
os.environ.setdefault("CATALOG_AUTOCREATE", "true")
os.environ.setdefault("JSON_LOGS", "false")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import database.models  # noqa: F401
from api.dependencies import get_cv_storage
from api.main import app
from core.security import create_access_token
from core.storage.local import LocalStorage
from database.engine import Base, build_engine, get_db
from database.models.catalogs import Benefit, Category, Location, Skill
from database.models.jobs import ExperienceLevel, Job, JobStatus, WorkType
from database.models.users import User, UserRole


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite database per test, with foreign keys enforced."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Session for arranging and inspecting data outside the API."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def cv_storage(tmp_path):
    return LocalStorage(str(tmp_path / "cv"))


@pytest.fixture
async def client(session_factory, cv_storage):
    """HTTP client bound to the test database and CV storage."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cv_storage] = lambda: cv_storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def users(db_session):
    """One admin, two employers and two candidates."""
    rows = {
        "admin": User(id=1, email="admin@example.com", name="Admin", role=UserRole.ADMIN),
        "employer": User(id=2, email="employer@example.com", name="Acme Hiring", role=UserRole.EMPLOYER),
        "other_employer": User(id=3, email="globex@example.com", name="Globex Hiring", role=UserRole.EMPLOYER),
        "candidate": User(id=4, email="ada@example.com", name="Ada", role=UserRole.CANDIDATE),
        "other_candidate": User(id=5, email="alan@example.com", name="Alan", role=UserRole.CANDIDATE),
    }
    db_session.add_all(rows.values())
    await db_session.commit()
    return rows


def bearer(user_id: int, role: UserRole) -> dict[str, str]:
    token = create_access_token(user_id, role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_headers():
    """Headers for an arbitrary identity, including ones with no user row."""
    return bearer


@pytest.fixture
def headers(users):
    """Authorization headers keyed like ``users``."""
    return {key: bearer(user.id, user.role) for key, user in users.items()}


@pytest.fixture
async def catalogs(db_session):
    """A few rows in every catalog."""
    db_session.add_all([
        Location(id=1, name="Berlin"),
        Location(id=2, name="Lisbon"),
        Location(id=3, name="Remote EU"),
        Skill(id=1, name="Python"),
        Skill(id=2, name="PostgreSQL"),
        Skill(id=3, name="Go"),
        Skill(id=4, name="Pandas"),
        Skill(id=5, name="Perl"),
        Skill(id=6, name="PHP"),
        Skill(id=7, name="Prolog"),
        Benefit(id=1, name="Health insurance"),
        Benefit(id=2, name="Remote budget"),
        Category(id=1, name="Engineering"),
        Category(id=2, name="Data"),
    ])
    await db_session.commit()


@pytest.fixture
def job_payload():
    return {
        "title": "Backend Engineer",
        "description": "Build and run the APIs behind our job board.",
        "deadline": "2030-01-31",
        "experience_level": "intermediate",
        "salary_from": 50000,
        "salary_to": 80000,
        "work_type": "remote",
        "location_id": 1,
    }


@pytest.fixture
def make_job(db_session, users, catalogs):
    """Insert a job directly, bypassing the API."""

    async def _make_job(
        title: str = "Backend Engineer",
        status: JobStatus = JobStatus.OPEN,
        work_type: WorkType = WorkType.REMOTE,
        employer: str = "employer",
        **overrides,
    ) -> Job:
        values = {
            "title": title,
            "slug": f"{title.lower().replace(' ', '-')}-{uuid.uuid4().hex[:6]}",
            "description": f"{title} wanted.",
            "experience_level": ExperienceLevel.INTERMEDIATE,
            "work_type": work_type,
            "status": status,
            "salary_from": 50000,
            "salary_to": 80000,
            "deadline": date(2030, 1, 31),
            "location_id": 1,
            "employer_id": users[employer].id,
            "number_of_applications": 0,
        }
        values.update(overrides)
        job = Job(**values)
        db_session.add(job)
        await db_session.commit()
        return job

    return _make_job
