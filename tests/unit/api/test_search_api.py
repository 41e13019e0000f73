"""Tests for job search, autocomplete and catalog listing endpoints."""

from datetime import datetime

import pytest

from database.models.catalogs import Benefit, Category, Skill
from database.models.jobs import ExperienceLevel, JobStatus, WorkType

API = "/api/v1"


@pytest.fixture
async def listings(make_job, db_session):
    """Three open jobs with different attributes, plus a pending and a closed one."""
    python = await db_session.get(Skill, 1)
    go = await db_session.get(Skill, 3)
    health = await db_session.get(Benefit, 1)
    data = await db_session.get(Category, 2)

    jobs = {
        "backend": await make_job(
            "Backend Engineer", skills=[python], categories=[data], salary_from=60000, salary_to=90000,
        ),
        "go": await make_job(
            "Go Developer", work_type=WorkType.ONSITE, location_id=2, skills=[go], benefits=[health],
            experience_level=ExperienceLevel.EXPERT, salary_from=40000, salary_to=70000,
        ),
        "analyst": await make_job(
            "Data Analyst", work_type=WorkType.HYBRID, description="Python and SQL reporting.",
            created_at=datetime(2025, 1, 10),
        ),
        "pending": await make_job("Pending Python Role", status=JobStatus.PENDING),
        "closed": await make_job("Closed Python Role", status=JobStatus.CLOSED),
    }
    return jobs


def ids(response):
    return {job["id"] for job in response.json()}


class TestSearchJobs:

    @pytest.mark.asyncio
    async def test_no_filters_returns_open_jobs(self, client, headers, listings):
        response = await client.get(f"{API}/search", headers=headers["candidate"])

        assert response.status_code == 200
        assert ids(response) == {listings[k].id for k in ("backend", "go", "analyst")}

    @pytest.mark.asyncio
    async def test_work_type(self, client, headers, listings):
        response = await client.get(f"{API}/search", params={"work_type": "remote"}, headers=headers["candidate"])

        assert ids(response) == {listings["backend"].id}
        assert all(job["work_type"] == "remote" for job in response.json())

    @pytest.mark.asyncio
    async def test_query_matches_title_or_description(self, client, headers, listings):
        response = await client.get(f"{API}/search", params={"query": "PYTHON"}, headers=headers["candidate"])

        assert ids(response) == {listings["analyst"].id}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params,expected", [
        ({"location": "lisb"}, {"go"}),
        ({"skill": "pyth"}, {"backend"}),
        ({"benefit": "health"}, {"go"}),
        ({"category": "data"}, {"backend"}),
        ({"experience_level": "expert"}, {"go"}),
        ({"salary_from": 50000}, {"backend", "analyst"}),
        ({"salary_to": 75000}, {"go"}),
        ({"work_type": "onsite", "location": "berlin"}, set()),
    ])
    async def test_filters(self, client, headers, listings, params, expected):
        response = await client.get(f"{API}/search", params=params, headers=headers["candidate"])

        assert response.status_code == 200
        assert ids(response) == {listings[k].id for k in expected}

    @pytest.mark.asyncio
    async def test_posted_after(self, client, headers, listings):
        response = await client.get(f"{API}/search", params={"posted_after": "2025-06-01"}, headers=headers["candidate"])

        assert listings["analyst"].id not in ids(response)
        assert listings["backend"].id in ids(response)

    @pytest.mark.asyncio
    async def test_blank_parameters_ignored(self, client, headers, listings):
        response = await client.get(
            f"{API}/search", params={"query": "", "work_type": ""}, headers=headers["candidate"]
        )

        assert response.status_code == 200
        assert len(response.json()) == 3

    @pytest.mark.asyncio
    async def test_status_filter_ignored_for_candidates(self, client, headers, listings):
        response = await client.get(f"{API}/search", params={"status": "pending"}, headers=headers["candidate"])

        assert listings["pending"].id not in ids(response)

    @pytest.mark.asyncio
    async def test_admin_may_filter_by_status(self, client, headers, listings):
        response = await client.get(f"{API}/search", params={"status": "pending"}, headers=headers["admin"])

        assert ids(response) == {listings["pending"].id}

    @pytest.mark.asyncio
    async def test_no_match_is_empty_list(self, client, headers, listings):
        response = await client.get(f"{API}/search", params={"query": "astronaut"}, headers=headers["candidate"])

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_invalid_enum(self, client, headers, listings):
        response = await client.get(f"{API}/search", params={"work_type": "space"}, headers=headers["candidate"])

        assert response.status_code == 422
        assert "work_type" in response.json()["errors"]

    @pytest.mark.asyncio
    async def test_salary_beyond_bigint(self, client, headers, listings):
        response = await client.get(
            f"{API}/search", params={"salary_from": str(10**20)}, headers=headers["candidate"]
        )

        assert response.status_code == 422
        assert "salary_from" in response.json()["errors"]


class TestAutocomplete:

    @pytest.mark.asyncio
    async def test_all_returns_whole_catalog(self, client, headers, catalogs):
        response = await client.get(
            f"{API}/autocomplete", params={"query": "all", "searchtype": "skills"}, headers=headers["candidate"]
        )

        assert response.status_code == 200
        assert [item["id"] for item in response.json()] == [1, 2, 3, 4, 5, 6, 7]

    @pytest.mark.asyncio
    async def test_prefix_matches_are_limited(self, client, headers, catalogs):
        response = await client.get(
            f"{API}/autocomplete", params={"query": "p", "searchtype": "skill"}, headers=headers["candidate"]
        )

        names = [item["name"] for item in response.json()]
        assert len(names) == 5
        assert all(name.lower().startswith("p") for name in names)
        assert "Go" not in names

    @pytest.mark.asyncio
    async def test_other_catalogs(self, client, headers, catalogs):
        response = await client.get(
            f"{API}/autocomplete", params={"query": "rem", "searchtype": "locations"}, headers=headers["employer"]
        )

        assert response.json() == [{"id": 3, "name": "Remote EU"}]

    @pytest.mark.asyncio
    async def test_unknown_searchtype(self, client, headers, catalogs):
        response = await client.get(
            f"{API}/autocomplete", params={"query": "py", "searchtype": "companies"}, headers=headers["candidate"]
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_query_required(self, client, headers, catalogs):
        response = await client.get(f"{API}/autocomplete", params={"searchtype": "skill"}, headers=headers["candidate"])

        assert response.status_code == 422
        assert "query" in response.json()["errors"]


class TestCatalogs:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path,first", [
        ("locations", "Berlin"),
        ("skills", "Python"),
        ("benefits", "Health insurance"),
        ("categories", "Engineering"),
    ])
    async def test_lists_ordered_by_id(self, client, headers, catalogs, path, first):
        response = await client.get(f"{API}/{path}", headers=headers["candidate"])

        assert response.status_code == 200
        assert response.json()[0] == {"id": 1, "name": first}
