"""
Integration tests for the Profiles and Analytics APIs.

The test database is shared across the session, so analytics assertions
check that our seeded respondents are counted rather than exact totals.
"""

import uuid

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_upsert_creates_profile(client: AsyncClient):
    profile_id = uuid.uuid4()
    response = await client.put(
        f"/api/v1/profiles/{profile_id}",
        json={"email": "ops@example.com", "industry": "Chemicals", "user_role": "COO"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == str(profile_id)
    assert data["industry"] == "Chemicals"
    assert data["user_country"] is None


@pytest.mark.asyncio
async def test_upsert_updates_only_given_fields(client: AsyncClient, test_profile):
    response = await client.put(
        f"/api/v1/profiles/{test_profile.id}",
        json={"user_country": "Austria"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["user_country"] == "Austria"
    assert data["industry"] == "Automotive"
    assert data["user_role"] == "Plant Manager"


@pytest.mark.asyncio
async def test_get_profile(client: AsyncClient, test_profile):
    response = await client.get(f"/api/v1/profiles/{test_profile.id}")

    assert response.status_code == 200
    assert response.json()["email"] == test_profile.email


@pytest.mark.asyncio
async def test_get_profile_not_found(client: AsyncClient):
    response = await client.get(f"/api/v1/profiles/{uuid.uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_analytics_counts_profiles_with_roles(client: AsyncClient):
    role = f"Role-{uuid.uuid4().hex[:6]}"
    country = f"Country-{uuid.uuid4().hex[:6]}"
    for _ in range(2):
        await client.put(
            f"/api/v1/profiles/{uuid.uuid4()}",
            json={"user_role": role, "user_country": country, "annual_revenue": "<$1M"},
        )
    # No role: excluded from every breakdown
    await client.put(
        f"/api/v1/profiles/{uuid.uuid4()}",
        json={"user_country": country},
    )

    response = await client.get("/api/v1/analytics")

    assert response.status_code == 200
    data = response.json()
    assert {"role": role, "count": 2} in data["designation"]
    assert {"name": country, "count": 2} in data["country"]
    assert any(r["range"] == "<$1M" and r["count"] >= 2 for r in data["revenue"])

    for key in ("designation", "industry", "revenue", "country"):
        counts = [entry["count"] for entry in data[key]]
        assert counts == sorted(counts, reverse=True)
