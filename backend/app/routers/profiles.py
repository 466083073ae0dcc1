"""
Profile and analytics endpoints.

1. PUT /profiles/{id} — Create or update a respondent profile
2. GET /profiles/{id} — Read a profile
3. GET /analytics — Respondent counts by designation, industry, revenue, country

Identity comes from the auth provider; the profile ID is whatever user ID
it issued. The analytics endpoint is READ-ONLY aggregation over profiles.
"""

import logging
from collections import Counter
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models import Profile
from app.schemas.profiles import (
    AnalyticsResponse,
    NameCount,
    ProfileResponse,
    ProfileUpsertRequest,
    RangeCount,
    RoleCount,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["profiles"])


@router.put("/profiles/{profile_id}", response_model=ProfileResponse)
async def upsert_profile(
    profile_id: UUID,
    request: ProfileUpsertRequest,
    db: AsyncSession = Depends(get_db),
):
    """Create the profile if it doesn't exist, otherwise update the given fields.

    Fields omitted from the request body are left unchanged.
    """
    profile = await db.get(Profile, profile_id)
    if not profile:
        profile = Profile(id=profile_id)
        db.add(profile)
        logger.info(f"Creating profile {profile_id}")

    for key, value in request.model_dump(exclude_unset=True).items():
        setattr(profile, key, value)

    await db.commit()
    await db.refresh(profile)
    return ProfileResponse.model_validate(profile)


@router.get("/profiles/{profile_id}", response_model=ProfileResponse)
async def get_profile(
    profile_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    profile = await db.get(Profile, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ProfileResponse.model_validate(profile)


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(db: AsyncSession = Depends(get_db)):
    """Respondent breakdowns for profiles that have a role filled in.

    All four breakdowns come from one query.
    """
    result = await db.execute(
        select(
            Profile.user_role,
            Profile.industry,
            Profile.annual_revenue,
            Profile.user_country,
        ).where(Profile.user_role.is_not(None))
    )
    rows = result.all()

    roles = Counter(row.user_role for row in rows if row.user_role)
    industries = Counter(row.industry for row in rows if row.industry)
    revenues = Counter(row.annual_revenue for row in rows if row.annual_revenue)
    countries = Counter(row.user_country for row in rows if row.user_country)

    return AnalyticsResponse(
        designation=[RoleCount(role=k, count=v) for k, v in roles.most_common()],
        industry=[NameCount(name=k, count=v) for k, v in industries.most_common()],
        revenue=[RangeCount(range=k, count=v) for k, v in revenues.most_common()],
        country=[NameCount(name=k, count=v) for k, v in countries.most_common()],
    )
