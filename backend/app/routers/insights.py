"""
Industry insight endpoints.

1. POST /insights/industry-trends — Top 5 trends for an industry (saved if user_id given)
2. GET /insights/industry-trends?user_id= — Previously saved trend lookups
3. POST /insights/best-in-class — What "best-in-class" looks like for one question

These call Claude synchronously inside the request (a few seconds).
The SDK is blocking, so calls go through asyncio.to_thread().
"""

import asyncio
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models import IndustryTrendRecord, Profile
from app.schemas.insights import (
    BestInClassRequest,
    BestInClassResponse,
    IndustryTrendRecordResponse,
    IndustryTrendsRequest,
    IndustryTrendsResponse,
)
from app.services.insights import InsightsService, InsightsUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/insights", tags=["insights"])


def get_insights_service() -> InsightsService:
    """FastAPI dependency for the Claude-backed insight service.

    Tests override this with a fake so no API calls are made.
    """
    try:
        return InsightsService()
    except InsightsUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/industry-trends", response_model=IndustryTrendsResponse)
async def industry_trends(
    request: IndustryTrendsRequest,
    db: AsyncSession = Depends(get_db),
    service: InsightsService = Depends(get_insights_service),
):
    """Generate the latest top trends for an industry.

    When user_id is provided the trends are also saved to that profile's
    history.
    """
    if request.user_id:
        profile = await db.get(Profile, request.user_id)
        if not profile:
            raise HTTPException(status_code=404, detail="Profile not found")

    try:
        trends = await asyncio.to_thread(service.industry_trends, request.industry)
    except InsightsUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"Generated {len(trends)} trends for industry '{request.industry}'")

    saved_id = None
    if request.user_id:
        record = IndustryTrendRecord(
            user_id=request.user_id,
            industry=request.industry,
            trends=trends,
        )
        db.add(record)
        await db.commit()
        await db.refresh(record)
        saved_id = record.id

    return IndustryTrendsResponse(
        industry=request.industry,
        trends=trends,
        saved_id=saved_id,
    )


@router.get("/industry-trends", response_model=list[IndustryTrendRecordResponse])
async def list_industry_trends(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Saved trend lookups for a profile, newest first."""
    result = await db.execute(
        select(IndustryTrendRecord)
        .where(IndustryTrendRecord.user_id == user_id)
        .order_by(IndustryTrendRecord.created_at.desc())
    )
    return [
        IndustryTrendRecordResponse.model_validate(record)
        for record in result.scalars().all()
    ]


@router.post("/best-in-class", response_model=BestInClassResponse)
async def best_in_class_example(
    request: BestInClassRequest,
    service: InsightsService = Depends(get_insights_service),
):
    """A 1-2 sentence example of a leading organization for one question."""
    try:
        example = await asyncio.to_thread(service.best_in_class_example, request.question)
    except InsightsUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return BestInClassResponse(example=example)
