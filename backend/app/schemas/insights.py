"""
Pydantic schemas for industry trends and best-in-class examples.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class IndustryTrendsRequest(BaseModel):
    industry: str = Field(min_length=1, max_length=100)
    user_id: Optional[UUID] = None  # when set, the result is saved


class IndustryTrend(BaseModel):
    trend: str
    implication: str = ""


class IndustryTrendsResponse(BaseModel):
    industry: str
    trends: list[IndustryTrend]
    saved_id: Optional[UUID] = None


class IndustryTrendRecordResponse(BaseModel):
    id: UUID
    industry: str
    trends: list[IndustryTrend]
    created_at: datetime

    model_config = {"from_attributes": True}


class BestInClassRequest(BaseModel):
    question: str = Field(min_length=1)


class BestInClassResponse(BaseModel):
    example: str
