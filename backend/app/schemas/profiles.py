"""
Pydantic schemas for respondent profiles and the analytics summary.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class ProfileUpsertRequest(BaseModel):
    email: Optional[str] = None
    industry: Optional[str] = None
    user_role: Optional[str] = None
    user_department: Optional[str] = None
    annual_revenue: Optional[str] = None
    user_country: Optional[str] = None


class ProfileResponse(BaseModel):
    id: UUID
    email: Optional[str] = None
    industry: Optional[str] = None
    user_role: Optional[str] = None
    user_department: Optional[str] = None
    annual_revenue: Optional[str] = None
    user_country: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RoleCount(BaseModel):
    role: str
    count: int


class NameCount(BaseModel):
    name: str
    count: int


class RangeCount(BaseModel):
    range: str
    count: int


class AnalyticsResponse(BaseModel):
    """Respondent breakdowns for the analytics charts.

    Only profiles with a role filled in are counted. Each list is sorted
    by count, highest first.
    """
    designation: list[RoleCount]
    industry: list[NameCount]
    revenue: list[RangeCount]
    country: list[NameCount]
