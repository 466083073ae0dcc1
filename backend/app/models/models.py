"""
SQLAlchemy models.

Three tables:
- profiles: who answered (plus the demographics the analytics page groups by)
- assessments: one completed questionnaire, its score, tier, and any
  AI recommendations generated for it
- industry_trends: saved trend lookups

Column types are the portable ones (Uuid, JSON) so the same models run
on Postgres in production and SQLite in tests.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Profile(Base):
    """A respondent. Identity is managed by the auth provider; we only
    keep the ID it hands us plus profile fields."""

    __tablename__ = "profiles"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    industry: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    user_role: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    user_department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    annual_revenue: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    user_country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    assessments: Mapped[List["Assessment"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, industry={self.industry})>"


class Assessment(Base):
    """One completed questionnaire."""

    __tablename__ = "assessments"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
    )
    assessment_type: Mapped[str] = mapped_column(String(20), nullable=False)
    # {"1": 4, "2": 3, ...}: question ID → Likert value
    answers: Mapped[dict] = mapped_column(JSON, nullable=False)
    total_score: Mapped[int] = mapped_column(Integer, nullable=False)
    readiness_level: Mapped[str] = mapped_column(String(20), nullable=False)
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    ai_recommendations: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    user: Mapped["Profile"] = relationship(back_populates="assessments")

    def __repr__(self) -> str:
        return f"<Assessment(id={self.id}, type={self.assessment_type}, score={self.total_score})>"


class IndustryTrendRecord(Base):
    """A saved set of trends for an industry."""

    __tablename__ = "industry_trends"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
    )
    industry: Mapped[str] = mapped_column(String(100), nullable=False)
    # [{"trend": "...", "implication": "..."}]
    trends: Mapped[list] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
