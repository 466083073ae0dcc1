"""
Pydantic schemas for the Questionnaire and Assessment APIs.
"""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from app.services.questionnaires import QUESTION_BANKS

AssessmentType = Literal["c_level", "shopfloor"]


class QuestionResponse(BaseModel):
    id: int
    question: str
    category: str

    model_config = {"from_attributes": True}


class LikertOptionResponse(BaseModel):
    value: int
    label: str
    description: str

    model_config = {"from_attributes": True}


class QuestionnaireResponse(BaseModel):
    """A full questionnaire: questions in display order plus the answer scale."""
    assessment_type: AssessmentType
    title: str
    questions: list[QuestionResponse]
    scale: list[LikertOptionResponse]


class AssessmentSubmitRequest(BaseModel):
    """A completed questionnaire.

    Every question in the bank must be answered with a value from 1 to 5.
    JSON object keys arrive as strings; Pydantic coerces them to ints.
    """
    user_id: UUID
    assessment_type: AssessmentType
    answers: dict[int, int]

    @model_validator(mode="after")
    def check_answers(self):
        expected = {q.id for q in QUESTION_BANKS[self.assessment_type]}
        missing = sorted(expected - self.answers.keys())
        unknown = sorted(self.answers.keys() - expected)
        if missing:
            raise ValueError(f"Unanswered questions: {missing}")
        if unknown:
            raise ValueError(f"Unknown question IDs: {unknown}")
        out_of_range = sorted(k for k, v in self.answers.items() if not 1 <= v <= 5)
        if out_of_range:
            raise ValueError(f"Answers must be between 1 and 5 (questions {out_of_range})")
        return self


class AssessmentResponse(BaseModel):
    """A scored assessment."""
    id: UUID
    user_id: UUID
    assessment_type: str
    answers: dict[int, int]
    total_score: int
    readiness_level: str
    readiness_description: str
    completed_at: datetime
    has_recommendations: bool
    created_at: datetime


class ActionPlanResponse(BaseModel):
    readiness_level: str
    title: str
    meaning: str
    next_steps: list[str]


class RecommendationItem(BaseModel):
    """One AI recommendation. Missing fields default to empty strings."""
    title: str = ""
    description: str = ""
    priority: str = ""
    timeline: str = ""
    impact: str = ""


class RecommendationsResponse(BaseModel):
    assessment_id: UUID
    recommendations: list[RecommendationItem] = Field(default_factory=list)
    model: Optional[str] = None
