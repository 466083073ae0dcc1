"""
Assemble a ReportModel from a stored assessment.

Stored data is loose: answers come back from the JSON column with string
keys, recommendations are whatever the model returned. Everything is
normalized here so the layout engine only sees typed, complete values
(missing text becomes an empty string).
"""

from datetime import datetime
from typing import Optional

from app.services.insights import unwrap_recommendations
from app.services.questionnaires import QUESTION_BANKS
from app.services.readiness import coerce_level, get_action_plan
from app.services.report_layout import QuestionAnswer, Recommendation, ReportModel


def normalize_answers(raw: Optional[dict]) -> dict[int, int]:
    """Convert {"1": 4, ...} from the JSON column to {1: 4, ...}.

    Keys that aren't question numbers are ignored.
    """
    answers = {}
    for key, value in (raw or {}).items():
        if str(key).isdigit() and isinstance(value, int):
            answers[int(key)] = value
    return answers


def to_recommendation(item: dict) -> Recommendation:
    def text(key: str) -> str:
        value = item.get(key)
        return "" if value is None else str(value)

    return Recommendation(
        title=text("title"),
        description=text("description"),
        priority=text("priority"),
        timeline=text("timeline"),
        impact=text("impact"),
    )


def format_completion_date(completed_at: Optional[datetime]) -> str:
    return completed_at.strftime("%B %d, %Y") if completed_at else ""


def build_report_model(assessment) -> ReportModel:
    """Build the report input from an Assessment row.

    Every question in the bank gets a pair, in bank order; questions with
    no stored answer carry answer_value 0.
    """
    level = coerce_level(assessment.readiness_level)
    answers = normalize_answers(assessment.answers)
    questions = QUESTION_BANKS.get(assessment.assessment_type, ())

    pairs = tuple(
        QuestionAnswer(
            question_id=q.id,
            question_text=q.question,
            category=q.category,
            answer_value=answers.get(q.id, 0),
        )
        for q in questions
    )
    recommendations = tuple(
        to_recommendation(item)
        for item in unwrap_recommendations(assessment.ai_recommendations or [])
        if isinstance(item, dict)
    )

    return ReportModel(
        assessment_kind=assessment.assessment_type,
        total_score=assessment.total_score,
        readiness_level=level,
        completion_date=format_completion_date(assessment.completed_at),
        question_answers=pairs,
        action_plan=get_action_plan(level),
        recommendations=recommendations,
    )
