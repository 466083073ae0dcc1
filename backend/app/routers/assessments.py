"""
Questionnaire and assessment API endpoints.

These handle the assessment lifecycle:
1. GET /questionnaires/{type} — The questions and answer scale for a survey
2. POST /assessments — Submit answers → scored, classified, saved
3. GET /assessments?user_id= — A respondent's assessment history
4. GET /assessments/{id} — One scored assessment
5. GET /assessments/{id}/action-plan — Fixed next steps for its readiness tier
6. POST /assessments/{id}/recommendations — Generate AI recommendations (Claude)
7. GET /assessments/{id}/recommendations — Previously generated recommendations
8. GET /assessments/{id}/report/pdf — Download the full report as a PDF

Scoring is synchronous and cheap. Recommendations take a few seconds
(one Claude call). PDFs are generated on demand from stored data, never
stored themselves.
"""

import asyncio
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.models import Assessment, Profile
from app.routers.insights import get_insights_service
from app.schemas.assessments import (
    ActionPlanResponse,
    AssessmentResponse,
    AssessmentSubmitRequest,
    AssessmentType,
    LikertOptionResponse,
    QuestionnaireResponse,
    QuestionResponse,
    RecommendationItem,
    RecommendationsResponse,
)
from app.services.insights import InsightsService, InsightsUnavailableError
from app.services.pdf_report import ReportGenerationError, export_assessment_pdf
from app.services.questionnaires import LIKERT_SCALE, display_name, get_questions
from app.services.readiness import (
    calculate_readiness_level,
    calculate_total_score,
    coerce_level,
    get_action_plan,
    get_tier,
)
from app.services.report_builder import build_report_model, normalize_answers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["assessments"])


@router.get("/questionnaires/{assessment_type}", response_model=QuestionnaireResponse)
async def get_questionnaire(assessment_type: AssessmentType):
    """Questions in display order plus the 1-5 answer scale."""
    return QuestionnaireResponse(
        assessment_type=assessment_type,
        title=f"{display_name(assessment_type)} Assessment",
        questions=[QuestionResponse(**asdict(q)) for q in get_questions(assessment_type)],
        scale=[LikertOptionResponse(**asdict(o)) for o in LIKERT_SCALE],
    )


@router.post("/assessments", response_model=AssessmentResponse, status_code=201)
async def submit_assessment(
    request: AssessmentSubmitRequest,
    db: AsyncSession = Depends(get_db),
):
    """Score a completed questionnaire and save it.

    The total is the sum of all 12 answers (12-60) and maps onto one of
    four readiness tiers.
    """
    profile = await db.get(Profile, request.user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    total_score = calculate_total_score(request.answers)
    level = calculate_readiness_level(total_score)

    assessment = Assessment(
        user_id=request.user_id,
        assessment_type=request.assessment_type,
        # JSON object keys are strings; store them that way explicitly
        answers={str(k): v for k, v in request.answers.items()},
        total_score=total_score,
        readiness_level=level.value,
        completed_at=datetime.now(timezone.utc),
    )
    db.add(assessment)
    await db.commit()
    await db.refresh(assessment)

    logger.info(
        f"Assessment {assessment.id} scored {total_score} ({level.value}) "
        f"for {request.assessment_type}"
    )
    return _to_response(assessment)


@router.get("/assessments", response_model=list[AssessmentResponse])
async def list_assessments(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """A respondent's assessments, newest first."""
    result = await db.execute(
        select(Assessment)
        .where(Assessment.user_id == user_id)
        .order_by(Assessment.completed_at.desc())
    )
    return [_to_response(a) for a in result.scalars().all()]


@router.get("/assessments/{assessment_id}", response_model=AssessmentResponse)
async def get_assessment(
    assessment_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    assessment = await _get_assessment(db, assessment_id)
    return _to_response(assessment)


@router.get("/assessments/{assessment_id}/action-plan", response_model=ActionPlanResponse)
async def get_assessment_action_plan(
    assessment_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """The fixed action plan for the assessment's readiness tier."""
    assessment = await _get_assessment(db, assessment_id)
    level = coerce_level(assessment.readiness_level)
    plan = get_action_plan(level)
    return ActionPlanResponse(
        readiness_level=level.value,
        title=plan.title,
        meaning=plan.meaning,
        next_steps=list(plan.next_steps),
    )


@router.post(
    "/assessments/{assessment_id}/recommendations",
    response_model=RecommendationsResponse,
)
async def generate_recommendations(
    assessment_id: UUID,
    db: AsyncSession = Depends(get_db),
    service: InsightsService = Depends(get_insights_service),
):
    """Generate AI recommendations and store them on the assessment.

    Calling again replaces the stored recommendations.
    """
    assessment = await _get_assessment(db, assessment_id)

    try:
        result = await asyncio.to_thread(
            service.generate_recommendations,
            assessment.assessment_type,
            assessment.readiness_level,
            normalize_answers(assessment.answers),
        )
    except InsightsUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))

    items = [_to_item(rec) for rec in result.recommendations if isinstance(rec, dict)]
    assessment.ai_recommendations = [item.model_dump() for item in items]
    await db.commit()

    logger.info(
        f"Stored {len(items)} recommendations for assessment {assessment.id} "
        f"({result.input_tokens} in / {result.output_tokens} out tokens)"
    )
    return RecommendationsResponse(
        assessment_id=assessment.id,
        recommendations=items,
        model=result.model or None,
    )


@router.get(
    "/assessments/{assessment_id}/recommendations",
    response_model=RecommendationsResponse,
)
async def get_recommendations(
    assessment_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    assessment = await _get_assessment(db, assessment_id)
    stored = assessment.ai_recommendations or []
    return RecommendationsResponse(
        assessment_id=assessment.id,
        recommendations=[_to_item(rec) for rec in stored if isinstance(rec, dict)],
    )


@router.get("/assessments/{assessment_id}/report/pdf")
async def download_report_pdf(
    assessment_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Download the assessment report as a PDF.

    Built on the fly from the stored answers, tier, and any saved
    recommendations. Layout is fast (no I/O), so there's no caching.
    """
    assessment = await _get_assessment(db, assessment_id)
    model = build_report_model(assessment)

    try:
        filename, pdf_bytes = export_assessment_pdf(
            model,
            product_name=settings.REPORT_PRODUCT_NAME,
            file_prefix=settings.REPORT_FILE_PREFIX,
        )
    except ReportGenerationError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# --- Helpers ---

async def _get_assessment(db: AsyncSession, assessment_id: UUID) -> Assessment:
    """Load an assessment or raise 404."""
    result = await db.execute(
        select(Assessment).where(Assessment.id == assessment_id)
    )
    assessment = result.scalar_one_or_none()
    if not assessment:
        raise HTTPException(status_code=404, detail="Assessment not found")
    return assessment


def _to_item(rec: dict) -> RecommendationItem:
    """Coerce a loosely-shaped recommendation dict, blanking missing fields."""
    return RecommendationItem(**{
        key: "" if rec.get(key) is None else str(rec.get(key))
        for key in RecommendationItem.model_fields
    })


def _to_response(assessment: Assessment) -> AssessmentResponse:
    level = coerce_level(assessment.readiness_level)
    return AssessmentResponse(
        id=assessment.id,
        user_id=assessment.user_id,
        assessment_type=assessment.assessment_type,
        answers=normalize_answers(assessment.answers),
        total_score=assessment.total_score,
        readiness_level=assessment.readiness_level,
        readiness_description=get_tier(level).description,
        completed_at=assessment.completed_at,
        has_recommendations=bool(assessment.ai_recommendations),
        created_at=assessment.created_at,
    )
