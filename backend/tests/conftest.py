"""
Test fixtures shared across all integration tests.

Architecture:
- Tests run against a throwaway SQLite database through aiosqlite. The
  models only use portable column types (Uuid, JSON), so the same schema
  works here and on Postgres. Set TEST_DATABASE_URL to point the suite at
  a real server instead.
- The environment is configured BEFORE the app is imported, because
  app.config builds its settings (and app.database its engine) at import.
- pyproject.toml sets asyncio_default_fixture_loop_scope = session so all
  tests share ONE event loop with the engine's connections.
- Seed data is committed via the app's own AsyncSessionLocal.
- Claude is never called: the API key is blanked for every test, and the
  insights dependency is overridden with a fake returning canned data.
"""

import os
import shutil
import tempfile
import uuid
from datetime import datetime, timezone

# The SQLite file lives in its own temp directory, removed after the session
TEST_DB_DIR = tempfile.mkdtemp(prefix="readiness-tests-")
os.environ["DATABASE_URL"] = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(TEST_DB_DIR, 'test_assessments.db')}",
)
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["DEBUG"] = "false"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.config import settings
from app.database import AsyncSessionLocal, Base, engine
from app.main import app
from app.models import Assessment, Profile
from app.routers.insights import get_insights_service
from app.services.insights import RecommendationsResult

# Shopfloor answers for the seed assessment: 12 answers, total 32 → Developing.
DEVELOPING_ANSWERS = {str(i): v for i, v in enumerate([1, 2, 3, 4, 5, 1, 2, 3, 4, 5, 1, 1], 1)}


class FakeInsightsService:
    """Stands in for InsightsService. Records calls, returns canned data."""

    def __init__(self):
        self.calls = []
        self.recommendations = [
            {
                "title": "Digitize Shift Handovers",
                "description": "Replace paper handover sheets with a shared tablet form.",
                "priority": "High",
                "timeline": "1-3 months",
                "impact": "Fewer missed issues between shifts",
            },
            {
                "title": "Start Sensor Pilot",
                "description": "Fit vibration sensors to the two most critical machines.",
                "priority": "Medium",
                "timeline": "3-6 months",
                "impact": "Early warning before breakdowns",
            },
        ]

    def generate_recommendations(self, assessment_type, readiness_level, answers):
        self.calls.append(("recommendations", assessment_type, readiness_level, answers))
        return RecommendationsResult(
            recommendations=list(self.recommendations),
            input_tokens=120,
            output_tokens=340,
            model="fake-model",
        )

    def industry_trends(self, industry):
        self.calls.append(("trends", industry))
        return [
            {"trend": "Predictive maintenance", "implication": "Less unplanned downtime"},
            {"trend": "Digital twins", "implication": "Faster line changeovers"},
        ]

    def best_in_class_example(self, question):
        self.calls.append(("best_in_class", question))
        return "A leading manufacturer reviews its digital roadmap every quarter."


@pytest_asyncio.fixture(scope="session")
async def setup_db():
    """Create all tables once before the test session (fresh each run)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()
    shutil.rmtree(TEST_DB_DIR, ignore_errors=True)


@pytest.fixture(autouse=True)
def blank_anthropic_key(monkeypatch):
    """Keep a real key from a local .env out of every test.

    Settings fills an empty ANTHROPIC_API_KEY from .env, so the blank set
    above isn't enough on its own.
    """
    monkeypatch.setattr(settings, "ANTHROPIC_API_KEY", "")


@pytest.fixture
def fake_insights():
    """Route every insights dependency to a fake for the duration of a test."""
    fake = FakeInsightsService()
    app.dependency_overrides[get_insights_service] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_insights_service, None)


@pytest_asyncio.fixture
async def client(setup_db):
    """Async HTTP test client against the real FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# --- Seed data fixtures ---
# Each fixture opens its own session, commits, and closes.
# Data is then visible to the app's sessions (same database, committed).

@pytest_asyncio.fixture
async def test_profile(setup_db):
    """Create a respondent profile with demographics filled in."""
    profile = Profile(
        id=uuid.uuid4(),
        email=f"test_{uuid.uuid4().hex[:8]}@example.com",
        industry="Automotive",
        user_role="Plant Manager",
        user_department="Operations",
        annual_revenue="$10M-$50M",
        user_country="Germany",
    )
    async with AsyncSessionLocal() as session:
        session.add(profile)
        await session.commit()
        await session.refresh(profile)
    return profile


@pytest_asyncio.fixture
async def test_assessment(test_profile):
    """A scored shopfloor assessment with no recommendations yet."""
    assessment = Assessment(
        id=uuid.uuid4(),
        user_id=test_profile.id,
        assessment_type="shopfloor",
        answers=dict(DEVELOPING_ANSWERS),
        total_score=32,
        readiness_level="Developing",
        completed_at=datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc),
    )
    async with AsyncSessionLocal() as session:
        session.add(assessment)
        await session.commit()
        await session.refresh(assessment)
    return assessment


@pytest_asyncio.fixture
async def test_assessment_with_recommendations(test_profile):
    """A C-level assessment that already has stored AI recommendations.

    One answer is missing so the report has to show "Not Answered".
    """
    answers = {str(i): 4 for i in range(1, 12)}
    assessment = Assessment(
        id=uuid.uuid4(),
        user_id=test_profile.id,
        assessment_type="c_level",
        answers=answers,
        total_score=44,
        readiness_level="Advanced",
        completed_at=datetime(2026, 4, 2, 15, 0, tzinfo=timezone.utc),
        ai_recommendations=[
            {
                "title": "Build a Data Platform",
                "description": "Consolidate plant data into one governed platform.",
                "priority": "High",
                "timeline": "6+ months",
                "impact": "One source of truth for KPIs",
            },
            {"title": "Partial item", "priority": None},
        ],
    )
    async with AsyncSessionLocal() as session:
        session.add(assessment)
        await session.commit()
        await session.refresh(assessment)
    return assessment
