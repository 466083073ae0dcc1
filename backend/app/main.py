"""
Digital Readiness Assessment — FastAPI Application

This is the entry point for the backend. It:
1. Creates the FastAPI app instance
2. Configures logging and CORS (so the web frontend can talk to us)
3. Registers route handlers
4. Sets up startup/shutdown lifecycle events

Run with:
    uvicorn app.main:app --reload --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import init_db
from app.routers import assessments, insights, profiles

# IMPORTANT: Import models so SQLAlchemy registers them with Base.metadata
# before init_db() calls create_all(). Without this, no tables get created.
import app.models  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic.

    Code before 'yield' runs on startup.
    Code after 'yield' runs on shutdown.
    """
    # --- Startup ---
    logger.info("Starting Digital Readiness Assessment API...")
    await init_db()  # Create tables if they don't exist
    logger.info("Database tables created/verified")

    yield  # App is running, handling requests

    # --- Shutdown ---
    logger.info("Shutting down...")


app = FastAPI(
    title="Digital Readiness Assessment API",
    description="Industry 4.0 readiness surveys, scoring, AI recommendations, and PDF reports",
    version="1.0.0",
    lifespan=lifespan,
)

# --- CORS Middleware ---
# Without this, the frontend (localhost:3000) can't call the API (localhost:8000)
# because browsers block requests between different origins by default.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(assessments.router)
app.include_router(insights.router)
app.include_router(profiles.router)


# --- Health Check Endpoints ---

@app.get("/", tags=["health"])
async def root():
    """Root endpoint — confirms the API is alive."""
    return {
        "service": "Digital Readiness Assessment",
        "status": "running",
        "version": "1.0.0",
    }


@app.get("/health", tags=["health"])
async def health_check():
    """Detailed health check — verifies database connectivity.

    Load balancers hit this endpoint to decide whether to send traffic
    to this instance.
    """
    from sqlalchemy import text

    from app.database import AsyncSessionLocal

    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.error(f"Health check database error: {e}")
        db_status = f"error: {str(e)}"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "database": db_status,
        "environment": settings.APP_ENV,
    }
