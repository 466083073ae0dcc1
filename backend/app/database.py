"""
Database connection and session management.

Key concepts:
- We use SQLAlchemy 2.0's async API (asyncpg against the hosted Postgres,
  aiosqlite in tests)
- AsyncSession gives us non-blocking database calls
- get_db() is a "dependency" that FastAPI injects into route handlers —
  it provides a session and ensures cleanup after each request
"""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from app.config import settings

# Pool sizing only applies to server databases; SQLite manages its own pool.
_engine_kwargs = {}
if not settings.DATABASE_URL.startswith("sqlite"):
    _engine_kwargs = {"pool_size": 5, "max_overflow": 10}

# echo=DEBUG logs all SQL in development
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **_engine_kwargs,
)

# Session factory: creates new database sessions
# - expire_on_commit=False means objects stay usable after commit
#   (without this, accessing an attribute after commit triggers a lazy load,
#    which fails with async)
AsyncSessionLocal = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def get_db():
    """FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...

    The session is closed when the request finishes, even on error.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db():
    """Create all tables defined by our models.

    Called once at startup. Schema changes beyond additive tables would
    need migrations; for now create_all is enough.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
