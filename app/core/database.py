from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from app.core.config import settings
from app.core.errors import InfrastructureFailure


def _engine_options(url: str) -> dict:
    options = {"echo": settings.DEBUG}  # Set DEBUG=false in .env to stop SQL logs
    # SQLite (local dev + tests) uses a single-connection pool, no sizing knobs.
    if not url.startswith("sqlite"):
        options.update(
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,  # Drops stale connections before use
        )
    return options


# ── Async Engine ──────────────────────────────────────────────────────
engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# ── Session Factory ───────────────────────────────────────────────────
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


# ── Base class for all models ─────────────────────────────────────────
class Base(DeclarativeBase):
    pass


async def commit_or_fail(db: AsyncSession, operation: str = "commit") -> None:
    """
    Commit, turning driver errors into InfrastructureFailure so they reach
    the sanitized 500 handler instead of the server's own error log.
    """
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise InfrastructureFailure(operation) from exc


# ── FastAPI Dependency ────────────────────────────────────────────────
# Inject this into any route with: db: AsyncSession = Depends(get_db)
async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await commit_or_fail(session)
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
