from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool
import os
import logging

from app.core.settings import settings

logger = logging.getLogger("app.database")

FALLBACK_DATABASE_URL = "sqlite+pysqlite:///:memory:"


def _create_fallback_engine():
    """In-memory SQLite engine used when no database is configured.

    StaticPool keeps a single connection so every session sees the same
    in-memory schema.
    """
    return create_engine(
        FALLBACK_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=settings.sql_debug,
    )


def _create_configured_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=settings.sql_debug,
        )
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=int(os.getenv("DB_POOL_SIZE", "10")),
        max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "20")),
        pool_pre_ping=True,  # Validate connections before use
        pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "3600")),   # Recycle connections every hour
        echo=settings.sql_debug,
    )


if settings.database_configured:
    try:
        engine = _create_configured_engine(settings.database_url)
    except Exception as e:
        logger.error("Failed to initialize database engine: %s", e)
        logger.info("Falling back to in-memory database")
        engine = _create_fallback_engine()
else:
    engine = _create_fallback_engine()

USING_FALLBACK_DATABASE = str(engine.url) == FALLBACK_DATABASE_URL

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def create_fallback_schema():
    """Create tables on the in-memory fallback so reads return empty results."""
    if USING_FALLBACK_DATABASE:
        import app.models  # noqa: F401  (registers tables on Base)
        Base.metadata.create_all(bind=engine)


async def check_database_health():
    """Check if database is accessible."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database health check: PASSED")
        return {"status": "healthy", "database": "connected", "fallback": USING_FALLBACK_DATABASE}
    except Exception as e:
        logger.error(f"Database health check: FAILED - {str(e)}")
        return {"status": "unhealthy", "database": f"error: {str(e)}"}


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
