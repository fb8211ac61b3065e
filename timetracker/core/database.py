"""
Database Configuration and Session Management
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from typing import AsyncIterator
import structlog

from timetracker.core.config import settings, DATABASE_CONFIG

logger = structlog.get_logger()


def build_database_url(url: str) -> str:
    """Switch sync driver URLs to their async drivers"""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://") and not url.startswith("sqlite+aiosqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


database_url = build_database_url(settings.DATABASE_URL)

engine_kwargs = {"echo": DATABASE_CONFIG["echo"]}

# Pool sizing only applies to server databases
if database_url.startswith("postgresql"):
    engine_kwargs.update({k: v for k, v in DATABASE_CONFIG.items() if k != "echo"})
    engine_kwargs["connect_args"] = {
        "server_settings": {
            "application_name": "timetracker-api",
        }
    }

engine = create_async_engine(database_url, **engine_kwargs)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    One session per request, committed when the endpoint returns.

    Role changes and the writes they guard commit or roll back together.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def check_database_health() -> bool:
    try:
        async with engine.connect() as conn:
            return (await conn.scalar(text("SELECT 1"))) == 1
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e), backend=engine.dialect.name)
        return False
    except OSError as e:
        logger.error("Database unreachable", error=str(e), backend=engine.dialect.name)
        return False


async def init_database():
    """Create all tables, called during application startup"""
    try:
        async with engine.begin() as conn:
            # Register all models on the metadata
            import timetracker.models  # noqa: F401

            await conn.run_sync(Base.metadata.create_all)

        logger.info(
            "Database initialized",
            backend=engine.dialect.name,
            tables=sorted(Base.metadata.tables),
        )
    except Exception as e:
        logger.error("Database initialization failed", error=str(e))
        raise


async def close_database():
    """Close database connections, called during application shutdown"""
    try:
        await engine.dispose()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error("Error closing database connections", error=str(e))
