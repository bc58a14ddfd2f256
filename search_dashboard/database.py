import asyncio
import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from search_dashboard.config import settings
from search_dashboard.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> AsyncEngine:
    """Create the async engine with environment-based pool configuration."""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        return create_async_engine(database_url, echo=settings.debug)

    connect_args = {}
    if url.get_backend_name() == "postgresql":
        # Timestamps are stored and bucketed in UTC
        server_settings = {"timezone": "UTC"}
        if settings.db_statement_timeout_ms:
            server_settings["statement_timeout"] = str(settings.db_statement_timeout_ms)
            server_settings["idle_in_transaction_session_timeout"] = str(settings.db_statement_timeout_ms)
        connect_args["server_settings"] = server_settings

    if settings.is_production:
        return create_async_engine(
            database_url,
            pool_size=20,
            max_overflow=10,
            pool_timeout=60,
            pool_recycle=1800,
            pool_pre_ping=True,
            connect_args=connect_args,
        )

    return create_async_engine(
        database_url,
        echo=settings.debug,  # Enable query logging in debug mode
        pool_size=5,
        max_overflow=5,
        pool_timeout=30,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


engine = build_engine(settings.database_url)

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db():
    async with AsyncSessionLocal() as db:
        try:
            yield db
        except Exception as e:
            logger.error(f"Database session error: {e}")
            raise


async def wait_for_database(retries: int = 5, delay: float = 5.0) -> None:
    """Verify connectivity at startup, retrying before giving up."""
    for attempt in range(1, retries + 1):
        try:
            async with engine.connect() as conn:
                if engine.dialect.name == "postgresql":
                    version = (await conn.execute(text("SELECT version()"))).scalar()
                    logger.info(f"Database: {version}")
                else:
                    await conn.execute(text("SELECT 1"))
            logger.info("Database connection established successfully.")
            return
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database connection attempt {attempt}/{retries} failed: {e}")
            if attempt == retries:
                logger.error("Unable to connect to the database after all retries")
                raise
            logger.info(f"Retrying in {delay} seconds...")
            await asyncio.sleep(delay)


async def check_database() -> dict:
    try:
        start = time.perf_counter()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        latency_ms = (time.perf_counter() - start) * 1000
        return {
            "status": "healthy",
            "message": "Database connection is active",
            "latency_ms": round(latency_ms, 2),
        }
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Database health check failed: {e}")
        return {"status": "unhealthy", "message": str(e)}


async def close_engine() -> None:
    await engine.dispose()
    logger.info("Database connection closed successfully")


@contextmanager
def store_operation(operation: str) -> Iterator[None]:
    """Report driver and pool failures inside the block as StorageUnavailableError."""
    try:
        yield
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Store operation '{operation}' failed: {e}")
        raise StorageUnavailableError(operation=operation, reason=str(e)) from e
