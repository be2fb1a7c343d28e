import asyncio
import functools
import logging
from typing import AsyncGenerator
from sqlalchemy import text
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from src.common.config import settings  # Import the settings object
from src.common.exceptions import TransientStoreError

logger = logging.getLogger(__name__)

# SQLAlchemy async engine and session setup
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    future=True,
    pool_pre_ping=True,
    pool_recycle=1800,
)

async_session = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

async def connect_to_db():
    """Connect to the database."""
    try:
        # Test connection by executing a simple query
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            logger.info("Database connected successfully")
    except Exception as e:
        logger.error("Error connecting to the database: %s", e)
        raise

async def close_db_connection():
    """Close the database connection."""
    try:
        await engine.dispose()
        logger.info("Database connection closed successfully")
    except Exception as e:
        logger.error("Error closing the database connection: %s", e)
        raise

# Dependency for using a session in routes
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for use in FastAPI routes."""
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


STORE_ERRORS = (OperationalError, InterfaceError, asyncio.TimeoutError, ConnectionError)


def guard_store(func):
    """Surface connectivity failures as TransientStoreError; never retry here."""
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except STORE_ERRORS as e:
            logger.error("Store call %s failed: %s", func.__name__, e)
            raise TransientStoreError() from e
    return wrapper
