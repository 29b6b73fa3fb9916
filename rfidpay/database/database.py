"""Database configuration module."""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from rfidpay.exceptions.api_exception import InfrastructureFailure
from rfidpay.settings import settings

logger = logging.getLogger(__name__)

Base = declarative_base()

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def init_engine(url: Optional[str] = None) -> async_sessionmaker[AsyncSession]:
    """
    Create the engine and session factory.

    Raises InfrastructureFailure when no database configuration is
    available rather than handing out sessions bound to an unconfigured
    client.
    """
    global _engine, _session_factory

    url = url or settings.resolve_database_url()
    if not url:
        logger.error("Database is not configured")
        raise InfrastructureFailure()

    _engine = create_async_engine(
        url,
        echo=settings.DEBUG,
    )
    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return _session_factory


async def dispose_engine() -> None:
    """Close pooled connections."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory, creating the engine on first use."""
    if _session_factory is None:
        return init_engine()
    return _session_factory


async def get_db() -> AsyncSession:
    """Dependency for database session."""
    async with get_session_factory()() as session:
        yield session
