"""
Storage backends for S.C.O.P.E.

Provides the repository protocols and chooses an implementation from
settings: the local SQLAlchemy database or the hosted REST service.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.config import Settings, get_settings
from src.integrations.base import AuthProvider, Backend, SessionUser, TableGateway
from src.integrations.database import build_database_backend
from src.integrations.rest import RestClient, build_rest_backend

logger = logging.getLogger(__name__)

# Singleton instance
_backend: Optional[Backend] = None


def build_backend(
    settings: Optional[Settings] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> Backend:
    """
    Create the backend selected by settings.backend_provider.

    Args:
        settings: Settings to use (defaults to get_settings())
        session_factory: Session factory for the local backend; defaults to
            the application's AsyncSessionLocal

    Raises:
        ValueError: If the REST backend is selected but not configured
    """
    settings = settings or get_settings()

    if settings.uses_rest_backend:
        settings.validate_rest_config()
        client = RestClient(
            settings.rest_url,
            settings.rest_api_key,
            access_token=settings.rest_access_token,
            timeout=settings.rest_timeout_seconds,
        )
        logger.info(f"Using hosted REST backend at {settings.rest_url}")
        return build_rest_backend(client)

    if session_factory is None:
        from src.database import AsyncSessionLocal
        session_factory = AsyncSessionLocal

    logger.info("Using local database backend")
    return build_database_backend(session_factory, account_id=settings.account_id)


def get_backend() -> Backend:
    """Get the backend singleton, creating it on first use."""
    global _backend
    if _backend is None:
        _backend = build_backend()
    return _backend


def reset_backend() -> None:
    """Reset the backend singleton (for testing)."""
    global _backend
    _backend = None


__all__ = [
    "AuthProvider",
    "Backend",
    "SessionUser",
    "TableGateway",
    "build_backend",
    "get_backend",
    "reset_backend",
]
