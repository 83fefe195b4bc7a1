"""
Local database backend.

Serves the repository protocols from the SQLAlchemy schema in src.models.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.integrations.base import AuthProvider, Backend
from src.integrations.database.gateway import (
    SQLAlchemyTableGateway,
    StaticAuthProvider,
    model_for_table,
)
from src.integrations.repositories import build_gateway_backend


def build_database_backend(
    session_factory: async_sessionmaker[AsyncSession],
    auth: Optional[AuthProvider] = None,
    account_id: Optional[str] = None,
) -> Backend:
    """
    Build a Backend over the local database.

    Args:
        session_factory: Session factory bound to the target engine
        auth: Session lookup; defaults to a StaticAuthProvider for account_id
        account_id: Account used when no auth provider is given
    """
    return build_gateway_backend(
        auth or StaticAuthProvider(account_id),
        lambda table: SQLAlchemyTableGateway(session_factory, model_for_table(table)),
    )


__all__ = [
    "SQLAlchemyTableGateway",
    "StaticAuthProvider",
    "build_database_backend",
    "model_for_table",
]
