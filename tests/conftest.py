"""
Pytest configuration and fixtures for S.C.O.P.E. tests.

Provides a sync database session for schema tests and an in-memory async
backend plus DomainStore for store and repository tests.
"""

from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
import sqlalchemy as sa
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.orm import Session, sessionmaker

# Importing src.database registers the SQLite foreign-key pragma listener
from src.database import (
    create_engine_for_url,
    create_session_factory,
    drop_all_tables,
    init_db,
)
from src.integrations.base import Backend
from src.integrations.database import StaticAuthProvider, build_database_backend
from src.models.base import Base
from src.services.store import DomainStore
from src.services.types import TeamMemberDraft

ACCOUNT_ID = "account-1"


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a clean database session for each test.

    Uses an in-memory SQLite database that is torn down after each test.

    Yields:
        Session: SQLAlchemy session for database operations
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False}
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.rollback()
        session.close()
        # Disable foreign key constraints for drop operations
        with engine.begin() as connection:
            connection.execute(sa.text("PRAGMA foreign_keys=OFF"))
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest_asyncio.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory aiosqlite engine with the full schema created."""
    engine = create_engine_for_url("sqlite:///:memory:")
    await init_db(engine)
    try:
        yield engine
    finally:
        await drop_all_tables(engine)
        await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine):
    return create_session_factory(async_engine)


@pytest.fixture
def auth() -> StaticAuthProvider:
    """Signed-in session for ACCOUNT_ID."""
    return StaticAuthProvider(ACCOUNT_ID, email="lead@example.com")


@pytest.fixture
def backend(session_factory, auth) -> Backend:
    return build_database_backend(session_factory, auth=auth)


@pytest.fixture
def other_backend(session_factory) -> Backend:
    """Backend over the same database signed in as a different account."""
    return build_database_backend(session_factory, account_id="account-2")


@pytest.fixture
def anonymous_backend(session_factory) -> Backend:
    """Backend with no active session."""
    return build_database_backend(session_factory, auth=StaticAuthProvider(None))


@pytest.fixture
def store(backend: Backend) -> DomainStore:
    return DomainStore(backend)


@pytest_asyncio.fixture
async def members(store: DomainStore):
    """Three persisted team members (one inactive), cached in the store."""
    alice = (await store.add_team_member(TeamMemberDraft(member_name="Alice Ng"))).unwrap()
    bob = (await store.add_team_member(TeamMemberDraft(member_name="Bob Ruiz"))).unwrap()
    carol = (
        await store.add_team_member(TeamMemberDraft(member_name="Carol Diaz", active=False))
    ).unwrap()
    return alice, bob, carol
