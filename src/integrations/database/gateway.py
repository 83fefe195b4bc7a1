"""
SQLAlchemy table gateway for the local database backend.

Each gateway wraps one ORM model and runs every call in its own session and
transaction. Rows come back through Model.to_dict(), so server defaults
(placeholders, audit timestamps) are included.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.integrations.base import Ordering, Row, SessionUser
from src.models.base import Base
from src.services.exceptions import BackendError

logger = logging.getLogger(__name__)


def _integrity_code(error: IntegrityError) -> str:
    """SQLSTATE when the driver exposes one, else a best guess from the message."""
    original = error.orig
    code = getattr(original, "pgcode", None) or getattr(original, "sqlstate", None)
    if code:
        return str(code)
    if "unique" in str(original).lower():
        return "23505"
    return "integrity"


def _translate_error(error: SQLAlchemyError, table: str) -> BackendError:
    if isinstance(error, IntegrityError):
        return BackendError(
            f"Integrity error on {table}: {error.orig}",
            code=_integrity_code(error),
            original_error=error,
        )
    return BackendError(f"Database error on {table}: {error}", original_error=error)


def model_for_table(table: str) -> type[Base]:
    """Look up the mapped model class for a table name."""
    for mapper in Base.registry.mappers:
        if mapper.class_.__tablename__ == table:
            return mapper.class_
    raise KeyError(f"No model mapped to table '{table}'")


class SQLAlchemyTableGateway:
    """
    TableGateway over one ORM model.

    Args:
        session_factory: async_sessionmaker bound to the engine
        model: Mapped model class (e.g. src.models.Event)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: type[Base],
    ):
        self._session_factory = session_factory
        self._model = model
        self.table = model.__tablename__

    def _conditions(self, filters: Row) -> list:
        return [getattr(self._model, column) == value for column, value in filters.items()]

    async def select(self, filters: Row, order_by: Ordering = ()) -> list[Row]:
        stmt = select(self._model).where(*self._conditions(filters))
        for column, descending in order_by:
            attribute = getattr(self._model, column)
            stmt = stmt.order_by(attribute.desc().nulls_last() if descending else attribute.asc())

        async with self._session_factory() as session:
            try:
                result = await session.execute(stmt)
            except SQLAlchemyError as e:
                logger.error(f"Select on {self.table} failed: {e}")
                raise _translate_error(e, self.table) from e
            rows = [instance.to_dict() for instance in result.scalars().all()]

        logger.debug(f"Selected {len(rows)} rows from {self.table}")
        return rows

    async def insert(self, rows: Sequence[Row]) -> list[Row]:
        instances = [self._model(**row) for row in rows]

        async with self._session_factory() as session:
            try:
                session.add_all(instances)
                await session.flush()
                for instance in instances:
                    await session.refresh(instance)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Insert into {self.table} failed: {e}")
                raise _translate_error(e, self.table) from e

        logger.debug(f"Inserted {len(instances)} rows into {self.table}")
        return [instance.to_dict() for instance in instances]

    async def update(self, filters: Row, values: Row) -> list[Row]:
        async with self._session_factory() as session:
            try:
                result = await session.execute(
                    select(self._model).where(*self._conditions(filters))
                )
                instances = result.scalars().all()
                for instance in instances:
                    for column, value in values.items():
                        setattr(instance, column, value)
                await session.flush()
                for instance in instances:
                    await session.refresh(instance)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Update on {self.table} failed: {e}")
                raise _translate_error(e, self.table) from e

            return [instance.to_dict() for instance in instances]

    async def delete(self, filters: Row) -> int:
        async with self._session_factory() as session:
            try:
                result = await session.execute(
                    delete(self._model).where(*self._conditions(filters))
                )
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Delete from {self.table} failed: {e}")
                raise _translate_error(e, self.table) from e

        return result.rowcount or 0


class StaticAuthProvider:
    """
    Session lookup for the local backend.

    The local database has no sign-in flow; the configured account id is the
    session user. None means signed out.
    """

    def __init__(self, account_id: Optional[str], email: Optional[str] = None):
        self._account_id = account_id
        self._email = email

    async def get_user(self) -> Optional[SessionUser]:
        if not self._account_id:
            return None
        return SessionUser(id=self._account_id, email=self._email)

    def sign_in(self, account_id: str) -> None:
        self._account_id = account_id

    def sign_out(self) -> None:
        self._account_id = None
