"""
Base model definitions for SQLAlchemy.

Provides:
- Declarative Base shared by every table
- TimestampMixin with created_at / updated_at audit columns
- AccountScopedMixin adding the owning-account column
- to_dict() serialization used by the table gateways
"""

from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all models."""

    def to_dict(self) -> dict[str, Any]:
        """
        Convert model instance to a plain row dictionary.

        Date and datetime values are rendered as ISO 8601 strings so rows
        have the same shape whichever backend produced them.

        Returns:
            Dictionary with all column values (excludes relationships)
        """
        row = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, (date, datetime)):
                value = value.isoformat()
            row[column.name] = value
        return row


class TimestampMixin:
    """
    Audit timestamps shared by all tables.

    - created_at: Timestamp of record creation (UTC)
    - updated_at: Timestamp of last update (UTC, auto-updates)
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Timestamp of record creation (UTC)"
    )

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=True,
        doc="Timestamp of last update (UTC)"
    )


class AccountScopedMixin:
    """Rows owned by one authenticated account; every query filters on user_id."""

    user_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
        doc="Owning account id"
    )
