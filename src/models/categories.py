"""
Category models.

- AssignmentCategory: per-account labels for team assignments. Names are
  unique per account, case-insensitively (functional unique index).
- TaskCategory: colored groupings for event tasks.
"""

from typing import Optional

from sqlalchemy import Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.defaults import DEFAULT_TASK_CATEGORY_COLOR
from src.models.base import AccountScopedMixin, Base, TimestampMixin


class AssignmentCategory(AccountScopedMixin, TimestampMixin, Base):
    """A custom assignment category label."""

    __tablename__ = "assignment_categories"

    category_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    category_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Label shown in assignment pickers"
    )

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<AssignmentCategory(name='{self.category_name}')>"


Index(
    "uq_assignment_category_user_name",
    AssignmentCategory.user_id,
    func.lower(AssignmentCategory.category_name),
    unique=True,
)


class TaskCategory(AccountScopedMixin, TimestampMixin, Base):
    """A colored category used to group event tasks."""

    __tablename__ = "task_categories"

    category_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    color: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        server_default=DEFAULT_TASK_CATEGORY_COLOR,
        doc="Hex color (#RRGGBB)"
    )

    sort_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (
        Index("idx_task_category_user_order", "user_id", "sort_order"),
    )
