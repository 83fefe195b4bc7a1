"""
EventTask and Profile models.

EventTask tracks preparation work for an event (title, status, due date,
assignee, category). Profile holds account-level details keyed by the
account id.
"""

from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.defaults import DEFAULT_TASK_STATUS, TASK_STATUSES
from src.models.base import AccountScopedMixin, Base, TimestampMixin

_STATUS_VALUES = ", ".join(f"'{status}'" for status in TASK_STATUSES)


class EventTask(AccountScopedMixin, TimestampMixin, Base):
    """A preparation task attached to an event."""

    __tablename__ = "event_tasks"

    task_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    event_id: Mapped[str] = mapped_column(
        ForeignKey("events.event_id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DEFAULT_TASK_STATUS,
        server_default=DEFAULT_TASK_STATUS,
        doc="'Not Started', 'In Progress' or 'Completed'"
    )

    due_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    due_time: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)

    assignee_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("team_members.member_id", ondelete="SET NULL"),
        nullable=True,
    )

    category_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("task_categories.category_id", ondelete="SET NULL"),
        nullable=True,
    )

    sort_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (
        CheckConstraint(f"status IN ({_STATUS_VALUES})", name="ck_event_task_status"),
        Index("idx_task_event", "user_id", "event_id", "sort_order"),
    )


class Profile(TimestampMixin, Base):
    """Account profile; id is the account id itself."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    organization: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    role: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
