"""
Event model.

An Event is the parent of every staffing row (team assignments, traffic
controls, supervisors, tasks). Child tables declare ON DELETE CASCADE so the
database removes them together with their event.
"""

from typing import Optional

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.defaults import (
    LOCATION_PLACEHOLDER,
    MEET_LOCATION_PLACEHOLDER,
    PREPARED_BY_PLACEHOLDER,
    TIME_PLACEHOLDER,
)
from src.models.base import AccountScopedMixin, Base, TimestampMixin


class Event(AccountScopedMixin, TimestampMixin, Base):
    """
    A scheduled community event that needs staffing.

    Dates are stored as ISO strings (YYYY-MM-DD) and times as HH:MM strings.
    Columns the UI may leave blank are non-nullable and default to a
    placeholder value.
    """

    __tablename__ = "events"

    event_id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        doc="Opaque event id (event_<base36>-<suffix>)"
    )

    event_name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        doc="Event name"
    )

    event_date: Mapped[Optional[str]] = mapped_column(
        String(10),
        nullable=True,
        doc="Event date (YYYY-MM-DD)"
    )

    location: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        server_default=LOCATION_PLACEHOLDER,
        doc="Event location"
    )

    start_time: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        server_default=TIME_PLACEHOLDER,
        doc="Start time (HH:MM)"
    )

    end_time: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        server_default=TIME_PLACEHOLDER,
        doc="End time (HH:MM)"
    )

    team_meet_time: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        server_default=TIME_PLACEHOLDER,
        doc="Time the team meets before the event (HH:MM)"
    )

    meet_location: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        server_default=MEET_LOCATION_PLACEHOLDER,
        doc="Where the team meets"
    )

    prepared_by: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        server_default=PREPARED_BY_PLACEHOLDER,
        doc="Who prepared the staffing sheet"
    )

    prepared_date: Mapped[Optional[str]] = mapped_column(
        String(10),
        nullable=True,
        doc="Date the staffing sheet was prepared (YYYY-MM-DD)"
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Free-text notes"
    )

    __table_args__ = (
        Index("idx_event_user_date", "user_id", "event_date"),
    )

    def __repr__(self) -> str:
        return f"<Event(event_id='{self.event_id}', name='{self.event_name}', date='{self.event_date}')>"
