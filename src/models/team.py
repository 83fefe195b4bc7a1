"""
Team member and per-event staffing models.

Entities:
- TeamMember: a person who can be staffed on events
- TeamAssignment: a member's assignment at one event
- TrafficControl: a traffic-control post at one event (member or free-text staff)
- Supervisor: an event supervisor with optional contact details
"""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, true
from sqlalchemy.orm import Mapped, mapped_column

from src.defaults import (
    AREA_ASSIGNMENT_PLACEHOLDER,
    ASSIGNMENT_TYPE_PLACEHOLDER,
    EQUIPMENT_AREA_PLACEHOLDER,
    PATROL_VEHICLE_PLACEHOLDER,
    TIME_PLACEHOLDER,
)
from src.models.base import AccountScopedMixin, Base, TimestampMixin


class TeamMember(AccountScopedMixin, TimestampMixin, Base):
    """
    A person available for staffing.

    Inactive members are kept (history stays intact) but hidden from
    assignment pickers.
    """

    __tablename__ = "team_members"

    member_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    member_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Display name"
    )

    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=true(),
        doc="Whether the member can be assigned"
    )

    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    emergency_contact: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    emergency_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    __table_args__ = (
        Index("idx_member_user_name", "user_id", "member_name"),
    )

    def __repr__(self) -> str:
        return f"<TeamMember(member_id='{self.member_id}', name='{self.member_name}', active={self.active})>"


class TeamAssignment(AccountScopedMixin, TimestampMixin, Base):
    """A team member's assignment (category, area, shift) at an event."""

    __tablename__ = "team_assignments"

    assignment_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    event_id: Mapped[str] = mapped_column(
        ForeignKey("events.event_id", ondelete="CASCADE"),
        nullable=False,
    )

    member_id: Mapped[str] = mapped_column(
        ForeignKey("team_members.member_id", ondelete="CASCADE"),
        nullable=False,
    )

    assignment_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        server_default=ASSIGNMENT_TYPE_PLACEHOLDER,
        doc="Assignment category label"
    )

    equipment_area: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        server_default=EQUIPMENT_AREA_PLACEHOLDER,
    )

    start_time: Mapped[str] = mapped_column(
        String(8), nullable=False, server_default=TIME_PLACEHOLDER
    )
    end_time: Mapped[str] = mapped_column(
        String(8), nullable=False, server_default=TIME_PLACEHOLDER
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    sort_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (
        Index("idx_assignment_event", "user_id", "event_id", "sort_order"),
    )


class TrafficControl(AccountScopedMixin, TimestampMixin, Base):
    """
    A traffic-control post at an event.

    Either member_id or staff_name identifies who holds the post.
    """

    __tablename__ = "traffic_controls"

    traffic_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    event_id: Mapped[str] = mapped_column(
        ForeignKey("events.event_id", ondelete="CASCADE"),
        nullable=False,
    )

    member_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("team_members.member_id", ondelete="SET NULL"),
        nullable=True,
    )

    staff_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    patrol_vehicle: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        server_default=PATROL_VEHICLE_PLACEHOLDER,
    )

    area_assignment: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        server_default=AREA_ASSIGNMENT_PLACEHOLDER,
    )

    sort_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (
        Index("idx_traffic_event", "user_id", "event_id", "sort_order"),
    )


class Supervisor(AccountScopedMixin, TimestampMixin, Base):
    """An event supervisor."""

    __tablename__ = "supervisors"

    supervisor_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    event_id: Mapped[str] = mapped_column(
        ForeignKey("events.event_id", ondelete="CASCADE"),
        nullable=False,
    )

    supervisor_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    sort_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (
        Index("idx_supervisor_event", "user_id", "event_id", "sort_order"),
    )
