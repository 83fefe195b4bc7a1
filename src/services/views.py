"""
Derived views over a StoreState snapshot.

Pure functions producing UI-ready aggregates: child collections grouped by
event, upcoming events, display strings, the dashboard summary and the
staffing sheet handed to the PDF export.

Grouping is memoized on the identity of the source collection. The store
replaces a collection tuple whenever it changes, so an unchanged tuple can
reuse its previous grouping.
"""

from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence

from dateutil import parser as date_parser

from src.defaults import DISPLAY_PLACEHOLDER
from src.services.store import StoreState
from src.services.types import (
    Event,
    EventTask,
    Supervisor,
    TeamAssignment,
    TeamMember,
    TrafficControl,
)
from src.services.validation import TIME_PATTERN

NOT_SPECIFIED = "Not specified"
UNKNOWN_MEMBER = "Unknown Member"

# id(source) -> (source, groups); the source reference keeps the id valid
_group_cache: dict[int, tuple[Sequence, Mapping]] = {}
_GROUP_CACHE_SIZE = 32


# =============================================================================
# Grouping
# =============================================================================


def group_by_event(items: Sequence) -> Mapping[str, tuple]:
    """
    Group rows with an event_id into {event_id: (rows...)}, keeping order.

    Calling again with the same collection object returns the same mapping.
    """
    cached = _group_cache.get(id(items))
    if cached is not None and cached[0] is items:
        return cached[1]

    groups: dict[str, list] = {}
    for item in items:
        groups.setdefault(item.event_id, []).append(item)
    result = MappingProxyType({event_id: tuple(rows) for event_id, rows in groups.items()})

    if len(_group_cache) >= _GROUP_CACHE_SIZE:
        _group_cache.clear()
    _group_cache[id(items)] = (items, result)
    return result


def assignments_by_event(state: StoreState) -> Mapping[str, tuple[TeamAssignment, ...]]:
    return group_by_event(state.team_assignments)


def traffic_by_event(state: StoreState) -> Mapping[str, tuple[TrafficControl, ...]]:
    return group_by_event(state.traffic_controls)


def supervisors_by_event(state: StoreState) -> Mapping[str, tuple[Supervisor, ...]]:
    return group_by_event(state.supervisors)


def tasks_by_event(state: StoreState) -> Mapping[str, tuple[EventTask, ...]]:
    return group_by_event(state.event_tasks)


# =============================================================================
# Events
# =============================================================================


def parse_event_date(value: Optional[str]) -> Optional[date]:
    """Parse an ISO date (or datetime) string; None when absent or invalid."""
    if not value:
        return None
    try:
        return date_parser.isoparse(value).date()
    except (ValueError, OverflowError):
        return None


def upcoming_events(events: Sequence[Event], today: Optional[date] = None) -> list[Event]:
    """
    Events dated today or later, soonest first.

    When none qualify the full list is returned in its original order.
    """
    today = today or date.today()
    dated = [(parse_event_date(event.event_date), event) for event in events]
    upcoming = [(day, event) for day, event in dated if day is not None and day >= today]
    if not upcoming:
        return list(events)
    upcoming.sort(key=lambda pair: pair[0])
    return [event for _, event in upcoming]


def next_upcoming_event(events: Sequence[Event], today: Optional[date] = None) -> Optional[Event]:
    upcoming = upcoming_events(events, today)
    return upcoming[0] if upcoming else None


# =============================================================================
# Display formatting
# =============================================================================


def format_event_date(value: Optional[str]) -> str:
    """'2025-10-04' -> '10/4/2025'; absent or unparsable -> 'TBD'."""
    day = parse_event_date(value)
    if day is None:
        return DISPLAY_PLACEHOLDER
    return f"{day.month}/{day.day}/{day.year}"


def format_time(value: Optional[str]) -> str:
    """Return HH:MM (seconds dropped); absent or unparsable -> 'TBD'."""
    if not value:
        return DISPLAY_PLACEHOLDER
    text = value.strip()[:5]
    if not TIME_PATTERN.match(text):
        return DISPLAY_PLACEHOLDER
    return text


def format_time_range(start: Optional[str], end: Optional[str]) -> str:
    if not start and not end:
        return DISPLAY_PLACEHOLDER
    return f"{format_time(start)} - {format_time(end)}"


def _text(value: Optional[str], fallback: str = NOT_SPECIFIED) -> str:
    if not value or not value.strip():
        return fallback
    return value.strip()


# =============================================================================
# Members
# =============================================================================


def active_members(members: Iterable[TeamMember]) -> list[TeamMember]:
    return [member for member in members if member.active]


def resolve_member_name(
    member_id: Optional[str],
    members: Iterable[TeamMember],
    fallback: str = UNKNOWN_MEMBER,
) -> str:
    for member in members:
        if member.member_id == member_id:
            return member.member_name
    return fallback


def traffic_display_name(control: TrafficControl, members: Iterable[TeamMember]) -> str:
    """Free-text staff name first, then the referenced member's name."""
    if control.staff_name and control.staff_name.strip():
        return control.staff_name.strip()
    return resolve_member_name(control.member_id, members, fallback=NOT_SPECIFIED)


# =============================================================================
# Aggregates
# =============================================================================


@dataclass(frozen=True)
class DashboardSummary:
    event_count: int
    active_member_count: int
    total_member_count: int
    recent_events: tuple[Event, ...]
    next_event: Optional[Event]


def dashboard_summary(
    state: StoreState,
    today: Optional[date] = None,
    recent_limit: int = 3,
) -> DashboardSummary:
    """Counts and highlights for the home screen."""
    return DashboardSummary(
        event_count=len(state.events),
        active_member_count=len(active_members(state.team_members)),
        total_member_count=len(state.team_members),
        recent_events=tuple(state.events[:recent_limit]),
        next_event=next_upcoming_event(state.events, today),
    )


@dataclass(frozen=True)
class AssignmentLine:
    member_name: str
    assignment_type: str
    equipment_area: str
    time_range: str
    notes: str


@dataclass(frozen=True)
class TrafficLine:
    staff_name: str
    patrol_vehicle: str
    area_assignment: str


@dataclass(frozen=True)
class StaffingSheet:
    """
    Resolved, ordered projection of one event for the PDF export.

    Section order: event information, supervisors, team assignments,
    traffic control.
    """

    event_name: str
    event_date: str
    location: str
    event_time: str
    team_meet_time: str
    meet_location: str
    prepared_by: str
    prepared_date: str
    notes: Optional[str]
    supervisors: tuple[str, ...]
    assignments: tuple[AssignmentLine, ...]
    traffic_controls: tuple[TrafficLine, ...]


def event_staffing_sheet(state: StoreState, event: Event) -> StaffingSheet:
    """Build the staffing sheet for an event from the cached collections."""
    members = state.team_members
    supervisors = supervisors_by_event(state).get(event.event_id, ())
    assignments = assignments_by_event(state).get(event.event_id, ())
    controls = traffic_by_event(state).get(event.event_id, ())

    return StaffingSheet(
        event_name=_text(event.event_name),
        event_date=format_event_date(event.event_date),
        location=_text(event.location),
        event_time=format_time_range(event.start_time, event.end_time),
        team_meet_time=format_time(event.team_meet_time),
        meet_location=_text(event.meet_location),
        prepared_by=_text(event.prepared_by),
        prepared_date=format_event_date(event.prepared_date),
        notes=event.notes.strip() if event.notes and event.notes.strip() else None,
        supervisors=tuple(
            _text(supervisor.supervisor_name, "Unnamed supervisor")
            for supervisor in sorted(supervisors, key=lambda s: s.sort_order)
        ),
        assignments=tuple(
            AssignmentLine(
                member_name=resolve_member_name(assignment.member_id, members),
                assignment_type=_text(assignment.assignment_type, "-"),
                equipment_area=_text(assignment.equipment_area, "-"),
                time_range=format_time_range(assignment.start_time, assignment.end_time),
                notes=_text(assignment.notes, "-"),
            )
            for assignment in sorted(assignments, key=lambda a: a.sort_order)
        ),
        traffic_controls=tuple(
            TrafficLine(
                staff_name=traffic_display_name(control, members),
                patrol_vehicle=_text(control.patrol_vehicle, "-"),
                area_assignment=_text(control.area_assignment, "-"),
            )
            for control in sorted(controls, key=lambda c: c.sort_order)
        ),
    )
