"""
Conversion between backend rows and domain objects.

Inbound (row -> domain) strips placeholder values to None so the UI can tell
"never set" apart from a real value. Outbound (domain -> payload) puts the
placeholders back, trims free text and turns empty optional text into None.
For canonical rows the two directions are inverses of each other.

Also provides the category, color and time normalizers.
"""

import re
from typing import Any, Iterable, Optional

from src.defaults import (
    AREA_ASSIGNMENT_PLACEHOLDER,
    ASSIGNMENT_TYPE_PLACEHOLDER,
    DEFAULT_TASK_CATEGORY_COLOR,
    DEFAULT_TASK_STATUS,
    EQUIPMENT_AREA_PLACEHOLDER,
    LOCATION_PLACEHOLDER,
    MEET_LOCATION_PLACEHOLDER,
    PATROL_VEHICLE_PLACEHOLDER,
    PREPARED_BY_PLACEHOLDER,
    TASK_STATUSES,
    TIME_PLACEHOLDER,
)
from src.services.types import (
    Event,
    EventTask,
    Supervisor,
    TaskCategory,
    TeamAssignment,
    TeamMember,
    TrafficControl,
)

Row = dict[str, Any]

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")
_WHITESPACE = re.compile(r"\s+")

# Placeholder-backed columns, per table
EVENT_PLACEHOLDERS = {
    "location": LOCATION_PLACEHOLDER,
    "meet_location": MEET_LOCATION_PLACEHOLDER,
    "prepared_by": PREPARED_BY_PLACEHOLDER,
    "start_time": TIME_PLACEHOLDER,
    "end_time": TIME_PLACEHOLDER,
    "team_meet_time": TIME_PLACEHOLDER,
}

ASSIGNMENT_PLACEHOLDERS = {
    "assignment_type": ASSIGNMENT_TYPE_PLACEHOLDER,
    "equipment_area": EQUIPMENT_AREA_PLACEHOLDER,
    "start_time": TIME_PLACEHOLDER,
    "end_time": TIME_PLACEHOLDER,
}

TRAFFIC_PLACEHOLDERS = {
    "patrol_vehicle": PATROL_VEHICLE_PLACEHOLDER,
    "area_assignment": AREA_ASSIGNMENT_PLACEHOLDER,
}


# =============================================================================
# Field helpers
# =============================================================================


def clean_text(value: Optional[Any]) -> str:
    """Trim a required text value; None becomes an empty string."""
    if value is None:
        return ""
    return str(value).strip()


def clean_optional_text(value: Optional[Any]) -> Optional[str]:
    """Trim optional text; empty or whitespace-only becomes None."""
    text = clean_text(value)
    return text or None


def strip_placeholder(value: Optional[Any], placeholder: str) -> Optional[str]:
    """Inbound: a blank value or the column's placeholder becomes None."""
    text = clean_optional_text(value)
    if text is None or text == placeholder:
        return None
    return text


def apply_placeholder(value: Optional[Any], placeholder: str) -> str:
    """Outbound: a missing or blank value becomes the column's placeholder."""
    return clean_optional_text(value) or placeholder


def normalize_time(value: Optional[Any]) -> Optional[str]:
    """Truncate stored times that carry seconds ("HH:MM:SS") to "HH:MM"."""
    text = clean_optional_text(value)
    if text is None:
        return None
    return text[:5] if len(text) > 5 else text


def normalize_color(value: Optional[Any]) -> str:
    """Return an upper-cased #RRGGBB color, or the default task category color."""
    if isinstance(value, str) and _HEX_COLOR.match(value):
        return value.upper()
    return DEFAULT_TASK_CATEGORY_COLOR


def normalize_task_status(value: Optional[Any]) -> str:
    text = clean_text(value)
    return text if text in TASK_STATUSES else DEFAULT_TASK_STATUS


def normalize_category_name(value: Optional[Any]) -> str:
    """Trim and collapse internal whitespace ("  First   Aid " -> "First Aid")."""
    return _WHITESPACE.sub(" ", clean_text(value))


def category_key(name: str) -> str:
    """Comparison key for case-insensitive category matching."""
    return normalize_category_name(name).casefold()


def dedupe_and_sort_categories(names: Iterable[Optional[str]]) -> list[str]:
    """
    Normalize, drop blanks and case-insensitive duplicates, then sort.

    The first spelling of a duplicated name wins. Sorting ignores case so
    "crowd control" sorts next to "Communications". Idempotent.
    """
    seen = set()
    unique = []
    for raw in names:
        name = normalize_category_name(raw)
        key = name.casefold()
        if not name or key in seen:
            continue
        seen.add(key)
        unique.append(name)
    return sorted(unique, key=lambda name: (name.casefold(), name))


def _sort_order(value: Optional[Any]) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


# =============================================================================
# Events
# =============================================================================


def event_from_row(row: Row) -> Event:
    """Convert an events row into an Event, stripping placeholders."""
    return Event(
        event_id=row["event_id"],
        event_name=clean_text(row.get("event_name")),
        event_date=clean_optional_text(row.get("event_date")),
        location=strip_placeholder(row.get("location"), LOCATION_PLACEHOLDER),
        start_time=strip_placeholder(normalize_time(row.get("start_time")), TIME_PLACEHOLDER),
        end_time=strip_placeholder(normalize_time(row.get("end_time")), TIME_PLACEHOLDER),
        team_meet_time=strip_placeholder(normalize_time(row.get("team_meet_time")), TIME_PLACEHOLDER),
        meet_location=strip_placeholder(row.get("meet_location"), MEET_LOCATION_PLACEHOLDER),
        prepared_by=strip_placeholder(row.get("prepared_by"), PREPARED_BY_PLACEHOLDER),
        prepared_date=clean_optional_text(row.get("prepared_date")),
        notes=clean_optional_text(row.get("notes")),
        created_at=clean_optional_text(row.get("created_at")),
    )


def event_to_payload(event) -> Row:
    """
    Build the insert/update payload for an Event or EventDraft.

    Identity and ownership columns (event_id, user_id) are added by the caller.
    """
    payload = {
        "event_name": clean_text(event.event_name),
        "event_date": clean_optional_text(event.event_date),
        "prepared_date": clean_optional_text(event.prepared_date),
        "notes": clean_optional_text(event.notes),
    }
    for field, placeholder in EVENT_PLACEHOLDERS.items():
        payload[field] = apply_placeholder(getattr(event, field), placeholder)
    return payload


# =============================================================================
# Team members
# =============================================================================


def member_from_row(row: Row) -> TeamMember:
    return TeamMember(
        member_id=row["member_id"],
        member_name=clean_text(row.get("member_name")),
        active=bool(row.get("active", True)),
    )


def member_to_payload(member) -> Row:
    return {
        "member_name": clean_text(member.member_name),
        "active": bool(member.active),
    }


# =============================================================================
# Event children
# =============================================================================


def assignment_from_row(row: Row) -> TeamAssignment:
    return TeamAssignment(
        assignment_id=row["assignment_id"],
        event_id=row["event_id"],
        member_id=clean_text(row.get("member_id")),
        assignment_type=strip_placeholder(row.get("assignment_type"), ASSIGNMENT_TYPE_PLACEHOLDER),
        equipment_area=strip_placeholder(row.get("equipment_area"), EQUIPMENT_AREA_PLACEHOLDER),
        start_time=strip_placeholder(normalize_time(row.get("start_time")), TIME_PLACEHOLDER),
        end_time=strip_placeholder(normalize_time(row.get("end_time")), TIME_PLACEHOLDER),
        notes=clean_optional_text(row.get("notes")),
        sort_order=_sort_order(row.get("sort_order")),
    )


def assignment_to_payload(assignment) -> Row:
    payload = {
        "member_id": clean_text(assignment.member_id),
        "notes": clean_optional_text(assignment.notes),
    }
    for field, placeholder in ASSIGNMENT_PLACEHOLDERS.items():
        payload[field] = apply_placeholder(getattr(assignment, field), placeholder)
    return payload


def traffic_from_row(row: Row) -> TrafficControl:
    return TrafficControl(
        traffic_id=row["traffic_id"],
        event_id=row["event_id"],
        member_id=clean_optional_text(row.get("member_id")),
        staff_name=clean_optional_text(row.get("staff_name")),
        patrol_vehicle=strip_placeholder(row.get("patrol_vehicle"), PATROL_VEHICLE_PLACEHOLDER),
        area_assignment=strip_placeholder(row.get("area_assignment"), AREA_ASSIGNMENT_PLACEHOLDER),
        sort_order=_sort_order(row.get("sort_order")),
    )


def traffic_to_payload(control) -> Row:
    payload = {
        "member_id": clean_optional_text(control.member_id),
        "staff_name": clean_optional_text(control.staff_name),
    }
    for field, placeholder in TRAFFIC_PLACEHOLDERS.items():
        payload[field] = apply_placeholder(getattr(control, field), placeholder)
    return payload


def supervisor_from_row(row: Row) -> Supervisor:
    return Supervisor(
        supervisor_id=row["supervisor_id"],
        event_id=row["event_id"],
        supervisor_name=clean_text(row.get("supervisor_name")),
        phone=clean_optional_text(row.get("phone")),
        email=clean_optional_text(row.get("email")),
        sort_order=_sort_order(row.get("sort_order")),
    )


def supervisor_to_payload(supervisor) -> Row:
    return {
        "supervisor_name": clean_text(supervisor.supervisor_name),
        "phone": clean_optional_text(supervisor.phone),
        "email": clean_optional_text(supervisor.email),
    }


# =============================================================================
# Tasks
# =============================================================================


def task_category_from_row(row: Row) -> TaskCategory:
    return TaskCategory(
        category_id=row["category_id"],
        name=normalize_category_name(row.get("name")),
        color=normalize_color(row.get("color")),
        sort_order=_sort_order(row.get("sort_order")),
    )


def task_category_to_payload(category) -> Row:
    return {
        "name": normalize_category_name(category.name),
        "color": normalize_color(category.color),
    }


def task_from_row(row: Row) -> EventTask:
    return EventTask(
        task_id=row["task_id"],
        event_id=row["event_id"],
        title=clean_text(row.get("title")),
        status=normalize_task_status(row.get("status")),
        description=clean_optional_text(row.get("description")),
        due_date=clean_optional_text(row.get("due_date")),
        due_time=normalize_time(row.get("due_time")),
        assignee_id=clean_optional_text(row.get("assignee_id")),
        category_id=clean_optional_text(row.get("category_id")),
        sort_order=_sort_order(row.get("sort_order")),
        created_at=clean_optional_text(row.get("created_at")),
        updated_at=clean_optional_text(row.get("updated_at")),
    )


def task_to_payload(task) -> Row:
    return {
        "title": clean_text(task.title),
        "status": normalize_task_status(task.status),
        "description": clean_optional_text(task.description),
        "due_date": clean_optional_text(task.due_date),
        "due_time": normalize_time(task.due_time),
        "assignee_id": clean_optional_text(task.assignee_id),
        "category_id": clean_optional_text(task.category_id),
    }
