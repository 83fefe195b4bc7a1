"""
Unit tests for row/domain normalization.

Tests:
- Placeholder stripping (inbound) and restoring (outbound)
- Round trips for canonical rows
- Category name normalization and dedupe
- Color, time and status normalizers
"""

import pytest

from src.defaults import DEFAULT_ASSIGNMENT_CATEGORIES, DEFAULT_TASK_CATEGORY_COLOR
from src.services.normalization import (
    apply_placeholder,
    assignment_from_row,
    assignment_to_payload,
    category_key,
    clean_optional_text,
    dedupe_and_sort_categories,
    event_from_row,
    event_to_payload,
    member_from_row,
    normalize_category_name,
    normalize_color,
    normalize_task_status,
    normalize_time,
    strip_placeholder,
    supervisor_to_payload,
    task_category_from_row,
    task_from_row,
    task_to_payload,
    traffic_from_row,
    traffic_to_payload,
)
from src.services.types import (
    EventDraft,
    EventTaskDraft,
    SupervisorDraft,
    TeamAssignmentDraft,
    TrafficControlDraft,
)


def _event_row(**overrides):
    row = {
        "event_id": "event_1",
        "user_id": "account-1",
        "event_name": "Harvest Fair",
        "event_date": "2025-10-04",
        "location": "Location TBD",
        "start_time": "00:00",
        "end_time": "00:00",
        "team_meet_time": "00:00",
        "meet_location": "Meet TBD",
        "prepared_by": "Unassigned",
        "prepared_date": None,
        "notes": None,
        "created_at": "2025-09-01T12:00:00+00:00",
    }
    row.update(overrides)
    return row


class TestFieldHelpers:
    """Test the text and placeholder helpers."""

    def test_clean_optional_text(self):
        assert clean_optional_text("  x ") == "x"
        assert clean_optional_text("   ") is None
        assert clean_optional_text(None) is None

    def test_strip_placeholder(self):
        assert strip_placeholder("Location TBD", "Location TBD") is None
        assert strip_placeholder("", "Location TBD") is None
        assert strip_placeholder(" Park ", "Location TBD") == "Park"

    def test_apply_placeholder(self):
        assert apply_placeholder(None, "Meet TBD") == "Meet TBD"
        assert apply_placeholder("  ", "Meet TBD") == "Meet TBD"
        assert apply_placeholder(" Gate 3 ", "Meet TBD") == "Gate 3"


class TestEvents:
    """Test event conversion."""

    def test_placeholders_become_none(self):
        event = event_from_row(_event_row())

        assert event.location is None
        assert event.start_time is None
        assert event.meet_location is None
        assert event.prepared_by is None
        assert event.event_date == "2025-10-04"

    def test_blank_location_round_trip(self):
        payload = event_to_payload(EventDraft(event_name="Fair", location="   "))

        assert payload["location"] == "Location TBD"
        assert event_from_row(_event_row(**payload)).location is None

    def test_times_kept_exactly(self):
        payload = event_to_payload(
            EventDraft(event_name="Fair", start_time="10:00", end_time="13:30")
        )

        assert payload["start_time"] == "10:00"
        assert payload["end_time"] == "13:30"
        assert payload["team_meet_time"] == "00:00"

    def test_stored_seconds_are_dropped(self):
        event = event_from_row(_event_row(start_time="00:00:00", end_time="13:30:00", team_meet_time="09:45:00"))

        assert event.start_time is None
        assert event.end_time == "13:30"
        assert event.team_meet_time == "09:45"

    def test_canonical_row_round_trip(self):
        row = _event_row(
            location="Main Street",
            start_time="10:00",
            end_time="13:30",
            meet_location="City Hall",
            prepared_by="Lt. Ortiz",
            notes="Bring radios",
        )
        event = event_from_row(row)
        payload = event_to_payload(event)

        for key, value in payload.items():
            assert row[key] == value

    def test_payload_omits_identity(self):
        payload = event_to_payload(EventDraft(event_name=" Fair "))

        assert payload["event_name"] == "Fair"
        assert "event_id" not in payload
        assert "user_id" not in payload


class TestChildren:
    """Test assignment, traffic and supervisor conversion."""

    def test_assignment_round_trip(self):
        payload = assignment_to_payload(TeamAssignmentDraft(member_id="member_1"))
        assert payload["assignment_type"] == "General Support"
        assert payload["equipment_area"] == "Assignment TBD"

        row = {**payload, "assignment_id": "assign_1", "event_id": "event_1", "sort_order": 2}
        assignment = assignment_from_row(row)

        assert assignment.assignment_type is None
        assert assignment.equipment_area is None
        assert assignment.start_time is None
        assert assignment.sort_order == 2

    def test_assignment_times_with_seconds(self):
        row = {
            "assignment_id": "assign_1",
            "event_id": "event_1",
            "member_id": "member_1",
            "start_time": "10:00:00",
            "end_time": "00:00:00",
        }

        assignment = assignment_from_row(row)

        assert assignment.start_time == "10:00"
        assert assignment.end_time is None

    def test_traffic_placeholders(self):
        payload = traffic_to_payload(TrafficControlDraft(staff_name="Officer Lee", member_id=" "))

        assert payload["member_id"] is None
        assert payload["patrol_vehicle"] == "Vehicle TBD"
        assert payload["area_assignment"] == "Area TBD"

        control = traffic_from_row({**payload, "traffic_id": "traffic_1", "event_id": "event_1"})
        assert control.patrol_vehicle is None
        assert control.sort_order == 0

    def test_supervisor_blank_contact_becomes_none(self):
        payload = supervisor_to_payload(SupervisorDraft(supervisor_name="Sgt. Park", phone=" ", email=""))

        assert payload == {"supervisor_name": "Sgt. Park", "phone": None, "email": None}

    def test_member_active_default(self):
        member = member_from_row({"member_id": "member_1", "member_name": " Alice "})
        assert member.member_name == "Alice"
        assert member.active is True


class TestTasks:
    """Test task and task category conversion."""

    def test_due_time_truncated(self):
        task = task_from_row({
            "task_id": "task_1",
            "event_id": "event_1",
            "title": "Cones",
            "status": "In Progress",
            "due_time": "09:30:00",
        })

        assert task.due_time == "09:30"
        assert task.status == "In Progress"

    def test_unknown_status_defaults(self):
        payload = task_to_payload(EventTaskDraft(title="Cones", status="Blocked"))
        assert payload["status"] == "Not Started"

    def test_category_color_normalized(self):
        category = task_category_from_row({"category_id": "c", "name": "Logistics", "color": "red"})
        assert category.color == DEFAULT_TASK_CATEGORY_COLOR


class TestNormalizers:
    """Test the scalar normalizers."""

    @pytest.mark.parametrize("value,expected", [
        ("09:30:00", "09:30"),
        ("09:30", "09:30"),
        ("", None),
        (None, None),
    ])
    def test_normalize_time(self, value, expected):
        assert normalize_time(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("#10b981", "#10B981"),
        ("#ABCDEF", "#ABCDEF"),
        ("10b981", "#3B82F6"),
        ("#fff", "#3B82F6"),
        (None, "#3B82F6"),
    ])
    def test_normalize_color(self, value, expected):
        assert normalize_color(value) == expected

    def test_normalize_task_status(self):
        assert normalize_task_status(" Completed ") == "Completed"
        assert normalize_task_status(None) == "Not Started"

    def test_normalize_category_name(self):
        assert normalize_category_name("  First   Aid ") == "First Aid"
        assert category_key("FIRST  aid") == category_key("first aid")


class TestDedupeAndSortCategories:
    """Test dedupe_and_sort_categories."""

    def test_case_insensitive_dedupe_keeps_first_spelling(self):
        result = dedupe_and_sort_categories(["gate", "Gate", " GATE ", "Parking"])
        assert result == ["gate", "Parking"]

    def test_blanks_dropped(self):
        assert dedupe_and_sort_categories(["", None, "  ", "Ops"]) == ["Ops"]

    def test_sort_ignores_case(self):
        result = dedupe_and_sort_categories(["crowd control", "Communications", "Admin"])
        assert result == ["Admin", "Communications", "crowd control"]

    def test_idempotent(self):
        once = dedupe_and_sort_categories(list(DEFAULT_ASSIGNMENT_CATEGORIES) + ["first aid"])
        assert dedupe_and_sort_categories(once) == once
        assert len(once) == 8
