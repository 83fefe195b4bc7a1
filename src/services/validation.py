"""
Form validation for event staffing submissions.

Each form row is validated with a Pydantic model; batch rules (at least one
row, active members only, no member listed twice for traffic control) are
checked on top. Errors are reported as a mapping of form field keys such as
"traffic_1_member_id" to messages, wrapped in a ValidationError.
"""

import re
from datetime import date
from typing import Any, Iterable, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from src.services.exceptions import ValidationError
from src.services.types import (
    EventDraft,
    SupervisorDraft,
    TeamAssignmentDraft,
    TeamMember,
    TrafficControlDraft,
)

EMAIL_PATTERN = re.compile(r".+@.+\..+")
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

FormT = TypeVar("FormT", bound=BaseModel)


def is_valid_email(value: Optional[str]) -> bool:
    """Loose email check: something@something.something"""
    return bool(value) and EMAIL_PATTERN.fullmatch(value.strip()) is not None


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _check_time(value: Optional[str]) -> Optional[str]:
    if value is not None and not TIME_PATTERN.match(value):
        raise ValueError("Enter a time as HH:MM")
    return value


def _check_date(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValueError("Enter a date as YYYY-MM-DD")
    return value


# =============================================================================
# Form models
# =============================================================================


class EventForm(BaseModel):
    """Create/edit event form."""

    event_name: Optional[str] = Field(None, max_length=200, validate_default=True)
    event_date: Optional[str] = None
    location: Optional[str] = Field(None, max_length=200)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    team_meet_time: Optional[str] = None
    meet_location: Optional[str] = Field(None, max_length=200)
    prepared_by: Optional[str] = Field(None, max_length=100)
    prepared_date: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("event_name")
    @classmethod
    def validate_name_present(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            raise ValueError("Event name is required")
        return v

    @field_validator("event_date", "prepared_date")
    @classmethod
    def validate_dates(cls, v: Optional[str]) -> Optional[str]:
        return _check_date(v)

    @field_validator("start_time", "end_time", "team_meet_time")
    @classmethod
    def validate_times(cls, v: Optional[str]) -> Optional[str]:
        return _check_time(v)

    def to_draft(self) -> EventDraft:
        return EventDraft(**self.model_dump())


class SupervisorForm(BaseModel):
    """One supervisor row."""

    supervisor_name: Optional[str] = Field(None, max_length=100, validate_default=True)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)

    @field_validator("*", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("supervisor_name")
    @classmethod
    def validate_name_present(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            raise ValueError("Supervisor name is required")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_valid_email(v):
            raise ValueError("Enter a valid email address")
        return v

    def to_draft(self, sort_order: int) -> SupervisorDraft:
        return SupervisorDraft(
            supervisor_name=self.supervisor_name or "",
            phone=self.phone,
            email=self.email,
            sort_order=sort_order,
        )


class TrafficControlForm(BaseModel):
    """One traffic-control row; either a member or a free-text staff name."""

    member_id: Optional[str] = None
    staff_name: Optional[str] = Field(None, max_length=100, validate_default=True)
    patrol_vehicle: Optional[str] = Field(None, max_length=100)
    area_assignment: Optional[str] = Field(None, max_length=200)

    @field_validator("*", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("staff_name")
    @classmethod
    def validate_staff_present(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if v is None and not info.data.get("member_id"):
            raise ValueError("Staff member is required")
        return v

    def to_draft(self, sort_order: int) -> TrafficControlDraft:
        return TrafficControlDraft(
            member_id=self.member_id,
            staff_name=self.staff_name,
            patrol_vehicle=self.patrol_vehicle,
            area_assignment=self.area_assignment,
            sort_order=sort_order,
        )


class TeamAssignmentForm(BaseModel):
    """One team assignment row."""

    member_id: Optional[str] = Field(None, validate_default=True)
    assignment_type: Optional[str] = Field(None, max_length=100, validate_default=True)
    equipment_area: Optional[str] = Field(None, max_length=200, validate_default=True)
    start_time: Optional[str] = Field(None, validate_default=True)
    end_time: Optional[str] = Field(None, validate_default=True)
    notes: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("member_id")
    @classmethod
    def validate_member_present(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            raise ValueError("Team member is required")
        return v

    @field_validator("assignment_type")
    @classmethod
    def validate_type_present(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            raise ValueError("Assignment type is required")
        return v

    @field_validator("equipment_area")
    @classmethod
    def validate_area_present(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            raise ValueError("Equipment/Area is required")
        return v

    @field_validator("start_time")
    @classmethod
    def validate_start(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            raise ValueError("Start time is required")
        return _check_time(v)

    @field_validator("end_time")
    @classmethod
    def validate_end(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if v is None:
            raise ValueError("End time is required")
        _check_time(v)
        start = info.data.get("start_time")
        # HH:MM strings compare chronologically
        if start and v <= start:
            raise ValueError("End time must be after start time")
        return v

    def to_draft(self, sort_order: int) -> TeamAssignmentDraft:
        return TeamAssignmentDraft(
            member_id=self.member_id,
            assignment_type=self.assignment_type,
            equipment_area=self.equipment_area,
            start_time=self.start_time,
            end_time=self.end_time,
            notes=self.notes,
            sort_order=sort_order,
        )


# =============================================================================
# Batch validation
# =============================================================================


def _error_message(error: dict) -> str:
    if error["type"] == "value_error":
        return str(error["ctx"]["error"])
    return error["msg"]


def _validate_rows(
    model: Type[FormT],
    rows: Iterable[dict],
    prefix: str,
    errors: dict[str, str],
) -> list[Optional[FormT]]:
    forms: list[Optional[FormT]] = []
    for index, row in enumerate(rows):
        try:
            forms.append(model.model_validate(row))
        except PydanticValidationError as e:
            forms.append(None)
            for error in e.errors():
                field = error["loc"][0] if error["loc"] else "general"
                errors.setdefault(f"{prefix}_{index}_{field}", _error_message(error))
    return forms


def validate_event(data: dict) -> EventDraft:
    """
    Validate the event form.

    Raises:
        ValidationError: keyed by field name
    """
    errors: dict[str, str] = {}
    try:
        return EventForm.model_validate(data).to_draft()
    except PydanticValidationError as e:
        for error in e.errors():
            field = error["loc"][0] if error["loc"] else "general"
            errors.setdefault(str(field), _error_message(error))
    raise ValidationError("Event form is invalid", errors)


def find_duplicate_member_refs(
    controls: Sequence[TrafficControlDraft],
    prefix: str = "traffic",
) -> dict[str, str]:
    """Flag every traffic-control row that repeats a member already listed above it."""
    errors = {}
    seen = set()
    for index, control in enumerate(controls):
        member_id = (control.member_id or "").strip()
        if not member_id:
            continue
        if member_id in seen:
            errors[f"{prefix}_{index}_member_id"] = "Team member is already assigned to traffic control"
        seen.add(member_id)
    return errors


def validate_supervisors(rows: Sequence[dict]) -> list[SupervisorDraft]:
    """
    Validate supervisor rows; at least one named supervisor is required.

    Raises:
        ValidationError: keyed as "supervisor_<index>_<field>" or "general"
    """
    errors: dict[str, str] = {}
    forms = _validate_rows(SupervisorForm, rows, "supervisor", errors)
    if not any(_blank_to_none(row.get("supervisor_name")) for row in rows):
        errors["general"] = "Add at least one supervisor for this event."
    if errors:
        raise ValidationError("Supervisors are invalid", errors)
    return [form.to_draft(index + 1) for index, form in enumerate(forms)]


def validate_traffic_controls(rows: Sequence[dict]) -> list[TrafficControlDraft]:
    """
    Validate traffic-control rows, including duplicate member references.

    Raises:
        ValidationError: keyed as "traffic_<index>_<field>"
    """
    errors: dict[str, str] = {}
    forms = _validate_rows(TrafficControlForm, rows, "traffic", errors)
    drafts = [
        form.to_draft(index + 1) if form else TrafficControlDraft()
        for index, form in enumerate(forms)
    ]
    for key, message in find_duplicate_member_refs(drafts).items():
        errors.setdefault(key, message)
    if errors:
        raise ValidationError("Traffic controls are invalid", errors)
    return drafts


def validate_team_assignments(
    rows: Sequence[dict],
    members: Sequence[TeamMember] = (),
) -> list[TeamAssignmentDraft]:
    """
    Validate assignment rows against the current team roster.

    Only active members can be assigned when a roster is supplied.

    Raises:
        ValidationError: keyed as "assignment_<index>_<field>" or "general"
    """
    if not rows:
        raise ValidationError(
            "Assignments are invalid",
            {"general": "At least one assignment is required"},
        )

    errors: dict[str, str] = {}
    forms = _validate_rows(TeamAssignmentForm, rows, "assignment", errors)

    if members:
        active_ids = {member.member_id for member in members if member.active}
        for index, form in enumerate(forms):
            if form is not None and form.member_id not in active_ids:
                errors[f"assignment_{index}_member_id"] = "Select an active team member"

    if errors:
        raise ValidationError("Assignments are invalid", errors)
    return [form.to_draft(index + 1) for index, form in enumerate(forms)]
