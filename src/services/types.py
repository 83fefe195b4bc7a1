"""
Domain types held by the store.

These are the application-side shapes produced by inbound normalization.
Optional fields are None when the backend holds a placeholder. Drafts are
the caller-supplied shapes for rows that do not exist yet; their sort_order
is None when it should be derived from list position.
"""

from dataclasses import dataclass
from typing import Literal, Optional

TaskStatus = Literal["Not Started", "In Progress", "Completed"]

# Assignment categories are plain labels
AssignmentCategory = str


@dataclass(frozen=True)
class Event:
    event_id: str
    event_name: str
    event_date: Optional[str] = None
    location: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    team_meet_time: Optional[str] = None
    meet_location: Optional[str] = None
    prepared_by: Optional[str] = None
    prepared_date: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class EventDraft:
    event_name: str
    event_date: Optional[str] = None
    location: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    team_meet_time: Optional[str] = None
    meet_location: Optional[str] = None
    prepared_by: Optional[str] = None
    prepared_date: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class TeamMember:
    member_id: str
    member_name: str
    active: bool = True


@dataclass(frozen=True)
class TeamMemberDraft:
    member_name: str
    active: bool = True


@dataclass(frozen=True)
class TeamAssignment:
    assignment_id: str
    event_id: str
    member_id: str
    assignment_type: Optional[str] = None
    equipment_area: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    notes: Optional[str] = None
    sort_order: int = 0


@dataclass(frozen=True)
class TeamAssignmentDraft:
    member_id: Optional[str]
    assignment_type: Optional[str] = None
    equipment_area: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    notes: Optional[str] = None
    sort_order: Optional[int] = None


@dataclass(frozen=True)
class TrafficControl:
    traffic_id: str
    event_id: str
    member_id: Optional[str] = None
    staff_name: Optional[str] = None
    patrol_vehicle: Optional[str] = None
    area_assignment: Optional[str] = None
    sort_order: int = 0


@dataclass(frozen=True)
class TrafficControlDraft:
    member_id: Optional[str] = None
    staff_name: Optional[str] = None
    patrol_vehicle: Optional[str] = None
    area_assignment: Optional[str] = None
    sort_order: Optional[int] = None


@dataclass(frozen=True)
class Supervisor:
    supervisor_id: str
    event_id: str
    supervisor_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    sort_order: int = 0


@dataclass(frozen=True)
class SupervisorDraft:
    supervisor_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    sort_order: Optional[int] = None


@dataclass(frozen=True)
class TaskCategory:
    category_id: str
    name: str
    color: str
    sort_order: int = 0


@dataclass(frozen=True)
class TaskCategoryDraft:
    name: str
    color: Optional[str] = None
    sort_order: Optional[int] = None


@dataclass(frozen=True)
class EventTask:
    task_id: str
    event_id: str
    title: str
    status: TaskStatus = "Not Started"
    description: Optional[str] = None
    due_date: Optional[str] = None
    due_time: Optional[str] = None
    assignee_id: Optional[str] = None
    category_id: Optional[str] = None
    sort_order: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class EventTaskDraft:
    title: str
    status: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[str] = None
    due_time: Optional[str] = None
    assignee_id: Optional[str] = None
    category_id: Optional[str] = None
    sort_order: Optional[int] = None
