"""
Backend repository protocols and base types.

Defines the interface between the domain store and row storage backends
(local database, hosted REST service). Repositories exchange plain row
dictionaries; the store's normalization layer maps them to domain objects.
"""

from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

Row = dict[str, Any]

# (column, descending) pairs
Ordering = Sequence[tuple[str, bool]]


@dataclass
class SessionUser:
    """The authenticated account; its id scopes every query."""

    id: str
    email: Optional[str] = None


class AuthProvider(Protocol):
    """Current-session lookup, consulted at the start of every operation."""

    @abstractmethod
    async def get_user(self) -> Optional[SessionUser]:
        """Return the signed-in account, or None when there is no session."""
        ...


class TableGateway(Protocol):
    """
    Row-level access to one backend table.

    Filters are column equality conditions combined with AND. Implementations
    translate driver failures into src.services.exceptions types.
    """

    table: str

    @abstractmethod
    async def select(self, filters: Row, order_by: Ordering = ()) -> list[Row]:
        ...

    @abstractmethod
    async def insert(self, rows: Sequence[Row]) -> list[Row]:
        """Insert rows and return them as stored (server defaults applied)."""
        ...

    @abstractmethod
    async def update(self, filters: Row, values: Row) -> list[Row]:
        """Update matching rows and return them as stored."""
        ...

    @abstractmethod
    async def delete(self, filters: Row) -> int:
        """Delete matching rows and return how many were removed."""
        ...


class EventRepository(Protocol):
    """Events owned by an account."""

    @abstractmethod
    async def list_events(self, user_id: str) -> Sequence[Row]:
        """All events of the account, newest event_date first."""
        ...

    @abstractmethod
    async def insert_event(self, payload: Row) -> Row:
        ...

    @abstractmethod
    async def update_event(self, user_id: str, event_id: str, updates: Row) -> Row:
        """Raises NotFoundError when no owned event matches."""
        ...

    @abstractmethod
    async def delete_event(self, user_id: str, event_id: str) -> bool:
        """Delete an event; the backend cascades to its child rows."""
        ...


class TeamMemberRepository(Protocol):
    """Team members owned by an account."""

    @abstractmethod
    async def list_members(self, user_id: str) -> Sequence[Row]:
        """All members, ordered by name."""
        ...

    @abstractmethod
    async def insert_member(self, payload: Row) -> Row:
        ...

    @abstractmethod
    async def update_member(self, user_id: str, member_id: str, updates: Row) -> Row:
        ...

    @abstractmethod
    async def delete_member(self, user_id: str, member_id: str) -> bool:
        ...


class EventChildRepository(Protocol):
    """
    Rows that belong to one event (assignments, traffic controls,
    supervisors, tasks).
    """

    @abstractmethod
    async def list_for_event(self, user_id: str, event_id: str) -> Sequence[Row]:
        """Children of one event, ordered by sort_order."""
        ...

    @abstractmethod
    async def insert_many(self, payloads: Sequence[Row]) -> Sequence[Row]:
        ...

    @abstractmethod
    async def delete_for_event(self, user_id: str, event_id: str) -> int:
        ...

    @abstractmethod
    async def update_child(self, user_id: str, child_id: str, updates: Row) -> Row:
        ...

    @abstractmethod
    async def delete_child(self, user_id: str, child_id: str) -> bool:
        ...


class AssignmentCategoryRepository(Protocol):
    """Custom assignment categories; names are unique per account."""

    @abstractmethod
    async def list_categories(self, user_id: str) -> Sequence[Row]:
        ...

    @abstractmethod
    async def insert_category(self, payload: Row) -> Row:
        """Raises DuplicateCategoryError on a name collision."""
        ...

    @abstractmethod
    async def rename_category(self, user_id: str, category_id: str, name: str) -> Row:
        ...

    @abstractmethod
    async def delete_category(self, user_id: str, category_id: str) -> bool:
        ...


class TaskCategoryRepository(Protocol):
    """Task categories, ordered by sort_order."""

    @abstractmethod
    async def list_task_categories(self, user_id: str) -> Sequence[Row]:
        ...

    @abstractmethod
    async def insert_task_category(self, payload: Row) -> Row:
        ...

    @abstractmethod
    async def update_task_category(self, user_id: str, category_id: str, updates: Row) -> Row:
        ...

    @abstractmethod
    async def delete_task_category(self, user_id: str, category_id: str) -> bool:
        ...


@dataclass
class Backend:
    """Everything the domain store needs from a backend."""

    auth: AuthProvider
    events: EventRepository
    team_members: TeamMemberRepository
    team_assignments: EventChildRepository
    traffic_controls: EventChildRepository
    supervisors: EventChildRepository
    event_tasks: EventChildRepository
    assignment_categories: AssignmentCategoryRepository
    task_categories: TaskCategoryRepository
