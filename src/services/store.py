"""
Domain store - the observable in-memory cache of an account's staffing data.

The store holds one ordered collection per entity type inside an immutable
StoreState snapshot. Every mutation entry point is an async method that:

1. Re-reads the session user from the backend's AuthProvider
2. Awaits the backend call (no optimistic local changes)
3. Merges the authoritative rows into a new snapshot
4. Notifies subscribers

Operations never raise store errors across the boundary: each returns a
Result carrying either the value or the ScopeError that stopped it. Callers
that prefer exceptions call Result.unwrap().

Per-event child collections (assignments, traffic controls, supervisors,
tasks) are replaced slice by slice: fetching or replacing the children of
one event never touches another event's rows, so concurrent hydration of
several events is safe.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Awaitable, Callable, Generic, Iterable, Optional, Sequence, TypeVar

from src.defaults import DEFAULT_ASSIGNMENT_CATEGORIES
from src.integrations.base import Backend, EventChildRepository, Row
from src.services.exceptions import (
    DuplicateCategoryError,
    NotFoundError,
    ScopeError,
    UnauthenticatedError,
    ValidationError,
)
from src.services.ids import (
    new_assignment_id,
    new_category_id,
    new_event_id,
    new_member_id,
    new_supervisor_id,
    new_task_id,
    new_traffic_id,
)
from src.services.normalization import (
    assignment_from_row,
    assignment_to_payload,
    category_key,
    clean_optional_text,
    dedupe_and_sort_categories,
    event_from_row,
    event_to_payload,
    member_from_row,
    member_to_payload,
    normalize_category_name,
    supervisor_from_row,
    supervisor_to_payload,
    task_category_from_row,
    task_category_to_payload,
    task_from_row,
    task_to_payload,
    traffic_from_row,
    traffic_to_payload,
)
from src.services.types import (
    AssignmentCategory,
    Event,
    EventDraft,
    EventTask,
    EventTaskDraft,
    Supervisor,
    SupervisorDraft,
    TaskCategory,
    TaskCategoryDraft,
    TeamAssignment,
    TeamAssignmentDraft,
    TeamMember,
    TeamMemberDraft,
    TrafficControl,
    TrafficControlDraft,
)
from src.services.validation import find_duplicate_member_refs, is_valid_email

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[["StoreState"], None]

# Singleton instance
_store: Optional["DomainStore"] = None


# =============================================================================
# Results and state
# =============================================================================


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a store operation: a value, or the error that stopped it."""

    value: Optional[T] = None
    error: Optional[ScopeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.value


def success(value: Optional[T] = None) -> Result[T]:
    return Result(value=value)


def failure(error: ScopeError) -> Result:
    return Result(error=error)


class LoadState(str, Enum):
    """Lifecycle of one collection (no error state is retained)."""

    UNKNOWN = "unknown"
    LOADING = "loading"
    LOADED = "loaded"


@dataclass(frozen=True)
class StoreState:
    """
    Immutable snapshot of everything the store holds.

    Collections are tuples, so a changed collection is always a new object;
    view builders memoize on that identity. load_states is keyed by
    collection name ("events") or collection and event ("supervisors:<id>").
    """

    events: tuple[Event, ...] = ()
    current_event: Optional[Event] = None
    team_members: tuple[TeamMember, ...] = ()
    team_assignments: tuple[TeamAssignment, ...] = ()
    traffic_controls: tuple[TrafficControl, ...] = ()
    supervisors: tuple[Supervisor, ...] = ()
    assignment_categories: tuple[AssignmentCategory, ...] = field(
        default_factory=lambda: tuple(dedupe_and_sort_categories(DEFAULT_ASSIGNMENT_CATEGORIES))
    )
    task_categories: tuple[TaskCategory, ...] = ()
    event_tasks: tuple[EventTask, ...] = ()
    is_event_loading: bool = False
    is_team_members_loading: bool = False
    load_states: dict[str, LoadState] = field(default_factory=dict)

    def load_state(self, collection: str, event_id: Optional[str] = None) -> LoadState:
        return self.load_states.get(_load_key(collection, event_id), LoadState.UNKNOWN)


def _load_key(collection: str, event_id: Optional[str] = None) -> str:
    return f"{collection}:{event_id}" if event_id else collection


def _position_sort_order(explicit: Optional[int], index: int) -> int:
    """Explicit sort order, else list position (1-based)."""
    return explicit if explicit is not None else index + 1


def _by_sort_order(items: Iterable[T]) -> tuple[T, ...]:
    return tuple(sorted(items, key=lambda item: item.sort_order))


def _by_member_name(members: Iterable[TeamMember]) -> tuple[TeamMember, ...]:
    return tuple(sorted(members, key=lambda member: member.member_name.casefold()))


# =============================================================================
# Store
# =============================================================================


class DomainStore:
    """
    Observable cache plus backend synchronization.

    Args:
        backend: Repositories and session lookup (see src.integrations)
        state: Initial snapshot (e.g. restored from local persistence)
    """

    def __init__(self, backend: Backend, state: Optional[StoreState] = None):
        self._backend = backend
        self._state = state or StoreState()
        self._listeners: list[Listener] = []

    # -------------------------------------------------------------------------
    # State container
    # -------------------------------------------------------------------------

    def get(self) -> StoreState:
        """Current snapshot."""
        return self._state

    def set(self, **changes) -> StoreState:
        """Apply changes to a new snapshot and notify subscribers."""
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with every new snapshot.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _require_user(self) -> str:
        user = await self._backend.auth.get_user()
        if user is None:
            raise UnauthenticatedError()
        return user.id

    async def _guard(self, description: str, operation: Callable[[], Awaitable[T]]) -> Result[T]:
        try:
            return success(await operation())
        except ScopeError as e:
            logger.error(f"Error {description}: {e}")
            return failure(e)

    async def _fetch(
        self,
        key: str,
        description: str,
        operation: Callable[[], Awaitable[T]],
        loading_flag: Optional[str] = None,
    ) -> Result[T]:
        """Run a fetch with load-state bookkeeping; a failure restores the previous state."""
        previous = self._state.load_states.get(key, LoadState.UNKNOWN)
        flags = {loading_flag: True} if loading_flag else {}
        self.set(load_states={**self._state.load_states, key: LoadState.LOADING}, **flags)

        result = await self._guard(description, operation)

        final = LoadState.LOADED if result.ok else previous
        flags = {loading_flag: False} if loading_flag else {}
        self.set(load_states={**self._state.load_states, key: final}, **flags)
        return result

    def _replace_slice(self, collection: str, event_id: str, children: Sequence) -> None:
        """Swap one event's rows in a child collection, leaving other events untouched."""
        current = getattr(self._state, collection)
        kept = tuple(child for child in current if child.event_id != event_id)
        self.set(**{collection: kept + tuple(children)})

    async def _replace_children(
        self,
        collection: str,
        repository: EventChildRepository,
        event_id: str,
        payloads: list[Row],
        from_row: Callable[[Row], T],
    ) -> tuple[T, ...]:
        """Delete every child of the event, then bulk-insert the new set."""
        user_id = await self._require_user()
        for payload in payloads:
            payload.update(user_id=user_id, event_id=event_id)

        deleted = await repository.delete_for_event(user_id, event_id)
        rows = await repository.insert_many(payloads) if payloads else []
        children = _by_sort_order(from_row(row) for row in rows)
        self._replace_slice(collection, event_id, children)
        logger.debug(
            f"Replaced {collection} for event {event_id}: "
            f"removed {deleted}, inserted {len(children)}"
        )
        return children

    async def _fetch_children(
        self,
        collection: str,
        repository: EventChildRepository,
        event_id: str,
        from_row: Callable[[Row], T],
    ) -> Result[tuple[T, ...]]:
        async def operation() -> tuple[T, ...]:
            user_id = await self._require_user()
            rows = await repository.list_for_event(user_id, event_id)
            children = _by_sort_order(from_row(row) for row in rows)
            self._replace_slice(collection, event_id, children)
            return children

        description = f"fetching {collection.replace('_', ' ')} for event {event_id}"
        return await self._fetch(_load_key(collection, event_id), description, operation)

    def _member_name(self, member_id: Optional[str]) -> Optional[str]:
        for member in self._state.team_members:
            if member.member_id == member_id:
                return member.member_name
        return None

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    async def fetch_events(self) -> Result[tuple[Event, ...]]:
        """Load every event owned by the account, newest date first."""
        async def operation() -> tuple[Event, ...]:
            user_id = await self._require_user()
            rows = await self._backend.events.list_events(user_id)
            events = tuple(event_from_row(row) for row in rows)
            self.set(events=events)
            logger.debug(f"Fetched {len(events)} events")
            return events

        return await self._fetch("events", "fetching events", operation, "is_event_loading")

    async def add_event(self, draft: EventDraft) -> Result[Event]:
        """Insert an event and prepend the stored row to the collection."""
        async def operation() -> Event:
            user_id = await self._require_user()
            payload = event_to_payload(draft)
            payload.update(event_id=new_event_id(), user_id=user_id)
            event = event_from_row(await self._backend.events.insert_event(payload))
            self.set(events=(event,) + self._state.events)
            logger.info(f"Created event {event.event_id}")
            return event

        return await self._guard("adding event", operation)

    async def update_event(self, event: Event) -> Result[Event]:
        async def operation() -> Event:
            user_id = await self._require_user()
            row = await self._backend.events.update_event(
                user_id, event.event_id, event_to_payload(event)
            )
            updated = event_from_row(row)
            changes = {
                "events": tuple(
                    updated if existing.event_id == updated.event_id else existing
                    for existing in self._state.events
                )
            }
            current = self._state.current_event
            if current is not None and current.event_id == updated.event_id:
                changes["current_event"] = updated
            self.set(**changes)
            return updated

        return await self._guard(f"updating event {event.event_id}", operation)

    async def delete_event(self, event_id: str) -> Result[bool]:
        """
        Delete an event. The backend cascades to its children; the local
        cache drops them too.

        Returns:
            Result whose value is False when no owned event matched
        """
        async def operation() -> bool:
            user_id = await self._require_user()
            deleted = await self._backend.events.delete_event(user_id, event_id)
            state = self._state

            def others(children):
                return tuple(child for child in children if child.event_id != event_id)

            current = state.current_event
            self.set(
                events=tuple(event for event in state.events if event.event_id != event_id),
                team_assignments=others(state.team_assignments),
                traffic_controls=others(state.traffic_controls),
                supervisors=others(state.supervisors),
                event_tasks=others(state.event_tasks),
                current_event=None if current and current.event_id == event_id else current,
            )
            logger.info(f"Deleted event {event_id}")
            return deleted

        return await self._guard(f"deleting event {event_id}", operation)

    def set_current_event(self, event_id: Optional[str]) -> Result[Optional[Event]]:
        """Select an event from the cache (None clears the selection)."""
        if event_id is None:
            self.set(current_event=None)
            return success(None)
        for event in self._state.events:
            if event.event_id == event_id:
                self.set(current_event=event)
                return success(event)
        return failure(NotFoundError("Event", event_id))

    async def hydrate_event(self, event_id: str) -> Result[None]:
        """
        Fetch every child collection of one event concurrently.

        Returns:
            Result carrying the first failure, if any
        """
        results = await asyncio.gather(
            self.fetch_team_assignments(event_id),
            self.fetch_traffic_controls(event_id),
            self.fetch_supervisors(event_id),
            self.fetch_event_tasks(event_id),
        )
        for result in results:
            if not result.ok:
                return failure(result.error)
        return success(None)

    # -------------------------------------------------------------------------
    # Team members
    # -------------------------------------------------------------------------

    async def fetch_team_members(self) -> Result[tuple[TeamMember, ...]]:
        async def operation() -> tuple[TeamMember, ...]:
            user_id = await self._require_user()
            rows = await self._backend.team_members.list_members(user_id)
            members = tuple(member_from_row(row) for row in rows)
            self.set(team_members=members)
            logger.debug(f"Fetched {len(members)} team members")
            return members

        return await self._fetch(
            "team_members", "fetching team members", operation, "is_team_members_loading"
        )

    async def add_team_member(self, draft: TeamMemberDraft) -> Result[TeamMember]:
        async def operation() -> TeamMember:
            user_id = await self._require_user()
            payload = member_to_payload(draft)
            payload.update(member_id=new_member_id(), user_id=user_id)
            member = member_from_row(await self._backend.team_members.insert_member(payload))
            self.set(team_members=_by_member_name(self._state.team_members + (member,)))
            logger.info(f"Added team member {member.member_id}")
            return member

        return await self._guard("adding team member", operation)

    async def update_team_member(self, member: TeamMember) -> Result[TeamMember]:
        async def operation() -> TeamMember:
            user_id = await self._require_user()
            row = await self._backend.team_members.update_member(
                user_id, member.member_id, member_to_payload(member)
            )
            updated = member_from_row(row)
            self.set(team_members=_by_member_name(
                updated if existing.member_id == updated.member_id else existing
                for existing in self._state.team_members
            ))
            return updated

        return await self._guard(f"updating team member {member.member_id}", operation)

    async def delete_team_member(self, member_id: str) -> Result[bool]:
        """
        Delete a member. Locally mirrors the schema's foreign keys: their
        assignments are removed; traffic posts and tasks lose the reference.
        """
        async def operation() -> bool:
            user_id = await self._require_user()
            deleted = await self._backend.team_members.delete_member(user_id, member_id)
            state = self._state
            self.set(
                team_members=tuple(m for m in state.team_members if m.member_id != member_id),
                team_assignments=tuple(
                    a for a in state.team_assignments if a.member_id != member_id
                ),
                traffic_controls=tuple(
                    replace(c, member_id=None) if c.member_id == member_id else c
                    for c in state.traffic_controls
                ),
                event_tasks=tuple(
                    replace(t, assignee_id=None) if t.assignee_id == member_id else t
                    for t in state.event_tasks
                ),
            )
            logger.info(f"Deleted team member {member_id}")
            return deleted

        return await self._guard(f"deleting team member {member_id}", operation)

    # -------------------------------------------------------------------------
    # Team assignments
    # -------------------------------------------------------------------------

    async def fetch_team_assignments(self, event_id: str) -> Result[tuple[TeamAssignment, ...]]:
        return await self._fetch_children(
            "team_assignments", self._backend.team_assignments, event_id, assignment_from_row
        )

    async def replace_team_assignments(
        self,
        event_id: str,
        drafts: Sequence[TeamAssignmentDraft],
    ) -> Result[tuple[TeamAssignment, ...]]:
        """Replace the event's assignments; entries without a member are dropped."""
        kept = [draft for draft in drafts if clean_optional_text(draft.member_id)]

        payloads = []
        for index, draft in enumerate(kept):
            payload = assignment_to_payload(draft)
            payload.update(
                assignment_id=new_assignment_id(),
                sort_order=_position_sort_order(draft.sort_order, index),
            )
            payloads.append(payload)

        return await self._guard(
            f"replacing team assignments for event {event_id}",
            lambda: self._replace_children(
                "team_assignments",
                self._backend.team_assignments,
                event_id,
                payloads,
                assignment_from_row,
            ),
        )

    def get_team_assignments(self, event_id: str) -> tuple[TeamAssignment, ...]:
        return tuple(a for a in self._state.team_assignments if a.event_id == event_id)

    # -------------------------------------------------------------------------
    # Traffic controls
    # -------------------------------------------------------------------------

    async def fetch_traffic_controls(self, event_id: str) -> Result[tuple[TrafficControl, ...]]:
        return await self._fetch_children(
            "traffic_controls", self._backend.traffic_controls, event_id, traffic_from_row
        )

    async def replace_traffic_controls(
        self,
        event_id: str,
        drafts: Sequence[TrafficControlDraft],
    ) -> Result[tuple[TrafficControl, ...]]:
        """
        Replace the event's traffic-control posts.

        A member listed twice is rejected before any backend call. Entries
        are kept only when they have a display name: the staff name, or the
        name of the referenced member in the cache.
        """
        duplicates = find_duplicate_member_refs(drafts)
        if duplicates:
            error = ValidationError("Team member is listed more than once", duplicates)
            logger.error(f"Error replacing traffic controls for event {event_id}: {error}")
            return failure(error)

        payloads = []
        for draft in drafts:
            member_id = clean_optional_text(draft.member_id)
            staff_name = clean_optional_text(draft.staff_name) or self._member_name(member_id)
            if not staff_name:
                continue
            payload = traffic_to_payload(replace(draft, member_id=member_id, staff_name=staff_name))
            payload.update(
                traffic_id=new_traffic_id(),
                sort_order=_position_sort_order(draft.sort_order, len(payloads)),
            )
            payloads.append(payload)

        return await self._guard(
            f"replacing traffic controls for event {event_id}",
            lambda: self._replace_children(
                "traffic_controls",
                self._backend.traffic_controls,
                event_id,
                payloads,
                traffic_from_row,
            ),
        )

    def get_traffic_controls(self, event_id: str) -> tuple[TrafficControl, ...]:
        return tuple(c for c in self._state.traffic_controls if c.event_id == event_id)

    # -------------------------------------------------------------------------
    # Supervisors
    # -------------------------------------------------------------------------

    async def fetch_supervisors(self, event_id: str) -> Result[tuple[Supervisor, ...]]:
        return await self._fetch_children(
            "supervisors", self._backend.supervisors, event_id, supervisor_from_row
        )

    async def replace_supervisors(
        self,
        event_id: str,
        drafts: Sequence[SupervisorDraft],
    ) -> Result[tuple[Supervisor, ...]]:
        """Replace the event's supervisors; unnamed entries are dropped, emails checked first."""
        kept = [draft for draft in drafts if clean_optional_text(draft.supervisor_name)]

        errors = {
            f"supervisor_{index}_email": "Enter a valid email address"
            for index, draft in enumerate(kept)
            if clean_optional_text(draft.email) and not is_valid_email(draft.email)
        }
        if errors:
            error = ValidationError("Supervisor email is invalid", errors)
            logger.error(f"Error replacing supervisors for event {event_id}: {error}")
            return failure(error)

        payloads = []
        for index, draft in enumerate(kept):
            payload = supervisor_to_payload(draft)
            payload.update(
                supervisor_id=new_supervisor_id(),
                sort_order=_position_sort_order(draft.sort_order, index),
            )
            payloads.append(payload)

        return await self._guard(
            f"replacing supervisors for event {event_id}",
            lambda: self._replace_children(
                "supervisors",
                self._backend.supervisors,
                event_id,
                payloads,
                supervisor_from_row,
            ),
        )

    def get_supervisors(self, event_id: str) -> tuple[Supervisor, ...]:
        return tuple(s for s in self._state.supervisors if s.event_id == event_id)

    # -------------------------------------------------------------------------
    # Assignment categories
    # -------------------------------------------------------------------------

    async def _category_rows(self, user_id: str) -> Sequence[Row]:
        return await self._backend.assignment_categories.list_categories(user_id)

    def _set_visible_categories(self, rows: Sequence[Row]) -> tuple[AssignmentCategory, ...]:
        """Persisted names, or the built-in defaults when none are persisted."""
        names = dedupe_and_sort_categories(row.get("category_name") for row in rows)
        if not names:
            names = dedupe_and_sort_categories(DEFAULT_ASSIGNMENT_CATEGORIES)
        categories = tuple(names)
        self.set(assignment_categories=categories)
        return categories

    @staticmethod
    def _find_category(rows: Sequence[Row], name: str) -> Optional[Row]:
        key = category_key(name)
        for row in rows:
            if category_key(row.get("category_name") or "") == key:
                return row
        return None

    async def fetch_assignment_categories(self) -> Result[tuple[AssignmentCategory, ...]]:
        async def operation() -> tuple[AssignmentCategory, ...]:
            user_id = await self._require_user()
            return self._set_visible_categories(await self._category_rows(user_id))

        return await self._fetch(
            "assignment_categories", "fetching assignment categories", operation
        )

    async def add_assignment_category(
        self,
        name: str,
        description: Optional[str] = None,
    ) -> Result[tuple[AssignmentCategory, ...]]:
        """
        Persist a new category name.

        Fails with DuplicateCategoryError when the name matches an existing
        one ignoring case and spacing.
        """
        async def operation() -> tuple[AssignmentCategory, ...]:
            normalized = normalize_category_name(name)
            if not normalized:
                raise ValidationError(
                    "Category name is required", {"category_name": "Category name is required"}
                )
            user_id = await self._require_user()
            rows = list(await self._category_rows(user_id))
            if self._find_category(rows, normalized) is not None:
                raise DuplicateCategoryError(normalized)

            row = await self._backend.assignment_categories.insert_category({
                "category_id": new_category_id(),
                "user_id": user_id,
                "category_name": normalized,
                "description": clean_optional_text(description),
            })
            logger.info(f"Added assignment category '{normalized}'")
            return self._set_visible_categories(rows + [row])

        return await self._guard("adding assignment category", operation)

    async def update_assignment_category(
        self,
        current_name: str,
        new_name: str,
    ) -> Result[tuple[AssignmentCategory, ...]]:
        """
        Rename a persisted category.

        Existing assignments keep their stored assignment_type text.
        """
        async def operation() -> tuple[AssignmentCategory, ...]:
            normalized = normalize_category_name(new_name)
            if not normalized:
                raise ValidationError(
                    "Category name is required", {"category_name": "Category name is required"}
                )
            user_id = await self._require_user()
            rows = list(await self._category_rows(user_id))
            target = self._find_category(rows, current_name)
            if target is None:
                raise NotFoundError("Assignment category", normalize_category_name(current_name))

            clash = self._find_category(rows, normalized)
            if clash is not None and clash["category_id"] != target["category_id"]:
                raise DuplicateCategoryError(normalized)

            row = await self._backend.assignment_categories.rename_category(
                user_id, target["category_id"], normalized
            )
            rows = [row if r["category_id"] == target["category_id"] else r for r in rows]
            logger.info(f"Renamed assignment category '{current_name}' to '{normalized}'")
            return self._set_visible_categories(rows)

        return await self._guard("updating assignment category", operation)

    async def delete_assignment_category(self, name: str) -> Result[tuple[AssignmentCategory, ...]]:
        """Delete a persisted category; removing the last one restores the defaults."""
        async def operation() -> tuple[AssignmentCategory, ...]:
            user_id = await self._require_user()
            rows = list(await self._category_rows(user_id))
            target = self._find_category(rows, name)
            if target is None:
                raise NotFoundError("Assignment category", normalize_category_name(name))

            await self._backend.assignment_categories.delete_category(
                user_id, target["category_id"]
            )
            logger.info(f"Deleted assignment category '{target['category_name']}'")
            return self._set_visible_categories(
                [r for r in rows if r["category_id"] != target["category_id"]]
            )

        return await self._guard("deleting assignment category", operation)

    # -------------------------------------------------------------------------
    # Task categories
    # -------------------------------------------------------------------------

    async def fetch_task_categories(self) -> Result[tuple[TaskCategory, ...]]:
        async def operation() -> tuple[TaskCategory, ...]:
            user_id = await self._require_user()
            rows = await self._backend.task_categories.list_task_categories(user_id)
            categories = _by_sort_order(task_category_from_row(row) for row in rows)
            self.set(task_categories=categories)
            return categories

        return await self._fetch("task_categories", "fetching task categories", operation)

    async def add_task_category(self, draft: TaskCategoryDraft) -> Result[TaskCategory]:
        """Add a task category; it goes last unless a sort order is given."""
        async def operation() -> TaskCategory:
            user_id = await self._require_user()
            existing = self._state.task_categories
            sort_order = draft.sort_order
            if sort_order is None:
                sort_order = max((c.sort_order for c in existing), default=0) + 1
            payload = task_category_to_payload(draft)
            payload.update(category_id=new_category_id(), user_id=user_id, sort_order=sort_order)
            row = await self._backend.task_categories.insert_task_category(payload)
            category = task_category_from_row(row)
            self.set(task_categories=_by_sort_order(self._state.task_categories + (category,)))
            return category

        return await self._guard("adding task category", operation)

    async def update_task_category(self, category: TaskCategory) -> Result[TaskCategory]:
        async def operation() -> TaskCategory:
            user_id = await self._require_user()
            updates = task_category_to_payload(category)
            updates["sort_order"] = category.sort_order
            row = await self._backend.task_categories.update_task_category(
                user_id, category.category_id, updates
            )
            updated = task_category_from_row(row)
            self.set(task_categories=_by_sort_order(
                updated if c.category_id == updated.category_id else c
                for c in self._state.task_categories
            ))
            return updated

        return await self._guard(f"updating task category {category.category_id}", operation)

    async def delete_task_category(self, category_id: str) -> Result[bool]:
        """Delete a task category; tasks in it become uncategorized."""
        async def operation() -> bool:
            user_id = await self._require_user()
            deleted = await self._backend.task_categories.delete_task_category(
                user_id, category_id
            )
            state = self._state
            self.set(
                task_categories=tuple(
                    c for c in state.task_categories if c.category_id != category_id
                ),
                event_tasks=tuple(
                    replace(t, category_id=None) if t.category_id == category_id else t
                    for t in state.event_tasks
                ),
            )
            return deleted

        return await self._guard(f"deleting task category {category_id}", operation)

    # -------------------------------------------------------------------------
    # Event tasks
    # -------------------------------------------------------------------------

    async def fetch_event_tasks(self, event_id: str) -> Result[tuple[EventTask, ...]]:
        return await self._fetch_children(
            "event_tasks", self._backend.event_tasks, event_id, task_from_row
        )

    async def add_event_task(self, event_id: str, draft: EventTaskDraft) -> Result[EventTask]:
        """Add one task to an event; it goes last unless a sort order is given."""
        async def operation() -> EventTask:
            user_id = await self._require_user()
            sort_order = draft.sort_order
            if sort_order is None:
                sort_order = len(self.get_event_tasks(event_id)) + 1
            payload = task_to_payload(draft)
            payload.update(
                task_id=new_task_id(),
                user_id=user_id,
                event_id=event_id,
                sort_order=sort_order,
            )
            rows = await self._backend.event_tasks.insert_many([payload])
            task = task_from_row(rows[0])
            self._replace_slice(
                "event_tasks", event_id, _by_sort_order(self.get_event_tasks(event_id) + (task,))
            )
            return task

        return await self._guard(f"adding task to event {event_id}", operation)

    async def update_event_task(self, task: EventTask) -> Result[EventTask]:
        async def operation() -> EventTask:
            user_id = await self._require_user()
            updates = task_to_payload(task)
            updates["sort_order"] = task.sort_order
            row = await self._backend.event_tasks.update_child(user_id, task.task_id, updates)
            updated = task_from_row(row)
            self.set(event_tasks=tuple(
                updated if t.task_id == updated.task_id else t for t in self._state.event_tasks
            ))
            return updated

        return await self._guard(f"updating task {task.task_id}", operation)

    async def delete_event_task(self, task_id: str) -> Result[bool]:
        async def operation() -> bool:
            user_id = await self._require_user()
            deleted = await self._backend.event_tasks.delete_child(user_id, task_id)
            self.set(event_tasks=tuple(t for t in self._state.event_tasks if t.task_id != task_id))
            return deleted

        return await self._guard(f"deleting task {task_id}", operation)

    async def replace_event_tasks(
        self,
        event_id: str,
        drafts: Sequence[EventTaskDraft],
    ) -> Result[tuple[EventTask, ...]]:
        """Replace the event's tasks; untitled entries are dropped."""
        kept = [draft for draft in drafts if clean_optional_text(draft.title)]

        payloads = []
        for index, draft in enumerate(kept):
            payload = task_to_payload(draft)
            payload.update(
                task_id=new_task_id(),
                sort_order=_position_sort_order(draft.sort_order, index),
            )
            payloads.append(payload)

        return await self._guard(
            f"replacing tasks for event {event_id}",
            lambda: self._replace_children(
                "event_tasks",
                self._backend.event_tasks,
                event_id,
                payloads,
                task_from_row,
            ),
        )

    def get_event_tasks(self, event_id: str) -> tuple[EventTask, ...]:
        return tuple(t for t in self._state.event_tasks if t.event_id == event_id)


def get_store() -> DomainStore:
    """Get the store singleton over the configured backend."""
    global _store
    if _store is None:
        from src.integrations import get_backend
        _store = DomainStore(get_backend())
    return _store


def reset_store() -> None:
    """Reset the store singleton (for testing)."""
    global _store
    _store = None
