"""
Entity repositories built on a TableGateway.

The same repository classes serve every backend; only the gateway differs
(SQLAlchemy for the local database, HTTP for the hosted service). Every query
carries the account filter, and child-table queries add the event filter.
"""

import logging
from typing import Callable, Sequence

from src.integrations.base import (
    AssignmentCategoryRepository,
    Backend,
    AuthProvider,
    EventChildRepository,
    EventRepository,
    Row,
    TableGateway,
    TaskCategoryRepository,
    TeamMemberRepository,
)
from src.services.exceptions import BackendError, DuplicateCategoryError, NotFoundError

logger = logging.getLogger(__name__)

# Backend error codes that mean a unique constraint was violated
UNIQUE_VIOLATION_CODES = {"23505", "409"}


def _single(rows: Sequence[Row], resource: str, identifier: str) -> Row:
    if not rows:
        raise NotFoundError(resource, identifier)
    return rows[0]


class GatewayEventRepository(EventRepository):
    """Events table access."""

    def __init__(self, gateway: TableGateway):
        self._gateway = gateway

    async def list_events(self, user_id: str) -> Sequence[Row]:
        return await self._gateway.select(
            {"user_id": user_id},
            order_by=[("event_date", True)],
        )

    async def insert_event(self, payload: Row) -> Row:
        rows = await self._gateway.insert([payload])
        return _single(rows, "Event", payload.get("event_id", ""))

    async def update_event(self, user_id: str, event_id: str, updates: Row) -> Row:
        rows = await self._gateway.update(
            {"event_id": event_id, "user_id": user_id}, updates
        )
        return _single(rows, "Event", event_id)

    async def delete_event(self, user_id: str, event_id: str) -> bool:
        deleted = await self._gateway.delete({"event_id": event_id, "user_id": user_id})
        return deleted > 0


class GatewayTeamMemberRepository(TeamMemberRepository):
    """Team members table access."""

    def __init__(self, gateway: TableGateway):
        self._gateway = gateway

    async def list_members(self, user_id: str) -> Sequence[Row]:
        return await self._gateway.select(
            {"user_id": user_id},
            order_by=[("member_name", False)],
        )

    async def insert_member(self, payload: Row) -> Row:
        rows = await self._gateway.insert([payload])
        return _single(rows, "Team member", payload.get("member_id", ""))

    async def update_member(self, user_id: str, member_id: str, updates: Row) -> Row:
        rows = await self._gateway.update(
            {"member_id": member_id, "user_id": user_id}, updates
        )
        return _single(rows, "Team member", member_id)

    async def delete_member(self, user_id: str, member_id: str) -> bool:
        deleted = await self._gateway.delete({"member_id": member_id, "user_id": user_id})
        return deleted > 0


class GatewayEventChildRepository(EventChildRepository):
    """
    Access to a table of rows owned by one event.

    Args:
        gateway: Gateway for the child table
        key: Primary key column (e.g. "assignment_id")
        resource: Human-readable name used in NotFoundError
    """

    def __init__(self, gateway: TableGateway, key: str, resource: str):
        self._gateway = gateway
        self._key = key
        self._resource = resource

    async def list_for_event(self, user_id: str, event_id: str) -> Sequence[Row]:
        return await self._gateway.select(
            {"event_id": event_id, "user_id": user_id},
            order_by=[("sort_order", False)],
        )

    async def insert_many(self, payloads: Sequence[Row]) -> Sequence[Row]:
        if not payloads:
            return []
        return await self._gateway.insert(payloads)

    async def delete_for_event(self, user_id: str, event_id: str) -> int:
        deleted = await self._gateway.delete({"event_id": event_id, "user_id": user_id})
        logger.debug(f"Deleted {deleted} rows from {self._gateway.table} for event {event_id}")
        return deleted

    async def update_child(self, user_id: str, child_id: str, updates: Row) -> Row:
        rows = await self._gateway.update(
            {self._key: child_id, "user_id": user_id}, updates
        )
        return _single(rows, self._resource, child_id)

    async def delete_child(self, user_id: str, child_id: str) -> bool:
        deleted = await self._gateway.delete({self._key: child_id, "user_id": user_id})
        return deleted > 0


class GatewayAssignmentCategoryRepository(AssignmentCategoryRepository):
    """Assignment categories table access; maps unique violations to DuplicateCategoryError."""

    def __init__(self, gateway: TableGateway):
        self._gateway = gateway

    async def list_categories(self, user_id: str) -> Sequence[Row]:
        return await self._gateway.select(
            {"user_id": user_id},
            order_by=[("category_name", False)],
        )

    async def insert_category(self, payload: Row) -> Row:
        try:
            rows = await self._gateway.insert([payload])
        except BackendError as e:
            if e.code in UNIQUE_VIOLATION_CODES:
                raise DuplicateCategoryError(payload.get("category_name", "")) from e
            raise
        return _single(rows, "Assignment category", payload.get("category_id", ""))

    async def rename_category(self, user_id: str, category_id: str, name: str) -> Row:
        try:
            rows = await self._gateway.update(
                {"category_id": category_id, "user_id": user_id},
                {"category_name": name},
            )
        except BackendError as e:
            if e.code in UNIQUE_VIOLATION_CODES:
                raise DuplicateCategoryError(name) from e
            raise
        return _single(rows, "Assignment category", category_id)

    async def delete_category(self, user_id: str, category_id: str) -> bool:
        deleted = await self._gateway.delete({"category_id": category_id, "user_id": user_id})
        return deleted > 0


class GatewayTaskCategoryRepository(TaskCategoryRepository):
    """Task categories table access."""

    def __init__(self, gateway: TableGateway):
        self._gateway = gateway

    async def list_task_categories(self, user_id: str) -> Sequence[Row]:
        return await self._gateway.select(
            {"user_id": user_id},
            order_by=[("sort_order", False), ("name", False)],
        )

    async def insert_task_category(self, payload: Row) -> Row:
        rows = await self._gateway.insert([payload])
        return _single(rows, "Task category", payload.get("category_id", ""))

    async def update_task_category(self, user_id: str, category_id: str, updates: Row) -> Row:
        rows = await self._gateway.update(
            {"category_id": category_id, "user_id": user_id}, updates
        )
        return _single(rows, "Task category", category_id)

    async def delete_task_category(self, user_id: str, category_id: str) -> bool:
        deleted = await self._gateway.delete({"category_id": category_id, "user_id": user_id})
        return deleted > 0


def build_gateway_backend(
    auth: AuthProvider,
    gateway_factory: Callable[[str], TableGateway],
) -> Backend:
    """
    Assemble a Backend from one gateway per table.

    Args:
        auth: Session lookup for the backend
        gateway_factory: Returns the gateway for a table name
    """
    return Backend(
        auth=auth,
        events=GatewayEventRepository(gateway_factory("events")),
        team_members=GatewayTeamMemberRepository(gateway_factory("team_members")),
        team_assignments=GatewayEventChildRepository(
            gateway_factory("team_assignments"), "assignment_id", "Team assignment"
        ),
        traffic_controls=GatewayEventChildRepository(
            gateway_factory("traffic_controls"), "traffic_id", "Traffic control"
        ),
        supervisors=GatewayEventChildRepository(
            gateway_factory("supervisors"), "supervisor_id", "Supervisor"
        ),
        event_tasks=GatewayEventChildRepository(
            gateway_factory("event_tasks"), "task_id", "Task"
        ),
        assignment_categories=GatewayAssignmentCategoryRepository(
            gateway_factory("assignment_categories")
        ),
        task_categories=GatewayTaskCategoryRepository(gateway_factory("task_categories")),
    )
