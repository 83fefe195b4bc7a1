"""
Unit tests for the gateway repositories over the local database backend.

Tests:
- Account scoping of every query
- Ordering contracts
- NotFound and duplicate-name mapping
- Error translation in the SQLAlchemy gateway
"""

import pytest

from src.integrations.database import SQLAlchemyTableGateway, model_for_table
from src.models import Event, TeamMember
from src.services.exceptions import BackendError, DuplicateCategoryError, NotFoundError

ACCOUNT = "account-1"
OTHER = "account-2"


def _event(event_id: str, user_id: str = ACCOUNT, event_date=None) -> dict:
    return {"event_id": event_id, "user_id": user_id, "event_name": event_id, "event_date": event_date}


class TestEventRepository:
    """Test events access."""

    @pytest.mark.asyncio
    async def test_insert_returns_server_defaults(self, backend):
        row = await backend.events.insert_event(_event("event_1"))

        assert row["location"] == "Location TBD"
        assert row["start_time"] == "00:00"
        assert row["prepared_by"] == "Unassigned"
        assert row["created_at"] is not None

    @pytest.mark.asyncio
    async def test_list_newest_first_undated_last(self, backend):
        await backend.events.insert_event(_event("spring", event_date="2025-04-01"))
        await backend.events.insert_event(_event("undated"))
        await backend.events.insert_event(_event("autumn", event_date="2025-10-04"))

        rows = await backend.events.list_events(ACCOUNT)

        assert [r["event_id"] for r in rows] == ["autumn", "spring", "undated"]

    @pytest.mark.asyncio
    async def test_account_scoping(self, backend, other_backend):
        await backend.events.insert_event(_event("mine"))
        await other_backend.events.insert_event(_event("theirs", user_id=OTHER))

        assert [r["event_id"] for r in await backend.events.list_events(ACCOUNT)] == ["mine"]

        with pytest.raises(NotFoundError):
            await other_backend.events.update_event(OTHER, "mine", {"event_name": "Hijack"})
        assert await other_backend.events.delete_event(OTHER, "mine") is False
        assert len(await backend.events.list_events(ACCOUNT)) == 1

    @pytest.mark.asyncio
    async def test_update_and_delete(self, backend):
        await backend.events.insert_event(_event("event_1"))

        row = await backend.events.update_event(ACCOUNT, "event_1", {"event_name": "Renamed"})
        assert row["event_name"] == "Renamed"

        assert await backend.events.delete_event(ACCOUNT, "event_1") is True
        assert await backend.events.list_events(ACCOUNT) == []


class TestEventChildRepository:
    """Test per-event child access."""

    @pytest.mark.asyncio
    async def test_replace_cycle(self, backend):
        await backend.events.insert_event(_event("event_1"))
        await backend.events.insert_event(_event("event_2"))
        supervisors = backend.supervisors

        await supervisors.insert_many([
            {"supervisor_id": "s2", "user_id": ACCOUNT, "event_id": "event_1", "supervisor_name": "B", "sort_order": 2},
            {"supervisor_id": "s1", "user_id": ACCOUNT, "event_id": "event_1", "supervisor_name": "A", "sort_order": 1},
            {"supervisor_id": "s3", "user_id": ACCOUNT, "event_id": "event_2", "supervisor_name": "C", "sort_order": 1},
        ])

        rows = await supervisors.list_for_event(ACCOUNT, "event_1")
        assert [r["supervisor_id"] for r in rows] == ["s1", "s2"]

        assert await supervisors.delete_for_event(ACCOUNT, "event_1") == 2
        assert await supervisors.list_for_event(ACCOUNT, "event_1") == []
        assert len(await supervisors.list_for_event(ACCOUNT, "event_2")) == 1

    @pytest.mark.asyncio
    async def test_insert_many_empty(self, backend):
        assert await backend.event_tasks.insert_many([]) == []

    @pytest.mark.asyncio
    async def test_update_missing_child(self, backend):
        with pytest.raises(NotFoundError) as exc_info:
            await backend.event_tasks.update_child(ACCOUNT, "task_x", {"title": "New"})

        assert exc_info.value.resource == "Task"

    @pytest.mark.asyncio
    async def test_task_status_check(self, backend):
        await backend.events.insert_event(_event("event_1"))

        with pytest.raises(BackendError) as exc_info:
            await backend.event_tasks.insert_many([{
                "task_id": "task_1",
                "user_id": ACCOUNT,
                "event_id": "event_1",
                "title": "Cones",
                "status": "Blocked",
            }])

        assert exc_info.value.code != "23505"

    @pytest.mark.asyncio
    async def test_child_of_missing_event_rejected(self, backend):
        with pytest.raises(BackendError):
            await backend.supervisors.insert_many([{
                "supervisor_id": "s1",
                "user_id": ACCOUNT,
                "event_id": "event_missing",
                "supervisor_name": "A",
            }])


class TestAssignmentCategoryRepository:
    """Test assignment category access."""

    @pytest.mark.asyncio
    async def test_duplicate_name_ignoring_case(self, backend):
        categories = backend.assignment_categories
        await categories.insert_category({"category_id": "c1", "user_id": ACCOUNT, "category_name": "Gate"})

        with pytest.raises(DuplicateCategoryError):
            await categories.insert_category({"category_id": "c2", "user_id": ACCOUNT, "category_name": "GATE"})

    @pytest.mark.asyncio
    async def test_same_name_in_other_account(self, backend, other_backend):
        await backend.assignment_categories.insert_category(
            {"category_id": "c1", "user_id": ACCOUNT, "category_name": "Gate"}
        )
        await other_backend.assignment_categories.insert_category(
            {"category_id": "c2", "user_id": OTHER, "category_name": "Gate"}
        )

        assert len(await other_backend.assignment_categories.list_categories(OTHER)) == 1

    @pytest.mark.asyncio
    async def test_rename_collision(self, backend):
        categories = backend.assignment_categories
        await categories.insert_category({"category_id": "c1", "user_id": ACCOUNT, "category_name": "Gate"})
        await categories.insert_category({"category_id": "c2", "user_id": ACCOUNT, "category_name": "Parking"})

        with pytest.raises(DuplicateCategoryError):
            await categories.rename_category(ACCOUNT, "c2", "gate")

    @pytest.mark.asyncio
    async def test_list_sorted_by_name(self, backend):
        categories = backend.assignment_categories
        for category_id, name in [("c1", "Parking"), ("c2", "Gate")]:
            await categories.insert_category({"category_id": category_id, "user_id": ACCOUNT, "category_name": name})

        rows = await categories.list_categories(ACCOUNT)

        assert [r["category_name"] for r in rows] == ["Gate", "Parking"]


class TestTaskCategoryRepository:
    """Test task category ordering."""

    @pytest.mark.asyncio
    async def test_sort_order_then_name(self, backend):
        categories = backend.task_categories
        for category_id, name, order in [("c1", "Zeta", 1), ("c2", "Alpha", 2), ("c3", "Beta", 1)]:
            await categories.insert_task_category(
                {"category_id": category_id, "user_id": ACCOUNT, "name": name, "sort_order": order}
            )

        rows = await categories.list_task_categories(ACCOUNT)

        assert [r["name"] for r in rows] == ["Beta", "Zeta", "Alpha"]
        assert rows[0]["color"] == "#3B82F6"


class TestSQLAlchemyTableGateway:
    """Test the gateway itself."""

    def test_model_for_table(self):
        assert model_for_table("events") is Event
        assert model_for_table("team_members") is TeamMember
        with pytest.raises(KeyError):
            model_for_table("calendars")

    @pytest.mark.asyncio
    async def test_select_filters_null(self, session_factory):
        gateway = SQLAlchemyTableGateway(session_factory, Event)
        await gateway.insert([_event("dated", event_date="2025-10-04"), _event("undated")])

        rows = await gateway.select({"event_date": None})

        assert [r["event_id"] for r in rows] == ["undated"]

    @pytest.mark.asyncio
    async def test_duplicate_primary_key(self, session_factory):
        gateway = SQLAlchemyTableGateway(session_factory, Event)
        await gateway.insert([_event("event_1")])

        with pytest.raises(BackendError) as exc_info:
            await gateway.insert([_event("event_1")])

        assert exc_info.value.code == "23505"
        assert exc_info.value.original_error is not None
        assert len(await gateway.select({})) == 1
