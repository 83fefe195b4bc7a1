"""
Unit tests for DomainStore failure paths, using a mocked backend.

Tests:
- Backend errors become failed Results and leave the cache unchanged
- Validation failures never reach the backend
- Load states and loading flags recover after a failure
- Singleton accessors
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.integrations.base import SessionUser
from src.services.exceptions import BackendError, DuplicateCategoryError, UnauthenticatedError
from src.services.store import DomainStore, LoadState, get_store, reset_store
from src.services.types import EventDraft, TeamAssignmentDraft, TrafficControlDraft


@pytest.fixture
def mock_backend():
    """Backend whose repositories are AsyncMocks and whose session is 'account-1'."""
    backend = MagicMock()
    backend.auth.get_user = AsyncMock(return_value=SessionUser(id="account-1"))
    for name in (
        "events",
        "team_members",
        "team_assignments",
        "traffic_controls",
        "supervisors",
        "event_tasks",
        "assignment_categories",
        "task_categories",
    ):
        setattr(backend, name, AsyncMock())
    return backend


class TestBackendFailures:
    """Test propagation of backend errors."""

    @pytest.mark.asyncio
    async def test_fetch_events_failure(self, mock_backend):
        mock_backend.events.list_events.side_effect = BackendError("boom", code="500")
        store = DomainStore(mock_backend)

        result = await store.fetch_events()

        assert isinstance(result.error, BackendError)
        assert result.error.code == "500"
        state = store.get()
        assert state.is_event_loading is False
        assert state.load_state("events") == LoadState.UNKNOWN

    @pytest.mark.asyncio
    async def test_add_event_failure_leaves_cache(self, mock_backend):
        mock_backend.events.insert_event.side_effect = BackendError("insert failed")
        store = DomainStore(mock_backend)

        result = await store.add_event(EventDraft(event_name="Fair"))

        assert not result.ok
        assert store.get().events == ()

    @pytest.mark.asyncio
    async def test_add_event_sends_placeholders(self, mock_backend):
        async def echo(payload):
            return payload
        mock_backend.events.insert_event.side_effect = echo
        store = DomainStore(mock_backend)

        await store.add_event(EventDraft(event_name="Fair", start_time="10:00"))

        payload = mock_backend.events.insert_event.call_args.args[0]
        assert payload["user_id"] == "account-1"
        assert payload["event_id"].startswith("event_")
        assert payload["location"] == "Location TBD"
        assert payload["start_time"] == "10:00"
        assert payload["end_time"] == "00:00"

    @pytest.mark.asyncio
    async def test_unexpected_exceptions_propagate(self, mock_backend):
        mock_backend.events.list_events.side_effect = RuntimeError("bug")
        store = DomainStore(mock_backend)

        with pytest.raises(RuntimeError):
            await store.fetch_events()

    @pytest.mark.asyncio
    async def test_child_fetch_failure_keeps_other_slices(self, mock_backend):
        mock_backend.supervisors.list_for_event.side_effect = BackendError("down")
        store = DomainStore(mock_backend)

        result = await store.fetch_supervisors("event_1")

        assert not result.ok
        assert store.get().load_state("supervisors", "event_1") == LoadState.UNKNOWN

    @pytest.mark.asyncio
    async def test_replace_failure_after_delete(self, mock_backend):
        mock_backend.team_assignments.delete_for_event.return_value = 2
        mock_backend.team_assignments.insert_many.side_effect = BackendError("insert failed")
        store = DomainStore(mock_backend)

        result = await store.replace_team_assignments(
            "event_1", [TeamAssignmentDraft(member_id="member_a")]
        )

        assert isinstance(result.error, BackendError)
        mock_backend.team_assignments.delete_for_event.assert_awaited_once_with("account-1", "event_1")

    @pytest.mark.asyncio
    async def test_repository_duplicate_surfaces(self, mock_backend):
        mock_backend.assignment_categories.list_categories.return_value = []
        mock_backend.assignment_categories.insert_category.side_effect = DuplicateCategoryError("Gate")
        store = DomainStore(mock_backend)

        result = await store.add_assignment_category("Gate")

        assert isinstance(result.error, DuplicateCategoryError)


class TestNoBackendCall:
    """Test rejections that happen before any backend call."""

    @pytest.mark.asyncio
    async def test_duplicate_traffic_members(self, mock_backend):
        store = DomainStore(mock_backend)

        result = await store.replace_traffic_controls("event_1", [
            TrafficControlDraft(member_id="member_a"),
            TrafficControlDraft(member_id="member_a"),
        ])

        assert not result.ok
        mock_backend.auth.get_user.assert_not_awaited()
        mock_backend.traffic_controls.delete_for_event.assert_not_awaited()
        mock_backend.traffic_controls.insert_many.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_blank_assignment_category(self, mock_backend):
        store = DomainStore(mock_backend)

        result = await store.add_assignment_category("   ")

        assert not result.ok
        mock_backend.assignment_categories.list_categories.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unauthenticated_skips_repositories(self, mock_backend):
        mock_backend.auth.get_user.return_value = None
        store = DomainStore(mock_backend)

        result = await store.fetch_team_members()

        assert isinstance(result.error, UnauthenticatedError)
        mock_backend.team_members.list_members.assert_not_awaited()
        assert store.get().is_team_members_loading is False

    @pytest.mark.asyncio
    async def test_unauthenticated_categories_keep_defaults(self, mock_backend):
        mock_backend.auth.get_user.return_value = None
        store = DomainStore(mock_backend)
        before = store.get().assignment_categories

        result = await store.fetch_assignment_categories()

        assert isinstance(result.error, UnauthenticatedError)
        assert store.get().assignment_categories == before


class TestStoreSingleton:
    """Test get_store/reset_store."""

    def test_singleton(self, monkeypatch, mock_backend):
        monkeypatch.setattr("src.integrations.get_backend", lambda: mock_backend)
        reset_store()
        try:
            store = get_store()
            assert get_store() is store
        finally:
            reset_store()
