"""
Local snapshot persistence.

Saves the store's entity collections as one JSON blob under a single storage
key and restores them verbatim. Loading flags, load states and the current
event selection are not persisted.

Blob layout: {"state": {"events": [...], ...}, "version": 0}
"""

import json
import logging
from pathlib import Path
from typing import Callable, Optional, Protocol

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from src.config import Settings, get_settings
from src.defaults import DEFAULT_ASSIGNMENT_CATEGORIES
from src.services.store import DomainStore, StoreState
from src.services.types import (
    Event,
    EventTask,
    Supervisor,
    TaskCategory,
    TeamAssignment,
    TeamMember,
    TrafficControl,
)

logger = logging.getLogger(__name__)

STORAGE_KEY = "event-staff-storage"
SNAPSHOT_VERSION = 0


class SnapshotStorage(Protocol):
    """String key-value storage (browser-style local storage)."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemoryStorage:
    """In-process storage."""

    def __init__(self):
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage:
    """
    Storage backed by one JSON file holding every key.

    Args:
        path: File location (created on first write)
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            items = json.loads(self._path.read_text(encoding="utf-8"))
        except ValueError as e:
            logger.warning(f"Ignoring unreadable storage file {self._path}: {e}")
            return {}
        if not isinstance(items, dict):
            logger.warning(f"Ignoring storage file {self._path}: expected a JSON object")
            return {}
        return items

    def _write(self, items: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(items), encoding="utf-8")

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str) -> None:
        items = self._read()
        if items.pop(key, None) is not None:
            self._write(items)


def get_snapshot_storage(settings: Settings | None = None) -> FileStorage:
    """File storage at the configured STATE_FILE location."""
    settings = settings or get_settings()
    return FileStorage(settings.state_file)


class PersistedCollections(BaseModel):
    """Entity collections saved from a StoreState."""

    events: list[Event] = Field(default_factory=list)
    team_members: list[TeamMember] = Field(default_factory=list)
    assignment_categories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ASSIGNMENT_CATEGORIES)
    )
    team_assignments: list[TeamAssignment] = Field(default_factory=list)
    traffic_controls: list[TrafficControl] = Field(default_factory=list)
    supervisors: list[Supervisor] = Field(default_factory=list)
    task_categories: list[TaskCategory] = Field(default_factory=list)
    event_tasks: list[EventTask] = Field(default_factory=list)


class PersistedSnapshot(BaseModel):
    state: PersistedCollections
    version: int = SNAPSHOT_VERSION


def snapshot_from_state(state: StoreState) -> PersistedSnapshot:
    return PersistedSnapshot(
        state=PersistedCollections(
            events=list(state.events),
            team_members=list(state.team_members),
            assignment_categories=list(state.assignment_categories),
            team_assignments=list(state.team_assignments),
            traffic_controls=list(state.traffic_controls),
            supervisors=list(state.supervisors),
            task_categories=list(state.task_categories),
            event_tasks=list(state.event_tasks),
        )
    )


def state_from_snapshot(snapshot: PersistedSnapshot) -> StoreState:
    collections = snapshot.state
    return StoreState(
        events=tuple(collections.events),
        team_members=tuple(collections.team_members),
        assignment_categories=tuple(collections.assignment_categories),
        team_assignments=tuple(collections.team_assignments),
        traffic_controls=tuple(collections.traffic_controls),
        supervisors=tuple(collections.supervisors),
        task_categories=tuple(collections.task_categories),
        event_tasks=tuple(collections.event_tasks),
    )


def save_state(state: StoreState, storage: SnapshotStorage, key: str = STORAGE_KEY) -> None:
    """Serialize the entity collections under the storage key."""
    storage.set_item(key, snapshot_from_state(state).model_dump_json())
    logger.debug(f"Saved snapshot under '{key}' ({len(state.events)} events)")


def load_state(storage: SnapshotStorage, key: str = STORAGE_KEY) -> Optional[StoreState]:
    """
    Restore a saved snapshot.

    Returns:
        The restored state, or None when nothing usable is stored
    """
    blob = storage.get_item(key)
    if blob is None:
        return None
    try:
        snapshot = PersistedSnapshot.model_validate_json(blob)
    except PydanticValidationError as e:
        logger.warning(f"Ignoring unreadable snapshot under '{key}': {e}")
        return None
    return state_from_snapshot(snapshot)


def clear_state(storage: SnapshotStorage, key: str = STORAGE_KEY) -> None:
    storage.remove_item(key)


def persist_store(
    store: DomainStore,
    storage: SnapshotStorage,
    key: str = STORAGE_KEY,
) -> Callable[[], None]:
    """
    Save the store's collections after every change.

    Returns:
        A function that stops persisting
    """
    return store.subscribe(lambda state: save_state(state, storage, key))
