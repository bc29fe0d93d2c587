"""
In-Memory Storage Implementation

Session-scoped stores that keep records in plain dicts.
Used by tests, by demos, and as the fallback when no remote
backend is configured. Each instance owns its own data: nothing is
shared at module level.
"""

import copy
from typing import Any, Optional
from uuid import UUID

from finance_tracker.models.audit import AuditEvent
from finance_tracker.services.storage.interface import (
    AuditStorageInterface,
    Collection,
    ConfigKey,
    DuplicateError,
    NotFoundError,
    RecordStoreInterface,
)


class InMemoryRecordStore(RecordStoreInterface):
    """
    Record store backed by per-collection lists.

    Records are deep-copied on the way in and out so callers can't
    mutate stored state behind the store's back.
    """

    def __init__(
        self,
        records: Optional[dict[Collection, list[dict[str, Any]]]] = None,
        config: Optional[dict[ConfigKey, Any]] = None,
    ):
        self._records: dict[Collection, list[dict[str, Any]]] = {
            collection: [] for collection in Collection
        }
        for collection, rows in (records or {}).items():
            self._records[Collection(collection)] = copy.deepcopy(rows)
        self._config: dict[ConfigKey, Any] = {
            ConfigKey(key): copy.deepcopy(value)
            for key, value in (config or {}).items()
        }

    @classmethod
    def with_demo_data(cls) -> "InMemoryRecordStore":
        """Create a store seeded with the demo data set."""
        from finance_tracker.services.storage.demo_data import (
            demo_config,
            demo_records,
        )

        return cls(records=demo_records(), config=demo_config())

    def _find_index(self, collection: Collection, record_id: str) -> Optional[int]:
        for idx, row in enumerate(self._records[collection]):
            if row.get("id") == record_id:
                return idx
        return None

    async def fetch_all(self, collection: Collection) -> list[dict[str, Any]]:
        return copy.deepcopy(self._records[collection])

    async def insert(
        self,
        collection: Collection,
        record: dict[str, Any],
    ) -> dict[str, Any]:
        if self._find_index(collection, record["id"]) is not None:
            raise DuplicateError(f"{collection.value} record already exists: {record['id']}")
        self._records[collection].append(copy.deepcopy(record))
        return copy.deepcopy(record)

    async def update(
        self,
        collection: Collection,
        record_id: str,
        patch: dict[str, Any],
    ) -> dict[str, Any]:
        idx = self._find_index(collection, record_id)
        if idx is None:
            raise NotFoundError(f"{collection.value} record not found: {record_id}")
        row = self._records[collection][idx]
        row.update(copy.deepcopy(patch))
        return copy.deepcopy(row)

    async def delete(self, collection: Collection, record_id: str) -> bool:
        idx = self._find_index(collection, record_id)
        if idx is None:
            return False
        del self._records[collection][idx]
        return True

    async def get_config(self, key: ConfigKey) -> Optional[Any]:
        return copy.deepcopy(self._config.get(key))

    async def set_config(self, key: ConfigKey, value: Any) -> None:
        self._config[key] = copy.deepcopy(value)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log kept in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._events if e.correlation_id == correlation_id]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
