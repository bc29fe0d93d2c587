"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
The record store exposes exactly four collection operations
(fetch-all, insert, update, delete) plus a key-value config table.
Records cross this boundary as plain dicts with snake_case keys;
mapping to models happens in the repository.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from finance_tracker.models.audit import AuditEvent


class Collection(str, Enum):
    """The six record collections of the store."""
    TRANSACTIONS = "transactions"
    DEBTS = "debts"
    BUDGETS = "budgets"
    SCHEDULED_PAYMENTS = "scheduled_payments"
    BTC_CONTRIBUTIONS = "btc_contributions"
    DASHBOARD_STATS = "dashboard_stats"


class ConfigKey(str, Enum):
    """Keys of the key-value configuration table."""
    CATEGORIES = "categories"
    PAYMENT_CONCEPTS = "payment_concepts"


class RecordStoreInterface(ABC):
    """
    Abstract interface for record storage operations.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def fetch_all(self, collection: Collection) -> list[dict[str, Any]]:
        """
        Fetch every record of a collection.

        Returns:
            List of records in storage order

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def insert(
        self,
        collection: Collection,
        record: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Insert a record. The record must carry its own `id`.

        Returns:
            The stored record

        Raises:
            DuplicateError: If a record with the same id exists
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def update(
        self,
        collection: Collection,
        record_id: str,
        patch: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Apply a partial update to a record.

        Returns:
            The full record after the update

        Raises:
            NotFoundError: If the record doesn't exist
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, collection: Collection, record_id: str) -> bool:
        """
        Delete a record by ID.

        Returns:
            True if a record was deleted, False if none matched
        """
        pass

    @abstractmethod
    async def get_config(self, key: ConfigKey) -> Optional[Any]:
        """
        Read a value from the key-value configuration table.

        Returns:
            The stored value, or None if the key was never written
        """
        pass

    @abstractmethod
    async def set_config(self, key: ConfigKey, value: Any) -> None:
        """
        Write a JSON-serializable value to the configuration table.

        Raises:
            StorageError: If the write fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one contribution flow).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific record.

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Record not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate record."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
