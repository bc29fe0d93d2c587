"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Google Sheets is the remote backend; the in-memory stores back tests,
demos and the no-configuration fallback.
"""

from finance_tracker.services.storage.interface import (
    AuditStorageInterface,
    Collection,
    ConfigKey,
    ConnectionError,
    DuplicateError,
    NotFoundError,
    RecordStoreInterface,
    StorageError,
)
from finance_tracker.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
)
from finance_tracker.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryRecordStore,
)
from finance_tracker.services.storage.repository import FinanceRepository

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "Collection",
    "ConfigKey",
    "RecordStoreInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryRecordStore",
    # Typed access
    "FinanceRepository",
]
