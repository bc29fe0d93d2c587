"""Services package."""

from finance_tracker.services.storage import (
    AuditStorageInterface,
    Collection,
    ConfigKey,
    ConnectionError,
    DuplicateError,
    FinanceRepository,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryAuditStorage,
    InMemoryRecordStore,
    NotFoundError,
    RecordStoreInterface,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "Collection",
    "ConfigKey",
    "ConnectionError",
    "DuplicateError",
    "FinanceRepository",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryAuditStorage",
    "InMemoryRecordStore",
    "NotFoundError",
    "RecordStoreInterface",
    "StorageError",
]
