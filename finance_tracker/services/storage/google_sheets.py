"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the remote backend because:
1. The user can view and fix their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions spanning several records (writes are independent)
- Limited query capabilities (we filter in Python)

One worksheet per collection, plus a key-value Config worksheet and the
AuditLog worksheet. Cells are written RAW, so every value round-trips
as a string and the models parse them back.

Only establishing the connection is retried. Record operations are not:
a failed write surfaces as a StorageError and simply does not apply.
"""

import json
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from finance_tracker.config import GoogleSheetsSettings, get_settings
from finance_tracker.models.audit import AuditEvent, AuditEventType, AuditSeverity
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


logger = structlog.get_logger(__name__)


# Column mappings per collection sheet (persisted snake_case names)
COLLECTION_COLUMNS: dict[Collection, list[str]] = {
    Collection.TRANSACTIONS: [
        "id",
        "date",
        "description",
        "amount",
        "category",
        "is_weekend",
        "status",
        "debt_id",
    ],
    Collection.DEBTS: [
        "id",
        "name",
        "initial_balance",
        "current_balance",
        "monthly_minimum",
        "real_payment",
        "priority",
        "due_date",
    ],
    Collection.BUDGETS: [
        "id",
        "category",
        "limit",
    ],
    Collection.SCHEDULED_PAYMENTS: [
        "id",
        "date",
        "concept",
        "amount",
        "type",
        "status",
        "notes",
    ],
    Collection.BTC_CONTRIBUTIONS: [
        "id",
        "date",
        "amount",
        "btc_amount",
        "notes",
    ],
    Collection.DASHBOARD_STATS: [
        "id",
        "available_cash",
        "total_debt",
        "weekend_spent",
        "weekend_cap",
        "savings_progress",
        "monthly_income",
        "btc_target_monthly",
        "btc_total_contributed",
        "btc_accumulated",
    ],
}

CONFIG_COLUMNS = ["key", "value_json"]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and worksheet creation.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(
        self,
        title: str,
        columns: list[str],
        rows: int = 1000,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_collection_sheet(self, collection: Collection) -> gspread.Worksheet:
        """Get or create the worksheet of a record collection."""
        return self._get_or_create_sheet(
            self._settings.sheet_name_for(collection.value),
            COLLECTION_COLUMNS[collection],
        )

    def get_config_sheet(self) -> gspread.Worksheet:
        """Get or create the key-value Config worksheet."""
        return self._get_or_create_sheet(
            self._settings.config_sheet_name,
            CONFIG_COLUMNS,
            rows=100,
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name,
            AUDIT_COLUMNS,
            rows=5000,  # More rows for audit log
        )


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class GoogleSheetsRecordStore(RecordStoreInterface):
    """
    Google Sheets implementation of the record store.

    Records are stored as rows in a worksheet with one record per row,
    in the column order of COLLECTION_COLUMNS.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _record_to_row(self, collection: Collection, record: dict[str, Any]) -> list:
        """Convert a record to a spreadsheet row."""
        return [_cell(record.get(column)) for column in COLLECTION_COLUMNS[collection]]

    def _row_to_record(self, collection: Collection, row: list) -> dict[str, Any]:
        """Convert a spreadsheet row to a record. Empty cells become None."""
        record = {}
        for idx, column in enumerate(COLLECTION_COLUMNS[collection]):
            value = row[idx] if idx < len(row) else ""
            record[column] = value if value != "" else None
        return record

    @staticmethod
    def _find_row(all_rows: list[list], record_id: str) -> Optional[int]:
        """1-based sheet row number of a record (row 1 is the header)."""
        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == record_id:
                return idx
        return None

    async def fetch_all(self, collection: Collection) -> list[dict[str, Any]]:
        try:
            sheet = self._client.get_collection_sheet(collection)
            all_rows = sheet.get_all_values()[1:]  # Skip header
            return [
                self._row_to_record(collection, row)
                for row in all_rows
                if row and row[0]  # Skip empty rows
            ]
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to fetch {collection.value}: {e}")

    async def insert(
        self,
        collection: Collection,
        record: dict[str, Any],
    ) -> dict[str, Any]:
        try:
            sheet = self._client.get_collection_sheet(collection)
            if self._find_row(sheet.get_all_values(), str(record["id"])) is not None:
                raise DuplicateError(f"{collection.value} record already exists: {record['id']}")
            row = self._record_to_row(collection, record)
            sheet.append_row(row, value_input_option="RAW")
            return self._row_to_record(collection, row)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to insert into {collection.value}: {e}")

    async def update(
        self,
        collection: Collection,
        record_id: str,
        patch: dict[str, Any],
    ) -> dict[str, Any]:
        try:
            sheet = self._client.get_collection_sheet(collection)
            all_rows = sheet.get_all_values()

            idx = self._find_row(all_rows, record_id)
            if idx is None:
                raise NotFoundError(f"{collection.value} record not found: {record_id}")

            record = self._row_to_record(collection, all_rows[idx - 1])
            record.update(patch)
            new_row = self._record_to_row(collection, record)

            # Update only the cells that changed
            old_row = all_rows[idx - 1]
            for col_idx, value in enumerate(new_row, start=1):
                old_value = old_row[col_idx - 1] if col_idx - 1 < len(old_row) else ""
                if value != old_value:
                    sheet.update_cell(idx, col_idx, value)

            return self._row_to_record(collection, new_row)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update {collection.value}: {e}")

    async def delete(self, collection: Collection, record_id: str) -> bool:
        try:
            sheet = self._client.get_collection_sheet(collection)
            idx = self._find_row(sheet.get_all_values(), record_id)
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except Exception as e:
            raise StorageError(f"Failed to delete from {collection.value}: {e}")

    async def get_config(self, key: ConfigKey) -> Optional[Any]:
        try:
            sheet = self._client.get_config_sheet()
            for row in sheet.get_all_values()[1:]:
                if row and row[0] == key.value:
                    return json.loads(row[1]) if len(row) > 1 and row[1] else None
            return None
        except Exception as e:
            raise StorageError(f"Failed to read config {key.value}: {e}")

    async def set_config(self, key: ConfigKey, value: Any) -> None:
        try:
            sheet = self._client.get_config_sheet()
            payload = json.dumps(value, ensure_ascii=False)
            idx = self._find_row(sheet.get_all_values(), key.value)
            if idx is None:
                sheet.append_row([key.value, payload], value_input_option="RAW")
            else:
                sheet.update_cell(idx, 2, payload)
        except Exception as e:
            raise StorageError(f"Failed to write config {key.value}: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            entity_type=safe_get(4) or None,
            entity_id=safe_get(5) or None,
            correlation_id=UUID(safe_get(6)) if safe_get(6) else None,
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            error_message=safe_get(9) or None,
            is_user_action=safe_get(10).lower() == "true",
        )

    def _read_events(self, keep) -> list[AuditEvent]:
        sheet = self._client.get_audit_sheet()
        events = []
        for row in sheet.get_all_values()[1:]:
            if not row or not row[0] or not keep(row):
                continue
            try:
                events.append(self._row_to_event(row))
            except ValueError:
                logger.warning("audit_row_unreadable", event_id=row[0])
        return events

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            # Audit logging should not break the main flow
            logger.warning("audit_write_failed", error=str(e), event_id=str(event.event_id))
            return False

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get events by correlation ID."""
        try:
            events = self._read_events(
                lambda row: len(row) > 6 and row[6] == str(correlation_id)
            )
            events.sort(key=lambda e: e.timestamp)
            return events
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """Get events by entity."""
        try:
            events = self._read_events(
                lambda row: len(row) > 5 and row[4] == entity_type and row[5] == entity_id
            )
            events.sort(key=lambda e: e.timestamp)
            return events
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events."""
        try:
            events = self._read_events(lambda row: True)
            # Sort newest first
            events.sort(key=lambda e: e.timestamp, reverse=True)
            return events[:limit]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")
