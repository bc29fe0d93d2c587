"""
Configuration Management for Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Business-rule thresholds live here too, so the rule engine has no
magic numbers of its own and every threshold can be overridden per
deployment.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    transactions_sheet_name: str = Field(default="Transactions")
    debts_sheet_name: str = Field(default="Debts")
    budgets_sheet_name: str = Field(default="Budgets")
    scheduled_payments_sheet_name: str = Field(default="ScheduledPayments")
    btc_contributions_sheet_name: str = Field(default="BtcContributions")
    dashboard_stats_sheet_name: str = Field(default="DashboardStats")
    config_sheet_name: str = Field(
        default="Config",
        description="Key-value sheet for category and payment-concept lists"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v

    def sheet_name_for(self, collection: str) -> str:
        """Worksheet name for a record collection (e.g. 'transactions')."""
        return getattr(self, f"{collection}_sheet_name")


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Storage
    storage_backend: Literal["memory", "google_sheets"] = Field(
        default="memory",
        description="Which record store to use"
    )
    seed_demo_data: bool = Field(
        default=False,
        description="Seed the in-memory store with the demo data set"
    )

    # Category names with special meaning
    debt_payment_category: str = Field(default="Pago de Deuda")
    income_category: str = Field(default="Ingreso")
    investment_category: str = Field(default="Inversión")

    # Available cash rule
    all_transactions_are_outflows: bool = Field(
        default=True,
        description=(
            "Treat every transaction as a deduction from available cash, "
            "including the income category"
        )
    )

    # Legacy debt linkage by description text (explicit debt_id always wins)
    link_debt_payments_by_description: bool = Field(default=False)
    priority_debt_keyword: Optional[str] = Field(
        default=None,
        description="Keyword that links a payment to the priority-1 debt"
    )

    # Alert thresholds
    weekend_alert_ratio: Decimal = Field(default=Decimal("0.9"), ge=0, le=1)
    category_alert_ratio: Decimal = Field(default=Decimal("0.8"), ge=0, le=1)
    healthy_margin_threshold: Decimal = Field(default=Decimal("1000"), ge=0)

    # Payoff simulation
    simulation_warning_ratio: Decimal = Field(default=Decimal("0.7"), ge=0, le=1)
    max_simulable_priority: int = Field(default=2, ge=1)

    # Forms
    min_name_length: int = Field(default=3, ge=1)

    # Notifications
    notification_ttl_seconds: float = Field(default=3.0, gt=0)


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()

