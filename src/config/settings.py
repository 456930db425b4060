"""
Configuration Management for the Cash Book

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """
    Hosted store configuration.

    Each collection (cash book, bookings, upcoming expenses) lives in
    its own worksheet of one spreadsheet.
    """

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
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

    entries_sheet_name: str = Field(
        default="cash-book",
        description="Worksheet holding cash book entries"
    )
    bookings_sheet_name: str = Field(
        default="bookings",
        description="Worksheet holding reservations"
    )
    upcoming_expenses_sheet_name: str = Field(
        default="upcoming-expenses",
        description="Worksheet holding planned expenses"
    )

    request_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="HTTP timeout applied to every Sheets API call"
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


class AuthSettings(BaseSettings):
    """Credentials checked by the login page."""

    model_config = SettingsConfigDict(
        env_prefix="CASHBOOK_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    username: str = Field(
        ...,
        min_length=1,
        description="Login name"
    )
    password: SecretStr = Field(
        ...,
        description="Login password"
    )


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

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )

    # Dashboard sizes
    top_categories_limit: int = Field(
        default=8,
        ge=1,
        le=50,
        description="How many expense categories the statistics panel shows"
    )
    items_per_page: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Rows per page in the bookings table"
    )
    summary_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Rows in the dashboard summaries"
    )

    # Validation thresholds
    max_entry_amount: float = Field(
        default=100000.0,
        gt=0,
        description="Amounts above this are flagged for a second look"
    )


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

    # Loaded lazily so a missing store config does not block the app settings

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def auth(self) -> AuthSettings:
        return AuthSettings()

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


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    `<name>_error` message for every section that failed to load.
    """
    results = {}

    settings = get_settings()

    for name in ("google_sheets", "auth", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
