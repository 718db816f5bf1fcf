"""
Configuration Management for Pocket Ledger

Every knob is read from the environment (or a .env file) through
pydantic-settings, one settings class per concern:
- LEDGER_STORAGE_*  where the slots and receipts live
- EXCHANGE_RATE_*   the live rate provider
- GOOGLE_SHEETS_*   only needed for the "sheets" backend

DESIGN DECISION: Nothing else in the package reads os.environ.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where the three data slots and the receipt images live."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        extra="ignore"
    )

    backend: Literal["file", "memory", "sheets"] = Field(
        default="file",
        description="Slot storage backend"
    )
    data_dir: Path = Field(
        default=Path("~/.pocket_ledger"),
        description="Directory holding expenses.json, categories.json and profile.json"
    )
    receipts_dir: Path = Field(
        default=Path("~/.pocket_ledger/receipts"),
        description="Directory holding one receipt image per expense"
    )

    @field_validator('data_dir', 'receipts_dir')
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        return v.expanduser()


class ExchangeRateSettings(BaseSettings):
    """Remote exchange rate provider configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXCHANGE_RATE_",
        extra="ignore"
    )

    api_key: str = Field(
        default="",
        description="exchangerate-api.com API key"
    )
    base_url: str = Field(
        default="https://v6.exchangerate-api.com/v6",
        description="Provider base URL (key and base currency are appended)"
    )
    base_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Currency all fetched rates are relative to"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Request timeout; a timeout counts as a network error"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets slot storage configuration."""

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
    slots_sheet_name: str = Field(
        default="LedgerSlots",
        description="Name of the worksheet holding one row per slot"
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
        description="Minimum log level for the structured logger"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def exchange_rate(self) -> ExchangeRateSettings:
        return ExchangeRateSettings()

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


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Google Sheets is only checked when it is the selected backend.
    """
    results = {}

    settings = get_settings()

    try:
        storage = settings.storage
        results["storage"] = True
    except Exception as e:
        storage = None
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.exchange_rate
        results["exchange_rate"] = True
    except Exception as e:
        results["exchange_rate"] = False
        results["exchange_rate_error"] = str(e)

    if storage is not None and storage.backend == "sheets":
        try:
            _ = settings.google_sheets
            results["google_sheets"] = True
        except Exception as e:
            results["google_sheets"] = False
            results["google_sheets_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
