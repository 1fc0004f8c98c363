"""
Configuration Management for PocketFin

Every tunable of PocketFin is read here, with pydantic-settings, from
the environment (and a local .env for AppSettings).

Sections load lazily: a missing Gemini key only fails when the AI
flows are built, and the ledger keeps working without it.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageBackend(str, Enum):
    """Where the ledger lives."""
    MEMORY = "memory"
    JSON = "json"
    SHEETS = "sheets"


class StorageSettings(BaseSettings):
    """Ledger store selection."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        extra="ignore"
    )

    backend: StorageBackend = Field(
        default=StorageBackend.JSON,
        description="Storage backend: memory, json or sheets"
    )
    data_path: Path = Field(
        default=Path("data/ledger.json"),
        description="JSON document used by the json backend"
    )


class GoogleSheetsSettings(BaseSettings):
    """Where the sheets backend finds its spreadsheet."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Service account key file used by gspread"
    )
    spreadsheet_id: str = Field(
        ...,
        description="Key of the spreadsheet holding the ledger"
    )

    # One worksheet per ledger collection
    transactions_sheet_name: str = Field(
        default="Transactions",
        description="Name of the sheet for transactions"
    )
    bank_accounts_sheet_name: str = Field(
        default="BankAccounts",
        description="Name of the sheet for bank accounts"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Only warn: the key file may be mounted after settings load."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Service account key {v} does not exist yet; "
                "the sheets backend will fail to connect without it."
            )
        return v


class GeminiSettings(BaseSettings):
    """Gemini model used by the receipt analyzer and the advisor."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Google AI Studio API key"
    )
    model_name: str = Field(
        default="gemini-2.5-flash",
        description="Multimodal model name"
    )
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Advisor answer length cap"
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Advisor sampling temperature"
    )


class AppSettings(BaseSettings):
    """
    Ledger views, upload limits and validation thresholds.

    Unprefixed variables, also read from a .env file.
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

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )
    json_logs: bool = Field(
        default=True,
        description="Render logs as JSON (False = console renderer)"
    )

    # Ledger views
    recent_transactions_limit: int = Field(
        default=10,
        ge=1,
        le=100,
        description="How many transactions the dashboard lists"
    )
    advisor_context_window: int = Field(
        default=50,
        ge=1,
        le=500,
        description="How many recent transactions are sent to the advisor"
    )
    currency_symbol: str = Field(
        default="R$",
        description="Currency symbol used for display"
    )

    # File upload limits
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Largest receipt photo accepted"
    )
    supported_image_formats: str = Field(
        default="jpg,jpeg,png,webp",
        description="Receipt photo extensions, comma separated"
    )

    # Validation thresholds
    max_transaction_amount: float = Field(
        default=1000000.0,
        description="Maximum reasonable transaction amount (for sanity checking)"
    )
    future_date_tolerance_days: int = Field(
        default=7,
        description="How many days in the future a single transaction can be"
    )

    @property
    def supported_formats_list(self) -> list[str]:
        """Lower-cased extensions without surrounding spaces."""
        return [fmt.strip().lower() for fmt in self.supported_image_formats.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024


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
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for every section that failed to load.
    """
    results = {}
    settings = get_settings()

    sections = {
        "storage": lambda: settings.storage,
        "google_sheets": lambda: settings.google_sheets,
        "gemini": lambda: settings.gemini,
        "app": lambda: settings.app,
    }

    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
