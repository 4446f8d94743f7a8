"""
Configuration Management for the Velam Fund Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see which storage backend is in use and what the
fund's standing rules are, and ensures configuration is validated at startup.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Persistence backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="VELAM_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: str = Field(
        default="json",
        pattern="^(memory|json|sheets)$",
        description="Which persistence backend to use"
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding one JSON file per collection (json backend)"
    )

    # One key per collection, matching the names the browser app used
    contributions_key: str = Field(
        default="velam_contributions",
        min_length=1,
    )
    loans_key: str = Field(
        default="velam_loans",
        min_length=1,
    )
    expenses_key: str = Field(
        default="velam_expenses",
        min_length=1,
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

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


class FundSettings(BaseSettings):
    """
    Standing rules of the fund.

    These only drive defaults shown to the person entering data.
    The ledger itself records whatever amount was actually paid.
    """

    model_config = SettingsConfigDict(
        env_prefix="VELAM_FUND_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    total_members: int = Field(
        default=11,
        ge=1,
        description="Number of members paying into the fund"
    )
    default_contribution: Decimal = Field(
        default=Decimal("500"),
        ge=0,
        description="Usual monthly contribution per member"
    )
    first_month_contribution: Decimal = Field(
        default=Decimal("100"),
        ge=0,
        description="Contribution due in the fund's first month"
    )
    top_borrowers_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="How many borrowers the leaderboard shows"
    )
    currency_symbol: str = Field(
        default="₹",
        max_length=5,
    )

    @property
    def expected_monthly_collection(self) -> Decimal:
        """What a full month of contributions adds up to."""
        return self.default_contribution * self.total_members


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
        description="Minimum level for structured log output"
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

    # Sub-settings are loaded lazily so a missing Sheets config
    # does not stop a json-backed ledger from starting

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def fund(self) -> FundSettings:
        return FundSettings()

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

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries describing each failure.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    sections = {
        "storage": lambda: settings.storage,
        "google_sheets": lambda: settings.google_sheets,
        "fund": lambda: settings.fund,
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
