"""
Configuration Management for Finance Manager

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every path the application writes to and every tunable threshold is
visible in one place and validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where the user dataset and audit trail live."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding persisted data"
    )
    users_file: str = Field(
        default="users.json",
        description="File name of the user dataset inside data_dir"
    )
    audit_file: str = Field(
        default="audit.jsonl",
        description="File name of the append-only audit log inside data_dir"
    )

    @property
    def users_path(self) -> Path:
        return self.data_dir / self.users_file

    @property
    def audit_path(self) -> Path:
        return self.data_dir / self.audit_file


class ExportSettings(BaseSettings):
    """Transaction export configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_EXPORT_",
        extra="ignore"
    )

    export_dir: Path = Field(
        default=Path("exports"),
        description="Directory export files are written to"
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

    # Security
    password_hash_rounds: int = Field(
        default=12,
        ge=4,
        le=16,
        description="bcrypt cost factor for password hashes"
    )
    min_password_length: int = Field(
        default=4,
        ge=1,
        description="Minimum accepted password length"
    )

    # Input sanity limits
    max_transaction_amount: float = Field(
        default=1_000_000_000.0,
        gt=0,
        description="Largest amount accepted from user input"
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

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def export(self) -> ExportSettings:
        return ExportSettings()

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


def validate_all_settings() -> dict[str, object]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus "<name>_error"
    entries for the ones that failed. Useful for startup checks.
    """
    results: dict[str, object] = {}
    settings = get_settings()

    for name in ("storage", "export", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValidationError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
