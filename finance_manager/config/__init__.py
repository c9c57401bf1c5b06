"""Configuration package."""

from finance_manager.config.settings import (
    AppSettings,
    ExportSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ExportSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
