"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements a local JSON file as the backend, but designed to be swappable.
"""

from finance_manager.services.storage.interface import (
    AuditStorageInterface,
    CorruptDataError,
    InMemoryUserStorage,
    StorageError,
    UserStorageInterface,
)
from finance_manager.services.storage.json_file import (
    JsonFileUserStorage,
    JsonLinesAuditStorage,
    UserDataset,
    UserRecord,
    WalletRecord,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "UserStorageInterface",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    # Implementations
    "InMemoryUserStorage",
    "JsonFileUserStorage",
    "JsonLinesAuditStorage",
    # Snapshot records
    "UserDataset",
    "UserRecord",
    "WalletRecord",
]
