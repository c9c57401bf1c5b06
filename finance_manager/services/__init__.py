"""Services package."""

from finance_manager.services.export import (
    CsvTransactionExporter,
    ExportError,
    JsonTransactionExporter,
    TransactionExporter,
)
from finance_manager.services.storage import (
    AuditStorageInterface,
    CorruptDataError,
    InMemoryUserStorage,
    JsonFileUserStorage,
    JsonLinesAuditStorage,
    StorageError,
    UserStorageInterface,
)

__all__ = [
    # Export services
    "CsvTransactionExporter",
    "ExportError",
    "JsonTransactionExporter",
    "TransactionExporter",
    # Storage services
    "AuditStorageInterface",
    "CorruptDataError",
    "InMemoryUserStorage",
    "JsonFileUserStorage",
    "JsonLinesAuditStorage",
    "StorageError",
    "UserStorageInterface",
]
