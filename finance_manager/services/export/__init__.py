"""Transaction export/import package."""

from finance_manager.services.export.interface import ExportError, TransactionExporter
from finance_manager.services.export.csv_export import CsvTransactionExporter
from finance_manager.services.export.json_export import JsonTransactionExporter

__all__ = [
    "CsvTransactionExporter",
    "ExportError",
    "JsonTransactionExporter",
    "TransactionExporter",
]
