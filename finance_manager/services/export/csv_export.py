"""
CSV export/import.

Columns: ID, Date, Category, Type, Amount, Description.
On import the header is matched case-insensitively, a missing ID column
yields fresh ids, and rows that fail validation are skipped with a warning
so one bad line does not lose the rest of the file.
"""

import csv
import io
from collections.abc import Iterable

import structlog
from pydantic import ValidationError

from finance_manager.exceptions import FinanceError
from finance_manager.models.ledger import Transaction
from finance_manager.services.export.interface import ExportError, TransactionExporter


logger = structlog.get_logger(__name__)

CSV_COLUMNS = ["ID", "Date", "Category", "Type", "Amount", "Description"]
REQUIRED_COLUMNS = {"date", "category", "type", "amount"}


class CsvTransactionExporter(TransactionExporter):
    """Comma-separated transaction files."""

    extension = "csv"

    def dumps(self, transactions: Iterable[Transaction]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_COLUMNS)
        for t in transactions:
            writer.writerow([
                t.id,
                t.date.isoformat(),
                t.category,
                t.type.display_name,
                str(t.amount),
                t.description,
            ])
        return buffer.getvalue()

    def loads(self, content: str) -> list[Transaction]:
        reader = csv.DictReader(io.StringIO(content.lstrip("\ufeff")))
        if reader.fieldnames is None:
            return []

        columns = {name.strip().lower(): name for name in reader.fieldnames if name}
        missing = REQUIRED_COLUMNS - columns.keys()
        if missing:
            raise ExportError(
                f"CSV is missing required columns: {', '.join(sorted(missing))}"
            )

        def cell(row: dict, column: str) -> str:
            key = columns.get(column)
            value = row.get(key) if key else None
            return value.strip() if value else ""

        transactions = []
        for row in reader:
            if not any((value or "").strip() for value in row.values() if isinstance(value, str)):
                continue
            try:
                transactions.append(Transaction(
                    id=cell(row, "id") or None,
                    date=cell(row, "date"),
                    category=cell(row, "category"),
                    type=cell(row, "type"),
                    amount=cell(row, "amount"),
                    description=cell(row, "description"),
                ))
            except (FinanceError, ValidationError) as e:
                logger.warning(
                    "csv_row_skipped",
                    line=reader.line_num,
                    error=str(e),
                )

        return transactions
