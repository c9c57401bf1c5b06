"""
JSON export/import.

The document is an array of transaction objects in list order. Unlike
CSV, a malformed element fails the whole import: a JSON file that does not
match the schema is almost always the wrong file, not one bad row.
"""

import json
from collections.abc import Iterable

from pydantic import TypeAdapter, ValidationError

from finance_manager.exceptions import FinanceError
from finance_manager.models.ledger import Transaction
from finance_manager.services.export.interface import ExportError, TransactionExporter


_transaction_list = TypeAdapter(list[Transaction])


class JsonTransactionExporter(TransactionExporter):
    """Pretty-printed JSON transaction files."""

    extension = "json"

    def dumps(self, transactions: Iterable[Transaction]) -> str:
        records = _transaction_list.dump_python(list(transactions), mode="json")
        return json.dumps(records, indent=2, ensure_ascii=False)

    def loads(self, content: str) -> list[Transaction]:
        try:
            return _transaction_list.validate_json(content)
        except (ValidationError, FinanceError) as e:
            raise ExportError(f"Invalid transaction JSON: {e}") from e
