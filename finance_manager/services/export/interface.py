"""
Abstract Export Interface

Exporters turn an ordered sequence of transactions into an interchange
document and back. Each format implements dumps()/loads() on strings;
the file-level export/import operations are shared here.

Every format round-trips: id, date (ISO), category, type, amount,
description. Amounts are written at full precision; rounding to two
places is a display concern only.
"""

import datetime
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from finance_manager.config import get_settings
from finance_manager.models.ledger import Transaction


class ExportError(Exception):
    """An export or import file could not be written or read."""
    pass


class TransactionExporter(ABC):
    """Base class for transaction interchange formats."""

    #: File extension (without dot) used for exported files
    extension: str = ""

    def __init__(self, export_dir: Optional[Path] = None):
        self._export_dir = (
            Path(export_dir) if export_dir else get_settings().export.export_dir
        )

    @property
    def export_dir(self) -> Path:
        return self._export_dir

    @abstractmethod
    def dumps(self, transactions: Iterable[Transaction]) -> str:
        """Encode transactions as a document string."""
        pass

    @abstractmethod
    def loads(self, content: str) -> list[Transaction]:
        """
        Decode a document string into transactions, preserving order.

        Raises:
            ExportError: If the document as a whole is unreadable
        """
        pass

    def export_transactions(
        self,
        transactions: Iterable[Transaction],
        file_name: Optional[str] = None,
    ) -> Path:
        """
        Write transactions to <export_dir>/<file_name>.<extension>.

        A blank file name defaults to transactions_<today>.
        """
        if not file_name or not file_name.strip():
            file_name = f"transactions_{datetime.date.today().isoformat()}"

        path = self._export_dir / f"{file_name.strip()}.{self.extension}"
        content = self.dumps(transactions)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ExportError(f"Failed to write {path}: {e}") from e

        return path

    def import_transactions(self, path: Path) -> list[Transaction]:
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8-sig")
        except OSError as e:
            raise ExportError(f"Failed to read {path}: {e}") from e
        return self.loads(content)
