"""
In-memory table storage.

Used by the test suite and by STORAGE_BACKEND=memory for running the API
locally without Google credentials. Data lives for the life of the process.
"""

from typing import Any, Optional, Sequence

from money_tracker.services.storage.interface import (
    NotFoundError,
    StorageUnavailableError,
    TableStorageInterface,
)


class InMemoryTableStorage(TableStorageInterface):
    """A list of lists behaving like one spreadsheet tab."""

    def __init__(self, name: str, rows: Optional[list[list[Any]]] = None):
        self._name = name
        self._rows: Optional[list[list[Any]]] = (
            [list(r) for r in rows] if rows is not None else None
        )
        self.column_widths: list[int] = []
        self.available = True

    @property
    def name(self) -> str:
        return self._name

    @property
    def rows(self) -> list[list[Any]]:
        """Snapshot of the stored rows (header included)."""
        return [list(r) for r in (self._rows or [])]

    def _check(self) -> list[list[Any]]:
        if not self.available:
            raise StorageUnavailableError(f"Table {self._name} is unavailable")
        if self._rows is None:
            raise NotFoundError(f"Table {self._name} does not exist")
        return self._rows

    def exists(self) -> bool:
        if not self.available:
            raise StorageUnavailableError(f"Table {self._name} is unavailable")
        return self._rows is not None

    def create(self, header: Sequence[str], column_widths: Sequence[int]) -> None:
        if not self.available:
            raise StorageUnavailableError(f"Table {self._name} is unavailable")
        self._rows = [list(header)]
        self.column_widths = list(column_widths)

    def read_rows(self) -> list[list[Any]]:
        return [list(r) for r in self._check()]

    def append_row(self, values: Sequence[Any]) -> None:
        self._check().append(list(values))

    def delete_row(self, index: int) -> None:
        rows = self._check()
        if index < 0 or index >= len(rows):
            raise NotFoundError(f"Row {index} out of range")
        del rows[index]

    def write_cell(self, row_index: int, column_index: int, value: Any) -> None:
        rows = self._check()
        if row_index < 0 or row_index >= len(rows):
            raise NotFoundError(f"Row {row_index} out of range")
        row = rows[row_index]
        if len(row) <= column_index:
            row.extend([""] * (column_index + 1 - len(row)))
        row[column_index] = value

    def write_row(self, row_index: int, values: Sequence[Any]) -> None:
        for column_index, value in enumerate(values):
            self.write_cell(row_index, column_index, value)
