"""
Abstract Table Storage Interface

DESIGN DECISION: The Entry Store never touches gspread directly.
It talks to a small table abstraction so that:
1. Google Sheets can be swapped for another tabular backend
2. Tests use an in-memory table instead of the network
3. Row-level semantics (header at row 0, positional columns) live in one place

Indices are 0-based and include the header: row 0 is the header row,
row 1 is the oldest entry.
"""

from abc import ABC, abstractmethod
from typing import Any, Sequence


class TableStorageInterface(ABC):
    """
    Abstract interface for a single named table of rows.

    Any tabular backend (Google Sheets, in-memory, ...) must implement
    these methods. Implementations raise StorageError subclasses only.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the table (sheet title)."""
        pass

    @abstractmethod
    def exists(self) -> bool:
        """
        Check whether the table exists.

        Raises:
            StorageUnavailableError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    def create(self, header: Sequence[str], column_widths: Sequence[int]) -> None:
        """
        Create the table with a header row and column widths.

        Args:
            header: Values for row 0
            column_widths: Pixel width per column, same length as header
        """
        pass

    @abstractmethod
    def read_rows(self) -> list[list[Any]]:
        """
        Read every row, header included.

        Raises:
            StorageUnavailableError: If the table cannot be read
        """
        pass

    @abstractmethod
    def append_row(self, values: Sequence[Any]) -> None:
        """Append a row after the last non-empty row."""
        pass

    @abstractmethod
    def delete_row(self, index: int) -> None:
        """
        Remove a row entirely; later rows shift up.

        Raises:
            NotFoundError: If index is out of range
        """
        pass

    @abstractmethod
    def write_cell(self, row_index: int, column_index: int, value: Any) -> None:
        """Overwrite a single cell."""
        pass

    @abstractmethod
    def write_row(self, row_index: int, values: Sequence[Any]) -> None:
        """Overwrite the first len(values) cells of a row."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Row or table not found in storage."""
    pass


class StorageUnavailableError(StorageError):
    """Could not reach or read the storage backend."""
    pass
