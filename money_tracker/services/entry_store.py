"""
Entry Store

Reads and writes entries as rows of the Entries table.

Row layout is positional (see ENTRY_COLUMNS). Row 0 is the header and is
never treated as data. Rows are only ever appended, deleted whole, or have
their receipt-link cell filled in once after the receipt upload.

Lookups by id scan from the last row backwards: the entry a client just
wrote is the most likely match, and with duplicate ids the most recent
row wins.
"""

import time
from datetime import datetime
from typing import Optional

from money_tracker.audit import AuditLogger
from money_tracker.models.entry import (
    COLUMN_WIDTHS,
    ENTRY_COLUMNS,
    RECEIPT_LINK_COLUMN,
    SAVED_AT_FORMAT,
    Entry,
    EntryWriteRequest,
    tokyo_now,
)
from money_tracker.services.storage.interface import (
    StorageError,
    TableStorageInterface,
)


def generate_entry_id() -> str:
    """Server-side fallback id: milliseconds since the epoch."""
    return str(int(time.time() * 1000))


class EntryStore:
    """
    Entry persistence on top of a TableStorageInterface.

    The table is injected so tests can use InMemoryTableStorage.
    """

    def __init__(
        self,
        table: TableStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._table = table
        self._audit_logger = audit_logger

    @property
    def table(self) -> TableStorageInterface:
        return self._table

    def _find_row_index(self, rows: list[list], entry_id: str) -> Optional[int]:
        target = str(entry_id)
        for index in range(len(rows) - 1, 0, -1):
            row = rows[index]
            if row and str(row[0]) == target:
                return index
        return None

    async def ensure_table(self) -> None:
        """
        Create the table if missing, or repair a legacy header row.

        Older sheets were created with headers such as "Amount (¥)" and
        "Saved At (JST)"; they are rewritten to ENTRY_COLUMNS in place.
        """
        if not self._table.exists():
            self._table.create(ENTRY_COLUMNS, COLUMN_WIDTHS)
            if self._audit_logger:
                self._audit_logger.log_table_created(self._table.name)
            return

        rows = self._table.read_rows()
        if not rows:
            self._table.append_row(ENTRY_COLUMNS)
            return

        header = [str(cell) for cell in rows[0]]
        if header[:len(ENTRY_COLUMNS)] != ENTRY_COLUMNS:
            self._table.write_row(0, ENTRY_COLUMNS)
            if self._audit_logger:
                self._audit_logger.log_header_repaired(self._table.name, rows[0])

    async def list_entries(self) -> list[Entry]:
        """
        List all entries, newest first.

        Returns [] if the table does not exist yet.

        Raises:
            StorageUnavailableError: If the table cannot be read
        """
        if not self._table.exists():
            return []

        rows = self._table.read_rows()
        entries = [
            Entry.from_sheets_row(row)
            for row in rows[1:]
            if row and str(row[0]).strip()
        ]
        entries.reverse()
        return entries

    async def append_entry(
        self,
        request: EntryWriteRequest,
        now: Optional[datetime] = None,
    ) -> Entry:
        """
        Append a new entry row with a blank receipt link.

        The id is the caller's id, or a generated one when absent.
        savedAt is stamped in the tracker timezone.

        Raises:
            StorageError: If the row cannot be written
        """
        await self.ensure_table()

        entry = Entry(
            id=request.id or generate_entry_id(),
            date=request.date,
            direction=request.direction,
            amount=request.amount,
            method=request.method,
            situation=request.situation,
            desc=request.description,
            who=request.who,
            savedAt=(now or tokyo_now()).strftime(SAVED_AT_FORMAT),
            driveLink="",
        )
        self._table.append_row(entry.to_sheets_row())
        return entry

    async def delete_entry(self, entry_id: str) -> bool:
        """
        Delete the most recent row whose id equals entry_id as a string.

        Returns False when nothing matched (including a missing table).
        """
        if not self._table.exists():
            return False

        rows = self._table.read_rows()
        index = self._find_row_index(rows, entry_id)
        if index is None:
            return False

        self._table.delete_row(index)
        return True

    async def set_receipt_link(self, entry_id: str, url: str) -> bool:
        """
        Write the receipt URL into the entry's Receipt Link cell.

        Never raises: the entry is already saved and a missing link is
        acceptable. Returns whether the link was written.
        """
        try:
            rows = self._table.read_rows()
            index = self._find_row_index(rows, entry_id)
            if index is None:
                if self._audit_logger:
                    self._audit_logger.log_receipt_link_write_failed(str(entry_id), "row not found")
                return False
            self._table.write_cell(index, RECEIPT_LINK_COLUMN, url)
            return True
        except StorageError as e:
            if self._audit_logger:
                self._audit_logger.log_receipt_link_write_failed(str(entry_id), str(e))
            return False
