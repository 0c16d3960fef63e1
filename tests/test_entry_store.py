"""Tests for the Entry Store against an in-memory table."""

import pytest
from datetime import datetime
from zoneinfo import ZoneInfo

from money_tracker.models.entry import (
    COLUMN_WIDTHS,
    ENTRY_COLUMNS,
    SHEET_NAME,
    EntryWriteRequest,
)
from money_tracker.services.entry_store import EntryStore
from money_tracker.services.storage import (
    InMemoryTableStorage,
    NotFoundError,
    StorageUnavailableError,
)


def make_request(**fields) -> EntryWriteRequest:
    return EntryWriteRequest.model_validate(fields)


@pytest.fixture
def table():
    return InMemoryTableStorage(SHEET_NAME)


@pytest.fixture
def store(table):
    return EntryStore(table)


class TestEnsureTable:
    """Tests for table creation and header repair."""

    @pytest.mark.asyncio
    async def test_creates_table_with_header_and_widths(self, store, table):
        """A missing table is created with header and widths."""
        await store.ensure_table()
        assert table.rows == [ENTRY_COLUMNS]
        assert table.column_widths == COLUMN_WIDTHS

    @pytest.mark.asyncio
    async def test_repairs_legacy_header(self):
        """Old header names are rewritten in place."""
        legacy = [
            "ID", "Date", "Direction", "Amount (¥)", "Method", "Situation",
            "Description", "Who", "Saved At (JST)", "Receipt (Drive Link)",
        ]
        table = InMemoryTableStorage(SHEET_NAME, rows=[legacy, ["1", "2026-01-01", "out", 100]])
        store = EntryStore(table)

        await store.ensure_table()

        assert table.rows[0] == ENTRY_COLUMNS
        assert table.rows[1][0] == "1"

    @pytest.mark.asyncio
    async def test_leaves_correct_header_alone(self):
        """A current header is not touched."""
        table = InMemoryTableStorage(SHEET_NAME, rows=[list(ENTRY_COLUMNS)])
        await EntryStore(table).ensure_table()
        assert table.rows == [ENTRY_COLUMNS]


class TestAppendAndList:
    """Tests for append and list."""

    @pytest.mark.asyncio
    async def test_append_then_list_newest_first(self, store):
        """Appended entries list newest first."""
        await store.append_entry(make_request(id="1", date="2026-01-21", amount=500, desc="lunch"))
        await store.append_entry(make_request(id="2", date="2026-01-22", amount=300, desc="coffee"))

        entries = await store.list_entries()

        assert [e.id for e in entries] == ["2", "1"]
        assert entries[1].amount == 500
        assert entries[1].description == "lunch"

    @pytest.mark.asyncio
    async def test_append_writes_one_row_with_blank_link(self, store, table):
        """An append writes a full row with a blank link."""
        await store.append_entry(make_request(id="1", date="2026-01-21", amount="500"))

        rows = table.rows
        assert len(rows) == 2
        assert len(rows[1]) == len(ENTRY_COLUMNS)
        assert rows[1][3] == 500
        assert rows[1][9] == ""

    @pytest.mark.asyncio
    async def test_saved_at_is_stamped_in_tokyo_time(self, store):
        """savedAt uses the Tokyo wall clock."""
        now = datetime(2026, 1, 21, 3, 4, 5, tzinfo=ZoneInfo("Asia/Tokyo"))
        entry = await store.append_entry(make_request(id="1"), now=now)
        assert entry.saved_at == "2026-01-21 03:04:05"

    @pytest.mark.asyncio
    async def test_missing_id_gets_server_generated_id(self, store):
        """A missing id becomes a millisecond timestamp."""
        entry = await store.append_entry(make_request(date="2026-01-21"))
        assert entry.id.isdigit()
        assert len(entry.id) >= 13

    @pytest.mark.asyncio
    async def test_list_on_missing_table_is_empty(self, store):
        """A missing table lists as empty."""
        assert await store.list_entries() == []

    @pytest.mark.asyncio
    async def test_list_skips_rows_without_id(self, table, store):
        """Rows with a blank id are skipped."""
        await store.ensure_table()
        table.append_row(["", "2026-01-01"])
        table.append_row(["3", "2026-01-02", "in", "1000"])

        entries = await store.list_entries()

        assert [e.id for e in entries] == ["3"]
        assert entries[0].direction == "in"

    @pytest.mark.asyncio
    async def test_list_raises_when_table_unavailable(self, store, table):
        """Read failures propagate from the store."""
        await store.ensure_table()
        table.available = False
        with pytest.raises(StorageUnavailableError):
            await store.list_entries()


class TestDelete:
    """Tests for delete by id."""

    @pytest.mark.asyncio
    async def test_delete_removes_only_matching_row(self, store):
        """Only the matching row is removed."""
        for entry_id in ["1", "2", "3"]:
            await store.append_entry(make_request(id=entry_id))

        assert await store.delete_entry("2") is True

        assert [e.id for e in await store.list_entries()] == ["3", "1"]

    @pytest.mark.asyncio
    async def test_delete_compares_as_strings(self, store):
        """Numeric and string ids match."""
        await store.append_entry(make_request(id=42))
        assert await store.delete_entry(42) is True
        assert await store.list_entries() == []

    @pytest.mark.asyncio
    async def test_delete_missing_returns_false(self, store):
        """An unknown id deletes nothing."""
        await store.append_entry(make_request(id="1"))
        assert await store.delete_entry("nope") is False
        assert len(await store.list_entries()) == 1

    @pytest.mark.asyncio
    async def test_delete_on_missing_table_returns_false(self, store):
        """Deleting from a missing table is a miss."""
        assert await store.delete_entry("1") is False

    @pytest.mark.asyncio
    async def test_delete_duplicate_id_removes_most_recent(self, store, table):
        """With duplicate ids the newest row goes."""
        await store.append_entry(make_request(id="1", desc="first"))
        await store.append_entry(make_request(id="1", desc="second"))

        await store.delete_entry("1")

        remaining = await store.list_entries()
        assert [e.description for e in remaining] == ["first"]

    def test_delete_out_of_range_row_raises(self, table):
        """Out-of-range deletes raise NotFoundError."""
        table.create(ENTRY_COLUMNS, COLUMN_WIDTHS)
        with pytest.raises(NotFoundError):
            table.delete_row(5)


class TestReceiptLink:
    """Tests for writing the receipt link."""

    @pytest.mark.asyncio
    async def test_set_receipt_link_writes_link_column(self, store):
        """Only the matching row gets the link."""
        await store.append_entry(make_request(id="1"))
        await store.append_entry(make_request(id="2"))

        assert await store.set_receipt_link("1", "https://example.com/r.jpg") is True

        by_id = {e.id: e for e in await store.list_entries()}
        assert by_id["1"].receipt_link == "https://example.com/r.jpg"
        assert by_id["2"].receipt_link == ""

    @pytest.mark.asyncio
    async def test_set_receipt_link_missing_row_returns_false(self, store):
        """An unknown id writes no link."""
        await store.append_entry(make_request(id="1"))
        assert await store.set_receipt_link("9", "https://example.com") is False

    @pytest.mark.asyncio
    async def test_set_receipt_link_never_raises(self, store, table):
        """Storage failures return False instead of raising."""
        await store.append_entry(make_request(id="1"))
        table.available = False
        assert await store.set_receipt_link("1", "https://example.com") is False
